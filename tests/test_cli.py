"""Click CLI commands."""

from __future__ import annotations

import asyncio

import pytest
from click.testing import CliRunner

from airdrop_claim import cli as cli_module
from airdrop_claim.cli import cli
from airdrop_claim.codec.datum import encode_record_cbor
from airdrop_claim.models.records import ClaimResult, InspectionReport
from airdrop_claim.storage.sqlite import SQLiteClaimJournal

from tests.conftest import TEST_SCRIPT, TEST_SEED
from tests.factories import ALICE, LOCK_ADDRESS, POLICY_ID, RECORD_TX, make_record

BASE_ENV = {
    "AIRDROP_CLAIM_PROJECT_ID": None,
    "AIRDROP_CLAIM_SIGNING_KEY": None,
    "AIRDROP_CLAIM_NETWORK": None,
    "AIRDROP_CLAIM_LOCK_ADDRESS": None,
    "AIRDROP_CLAIM_BLOCKFROST_URL": None,
}


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "claim.toml"
    path.write_text(f"""
[airdrop]
lock_address = "{LOCK_ADDRESS}"
policy_id = "{POLICY_ID}"
script_cbor = "{TEST_SCRIPT}"

[storage]
db_path = "{(tmp_path / 'journal.db').as_posix()}"
""")
    return path


def _invoke(args, env=None, **kwargs):
    merged = dict(BASE_ENV)
    merged.update(env or {})
    return CliRunner().invoke(cli, args, env=merged, **kwargs)


def _funded_env():
    return {"AIRDROP_CLAIM_SIGNING_KEY": TEST_SEED, "AIRDROP_CLAIM_PROJECT_ID": "preprodTest"}


# ── Info ──────────────────────────────────────────────────────────


def test_status(config_file):
    result = _invoke(["-c", str(config_file), "status"], env=_funded_env())
    assert result.exit_code == 0, result.output
    assert "preprod" in result.output
    assert LOCK_ADDRESS in result.output
    assert "***configured***" in result.output
    assert TEST_SEED not in result.output


def test_decode_prints_record():
    datum = encode_record_cbor(make_record()).hex()
    result = _invoke(["decode", datum])
    assert result.exit_code == 0, result.output
    assert "Total:      1100" in result.output
    assert ALICE in result.output


def test_decode_json():
    datum = encode_record_cbor(make_record()).hex()
    result = _invoke(["decode", "--json", datum])
    assert result.exit_code == 0, result.output
    assert '"constructor": 0' in result.output


def test_decode_malformed():
    result = _invoke(["decode", "d87980"])
    assert result.exit_code == 1
    assert "Malformed record" in result.output


# ── Claiming ──────────────────────────────────────────────────────


def test_claim_requires_signing_key(config_file):
    result = _invoke(["-c", str(config_file), "claim", "--tx-hash", RECORD_TX, "--yes"])
    assert result.exit_code == 1
    assert "No signing key" in result.output


def test_claim_success(config_file, monkeypatch):
    calls = []

    async def fake_run_claim(cfg, target, wait=True):
        calls.append((target, wait))
        return ClaimResult(
            success=True, target=str(target), tx_hash="d0" * 32,
            token_payout=50, lovelace_payout=550, confirmed=None,
        )

    monkeypatch.setattr(cli_module, "run_claim", fake_run_claim)
    result = _invoke(
        ["-c", str(config_file), "claim", "--tx-hash", RECORD_TX, "--index", "2", "--no-wait", "--yes"],
        env=_funded_env(),
    )
    assert result.exit_code == 0, result.output
    assert "d0" * 32 in result.output
    assert calls[0][0].index == 2
    assert calls[0][1] is False


def test_claim_failure_exits_nonzero(config_file, monkeypatch):
    async def fake_run_claim(cfg, target, wait=True):
        return ClaimResult(
            success=False, target=str(target), error="record_not_found:gone", retryable=True,
        )

    monkeypatch.setattr(cli_module, "run_claim", fake_run_claim)
    result = _invoke(
        ["-c", str(config_file), "claim", "--tx-hash", RECORD_TX, "--yes"], env=_funded_env(),
    )
    assert result.exit_code == 1
    assert "record_not_found:gone" in result.output
    assert "transient" in result.output


def test_claim_with_bad_signing_key_reports_error(config_file):
    env = dict(_funded_env(), AIRDROP_CLAIM_SIGNING_KEY="zz")
    result = _invoke(["-c", str(config_file), "claim", "--tx-hash", RECORD_TX, "--yes"], env=env)
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Claim failed" in result.output


def test_claim_prompt_declined(config_file, monkeypatch):
    async def fake_run_claim(cfg, target, wait=True):
        raise AssertionError("claim must not run")

    monkeypatch.setattr(cli_module, "run_claim", fake_run_claim)
    result = _invoke(
        ["-c", str(config_file), "claim", "--tx-hash", RECORD_TX],
        env=_funded_env(), input="n\n",
    )
    assert result.exit_code == 1
    assert "Aborted" in result.output


def test_inspect(config_file, monkeypatch):
    async def fake_run_inspect(cfg, target):
        return InspectionReport(str(target), make_record(), claimable=False, reason="not_eligible:x")

    monkeypatch.setattr(cli_module, "run_inspect", fake_run_inspect)
    result = _invoke(
        ["-c", str(config_file), "inspect", "--tx-hash", RECORD_TX], env=_funded_env(),
    )
    assert result.exit_code == 0, result.output
    assert "Claimable:   no (not_eligible:x)" in result.output


# ── History ───────────────────────────────────────────────────────


def test_history_empty(config_file):
    result = _invoke(["-c", str(config_file), "history"])
    assert result.exit_code == 0, result.output
    assert "No claim attempts recorded." in result.output


def test_history_lists_attempts(config_file, tmp_path):
    async def seed():
        j = SQLiteClaimJournal(str(tmp_path / "journal.db"))
        await j.initialize()
        await j.record_attempt(ALICE, ClaimResult(
            success=True, target=f"{RECORD_TX}#0", tx_hash="d0" * 32, confirmed=True,
        ))
        await j.close()

    asyncio.run(seed())
    result = _invoke(["-c", str(config_file), "history", "-n", "5"])
    assert result.exit_code == 0, result.output
    assert "confirmed" in result.output
    assert "tx=d0d0" in result.output
