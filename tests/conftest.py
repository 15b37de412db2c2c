"""Shared fixtures for airdrop_claim tests."""

from __future__ import annotations

import pytest
from pytest_metadata.plugin import metadata_key

from airdrop_claim.cardano.wallet import KeyWallet
from airdrop_claim.models.config import ClaimConfig, Network
from airdrop_claim.service import AirdropClaimService
from airdrop_claim.storage.sqlite import SQLiteClaimJournal

from tests.factories import ASSET_NAME, LOCK_ADDRESS, POLICY_ID
from tests.mocks import MockGateway, MockJournal

# Deterministic ed25519 seed; never funded on any network
TEST_SEED = bytes(range(32)).hex()

# Any hex works; the builder embeds it without evaluating it
TEST_SCRIPT = "4e4d01000033222220051200120011"

EXPLORER_BASE = "https://preprod.cardanoscan.io"


def cardanoscan_link(kind: str, id: str, label: str | None = None) -> str:
    """Build an HTML anchor to cardanoscan for the report."""
    url = f"{EXPLORER_BASE}/{kind}/{id}"
    text = label or f"{id[:8]}...{id[-4:]}"
    return f'<a href="{url}" target="_blank">{text}</a>'


# ── Report metadata & explorer links ─────────────────────────────


def pytest_configure(config):
    """Add network info to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Network"] = "Cardano Preprod"
    meta["Lock Address"] = LOCK_ADDRESS
    meta["Airdrop Policy"] = POLICY_ID


def pytest_html_results_summary(prefix, summary, postfix):
    """Inject clickable Cardano explorer links into the report summary."""
    prefix.append(
        '<div style="margin:8px 0;padding:10px;background:#f8f9fa;border:1px solid #dee2e6;'
        'border-radius:4px;font-family:monospace;font-size:13px;">'
        "<strong>Cardano Preprod Explorer Links</strong><br/>"
        f'Lock Address: {cardanoscan_link("address", LOCK_ADDRESS, LOCK_ADDRESS)}<br/>'
        f'Policy: {cardanoscan_link("tokenPolicy", POLICY_ID, POLICY_ID)}'
        "</div>"
    )


def make_test_config(**overrides) -> ClaimConfig:
    """Build a ClaimConfig suitable for testing."""
    defaults = dict(
        network=Network.PREPROD,
        blockfrost_url="http://127.0.0.1:9301",
        blockfrost_project_id="preprodTestProject",
        lock_address=LOCK_ADDRESS,
        policy_id=POLICY_ID,
        asset_name=ASSET_NAME,
        script_cbor=TEST_SCRIPT,
        signing_key=TEST_SEED,
        confirm_timeout=1,
        confirm_poll_interval=0,
        db_path=":memory:",
    )
    defaults.update(overrides)
    return ClaimConfig(**defaults)


@pytest.fixture
def test_config():
    """Default ClaimConfig for tests."""
    return make_test_config()


@pytest.fixture
def wallet():
    return KeyWallet.from_hex(TEST_SEED, network_id=0)


@pytest.fixture
async def caller(wallet):
    """The test wallet's payment key hash."""
    return await wallet.get_identity_hash()


@pytest.fixture
async def journal():
    """Initialized in-memory SQLiteClaimJournal."""
    j = SQLiteClaimJournal(":memory:")
    await j.initialize()
    yield j
    await j.close()


@pytest.fixture
def mock_gateway():
    return MockGateway()


@pytest.fixture
def mock_journal():
    return MockJournal()


@pytest.fixture
def service(test_config, mock_gateway, wallet, mock_journal):
    """AirdropClaimService wired to the mock gateway and a real key wallet."""
    return AirdropClaimService(test_config, mock_gateway, wallet, mock_journal)
