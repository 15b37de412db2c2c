"""CLI entry point for the airdrop claim client."""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click

from airdrop_claim.codec.cbor import to_json
from airdrop_claim.codec.datum import decode_record_cbor, encode_record
from airdrop_claim.config import load_config
from airdrop_claim.errors import MalformedRecord
from airdrop_claim.models.chain import LOVELACE_PER_ADA
from airdrop_claim.models.records import AirdropRecord, OutputRef, Spent
from airdrop_claim.service import run_claim, run_inspect
from airdrop_claim.storage.sqlite import SQLiteClaimJournal


def _ada(lovelace: int) -> str:
    return f"{lovelace / LOVELACE_PER_ADA:.6f} ADA"


def _load(ctx: click.Context):
    """Load config and apply its log level unless -v was given."""
    cfg = load_config(ctx.obj["config_path"])
    if not ctx.obj["verbose"]:
        logging.getLogger().setLevel(cfg.log_level.upper())
    return cfg


def _require_wallet(cfg):
    """Exit with error if no signing key is configured."""
    if not cfg.signing_key and not cfg.signing_key_file:
        click.echo("Error: No signing key configured.", err=True)
        click.echo("Set AIRDROP_CLAIM_SIGNING_KEY env var or [wallet] in config.", err=True)
        sys.exit(1)


def _require_airdrop(cfg):
    """Exit with error if the lock address, asset or script is missing."""
    if not cfg.lock_address or not cfg.policy_id:
        click.echo("Error: No airdrop configured.", err=True)
        click.echo("Set AIRDROP_CLAIM_LOCK_ADDRESS and [airdrop] policy_id in config.", err=True)
        sys.exit(1)
    if not cfg.script_cbor:
        click.echo("Error: No spend validator script found.", err=True)
        click.echo(f"Set [airdrop] script_cbor or check {cfg.blueprint_path}.", err=True)
        sys.exit(1)


def _require_project(cfg):
    if not cfg.blockfrost_project_id:
        click.echo("Error: No Blockfrost project id configured.", err=True)
        click.echo("Set AIRDROP_CLAIM_PROJECT_ID env var.", err=True)
        sys.exit(1)


def _echo_record(record: AirdropRecord) -> None:
    marker = record.spent_marker
    click.echo(f"  Creator:    {record.creator}")
    click.echo(f"  Asset:      {record.policy_id}.{record.asset_name}")
    click.echo(f"  Total:      {record.total_amount}")
    click.echo(f"  Claimed:    {record.claimed_amount}")
    click.echo(f"  Spent:      {marker.ref if isinstance(marker, Spent) else 'no'}")
    click.echo(f"  Claimants:  {len(record.claimants)}")
    for c in record.claimants:
        click.echo(f"    {c.identity_hash}  {c.allocation}")


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """airdrop-claim - Claim tokens from a Cardano airdrop validator."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show client configuration."""
    cfg = _load(ctx)
    click.echo(f"Network:     {cfg.network.value}")
    click.echo(f"Blockfrost:  {cfg.resolved_blockfrost_url()}")
    click.echo(f"Project id:  {'***configured***' if cfg.blockfrost_project_id else '(not set)'}")
    click.echo(f"Lock addr:   {cfg.lock_address or '(not set)'}")
    click.echo(f"Policy id:   {cfg.policy_id or '(not set)'}")
    click.echo(f"Asset name:  {cfg.asset_name or '(empty)'}")
    click.echo(f"Script:      {f'{len(cfg.script_cbor) // 2} bytes' if cfg.script_cbor else '(not set)'}")
    click.echo(f"DB path:     {cfg.db_path}")
    click.echo(f"Signing key: {'***configured***' if cfg.signing_key or cfg.signing_key_file else '(not set)'}")


@cli.command()
@click.argument("datum")
@click.option("--json", "as_json", is_flag=True, help="Print detailed-schema JSON instead")
def decode(datum: str, as_json: bool) -> None:
    """Decode an airdrop record from its inline datum CBOR hex."""
    try:
        record = decode_record_cbor(datum.strip())
    except MalformedRecord as exc:
        click.echo(f"Malformed record: {exc}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(to_json(encode_record(record)), indent=2))
        return
    click.echo("Airdrop record")
    _echo_record(record)


# ── Claiming ───────────────────────────────────────────


@cli.command()
@click.option("--tx-hash", required=True, help="Transaction hash of the record UTxO")
@click.option("--index", type=int, default=0, help="Output index of the record UTxO")
@click.pass_context
def inspect(ctx: click.Context, tx_hash: str, index: int) -> None:
    """Fetch a record and check whether this wallet may claim it."""
    cfg = _load(ctx)
    _require_wallet(cfg)
    _require_airdrop(cfg)
    _require_project(cfg)

    try:
        report = asyncio.run(run_inspect(cfg, OutputRef(tx_hash, index)))
    except ValueError as exc:
        click.echo(f"Inspect failed: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Target:      {report.target}")
    if report.record is not None:
        _echo_record(report.record)
    if report.claimable:
        click.echo(f"Claimable:   yes ({report.allocation} tokens)")
    else:
        click.echo(f"Claimable:   no ({report.reason})")


@cli.command()
@click.option("--tx-hash", required=True, help="Transaction hash of the record UTxO")
@click.option("--index", type=int, default=0, help="Output index of the record UTxO")
@click.option("--no-wait", is_flag=True, help="Return after submission without waiting for a block")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def claim(ctx: click.Context, tx_hash: str, index: int, no_wait: bool, yes: bool) -> None:
    """Claim this wallet's allocation from a record UTxO.

    Spends the record, pays the allocation to this wallet and locks the
    rest back at the script address with the record marked spent.
    """
    cfg = _load(ctx)
    _require_wallet(cfg)
    _require_airdrop(cfg)
    _require_project(cfg)

    target = OutputRef(tx_hash, index)
    click.echo(f"Claiming from {target} on {cfg.network.value}")
    if not yes:
        click.confirm("Proceed with claim?", abort=True)

    try:
        result = asyncio.run(run_claim(cfg, target, wait=not no_wait))
    except ValueError as exc:
        click.echo(f"\nClaim failed: {exc}", err=True)
        sys.exit(1)

    if not result.success:
        click.echo(f"\nClaim failed: {result.error}", err=True)
        if result.retryable:
            click.echo("The failure may be transient; re-run to try again.", err=True)
        sys.exit(1)

    click.echo("Claim submitted!")
    click.echo(f"  Tx hash:   {result.tx_hash}")
    click.echo(f"  Tokens:    {result.token_payout}")
    click.echo(f"  Lovelace:  {result.lovelace_payout} ({_ada(result.lovelace_payout or 0)})")
    if result.confirmed is not None:
        click.echo(f"  Confirmed: {result.confirmed}")


@cli.command()
@click.option("-n", "--limit", type=int, default=20, help="Number of recent attempts to show")
@click.pass_context
def history(ctx: click.Context, limit: int) -> None:
    """Show recent claim attempts from the local journal."""
    cfg = _load(ctx)

    async def _history():
        journal = SQLiteClaimJournal(cfg.db_path)
        await journal.initialize()
        try:
            attempts = await journal.get_recent_attempts(limit)
            if not attempts:
                click.echo("No claim attempts recorded.")
                return

            for a in attempts:
                detail = f"tx={a.tx_hash[:16]}..." if a.tx_hash else f"error={a.error}"
                click.echo(f"  #{a.id} [{a.status:9s}] target={a.target[:20]}... {detail} at={a.created_at}")
        finally:
            await journal.close()

    asyncio.run(_history())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
