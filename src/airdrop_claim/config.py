"""Configuration loading: TOML file + environment variables + plutus.json blueprint."""

from __future__ import annotations

import json
import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from airdrop_claim.models.config import ClaimConfig, Network


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "AIRDROP_CLAIM_",
) -> ClaimConfig:
    """Load claim configuration from TOML file, env vars, and the blueprint.

    Priority (highest wins):
        1. Environment variables (AIRDROP_CLAIM_SIGNING_KEY, etc.)
        2. TOML config file
        3. Defaults from ClaimConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = ClaimConfig()

    # ── Network section ────────────────────────────────────
    network = raw.get("network", {})
    if v := network.get("name"):
        cfg.network = Network(v)
    if v := network.get("blockfrost_url"):
        cfg.blockfrost_url = str(v)
    if v := network.get("blockfrost_project_id"):
        cfg.blockfrost_project_id = str(v)
    if v := network.get("request_timeout"):
        cfg.request_timeout = int(v)

    # ── Airdrop section ────────────────────────────────────
    airdrop = raw.get("airdrop", {})
    if v := airdrop.get("lock_address"):
        cfg.lock_address = str(v)
    if v := airdrop.get("policy_id"):
        cfg.policy_id = str(v)
    if v := airdrop.get("asset_name"):
        cfg.asset_name = str(v)
    if v := airdrop.get("script_cbor"):
        cfg.script_cbor = str(v)
    if v := airdrop.get("blueprint_path"):
        cfg.blueprint_path = str(v)
    if v := airdrop.get("validator_title"):
        cfg.validator_title = str(v)

    # ── Wallet section ─────────────────────────────────────
    wallet = raw.get("wallet", {})
    if v := wallet.get("signing_key"):
        cfg.signing_key = str(v)
    if v := wallet.get("signing_key_file"):
        cfg.signing_key_file = str(v)

    # ── Tx section ─────────────────────────────────────────
    tx = raw.get("tx", {})
    if v := tx.get("collateral_min_lovelace"):
        cfg.collateral_min_lovelace = int(v)
    if v := tx.get("min_change_lovelace"):
        cfg.min_change_lovelace = int(v)
    if v := tx.get("spend_mem"):
        cfg.spend_mem = int(v)
    if v := tx.get("spend_steps"):
        cfg.spend_steps = int(v)
    if v := tx.get("confirm_timeout"):
        cfg.confirm_timeout = int(v)
    if v := tx.get("confirm_poll_interval"):
        cfg.confirm_poll_interval = int(v)

    # ── Storage / logging sections ─────────────────────────
    if v := raw.get("storage", {}).get("db_path"):
        cfg.db_path = str(v)
    if v := raw.get("logging", {}).get("level"):
        cfg.log_level = str(v)

    # ── Environment variable overrides (highest priority) ──
    if project := os.environ.get(f"{env_prefix}PROJECT_ID"):
        cfg.blockfrost_project_id = project
    if key := os.environ.get(f"{env_prefix}SIGNING_KEY"):
        cfg.signing_key = key
    if net := os.environ.get(f"{env_prefix}NETWORK"):
        cfg.network = Network(net)
    if addr := os.environ.get(f"{env_prefix}LOCK_ADDRESS"):
        cfg.lock_address = addr
    if url := os.environ.get(f"{env_prefix}BLOCKFROST_URL"):
        cfg.blockfrost_url = url

    # Load the spend validator from the blueprint if not explicitly set
    if not cfg.script_cbor:
        _load_blueprint(cfg)

    # Expand ~ in paths
    if cfg.db_path != ":memory:":
        cfg.db_path = str(Path(cfg.db_path).expanduser())

    return cfg


def _load_blueprint(cfg: ClaimConfig) -> None:
    """Load the spend validator's compiled code from an Aiken plutus.json."""
    p = Path(cfg.blueprint_path).expanduser()
    if not p.is_absolute():
        p = Path.cwd() / p
    if not p.exists():
        return

    with open(p) as f:
        data = json.load(f)

    for validator in data.get("validators", []):
        if validator.get("title") == cfg.validator_title:
            cfg.script_cbor = validator.get("compiledCode", "")
            return
