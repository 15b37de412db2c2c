"""Configuration models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Network(str, Enum):
    """Cardano network the claimant operates on."""

    MAINNET = "mainnet"
    PREPROD = "preprod"
    PREVIEW = "preview"

    @property
    def network_id(self) -> int:
        """Network id nibble used in address headers."""
        return 1 if self is Network.MAINNET else 0


BLOCKFROST_URLS = {
    Network.MAINNET: "https://cardano-mainnet.blockfrost.io/api/v0",
    Network.PREPROD: "https://cardano-preprod.blockfrost.io/api/v0",
    Network.PREVIEW: "https://cardano-preview.blockfrost.io/api/v0",
}


@dataclass
class ClaimConfig:
    """Complete claim client configuration."""

    # Network
    network: Network = Network.PREPROD
    blockfrost_url: str = ""  # derived from network when empty
    blockfrost_project_id: str = ""  # loaded from env var AIRDROP_CLAIM_PROJECT_ID
    request_timeout: int = 30  # seconds

    # Airdrop
    lock_address: str = ""
    policy_id: str = ""
    asset_name: str = ""  # hex
    script_cbor: str = ""  # compiled spend validator, hex
    blueprint_path: str = "plutus.json"
    validator_title: str = "airdrop.airdrop.spend"

    # Wallet
    signing_key: str = ""  # hex seed, loaded from env var AIRDROP_CLAIM_SIGNING_KEY
    signing_key_file: str = ""  # cardano-cli .skey JSON

    # Transaction
    collateral_min_lovelace: int = 5_000_000
    min_change_lovelace: int = 1_000_000
    spend_mem: int = 2_000_000  # execution units budgeted for the spend script
    spend_steps: int = 800_000_000
    confirm_timeout: int = 600  # seconds
    confirm_poll_interval: int = 20  # seconds

    # Storage
    db_path: str = "~/.airdrop_claim/journal.db"

    # Logging
    log_level: str = "info"

    def resolved_blockfrost_url(self) -> str:
        return self.blockfrost_url or BLOCKFROST_URLS[self.network]
