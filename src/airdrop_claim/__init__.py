"""airdrop_claim - claimant-side client for a Cardano token airdrop validator."""

__version__ = "0.1.0"
