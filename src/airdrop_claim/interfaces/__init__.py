"""Protocol interfaces for airdrop_claim collaborators."""

from airdrop_claim.interfaces.gateway import ChainGateway
from airdrop_claim.interfaces.journal import ClaimJournal
from airdrop_claim.interfaces.wallet import Wallet

__all__ = ["ChainGateway", "ClaimJournal", "Wallet"]
