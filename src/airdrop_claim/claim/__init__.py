"""Claim validation and transaction composition."""

from airdrop_claim.claim.composer import TransactionComposer
from airdrop_claim.claim.validator import ClaimValidator

__all__ = ["ClaimValidator", "TransactionComposer"]
