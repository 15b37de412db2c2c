"""Wallet protocol - caller identity and transaction signing."""

from __future__ import annotations

from typing import Protocol

from airdrop_claim.cardano.transaction import SignedTransaction, UnsignedTransaction


class Wallet(Protocol):
    """Holds the claimant's payment key."""

    async def get_address(self) -> str:
        ...

    async def get_identity_hash(self) -> str:
        """Hex payment key hash identifying the claimant."""
        ...

    async def sign(self, unsigned: UnsignedTransaction) -> SignedTransaction:
        ...
