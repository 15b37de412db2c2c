"""Persistence for claim attempts."""

from airdrop_claim.storage.sqlite import SQLiteClaimJournal

__all__ = ["SQLiteClaimJournal"]
