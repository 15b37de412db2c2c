"""ClaimJournal protocol - records claim attempts and their outcomes."""

from __future__ import annotations

from typing import Protocol

from airdrop_claim.models.records import ClaimAttempt, ClaimResult


class ClaimJournal(Protocol):
    """Append-only log of claim attempts."""

    async def initialize(self) -> None:
        """Create tables if they don't exist."""
        ...

    async def close(self) -> None:
        ...

    async def record_attempt(self, caller: str, result: ClaimResult) -> None:
        ...

    async def get_recent_attempts(self, limit: int = 20) -> list[ClaimAttempt]:
        ...
