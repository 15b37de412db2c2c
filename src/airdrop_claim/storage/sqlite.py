"""SQLite implementation of the ClaimJournal protocol."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from airdrop_claim.models.records import ClaimAttempt, ClaimResult

SCHEMA = """
CREATE TABLE IF NOT EXISTS claim_attempts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    target TEXT NOT NULL,
    caller TEXT NOT NULL,
    status TEXT NOT NULL,
    error TEXT,
    tx_hash TEXT,
    token_payout INTEGER,
    lovelace_payout INTEGER,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_attempts_created ON claim_attempts(created_at);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _status(result: ClaimResult) -> str:
    if not result.success:
        return "failed"
    return "confirmed" if result.confirmed else "submitted"


class SQLiteClaimJournal:
    """SQLite-backed implementation of the ClaimJournal protocol."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self._db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.executescript(SCHEMA)
        await self._db.commit()

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        assert self._db is not None, "Journal not initialized. Call initialize() first."
        return self._db

    async def record_attempt(self, caller: str, result: ClaimResult) -> None:
        await self.db.execute(
            "INSERT INTO claim_attempts"
            " (target, caller, status, error, tx_hash, token_payout, lovelace_payout, created_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                result.target,
                caller,
                _status(result),
                result.error,
                result.tx_hash,
                result.token_payout,
                result.lovelace_payout,
                _now(),
            ),
        )
        await self.db.commit()

    async def get_recent_attempts(self, limit: int = 20) -> list[ClaimAttempt]:
        async with self.db.execute(
            "SELECT * FROM claim_attempts ORDER BY id DESC LIMIT ?", (limit,),
        ) as cur:
            rows = await cur.fetchall()
        return [
            ClaimAttempt(
                id=row["id"],
                target=row["target"],
                caller=row["caller"],
                status=row["status"],
                error=row["error"],
                tx_hash=row["tx_hash"],
                token_payout=row["token_payout"],
                lovelace_payout=row["lovelace_payout"],
                created_at=row["created_at"],
            )
            for row in rows
        ]
