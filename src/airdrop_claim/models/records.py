"""Airdrop record types and claim operation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class OutputRef:
    """Reference to a transaction output: ``tx_hash#index``."""

    tx_hash: str  # hex
    index: int

    def __str__(self) -> str:
        return f"{self.tx_hash}#{self.index}"

    @classmethod
    def parse(cls, text: str) -> OutputRef:
        tx_hash, _, index = text.partition("#")
        return cls(tx_hash=tx_hash, index=int(index))


@dataclass(frozen=True)
class AssetId:
    """A native token: minting policy plus asset name."""

    policy_id: str  # hex, 28 bytes
    asset_name: str  # hex

    @property
    def unit(self) -> str:
        """Concatenated form used as the asset key in UTxO values."""
        return self.policy_id + self.asset_name


@dataclass(frozen=True)
class Unspent:
    """Spent marker for a record that can still be claimed.

    ``origin`` is the output that seeded the airdrop, when the creator
    recorded one.
    """

    origin: OutputRef | None = None


@dataclass(frozen=True)
class Spent:
    """Spent marker for a record already consumed by ``ref``."""

    ref: OutputRef


SpentMarker = Union[Unspent, Spent]


@dataclass(frozen=True)
class Claimant:
    """An identity pre-registered for a token allocation."""

    identity_hash: str  # hex payment key hash
    allocation: int


@dataclass(frozen=True)
class AirdropRecord:
    """The on-chain claim state carried as the airdrop UTxO's inline datum."""

    creator: str  # hex payment key hash
    policy_id: str
    asset_name: str
    total_amount: int
    claimed_amount: int
    spent_marker: SpentMarker
    claimants: tuple[Claimant, ...] = ()

    @property
    def asset(self) -> AssetId:
        return AssetId(self.policy_id, self.asset_name)

    @property
    def is_spent(self) -> bool:
        return isinstance(self.spent_marker, Spent)


@dataclass(frozen=True)
class ClaimRequest:
    """A caller's intent to claim from one specific record UTxO."""

    caller_identity: str  # hex payment key hash
    target: OutputRef
    asset: AssetId


@dataclass(frozen=True)
class ClaimApproval:
    """Outcome of a successful validation."""

    record: AirdropRecord
    allocation: int
    updated_claimed_amount: int  # informational, never checked against total


@dataclass(frozen=True)
class PlannedOutput:
    """An output the claim transaction must create."""

    address: str  # bech32
    lovelace: int
    assets: dict[str, int] = field(default_factory=dict)  # unit -> quantity
    datum: AirdropRecord | None = None


@dataclass(frozen=True)
class ClaimPlan:
    """The unsigned claim transaction before balancing.

    Consumes exactly one script input and creates exactly two outputs: the
    payout to the caller and the continuing record at the lock address.
    """

    script_input: OutputRef
    redeemer_identity: str
    payout: PlannedOutput
    continuing: PlannedOutput
    token_payout: int
    lovelace_payout: int
    remaining_tokens: int
    remaining_lovelace: int

    @property
    def outputs(self) -> tuple[PlannedOutput, PlannedOutput]:
        return (self.payout, self.continuing)


@dataclass
class ClaimResult:
    """Result of a full claim attempt."""

    success: bool
    target: str  # tx_hash#index
    tx_hash: str | None = None
    token_payout: int | None = None
    lovelace_payout: int | None = None
    confirmed: bool | None = None
    error: str | None = None  # "<kind>:<message>"
    retryable: bool = False


@dataclass
class InspectionReport:
    """Read-only view of a record and whether the caller may claim it."""

    target: str
    record: AirdropRecord | None
    claimable: bool
    allocation: int | None = None
    reason: str | None = None


@dataclass
class ClaimAttempt:
    """A claim attempt as persisted in the claim journal."""

    id: int
    target: str
    caller: str
    status: str  # "submitted", "confirmed", "failed"
    error: str | None
    tx_hash: str | None
    token_payout: int | None
    lovelace_payout: int | None
    created_at: str
