"""Claim error taxonomy.

Every failure of a claim attempt is a ``ClaimError``. Components raise them;
the claim service converts them into ``ClaimResult`` records at its boundary.
``kind`` is the stable short name used in results and the claim journal.
"""

from __future__ import annotations


class ClaimError(Exception):
    """Base class for all errors scoped to a single claim attempt."""

    kind = "claim_error"
    retryable = False


class MalformedRecord(ClaimError):
    """The datum does not have the airdrop record shape."""

    kind = "malformed_record"

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class AlreadyClaimed(ClaimError):
    """The record's spent marker is already set."""

    kind = "already_claimed"


class NotEligible(ClaimError):
    """The caller is not in the record's claimant list."""

    kind = "not_eligible"


class ZeroAllocation(ClaimError):
    """The caller's allocation is zero or negative."""

    kind = "zero_allocation"


class InsufficientTokens(ClaimError):
    """The record UTxO holds fewer tokens than the allocation.

    Usually means a concurrent claim consumed the funds; refetch the
    superseding record and try again.
    """

    kind = "insufficient_tokens"

    def __init__(self, held: int, required: int) -> None:
        super().__init__(f"UTxO holds {held} tokens, claim needs {required}")
        self.held = held
        self.required = required


class RecordNotFound(ClaimError):
    """No UTxO at the lock address matches the claim target."""

    kind = "record_not_found"
    retryable = True


class InsufficientFunds(ClaimError):
    """The wallet cannot cover the fee, collateral or change."""

    kind = "insufficient_funds"


class InvalidAddress(ClaimError):
    """A configured or derived address is not valid bech32 for Cardano."""

    kind = "invalid_address"


class BuildError(ClaimError):
    """The claim transaction could not be balanced."""

    kind = "build_error"


class GatewayError(ClaimError):
    """Network, submission or response-shape failure talking to the chain."""

    kind = "gateway_error"
    retryable = True

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
