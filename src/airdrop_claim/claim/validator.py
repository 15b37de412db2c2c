"""Claim validator - decides whether a caller may claim from a record."""

from __future__ import annotations

import logging

from airdrop_claim.codec.cbor import decode_plutus
from airdrop_claim.codec.datum import decode_record
from airdrop_claim.errors import AlreadyClaimed, NotEligible, ZeroAllocation
from airdrop_claim.models.plutus import PlutusData
from airdrop_claim.models.records import ClaimApproval, ClaimRequest

log = logging.getLogger(__name__)


class ClaimValidator:
    """Checks a claim request against the record it targets.

    Checks, in order:
    1. Datum decodes to an airdrop record (MalformedRecord)
    2. Record is not already spent (AlreadyClaimed)
    3. Caller is in the claimant list (NotEligible)
    4. Caller's allocation is positive (ZeroAllocation)

    Holds no state; every call works on the datum it is given.
    """

    def validate(
        self, request: ClaimRequest, datum: PlutusData | bytes | str,
    ) -> ClaimApproval:
        if isinstance(datum, (bytes, str)):
            datum = decode_plutus(datum)
        record = decode_record(datum)

        if record.is_spent:
            log.warning("Record %s already claimed (%s)", request.target, record.spent_marker)
            raise AlreadyClaimed(f"record {request.target} has already been spent")

        caller = request.caller_identity.lower()
        match = next((c for c in record.claimants if c.identity_hash == caller), None)
        if match is None:
            log.warning("Caller %s not among %d claimants", caller[:16], len(record.claimants))
            raise NotEligible(f"{request.caller_identity} is not a claimant of {request.target}")

        if match.allocation <= 0:
            raise ZeroAllocation(
                f"{request.caller_identity} has allocation {match.allocation}",
            )

        updated = record.claimed_amount + match.allocation
        log.info(
            "Claim approved: %s gets %d (claimed %d -> %d of %d)",
            caller[:16], match.allocation, record.claimed_amount, updated,
            record.total_amount,
        )
        return ClaimApproval(
            record=record,
            allocation=match.allocation,
            updated_claimed_amount=updated,
        )
