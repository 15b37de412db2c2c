"""Transaction composer - lays out the claim transaction's input and outputs."""

from __future__ import annotations

import dataclasses
import logging

from airdrop_claim.errors import InsufficientTokens, NotEligible
from airdrop_claim.models.chain import Value
from airdrop_claim.models.records import (
    AirdropRecord,
    ClaimPlan,
    OutputRef,
    PlannedOutput,
    Spent,
)

log = logging.getLogger(__name__)


class TransactionComposer:
    """Builds the unsigned claim plan for an approved claim.

    Payout arithmetic:
        token_payout       = allocation
        lovelace_payout    = total_amount // len(claimants)
        remaining_lovelace = total_amount - lovelace_payout
        remaining_tokens   = held_tokens - token_payout

    The lovelace share is always computed from total_amount and the
    full claimant list, so every claim takes the same fixed share of the pot.
    """

    def compose(
        self,
        record: AirdropRecord,
        allocation: int,
        caller_identity: str,
        payout_address: str,
        script_input: OutputRef,
        lock_address: str,
        held: Value,
    ) -> ClaimPlan:
        if not record.claimants:
            raise NotEligible("record has no claimants")

        unit = record.asset.unit
        held_tokens = held.quantity(unit)
        if held_tokens < allocation:
            raise InsufficientTokens(held=held_tokens, required=allocation)

        token_payout = allocation
        lovelace_payout = record.total_amount // len(record.claimants)
        remaining_lovelace = record.total_amount - lovelace_payout
        remaining_tokens = held_tokens - token_payout

        continuing_record = dataclasses.replace(
            record,
            claimed_amount=record.claimed_amount + token_payout,
            spent_marker=Spent(script_input),
        )

        plan = ClaimPlan(
            script_input=script_input,
            redeemer_identity=caller_identity,
            payout=PlannedOutput(
                address=payout_address,
                lovelace=lovelace_payout,
                assets={unit: token_payout},
            ),
            continuing=PlannedOutput(
                address=lock_address,
                lovelace=remaining_lovelace,
                assets={unit: remaining_tokens},
                datum=continuing_record,
            ),
            token_payout=token_payout,
            lovelace_payout=lovelace_payout,
            remaining_tokens=remaining_tokens,
            remaining_lovelace=remaining_lovelace,
        )
        log.info(
            "Composed claim on %s: %d tokens + %d lovelace to caller, "
            "%d tokens + %d lovelace stay locked",
            script_input, token_payout, lovelace_payout,
            remaining_tokens, remaining_lovelace,
        )
        return plan
