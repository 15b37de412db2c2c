"""Claim transaction builder - balances a ClaimPlan into a Babbage transaction body."""

from __future__ import annotations

import logging
import math
from typing import Any

import cbor2

from airdrop_claim.cardano.bech32 import address_to_bytes
from airdrop_claim.cardano.transaction import (
    BODY_COLLATERAL,
    BODY_FEE,
    BODY_INPUTS,
    BODY_OUTPUTS,
    BODY_REQUIRED_SIGNERS,
    BODY_SCRIPT_DATA_HASH,
    UnsignedTransaction,
    blake2b_256,
)
from airdrop_claim.codec.cbor import dumps, to_cbor_item
from airdrop_claim.codec.datum import claim_redeemer, encode_record_cbor
from airdrop_claim.errors import BuildError, InsufficientFunds
from airdrop_claim.models.chain import ProtocolParams, Utxo, Value
from airdrop_claim.models.records import ClaimPlan, OutputRef, PlannedOutput

log = logging.getLogger(__name__)

REDEEMER_TAG_SPEND = 0
PLUTUS_V2_LANGUAGE_ID = 1
INLINE_DATUM = 1
POLICY_ID_HEX_LEN = 56

# Placeholder witness used while estimating the fee
_DUMMY_WITNESS = (bytes(32), bytes(64))
_MAX_FEE_ROUNDS = 5


def _input_item(ref: OutputRef) -> list[Any]:
    return [bytes.fromhex(ref.tx_hash), ref.index]


def _value_item(value: Value) -> Any:
    assets = {unit: qty for unit, qty in value.assets.items() if qty}
    if not assets:
        return value.lovelace
    multiasset: dict[bytes, dict[bytes, int]] = {}
    for unit in sorted(assets):
        policy = bytes.fromhex(unit[:POLICY_ID_HEX_LEN])
        name = bytes.fromhex(unit[POLICY_ID_HEX_LEN:])
        multiasset.setdefault(policy, {})[name] = assets[unit]
    return [value.lovelace, multiasset]


def _output_item(address: str, value: Value, datum_cbor: bytes | None = None) -> dict[int, Any]:
    out: dict[int, Any] = {0: address_to_bytes(address), 1: _value_item(value)}
    if datum_cbor is not None:
        out[2] = [INLINE_DATUM, cbor2.CBORTag(24, datum_cbor)]
    return out


def _planned_value(output: PlannedOutput) -> Value:
    return Value(output.lovelace, dict(output.assets))


class ClaimTxBuilder:
    """Turns a ClaimPlan into a balanced, unsigned transaction.

    Adds a wallet input for the fee, a collateral input, the caller as a
    required signer, the spend redeemer and the script data hash, then
    sends everything left over back to the caller as change.
    """

    def __init__(
        self,
        params: ProtocolParams,
        script_cbor: str,
        spend_mem: int = 2_000_000,
        spend_steps: int = 800_000_000,
        collateral_min_lovelace: int = 5_000_000,
        min_change_lovelace: int = 1_000_000,
    ) -> None:
        self._params = params
        self._script = bytes.fromhex(script_cbor)
        self._spend_mem = spend_mem
        self._spend_steps = spend_steps
        self._collateral_min = collateral_min_lovelace
        self._min_change = min_change_lovelace

    # ── Selection ──────────────────────────────────────────

    def select_collateral(self, wallet_utxos: list[Utxo]) -> Utxo:
        for utxo in wallet_utxos:
            if utxo.value.is_pure_lovelace and utxo.value.lovelace >= self._collateral_min:
                return utxo
        raise InsufficientFunds(
            f"no pure-lovelace UTxO of at least {self._collateral_min} lovelace for collateral",
        )

    def select_fee_input(self, wallet_utxos: list[Utxo], collateral: Utxo) -> Utxo:
        others = [u for u in wallet_utxos if u.ref != collateral.ref]
        if not others:
            return collateral
        return max(others, key=lambda u: u.value.lovelace)

    # ── Fees ───────────────────────────────────────────────

    def script_fee(self) -> int:
        p = self._params
        return math.ceil(p.price_mem * self._spend_mem + p.price_step * self._spend_steps)

    def min_fee(self, tx_size: int) -> int:
        p = self._params
        return p.min_fee_a * tx_size + p.min_fee_b + self.script_fee()

    # ── Script integrity ───────────────────────────────────

    def redeemers_cbor(self, caller_identity: str, redeemer_index: int) -> bytes:
        redeemer = to_cbor_item(claim_redeemer(caller_identity))
        return dumps([[
            REDEEMER_TAG_SPEND,
            redeemer_index,
            redeemer,
            [self._spend_mem, self._spend_steps],
        ]])

    def script_data_hash(self, redeemers_cbor: bytes) -> bytes:
        """blake2b-256 over redeemers || language views (no witness datums)."""
        views = dumps({PLUTUS_V2_LANGUAGE_ID: list(self._params.plutus_v2_cost_model)})
        return blake2b_256(redeemers_cbor + views)

    # ── Build ──────────────────────────────────────────────

    def build(
        self,
        plan: ClaimPlan,
        script_utxo: Utxo,
        wallet_utxos: list[Utxo],
        change_address: str,
    ) -> UnsignedTransaction:
        collateral = self.select_collateral(wallet_utxos)
        fee_input = self.select_fee_input(wallet_utxos, collateral)

        inputs = sorted({script_utxo.ref, fee_input.ref}, key=lambda r: (r.tx_hash, r.index))
        redeemer_index = inputs.index(script_utxo.ref)
        redeemers = self.redeemers_cbor(plan.redeemer_identity, redeemer_index)

        total_in = script_utxo.value + fee_input.value
        total_out = _planned_value(plan.payout) + _planned_value(plan.continuing)
        continuing_datum = encode_record_cbor(plan.continuing.datum) if plan.continuing.datum else None

        fee = 0
        for _ in range(_MAX_FEE_ROUNDS):
            change = total_in - total_out - Value(fee)
            body = {
                BODY_INPUTS: [_input_item(r) for r in inputs],
                BODY_OUTPUTS: [
                    _output_item(plan.payout.address, _planned_value(plan.payout)),
                    _output_item(
                        plan.continuing.address,
                        _planned_value(plan.continuing),
                        continuing_datum,
                    ),
                    _output_item(change_address, change),
                ],
                BODY_FEE: fee,
                BODY_SCRIPT_DATA_HASH: self.script_data_hash(redeemers),
                BODY_COLLATERAL: [_input_item(collateral.ref)],
                BODY_REQUIRED_SIGNERS: [bytes.fromhex(plan.redeemer_identity)],
            }
            unsigned = UnsignedTransaction(
                body_cbor=dumps(body),
                redeemers_cbor=redeemers,
                scripts=(self._script,),
                fee=fee,
                required_signers=(plan.redeemer_identity,),
            )
            size = len(unsigned.assemble([_DUMMY_WITNESS]).cbor)
            needed = self.min_fee(size)
            if needed <= fee:
                break
            fee = needed
        else:
            raise BuildError(
                f"fee did not settle after {_MAX_FEE_ROUNDS} rounds (still rising at {fee})",
            )

        change = total_in - total_out - Value(unsigned.fee)
        if change.lovelace < self._min_change:
            raise InsufficientFunds(
                f"change of {change.lovelace} lovelace is below {self._min_change} "
                f"after a fee of {unsigned.fee}",
            )
        if any(qty < 0 for qty in change.assets.values()):
            raise InsufficientFunds(f"inputs do not cover outputs: {change.assets}")
        if collateral.value.lovelace * 100 < unsigned.fee * self._params.collateral_percent:
            raise InsufficientFunds(
                f"collateral of {collateral.value.lovelace} lovelace does not cover "
                f"{self._params.collateral_percent}% of fee {unsigned.fee}",
            )

        log.info(
            "Built claim tx %s: %d inputs, fee %d, change %d lovelace",
            unsigned.tx_id[:16], len(inputs), unsigned.fee, change.lovelace,
        )
        return unsigned
