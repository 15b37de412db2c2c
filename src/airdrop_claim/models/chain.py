"""Ledger-side types returned by the chain gateway."""

from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction

from airdrop_claim.models.records import OutputRef

LOVELACE_PER_ADA = 1_000_000


@dataclass(frozen=True)
class Value:
    """Lovelace plus native assets keyed by unit (policy id + asset name hex)."""

    lovelace: int = 0
    assets: dict[str, int] = field(default_factory=dict)

    def quantity(self, unit: str) -> int:
        return self.assets.get(unit, 0)

    @property
    def is_pure_lovelace(self) -> bool:
        return not any(self.assets.values())

    def __add__(self, other: Value) -> Value:
        assets = dict(self.assets)
        for unit, qty in other.assets.items():
            assets[unit] = assets.get(unit, 0) + qty
        return Value(self.lovelace + other.lovelace, assets)

    def __sub__(self, other: Value) -> Value:
        assets = dict(self.assets)
        for unit, qty in other.assets.items():
            assets[unit] = assets.get(unit, 0) - qty
        return Value(
            self.lovelace - other.lovelace,
            {unit: qty for unit, qty in assets.items() if qty != 0},
        )


@dataclass(frozen=True)
class Utxo:
    """An unspent transaction output."""

    ref: OutputRef
    address: str  # bech32
    value: Value
    inline_datum: str | None = None  # CBOR hex


@dataclass(frozen=True)
class ProtocolParams:
    """The subset of protocol parameters the transaction builder needs."""

    min_fee_a: int
    min_fee_b: int
    price_mem: Fraction
    price_step: Fraction
    collateral_percent: int = 150
    plutus_v2_cost_model: tuple[int, ...] = ()
