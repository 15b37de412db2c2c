"""Plutus data: the closed set of shapes a datum or redeemer is built from."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class PlutusBytes:
    """A byte string."""

    value: bytes

    @classmethod
    def from_hex(cls, text: str) -> PlutusBytes:
        return cls(bytes.fromhex(text))

    def hex(self) -> str:
        return self.value.hex()


@dataclass(frozen=True)
class PlutusInt:
    """An arbitrary-precision integer."""

    value: int


@dataclass(frozen=True)
class Constr:
    """A tagged alternative (sum type constructor) with ordered fields."""

    index: int
    fields: tuple[PlutusData, ...] = ()


@dataclass(frozen=True)
class PlutusList:
    """An ordered list of values."""

    items: tuple[PlutusData, ...] = ()


PlutusData = Union[PlutusBytes, PlutusInt, Constr, PlutusList]
