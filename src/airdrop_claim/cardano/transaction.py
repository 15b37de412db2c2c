"""Babbage-era transaction envelopes: unsigned body plus witnesses."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Any

from airdrop_claim.codec.cbor import RawCbor, dumps

# Transaction body keys
BODY_INPUTS = 0
BODY_OUTPUTS = 1
BODY_FEE = 2
BODY_SCRIPT_DATA_HASH = 11
BODY_COLLATERAL = 13
BODY_REQUIRED_SIGNERS = 14

# Witness set keys
WITNESS_VKEYS = 0
WITNESS_REDEEMERS = 5
WITNESS_PLUTUS_V2_SCRIPTS = 6


def blake2b_256(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=32).digest()


def blake2b_224(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=28).digest()


@dataclass(frozen=True)
class SignedTransaction:
    """A fully witnessed transaction ready for submission."""

    cbor: bytes
    tx_id: str

    def hex(self) -> str:
        return self.cbor.hex()


@dataclass(frozen=True)
class UnsignedTransaction:
    """A balanced transaction body and its script witnesses, awaiting vkey signatures.

    The body is kept as encoded bytes so the signed hash and the submitted
    body are the same bytes.
    """

    body_cbor: bytes
    redeemers_cbor: bytes
    scripts: tuple[bytes, ...]
    fee: int
    required_signers: tuple[str, ...] = field(default_factory=tuple)

    @property
    def tx_id(self) -> str:
        return blake2b_256(self.body_cbor).hex()

    @property
    def body_hash(self) -> bytes:
        return blake2b_256(self.body_cbor)

    def witness_set(self, vkey_witnesses: list[tuple[bytes, bytes]]) -> dict[int, Any]:
        witnesses: dict[int, Any] = {}
        if vkey_witnesses:
            witnesses[WITNESS_VKEYS] = [[vkey, sig] for vkey, sig in vkey_witnesses]
        witnesses[WITNESS_REDEEMERS] = RawCbor(self.redeemers_cbor)
        if self.scripts:
            witnesses[WITNESS_PLUTUS_V2_SCRIPTS] = list(self.scripts)
        return witnesses

    def assemble(self, vkey_witnesses: list[tuple[bytes, bytes]]) -> SignedTransaction:
        """Attach (verification key, signature) pairs and serialize."""
        tx = [RawCbor(self.body_cbor), self.witness_set(vkey_witnesses), True, None]
        return SignedTransaction(cbor=dumps(tx), tx_id=self.tx_id)
