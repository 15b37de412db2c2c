"""Airdrop datum codec: Plutus data <-> AirdropRecord.

Wire shape (field order and constructor indices are fixed on-chain):

    Constr 0 [
        creator        : bytes
        policy_id      : bytes
        asset_name     : bytes
        total_amount   : int
        claimed_amount : int
        spent_marker   : Constr 0 [tx_hash: bytes, index: int]   unspent, seeded by that output
                       | Constr 0 []                             unspent, no origin recorded
                       | Constr 1 [Constr 0 [tx_hash, index]]    spent by that input
        claimants      : list of [identity: bytes, allocation: int]
    ]
"""

from __future__ import annotations

from airdrop_claim.codec.cbor import decode_plutus, encode_plutus, is_hex
from airdrop_claim.errors import MalformedRecord
from airdrop_claim.models.plutus import Constr, PlutusBytes, PlutusData, PlutusInt, PlutusList
from airdrop_claim.models.records import (
    AirdropRecord,
    Claimant,
    OutputRef,
    Spent,
    SpentMarker,
    Unspent,
)

RECORD_FIELDS = (
    "creator",
    "policy_id",
    "asset_name",
    "total_amount",
    "claimed_amount",
    "spent_marker",
    "claimants",
)

_UNSPENT = 0
_SPENT = 1


# ── Decoding ───────────────────────────────────────────


def _bytes_field(value: PlutusData, field: str) -> str:
    if not isinstance(value, PlutusBytes):
        raise MalformedRecord(field, f"expected bytes, got {type(value).__name__}")
    return value.hex()


def _int_field(value: PlutusData, field: str) -> int:
    if not isinstance(value, PlutusInt):
        raise MalformedRecord(field, f"expected int, got {type(value).__name__}")
    return value.value


def _decode_output_ref(value: PlutusData, field: str) -> OutputRef:
    if not isinstance(value, Constr) or value.index != 0 or len(value.fields) != 2:
        raise MalformedRecord(field, "output reference must be Constr 0 [tx_hash, index]")
    tx_hash = _bytes_field(value.fields[0], f"{field}.tx_hash")
    index = _int_field(value.fields[1], f"{field}.index")
    if index < 0:
        raise MalformedRecord(f"{field}.index", "must not be negative")
    return OutputRef(tx_hash, index)


def _decode_spent_marker(value: PlutusData) -> SpentMarker:
    field = "spent_marker"
    if not isinstance(value, Constr):
        raise MalformedRecord(field, f"expected a tag, got {type(value).__name__}")
    if value.index == _UNSPENT:
        if not value.fields:
            return Unspent()
        return Unspent(_decode_output_ref(value, field))
    if value.index == _SPENT:
        if len(value.fields) != 1:
            raise MalformedRecord(field, "spent marker must carry exactly one output reference")
        return Spent(_decode_output_ref(value.fields[0], f"{field}.ref"))
    raise MalformedRecord(field, f"unknown tag {value.index}")


def _decode_claimants(value: PlutusData) -> tuple[Claimant, ...]:
    if not isinstance(value, PlutusList):
        raise MalformedRecord("claimants", f"expected a list, got {type(value).__name__}")
    claimants: list[Claimant] = []
    seen: set[str] = set()
    for i, entry in enumerate(value.items):
        field = f"claimants[{i}]"
        if not isinstance(entry, PlutusList) or len(entry.items) != 2:
            raise MalformedRecord(field, "claimant must be a pair [identity, allocation]")
        identity = _bytes_field(entry.items[0], f"{field}.identity")
        allocation = _int_field(entry.items[1], f"{field}.allocation")
        if identity in seen:
            raise MalformedRecord(field, f"duplicate claimant identity {identity}")
        seen.add(identity)
        claimants.append(Claimant(identity, allocation))
    return tuple(claimants)


def decode_record(data: PlutusData) -> AirdropRecord:
    """Decode Plutus data into an AirdropRecord, or raise MalformedRecord."""
    if not isinstance(data, Constr) or data.index != 0:
        raise MalformedRecord("datum", "record must be Constr 0")
    if len(data.fields) != len(RECORD_FIELDS):
        raise MalformedRecord(
            "datum", f"expected {len(RECORD_FIELDS)} fields, got {len(data.fields)}",
        )

    creator, policy_id, asset_name, total, claimed, marker, claimants = data.fields
    record = AirdropRecord(
        creator=_bytes_field(creator, "creator"),
        policy_id=_bytes_field(policy_id, "policy_id"),
        asset_name=_bytes_field(asset_name, "asset_name"),
        total_amount=_int_field(total, "total_amount"),
        claimed_amount=_int_field(claimed, "claimed_amount"),
        spent_marker=_decode_spent_marker(marker),
        claimants=_decode_claimants(claimants),
    )

    if record.total_amount < 0:
        raise MalformedRecord("total_amount", "must not be negative")
    if record.claimed_amount < 0:
        raise MalformedRecord("claimed_amount", "must not be negative")
    # claimed_amount may exceed total_amount: claims never re-check the total
    return record


def decode_record_cbor(raw: bytes | str) -> AirdropRecord:
    """Decode an inline datum given as CBOR bytes or hex."""
    return decode_record(decode_plutus(raw))


# ── Encoding ───────────────────────────────────────────


def _hex_bytes(value: str, field: str) -> PlutusBytes:
    if not is_hex(value):
        raise MalformedRecord(field, f"not a hex string: {value!r}")
    return PlutusBytes.from_hex(value)


def _encode_output_ref(ref: OutputRef, field: str) -> Constr:
    return Constr(0, (_hex_bytes(ref.tx_hash, f"{field}.tx_hash"), PlutusInt(ref.index)))


def _encode_spent_marker(marker: SpentMarker) -> Constr:
    if isinstance(marker, Spent):
        return Constr(_SPENT, (_encode_output_ref(marker.ref, "spent_marker.ref"),))
    if marker.origin is None:
        return Constr(_UNSPENT)
    return Constr(_UNSPENT, _encode_output_ref(marker.origin, "spent_marker").fields)


def encode_record(record: AirdropRecord) -> Constr:
    """Encode an AirdropRecord; exact structural inverse of decode_record."""
    claimants = PlutusList(tuple(
        PlutusList((
            _hex_bytes(c.identity_hash, f"claimants[{i}].identity"),
            PlutusInt(c.allocation),
        ))
        for i, c in enumerate(record.claimants)
    ))
    return Constr(0, (
        _hex_bytes(record.creator, "creator"),
        _hex_bytes(record.policy_id, "policy_id"),
        _hex_bytes(record.asset_name, "asset_name"),
        PlutusInt(record.total_amount),
        PlutusInt(record.claimed_amount),
        _encode_spent_marker(record.spent_marker),
        claimants,
    ))


def encode_record_cbor(record: AirdropRecord) -> bytes:
    return encode_plutus(encode_record(record))


def claim_redeemer(caller_identity: str) -> Constr:
    """The ``Claim`` redeemer authorizing the caller to spend the record."""
    return Constr(0, (_hex_bytes(caller_identity, "redeemer.identity"),))
