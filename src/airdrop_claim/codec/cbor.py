"""Plutus data wire codec: CBOR and detailed-schema JSON.

CBOR layout follows the ledger's canonical Plutus data encoding:

    Constr i, i in 0..6      -> tag 121+i, fields
    Constr i, i in 7..127    -> tag 1280+(i-7), fields
    Constr i, otherwise      -> tag 102, [i, fields]
    list                     -> indefinite array when non-empty, else 0x80
    bytes longer than 64     -> indefinite byte string of 64-byte chunks
    int                      -> major type 0/1, bignum tags 2/3 beyond 64 bits

Decoding accepts both definite and indefinite forms.
"""

from __future__ import annotations

import re
from typing import Any

import cbor2

from airdrop_claim.errors import MalformedRecord
from airdrop_claim.models.plutus import Constr, PlutusBytes, PlutusData, PlutusInt, PlutusList

_CHUNK_SIZE = 64
_HEX_RE = re.compile(r"^(?:[0-9a-fA-F]{2})*$")


class _IndefiniteList:
    def __init__(self, items: list[Any]) -> None:
        self.items = items


class _ChunkedBytes:
    def __init__(self, data: bytes) -> None:
        self.data = data


class RawCbor:
    """Already-encoded CBOR spliced verbatim into a larger item."""

    def __init__(self, data: bytes) -> None:
        self.data = data


def _encode_extra(encoder: cbor2.CBOREncoder, value: Any) -> None:
    if isinstance(value, _IndefiniteList):
        encoder.write(b"\x9f")
        for item in value.items:
            encoder.encode(item)
        encoder.write(b"\xff")
    elif isinstance(value, _ChunkedBytes):
        encoder.write(b"\x5f")
        for i in range(0, len(value.data), _CHUNK_SIZE):
            encoder.encode(value.data[i:i + _CHUNK_SIZE])
        encoder.write(b"\xff")
    elif isinstance(value, RawCbor):
        encoder.write(value.data)
    else:
        raise cbor2.CBOREncodeTypeError(f"cannot serialize type {type(value).__name__}")


def dumps(obj: Any) -> bytes:
    """Serialize a CBOR item tree that may contain Plutus data items."""
    return cbor2.dumps(obj, default=_encode_extra)


def is_hex(text: str) -> bool:
    return bool(_HEX_RE.match(text))


# ── Encoding ───────────────────────────────────────────


def _seq(items: list[Any]) -> Any:
    return _IndefiniteList(items) if items else []


def to_cbor_item(data: PlutusData) -> Any:
    """Convert Plutus data into a cbor2-serializable item tree."""
    if isinstance(data, PlutusBytes):
        if len(data.value) > _CHUNK_SIZE:
            return _ChunkedBytes(data.value)
        return data.value
    if isinstance(data, PlutusInt):
        return data.value
    if isinstance(data, PlutusList):
        return _seq([to_cbor_item(item) for item in data.items])
    if isinstance(data, Constr):
        fields = _seq([to_cbor_item(f) for f in data.fields])
        if 0 <= data.index <= 6:
            return cbor2.CBORTag(121 + data.index, fields)
        if 7 <= data.index <= 127:
            return cbor2.CBORTag(1280 + data.index - 7, fields)
        return cbor2.CBORTag(102, [data.index, fields])
    raise TypeError(f"not Plutus data: {type(data).__name__}")


def encode_plutus(data: PlutusData) -> bytes:
    return dumps(to_cbor_item(data))


# ── Decoding ───────────────────────────────────────────


def _constr_index(tag: int) -> int | None:
    if 121 <= tag <= 127:
        return tag - 121
    if 1280 <= tag <= 1400:
        return tag - 1280 + 7
    return None


def from_cbor_item(item: Any, path: str = "datum") -> PlutusData:
    """Recursive-descent conversion of a decoded CBOR item to Plutus data."""
    if isinstance(item, bool) or item is None:
        raise MalformedRecord(path, f"unexpected CBOR simple value {item!r}")
    if isinstance(item, int):
        return PlutusInt(item)
    if isinstance(item, (bytes, bytearray)):
        return PlutusBytes(bytes(item))
    if isinstance(item, (list, tuple)):
        return PlutusList(tuple(
            from_cbor_item(x, f"{path}[{i}]") for i, x in enumerate(item)
        ))
    if isinstance(item, cbor2.CBORTag):
        index = _constr_index(item.tag)
        raw_fields = item.value
        if index is None:
            if item.tag != 102:
                raise MalformedRecord(path, f"unsupported CBOR tag {item.tag}")
            if not (isinstance(item.value, (list, tuple)) and len(item.value) == 2):
                raise MalformedRecord(path, "tag 102 must wrap [alternative, fields]")
            index, raw_fields = item.value
            if isinstance(index, bool) or not isinstance(index, int) or index < 0:
                raise MalformedRecord(path, f"invalid constructor alternative {index!r}")
        if not isinstance(raw_fields, (list, tuple)):
            raise MalformedRecord(path, "constructor fields must be an array")
        return Constr(index, tuple(
            from_cbor_item(x, f"{path}.fields[{i}]") for i, x in enumerate(raw_fields)
        ))
    if isinstance(item, dict):
        raise MalformedRecord(path, "maps are not allowed here")
    raise MalformedRecord(path, f"unsupported CBOR value of type {type(item).__name__}")


def decode_plutus(raw: bytes | str) -> PlutusData:
    """Decode CBOR bytes (or their hex) into Plutus data."""
    if isinstance(raw, str):
        if not is_hex(raw):
            raise MalformedRecord("datum", "CBOR hex is not valid hex")
        raw = bytes.fromhex(raw)
    try:
        item = cbor2.loads(raw)
    except cbor2.CBORDecodeError as exc:
        raise MalformedRecord("datum", f"invalid CBOR: {exc}") from exc
    return from_cbor_item(item)


# ── Detailed-schema JSON ───────────────────────────────


def from_json(obj: Any, path: str = "datum") -> PlutusData:
    """Parse the detailed-schema JSON form used by explorers and Blockfrost."""
    if not isinstance(obj, dict):
        raise MalformedRecord(path, f"expected an object, got {type(obj).__name__}")
    if "bytes" in obj:
        text = obj["bytes"]
        if not isinstance(text, str) or not is_hex(text):
            raise MalformedRecord(path, f"byte string is not hex: {text!r}")
        return PlutusBytes(bytes.fromhex(text))
    if "int" in obj:
        value = obj["int"]
        if isinstance(value, bool) or not isinstance(value, int):
            raise MalformedRecord(path, f"integer expected, got {value!r}")
        return PlutusInt(value)
    if "list" in obj:
        items = obj["list"]
        if not isinstance(items, list):
            raise MalformedRecord(path, "list must be an array")
        return PlutusList(tuple(from_json(x, f"{path}[{i}]") for i, x in enumerate(items)))
    if "constructor" in obj:
        index = obj["constructor"]
        fields = obj.get("fields", [])
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            raise MalformedRecord(path, f"invalid constructor alternative {index!r}")
        if not isinstance(fields, list):
            raise MalformedRecord(path, "fields must be an array")
        return Constr(index, tuple(
            from_json(x, f"{path}.fields[{i}]") for i, x in enumerate(fields)
        ))
    if "map" in obj:
        raise MalformedRecord(path, "maps are not allowed here")
    raise MalformedRecord(path, f"unrecognized value: {sorted(obj)}")


def to_json(data: PlutusData) -> dict[str, Any]:
    if isinstance(data, PlutusBytes):
        return {"bytes": data.hex()}
    if isinstance(data, PlutusInt):
        return {"int": data.value}
    if isinstance(data, PlutusList):
        return {"list": [to_json(x) for x in data.items]}
    return {"constructor": data.index, "fields": [to_json(f) for f in data.fields]}
