"""Cardano address helpers on top of the ``bech32`` package.

``bech32.bech32_decode`` refuses strings over BIP-173's 90 characters, which
base addresses exceed, so decoding checks the checksum with the package's
polymod directly and applies no length limit.
"""

from __future__ import annotations

from bech32 import CHARSET, bech32_encode, bech32_hrp_expand, bech32_polymod, convertbits

from airdrop_claim.errors import InvalidAddress


def encode(hrp: str, payload: bytes) -> str:
    return bech32_encode(hrp, convertbits(payload, 8, 5))


def decode(text: str) -> tuple[str, bytes]:
    """Decode a bech32 string into (hrp, payload bytes)."""
    if text.lower() != text and text.upper() != text:
        raise ValueError("mixed case bech32 string")
    text = text.lower()
    pos = text.rfind("1")
    if pos < 1 or pos + 7 > len(text):
        raise ValueError("missing or misplaced bech32 separator")
    hrp = text[:pos]
    if any(ord(c) < 33 or ord(c) > 126 for c in hrp):
        raise ValueError("invalid human-readable part")
    if any(c not in CHARSET for c in text[pos + 1:]):
        raise ValueError("invalid bech32 character")
    data = [CHARSET.find(c) for c in text[pos + 1:]]
    if bech32_polymod(bech32_hrp_expand(hrp) + data) != 1:
        raise ValueError("bech32 checksum mismatch")
    payload = convertbits(data[:-6], 5, 8, False)
    if payload is None:
        raise ValueError("invalid bech32 padding")
    return hrp, bytes(payload)


def address_hrp(network_id: int) -> str:
    return "addr" if network_id == 1 else "addr_test"


def address_to_bytes(address: str) -> bytes:
    try:
        hrp, payload = decode(address)
    except ValueError as exc:
        raise InvalidAddress(f"{address!r}: {exc}") from exc
    if hrp not in ("addr", "addr_test") or not payload:
        raise InvalidAddress(f"{address!r} is not a Cardano payment address")
    return payload


def address_from_bytes(payload: bytes) -> str:
    return encode(address_hrp(payload[0] & 0x0F), payload)
