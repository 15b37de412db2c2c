"""Bech32 codec and Cardano address helpers."""

from __future__ import annotations

import pytest

from airdrop_claim.cardano import bech32
from airdrop_claim.errors import InvalidAddress


# ── BIP-173 vectors ───────────────────────────────────────────────


@pytest.mark.parametrize("text,hrp,payload", [
    ("A12UEL5L", "a", ""),
    ("a12uel5l", "a", ""),
    (
        "abcdef1qpzry9x8gf2tvdw0s3jn54khce6mua7lmqqqxw",
        "abcdef",
        "00443214c74254b635cf84653a56d7c675be77df",
    ),
])
def test_valid_vectors(text, hrp, payload):
    assert bech32.decode(text) == (hrp, bytes.fromhex(payload))
    assert bech32.encode(hrp, bytes.fromhex(payload)) == text.lower()


@pytest.mark.parametrize("text", [
    "A12UEL5M",  # checksum
    "A12uEL5L",  # mixed case
    "12uel5l",  # empty hrp
    "a1uel5",  # too short
    "abcdef1qpzry9x8gf2tvdw0s3jn54khce6mua7lmqqqxb",  # checksum
    "a1bqqqqqqq",  # 'b' is not in the charset
])
def test_invalid_strings(text):
    with pytest.raises(ValueError):
        bech32.decode(text)


# ── Cardano addresses ─────────────────────────────────────────────


def test_address_hrp_follows_network():
    assert bech32.address_hrp(1) == "addr"
    assert bech32.address_hrp(0) == "addr_test"


def test_enterprise_address_round_trip():
    payload = bytes([0x61]) + bytes(range(28))
    address = bech32.address_from_bytes(payload)
    assert address.startswith("addr1")
    assert bech32.address_to_bytes(address) == payload


def test_testnet_header_selects_test_prefix():
    payload = bytes([0x70]) + bytes(28)
    address = bech32.address_from_bytes(payload)
    assert address.startswith("addr_test1")
    assert bech32.address_to_bytes(address) == payload


def test_base_address_longer_than_ninety_characters():
    payload = bytes([0x00]) + bytes(range(56))
    address = bech32.address_from_bytes(payload)
    assert len(address) > 90
    assert bech32.address_to_bytes(address) == payload


@pytest.mark.parametrize("address", [
    "addr_test1notbech32",
    "a12uel5l",  # valid bech32, wrong prefix, no payload
    "",
])
def test_invalid_address_is_a_claim_error(address):
    with pytest.raises(InvalidAddress) as exc_info:
        bech32.address_to_bytes(address)
    assert exc_info.value.kind == "invalid_address"
