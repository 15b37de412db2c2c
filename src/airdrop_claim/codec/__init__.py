"""Plutus data wire codec and the airdrop datum codec."""

from airdrop_claim.codec.cbor import decode_plutus, encode_plutus, from_json, to_json
from airdrop_claim.codec.datum import (
    claim_redeemer,
    decode_record,
    decode_record_cbor,
    encode_record,
    encode_record_cbor,
)

__all__ = [
    "decode_plutus", "encode_plutus", "from_json", "to_json",
    "claim_redeemer", "decode_record", "decode_record_cbor",
    "encode_record", "encode_record_cbor",
]
