"""Ed25519 key wallet - signs claim transactions with a payment signing key."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import cbor2
from nacl.signing import SigningKey

from airdrop_claim.cardano.bech32 import address_from_bytes
from airdrop_claim.cardano.transaction import SignedTransaction, UnsignedTransaction, blake2b_224

log = logging.getLogger(__name__)

# Shelley enterprise address header (payment key hash, no stake part)
_ENTERPRISE_KEY_HEADER = 0x60


def load_skey_file(path: str | Path) -> bytes:
    """Read the 32-byte seed out of a cardano-cli ``.skey`` JSON envelope."""
    with open(Path(path).expanduser()) as f:
        envelope = json.load(f)
    seed = cbor2.loads(bytes.fromhex(envelope["cborHex"]))
    if not isinstance(seed, bytes) or len(seed) != 32:
        raise ValueError(f"{path}: expected a 32-byte ed25519 signing key")
    return seed


class KeyWallet:
    """Implements the Wallet protocol with a single payment signing key."""

    def __init__(self, seed: bytes, network_id: int = 0) -> None:
        if len(seed) != 32:
            raise ValueError("ed25519 signing key seed must be 32 bytes")
        self._key = SigningKey(seed)
        self._vkey = bytes(self._key.verify_key)
        self._vkh = blake2b_224(self._vkey)
        self._network_id = network_id

    @classmethod
    def from_hex(cls, seed_hex: str, network_id: int = 0) -> KeyWallet:
        return cls(bytes.fromhex(seed_hex), network_id)

    @classmethod
    def from_skey_file(cls, path: str | Path, network_id: int = 0) -> KeyWallet:
        return cls(load_skey_file(path), network_id)

    @property
    def verification_key(self) -> bytes:
        return self._vkey

    async def get_address(self) -> str:
        return address_from_bytes(bytes([_ENTERPRISE_KEY_HEADER | self._network_id]) + self._vkh)

    async def get_identity_hash(self) -> str:
        return self._vkh.hex()

    async def sign(self, unsigned: UnsignedTransaction) -> SignedTransaction:
        signature = self._key.sign(unsigned.body_hash).signature
        log.debug("Signed tx %s", unsigned.tx_id[:16])
        return unsigned.assemble([(self._vkey, signature)])
