"""Cardano integration components."""

from airdrop_claim.cardano.blockfrost import BlockfrostGateway
from airdrop_claim.cardano.builder import ClaimTxBuilder
from airdrop_claim.cardano.transaction import SignedTransaction, UnsignedTransaction
from airdrop_claim.cardano.wallet import KeyWallet

__all__ = [
    "BlockfrostGateway",
    "ClaimTxBuilder",
    "SignedTransaction",
    "UnsignedTransaction",
    "KeyWallet",
]
