"""ChainGateway protocol - UTxO lookup, protocol parameters and submission."""

from __future__ import annotations

from typing import Protocol

from airdrop_claim.models.chain import ProtocolParams, Utxo


class ChainGateway(Protocol):
    """Reads chain state and submits transactions. Raises GatewayError on failure."""

    async def find_utxos_at_address(self, address: str) -> list[Utxo]:
        """All current UTxOs at a bech32 address."""
        ...

    async def get_protocol_params(self) -> ProtocolParams:
        ...

    async def submit(self, signed_tx: bytes) -> str:
        """Submit a serialized transaction. Returns its hash."""
        ...

    async def await_confirmation(
        self, tx_hash: str, timeout: float = 600, poll_interval: float = 20,
    ) -> bool:
        """Wait until the transaction is in a block. False on timeout."""
        ...
