"""Blockfrost chain gateway - UTxO lookup, protocol parameters and submission over httpx."""

from __future__ import annotations

import asyncio
import logging
import time
from fractions import Fraction
from typing import Any

import httpx

from airdrop_claim.errors import GatewayError
from airdrop_claim.models.chain import ProtocolParams, Utxo, Value
from airdrop_claim.models.records import OutputRef

log = logging.getLogger(__name__)

PAGE_SIZE = 100


def _parse_value(amount: list[dict[str, Any]]) -> Value:
    lovelace = 0
    assets: dict[str, int] = {}
    for entry in amount:
        qty = int(entry["quantity"])
        if entry["unit"] == "lovelace":
            lovelace += qty
        else:
            assets[entry["unit"]] = assets.get(entry["unit"], 0) + qty
    return Value(lovelace, assets)


def _parse_utxo(raw: dict[str, Any]) -> Utxo:
    index = raw.get("output_index", raw.get("tx_index"))
    return Utxo(
        ref=OutputRef(raw["tx_hash"], int(index)),
        address=raw["address"],
        value=_parse_value(raw["amount"]),
        inline_datum=raw.get("inline_datum"),
    )


def _parse_params(raw: dict[str, Any]) -> ProtocolParams:
    cost_model: list[int] = []
    raw_models = raw.get("cost_models_raw") or {}
    if raw_models.get("PlutusV2"):
        cost_model = [int(v) for v in raw_models["PlutusV2"]]
    elif (raw.get("cost_models") or {}).get("PlutusV2"):
        cost_model = [int(v) for v in raw["cost_models"]["PlutusV2"].values()]
    if not cost_model:
        raise GatewayError("protocol parameters carry no PlutusV2 cost model")
    return ProtocolParams(
        min_fee_a=int(raw["min_fee_a"]),
        min_fee_b=int(raw["min_fee_b"]),
        price_mem=Fraction(str(raw["price_mem"])),
        price_step=Fraction(str(raw["price_step"])),
        collateral_percent=int(raw.get("collateral_percent") or 150),
        plutus_v2_cost_model=tuple(cost_model),
    )


class BlockfrostGateway:
    """Implements the ChainGateway protocol against the Blockfrost REST API.

    Every call fetches fresh chain state; nothing is cached. Transport and
    HTTP failures surface as GatewayError without retrying.
    """

    def __init__(
        self,
        base_url: str,
        project_id: str,
        request_timeout: int = 30,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"project_id": project_id},
            timeout=httpx.Timeout(request_timeout, connect=10),
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            log.error("Blockfrost %s %s timed out", method, path)
            raise GatewayError(f"timeout calling {path}") from exc
        except httpx.HTTPError as exc:
            log.error("Blockfrost %s %s failed: %s", method, path, exc)
            raise GatewayError(f"transport error calling {path}: {exc}") from exc
        return resp

    def _raise_for_status(self, resp: httpx.Response, path: str) -> None:
        if resp.is_success:
            return
        try:
            detail = resp.json().get("message", resp.text)
        except ValueError:
            detail = resp.text
        log.error("Blockfrost %s returned HTTP %d: %s", path, resp.status_code, detail)
        raise GatewayError(f"HTTP {resp.status_code} from {path}: {detail}", resp.status_code)

    async def find_utxos_at_address(self, address: str) -> list[Utxo]:
        """All UTxOs at an address, following pagination."""
        path = f"/addresses/{address}/utxos"
        utxos: list[Utxo] = []
        page = 1
        while True:
            resp = await self._request("GET", path, params={"page": page, "count": PAGE_SIZE})
            if resp.status_code == 404:
                # Address has never been used
                return utxos
            self._raise_for_status(resp, path)
            try:
                batch = [_parse_utxo(raw) for raw in resp.json()]
            except (KeyError, TypeError, ValueError) as exc:
                raise GatewayError(f"unexpected UTxO response from {path}: {exc}") from exc
            utxos.extend(batch)
            if len(batch) < PAGE_SIZE:
                break
            page += 1
        log.debug("Found %d UTxOs at %s", len(utxos), address[:24])
        return utxos

    async def get_protocol_params(self) -> ProtocolParams:
        path = "/epochs/latest/parameters"
        resp = await self._request("GET", path)
        self._raise_for_status(resp, path)
        try:
            return _parse_params(resp.json())
        except (KeyError, TypeError, ValueError) as exc:
            raise GatewayError(f"unexpected protocol parameters from {path}: {exc}") from exc

    async def submit(self, signed_tx: bytes) -> str:
        path = "/tx/submit"
        resp = await self._request(
            "POST", path, content=signed_tx, headers={"Content-Type": "application/cbor"},
        )
        self._raise_for_status(resp, path)
        try:
            tx_hash = resp.json()
        except ValueError as exc:
            raise GatewayError(f"unexpected submit response: {resp.text[:80]}") from exc
        log.info("Submitted tx %s", tx_hash)
        return str(tx_hash)

    async def is_confirmed(self, tx_hash: str) -> bool:
        path = f"/txs/{tx_hash}"
        resp = await self._request("GET", path)
        if resp.status_code == 404:
            return False
        self._raise_for_status(resp, path)
        return True

    async def await_confirmation(
        self, tx_hash: str, timeout: float = 600, poll_interval: float = 20,
    ) -> bool:
        """Poll until the transaction is in a block or the timeout passes."""
        deadline = time.monotonic() + timeout
        while True:
            if await self.is_confirmed(tx_hash):
                log.info("Tx %s confirmed", tx_hash[:16])
                return True
            if time.monotonic() + poll_interval > deadline:
                log.warning("Tx %s not confirmed after %ss", tx_hash[:16], timeout)
                return False
            await asyncio.sleep(poll_interval)
