"""Blockfrost gateway against a local aiohttp server."""

from __future__ import annotations

from fractions import Fraction

import pytest
from aiohttp import web

from airdrop_claim.cardano import blockfrost
from airdrop_claim.cardano.blockfrost import BlockfrostGateway
from airdrop_claim.errors import GatewayError
from airdrop_claim.models.records import OutputRef

from tests.factories import LOCK_ADDRESS, RECORD_TX, UNIT
from tests.mocks import TEST_COST_MODEL

PROJECT_ID = "preprodTestProject"
SERVER_PORT = 9301
CONFIRMED_TX = "c1" * 32


def _raw_utxo(index: int, datum: str | None = None) -> dict:
    return {
        "address": LOCK_ADDRESS,
        "tx_hash": RECORD_TX,
        "output_index": index,
        "amount": [
            {"unit": "lovelace", "quantity": "2000000"},
            {"unit": UNIT, "quantity": str(100 + index)},
        ],
        "block": "ab" * 32,
        "data_hash": None,
        "inline_datum": datum,
        "reference_script_hash": None,
    }


PARAMS = {
    "epoch": 120,
    "min_fee_a": 44,
    "min_fee_b": 155381,
    "price_mem": 0.0577,
    "price_step": 0.0000721,
    "collateral_percent": 150,
    "cost_models_raw": {"PlutusV1": [1, 2, 3], "PlutusV2": list(TEST_COST_MODEL)},
}


@pytest.fixture
async def blockfrost_server():
    """Local HTTP server speaking the subset of the Blockfrost API the gateway uses.

    Returns (base_url, state). ``state`` records submissions and confirm polls.
    """
    utxos = [_raw_utxo(0, "d87980"), _raw_utxo(1), _raw_utxo(2)]
    state = {"submitted": [], "polls": 0, "confirm_after": 2}

    @web.middleware
    async def auth(request, handler):
        if request.headers.get("project_id") != PROJECT_ID:
            return web.json_response(
                {"status_code": 403, "error": "Forbidden", "message": "Invalid project token."},
                status=403,
            )
        return await handler(request)

    async def handle_utxos(request):
        if request.match_info["address"] != LOCK_ADDRESS:
            return web.json_response(
                {"status_code": 404, "error": "Not Found", "message": "The requested component has not been found."},
                status=404,
            )
        page = int(request.query.get("page", 1))
        count = int(request.query.get("count", 100))
        return web.json_response(utxos[(page - 1) * count:page * count])

    async def handle_params(request):
        return web.json_response(PARAMS)

    async def handle_submit(request):
        body = await request.read()
        if request.content_type != "application/cbor" or body == b"\x00":
            return web.json_response(
                {"status_code": 400, "error": "Bad Request", "message": "transaction submit error"},
                status=400,
            )
        state["submitted"].append(body)
        return web.json_response("d0" * 32)

    async def handle_tx(request):
        if request.match_info["tx_hash"] == CONFIRMED_TX:
            state["polls"] += 1
            if state["polls"] >= state["confirm_after"]:
                return web.json_response({"hash": CONFIRMED_TX, "block_height": 1})
        return web.json_response({"status_code": 404, "error": "Not Found"}, status=404)

    app = web.Application(middlewares=[auth])
    app.router.add_get("/addresses/{address}/utxos", handle_utxos)
    app.router.add_get("/epochs/latest/parameters", handle_params)
    app.router.add_post("/tx/submit", handle_submit)
    app.router.add_get("/txs/{tx_hash}", handle_tx)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", SERVER_PORT)
    await site.start()
    yield f"http://127.0.0.1:{SERVER_PORT}", state
    await runner.cleanup()


@pytest.fixture
async def gateway(blockfrost_server):
    base_url, _ = blockfrost_server
    g = BlockfrostGateway(base_url, PROJECT_ID, request_timeout=5)
    yield g
    await g.close()


# ── UTxO lookup ───────────────────────────────────────────────────


async def test_find_utxos_parses_values(gateway):
    utxos = await gateway.find_utxos_at_address(LOCK_ADDRESS)

    assert len(utxos) == 3
    first = utxos[0]
    assert first.ref == OutputRef(RECORD_TX, 0)
    assert first.address == LOCK_ADDRESS
    assert first.value.lovelace == 2_000_000
    assert first.value.quantity(UNIT) == 100
    assert first.inline_datum == "d87980"
    assert utxos[1].inline_datum is None


async def test_find_utxos_follows_pages(gateway, monkeypatch):
    monkeypatch.setattr(blockfrost, "PAGE_SIZE", 2)
    utxos = await gateway.find_utxos_at_address(LOCK_ADDRESS)
    assert [u.ref.index for u in utxos] == [0, 1, 2]


async def test_unused_address_has_no_utxos(gateway):
    assert await gateway.find_utxos_at_address("addr_test1unused") == []


# ── Protocol parameters ───────────────────────────────────────────


async def test_protocol_params(gateway):
    params = await gateway.get_protocol_params()
    assert params.min_fee_a == 44
    assert params.min_fee_b == 155381
    assert params.price_mem == Fraction(577, 10000)
    assert params.price_step == Fraction(721, 10000000)
    assert params.plutus_v2_cost_model == TEST_COST_MODEL


def test_params_without_plutus_v2_model():
    raw = dict(PARAMS, cost_models_raw={"PlutusV1": [1]}, cost_models=None)
    with pytest.raises(GatewayError, match="PlutusV2"):
        blockfrost._parse_params(raw)


def test_params_fall_back_to_named_cost_model():
    raw = dict(PARAMS, cost_models_raw=None, cost_models={"PlutusV2": {"a": 5, "b": 6}})
    assert blockfrost._parse_params(raw).plutus_v2_cost_model == (5, 6)


# ── Submission & confirmation ─────────────────────────────────────


async def test_submit_sends_cbor(gateway, blockfrost_server):
    _, state = blockfrost_server
    tx_hash = await gateway.submit(b"\x84\xa0\xa0\xf5\xf6")
    assert tx_hash == "d0" * 32
    assert state["submitted"] == [b"\x84\xa0\xa0\xf5\xf6"]


async def test_rejected_submission(gateway):
    with pytest.raises(GatewayError) as exc_info:
        await gateway.submit(b"\x00")
    assert exc_info.value.status_code == 400
    assert "transaction submit error" in str(exc_info.value)
    assert exc_info.value.retryable is True


async def test_await_confirmation_polls_until_seen(gateway, blockfrost_server):
    _, state = blockfrost_server
    assert await gateway.await_confirmation(CONFIRMED_TX, timeout=10, poll_interval=0)
    assert state["polls"] == 2


async def test_await_confirmation_times_out(gateway):
    assert await gateway.await_confirmation("e0" * 32, timeout=0, poll_interval=0) is False


# ── Failures ──────────────────────────────────────────────────────


async def test_bad_project_id(blockfrost_server):
    base_url, _ = blockfrost_server
    g = BlockfrostGateway(base_url, "wrong", request_timeout=5)
    try:
        with pytest.raises(GatewayError) as exc_info:
            await g.get_protocol_params()
        assert exc_info.value.status_code == 403
    finally:
        await g.close()


async def test_unreachable_server():
    g = BlockfrostGateway("http://127.0.0.1:9", PROJECT_ID, request_timeout=2)
    try:
        with pytest.raises(GatewayError, match="transport error"):
            await g.find_utxos_at_address(LOCK_ADDRESS)
    finally:
        await g.close()
