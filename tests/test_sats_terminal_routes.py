import json

import pytest

from runeswap.errors import RuneSwapError, UpstreamError
from runeswap.web.routes.sats_terminal import map_search_results, search_result_id, translate_swap_error

TAPROOT = "bc1p5d7rjq7g6rdk2yhzks9smlaqtedr4dekq08ge8ztwac72sfr9rusxg3297"
LEGACY = "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa"

ORDER = {"id": "o1", "market": "MagicEden", "price": 100, "formattedAmount": 1.5, "side": "buy"}

PSBT_BODY = {
    "orders": [ORDER],
    "address": TAPROOT,
    "publicKey": "02abc",
    "paymentAddress": LEGACY,
    "paymentPublicKey": "03def",
    "runeName": "DOG•GO•TO•THE•MOON",
}

CONFIRM_BODY = {**PSBT_BODY, "signedPsbtBase64": "cHNidP8=", "swapId": "swap-1"}


# ----------------------------------------------------------------------------
# quote
# ----------------------------------------------------------------------------


async def test_quote_stringifies_numeric_amount(client, sats_terminal):
    sats_terminal.responses["fetch_quote"] = {"totalFormattedAmount": "1234", "totalPrice": "10000"}

    response = await client.post(
        "/api/sats-terminal/quote", json={"btcAmount": 0.0001, "runeName": "DOG", "address": TAPROOT}
    )

    assert response.status_code == 200
    assert response.json() == {"data": {"totalFormattedAmount": "1234", "totalPrice": "10000"}}
    (args, _), = sats_terminal.called("fetch_quote")
    assert args[0] == {"btcAmount": "0.0001", "runeName": "DOG", "address": TAPROOT}


async def test_quote_forwards_sell_flag(client, sats_terminal):
    sats_terminal.responses["fetch_quote"] = {"totalPrice": "1"}

    await client.post(
        "/api/sats-terminal/quote", json={"btcAmount": "5000", "runeName": "DOG", "address": TAPROOT, "sell": True}
    )

    (args, _), = sats_terminal.called("fetch_quote")
    assert args[0]["sell"] is True
    assert args[0]["btcAmount"] == "5000"


@pytest.mark.parametrize("amount", [0, -1, True, "", None])
async def test_quote_rejects_bad_amounts(client, sats_terminal, amount):
    response = await client.post(
        "/api/sats-terminal/quote", json={"btcAmount": amount, "runeName": "DOG", "address": TAPROOT}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid request parameters"
    assert "btcAmount" in json.loads(body["details"])
    assert sats_terminal.calls == []


async def test_quote_invalid_json(client, sats_terminal):
    response = await client.post(
        "/api/sats-terminal/quote", content=b"btcAmount=1", headers={"content-type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request"


async def test_quote_rate_limited(client, sats_terminal):
    sats_terminal.responses["fetch_quote"] = UpstreamError("Too many requests", '{"error": "slow down"}', 429)

    response = await client.post(
        "/api/sats-terminal/quote", json={"btcAmount": "0.01", "runeName": "DOG", "address": TAPROOT}
    )

    assert response.status_code == 429
    assert response.json() == {"error": "Rate limit exceeded", "details": "Please try again later"}


async def test_quote_without_liquidity(client, sats_terminal):
    sats_terminal.responses["fetch_quote"] = UpstreamError("Insufficient liquidity for DOG", None, 400)

    response = await client.post(
        "/api/sats-terminal/quote", json={"btcAmount": "0.01", "runeName": "DOG", "address": TAPROOT}
    )

    assert response.status_code == 404
    assert response.json() == {"error": "No liquidity available", "details": "Insufficient liquidity for DOG"}


async def test_quote_non_dict_response(client, sats_terminal):
    sats_terminal.responses["fetch_quote"] = ["not", "a", "quote"]

    response = await client.post(
        "/api/sats-terminal/quote", json={"btcAmount": "0.01", "runeName": "DOG", "address": TAPROOT}
    )

    assert response.status_code == 500
    assert response.json()["error"] == "Invalid quote response"


# ----------------------------------------------------------------------------
# search
# ----------------------------------------------------------------------------

SEARCH_RESULTS = [
    {"token": "DOG•GO•TO•THE•MOON", "icon": "https://icons/dog.png"},
    {"token_id": "840000:28", "token": "BITCOIN", "icon": "https://icons/btc.png"},
    {"name": "NAMEONLY"},
    "junk",
]


async def test_search_maps_results_with_stable_ids(client, sats_terminal):
    sats_terminal.responses["search"] = SEARCH_RESULTS

    first = await client.get("/api/sats-terminal/search", params={"query": "dog"})
    second = await client.get("/api/sats-terminal/search", params={"query": "dog"})

    assert first.status_code == 200
    results = first.json()["data"]
    assert results == second.json()["data"]
    assert len(results) == 3
    assert results[0]["id"].startswith("search_")
    assert len(results[0]["id"]) == len("search_") + 8
    assert results[0]["name"] == "DOG•GO•TO•THE•MOON"
    assert results[0]["imageURI"] == "https://icons/dog.png"
    assert results[1] == {"id": "840000:28", "name": "BITCOIN", "imageURI": "https://icons/btc.png"}
    assert results[2]["name"] == "NAMEONLY"
    assert results[2]["imageURI"] == ""


async def test_search_passes_sell_flag(client, sats_terminal):
    sats_terminal.responses["search"] = []

    await client.get("/api/sats-terminal/search", params={"query": "dog", "sell": "true"})
    await client.get("/api/sats-terminal/search", params={"query": "dog"})

    calls = sats_terminal.called("search")
    assert calls[0] == (("dog",), {"sell": True})
    assert calls[1] == (("dog",), {"sell": False})


async def test_search_non_list_is_empty(client, sats_terminal):
    sats_terminal.responses["search"] = {"error": "weird"}

    response = await client.get("/api/sats-terminal/search", params={"query": "dog"})

    assert response.status_code == 200
    assert response.json() == {"data": []}


async def test_search_requires_query(client, sats_terminal):
    response = await client.get("/api/sats-terminal/search")

    assert response.status_code == 400
    assert "query" in json.loads(response.json()["details"])


def test_search_ids_depend_on_position():
    item = {"token": "DOG", "icon": ""}

    assert search_result_id(item, 0) == search_result_id(dict(item), 0)
    assert search_result_id(item, 0) != search_result_id(item, 1)
    assert map_search_results(None) == []


# ----------------------------------------------------------------------------
# PSBT
# ----------------------------------------------------------------------------


async def test_create_psbt_keeps_extra_order_fields(client, sats_terminal):
    sats_terminal.responses["get_psbt"] = {"psbtBase64": "cHNidP8=", "swapId": "swap-1"}

    response = await client.post("/api/sats-terminal/psbt/create", json={**PSBT_BODY, "feeRate": 12})

    assert response.status_code == 200
    assert response.json()["data"]["swapId"] == "swap-1"
    (args, _), = sats_terminal.called("get_psbt")
    payload = args[0]
    assert payload["feeRate"] == 12
    assert payload["publicKey"] == "02abc"
    assert payload["orders"][0]["side"] == "buy"
    assert payload["orders"][0]["formattedAmount"] == 1.5


async def test_create_psbt_requires_orders(client, sats_terminal):
    body = {key: value for key, value in PSBT_BODY.items() if key != "orders"}

    response = await client.post("/api/sats-terminal/psbt/create", json=body)

    assert response.status_code == 400
    assert "orders" in json.loads(response.json()["details"])


async def test_create_psbt_quote_expired(client, sats_terminal):
    sats_terminal.responses["get_psbt"] = UpstreamError("Order moved", None, 400, code="ERR677K3")

    response = await client.post("/api/sats-terminal/psbt/create", json=PSBT_BODY)

    assert response.status_code == 410
    assert response.json()["error"] == "Quote expired. Please fetch a new quote."


@pytest.mark.parametrize("address", [TAPROOT, LEGACY])
async def test_confirm_accepts_bitcoin_addresses(client, sats_terminal, address):
    sats_terminal.responses["confirm_psbt"] = {"txid": "abc"}

    response = await client.post("/api/sats-terminal/psbt/confirm", json={**CONFIRM_BODY, "address": address})

    assert response.status_code == 200
    assert response.json() == {"data": {"txid": "abc"}}


@pytest.mark.parametrize("address", ["not-an-address", "bc1short", "0A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa"])
async def test_confirm_rejects_bad_address(client, sats_terminal, address):
    response = await client.post("/api/sats-terminal/psbt/confirm", json={**CONFIRM_BODY, "address": address})

    assert response.status_code == 400
    assert "address" in json.loads(response.json()["details"])
    assert sats_terminal.calls == []


async def test_confirm_rbf_requires_second_signature(client, sats_terminal):
    response = await client.post("/api/sats-terminal/psbt/confirm", json={**CONFIRM_BODY, "rbfProtection": True})

    assert response.status_code == 400
    assert "signedRbfPsbtBase64" in response.json()["details"]
    assert sats_terminal.calls == []


async def test_confirm_rbf_with_signature(client, sats_terminal):
    sats_terminal.responses["confirm_psbt"] = {"txid": "abc", "rbfTxid": "def"}
    body = {**CONFIRM_BODY, "rbfProtection": True, "signedRbfPsbtBase64": "cmJm"}

    response = await client.post("/api/sats-terminal/psbt/confirm", json=body)

    assert response.status_code == 200
    (args, _), = sats_terminal.called("confirm_psbt")
    assert args[0]["signedRbfPsbtBase64"] == "cmJm"
    assert args[0]["rbfProtection"] is True


async def test_confirm_html_response_is_unavailable(client, sats_terminal):
    sats_terminal.responses["confirm_psbt"] = UpstreamError(
        "Unexpected token '<' in SatsTerminal response", "<html>", 502, non_json=True
    )

    response = await client.post("/api/sats-terminal/psbt/confirm", json=CONFIRM_BODY)

    assert response.status_code == 503
    assert response.json()["error"] == "API service unavailable"


# ----------------------------------------------------------------------------
# error translation
# ----------------------------------------------------------------------------


@pytest.mark.parametrize(
    "exc, status, message",
    [
        (UpstreamError("No LIQUIDITY here", None, 400), 404, "No liquidity available"),
        (UpstreamError("Quote expired", None, 400), 410, "Quote expired. Please fetch a new quote."),
        (UpstreamError("whatever", None, 400, code="ERR677K3"), 410, "Quote expired. Please fetch a new quote."),
        (UpstreamError("Rate limit hit", None, 500), 429, "Rate limit exceeded"),
        (UpstreamError("slow", None, 429), 429, "Rate limit exceeded"),
        (UpstreamError("Unexpected token in SatsTerminal response: <", None, 500), 503, "API service unavailable"),
        (UpstreamError("gateway", None, 502), 502, "Failed to fetch quote"),
        (UpstreamError("bad", None, 400), 400, "Bad request"),
        (RuneSwapError("Server configuration error", "Missing key", 500), 500, "Server configuration error"),
    ],
)
def test_translate_swap_error(exc, status, message):
    info = translate_swap_error(exc, "Failed to fetch quote")

    assert (info.status, info.message) == (status, message)
