from runeswap.errors import UpstreamError
from runeswap.repositories import rune_repo

from .conftest import WALLET

DOG = {
    "id": "840000:3",
    "name": "DOGGOTOTHEMOON",
    "formatted_name": "DOG•GO•TO•THE•MOON",
    "decimals": 5,
    "symbol": "🐕",
    "current_supply": "100000000000000000",
}


async def test_rune_info_served_from_table(client, ordiscan, session):
    await rune_repo.upsert_rune(session, DOG)

    response = await client.get("/api/ordiscan/rune-info", params={"name": "DOG•GO•TO•THE•MOON"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == "840000:3"
    assert data["current_supply"] == "100000000000000000"
    assert ordiscan.calls == []


async def test_rune_info_fetches_and_caches_on_miss(client, ordiscan, session_maker):
    ordiscan.responses["get_rune_info"] = {**DOG, "unknown_indexer_field": True}

    first = await client.get("/api/ordiscan/rune-info", params={"name": "DOG.GO.TO.THE.MOON"})
    second = await client.get("/api/ordiscan/rune-info", params={"name": "DOGGOTOTHEMOON"})

    assert first.status_code == 200
    assert first.json()["data"]["unknown_indexer_field"] is True
    assert second.json()["data"]["formatted_name"] == "DOG•GO•TO•THE•MOON"
    assert ordiscan.called("get_rune_info") == [(("DOGGOTOTHEMOON",), {})]

    async with session_maker() as fresh:
        stored = await rune_repo.get_rune_by_id(fresh, "840000:3")
    assert stored.decimals == 5


async def test_rune_info_unknown_is_404_with_null_data(client, ordiscan):
    ordiscan.responses["get_rune_info"] = None

    response = await client.get("/api/ordiscan/rune-info", params={"name": "NOSUCHRUNE"})

    assert response.status_code == 404
    assert response.json() == {"data": None}


async def test_rune_info_requires_name(client, ordiscan):
    response = await client.get("/api/ordiscan/rune-info")

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request parameters"


async def test_rune_info_by_exact_id_and_prefix(client, ordiscan, session):
    await rune_repo.upsert_rune(session, DOG)

    exact = await client.get("/api/ordiscan/rune-info-by-id", params={"prefix": "840000:3"})
    by_block = await client.get("/api/ordiscan/rune-info-by-id", params={"prefix": "840000"})

    assert exact.json()["data"]["name"] == "DOGGOTOTHEMOON"
    assert by_block.json()["data"]["id"] == "840000:3"
    assert ordiscan.calls == []


async def test_rune_info_by_id_refreshes_block_sibling(client, ordiscan, session):
    await rune_repo.upsert_rune(session, DOG)
    ordiscan.responses["get_rune_info"] = {**DOG, "current_supply": "42"}

    response = await client.get("/api/ordiscan/rune-info-by-id", params={"prefix": "840000:77"})

    assert response.status_code == 200
    assert response.json()["data"]["current_supply"] == "42"
    assert ordiscan.called("get_rune_info") == [(("DOGGOTOTHEMOON",), {})]


async def test_rune_info_by_id_not_found(client, ordiscan):
    response = await client.get("/api/ordiscan/rune-info-by-id", params={"prefix": "999999"})

    assert response.status_code == 404
    assert response.json() == {"error": "Rune not found", "details": "Rune not found with the given prefix"}


async def test_rune_info_by_id_missing_prefix(client, ordiscan):
    response = await client.get("/api/ordiscan/rune-info-by-id")

    assert response.status_code == 400
    assert response.json()["error"] == "Missing required parameter: prefix"


async def test_list_runes_is_cached(client, ordiscan):
    ordiscan.responses["list_runes"] = [{"id": "840000:3", "name": "DOGGOTOTHEMOON"}]

    first = await client.get("/api/ordiscan/list-runes")
    second = await client.get("/api/ordiscan/list-runes")

    assert first.json() == second.json() == {"data": [{"id": "840000:3", "name": "DOGGOTOTHEMOON"}]}
    assert ordiscan.called("list_runes") == [((), {"sort": "newest"})]


async def test_list_runes_upstream_failure(client, ordiscan):
    ordiscan.responses["list_runes"] = UpstreamError("Ordiscan: bad gateway", "upstream", 502)

    response = await client.get("/api/ordiscan/list-runes")

    assert response.status_code == 502
    assert response.json() == {"error": "Failed to fetch runes list", "details": "upstream"}


async def test_rune_activity_cached_per_address(client, ordiscan):
    ordiscan.responses["get_address_rune_activity"] = lambda address: [{"address": address, "type": "SEND"}]

    first = await client.get("/api/ordiscan/rune-activity", params={"address": WALLET})
    await client.get("/api/ordiscan/rune-activity", params={"address": WALLET})
    other = await client.get("/api/ordiscan/rune-activity", params={"address": "bc1qother"})

    assert first.json()["data"] == [{"address": WALLET, "type": "SEND"}]
    assert other.json()["data"] == [{"address": "bc1qother", "type": "SEND"}]
    assert len(ordiscan.called("get_address_rune_activity")) == 2


async def test_rune_activity_non_list_is_empty(client, ordiscan):
    ordiscan.responses["get_address_rune_activity"] = {"unexpected": True}

    response = await client.get("/api/ordiscan/rune-activity", params={"address": WALLET})

    assert response.json() == {"data": []}
