import pytest
from sqlalchemy.exc import OperationalError

from runeswap.repositories import rune_repo
from runeswap.services.rune_resolver import resolve_rune_id


@pytest.fixture
async def runes(session):
    for data in (
        {"id": "840000:3", "name": "DOGGOTOTHEMOON", "formatted_name": "DOG•GO•TO•THE•MOON"},
        {"id": "840000:28", "name": "BITCOIN", "formatted_name": "BITCOIN"},
        {"id": "865193:4006", "name": "LIQUIDIUMTOKEN", "formatted_name": "LIQUIDIUM•TOKEN"},
        {"id": "1:0", "name": "UNCOMMONGOODS"},
    ):
        await rune_repo.upsert_rune(session, data)


@pytest.mark.parametrize("value", ["840000:3", "1:0", "abc:def", ":", "unknown:1"])
async def test_canonical_ids_pass_through(session, runes, value):
    assert await resolve_rune_id(session, value) == value


async def test_exact_name_is_case_insensitive(session, runes):
    assert await resolve_rune_id(session, "bitcoin") == "840000:28"
    assert await resolve_rune_id(session, "DoggoToTheMoon") == "840000:3"


async def test_block_prefix_resolves(session, runes):
    assert await resolve_rune_id(session, "865193") == "865193:4006"


async def test_reserved_liquidium_name(session):
    await rune_repo.upsert_rune(session, {"id": "865193:4006", "name": "LIQUIDIUMTOKEN"})

    assert await resolve_rune_id(session, "LiquidiumToken") == "865193:4006"


async def test_unknown_value_is_returned_unchanged(session, runes):
    assert await resolve_rune_id(session, "NOTARUNE") == "NOTARUNE"


async def test_like_wildcards_are_literal(session, runes):
    assert await resolve_rune_id(session, "%") == "%"
    assert await resolve_rune_id(session, "_ITCOIN") == "_ITCOIN"


async def test_resolution_is_idempotent(session, runes):
    first = await resolve_rune_id(session, "bitcoin")
    second = await resolve_rune_id(session, first)
    third = await resolve_rune_id(session, "bitcoin")

    assert first == second == third == "840000:28"


class BrokenSession:
    def __init__(self):
        self.rollbacks = 0

    async def exec(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    async def rollback(self):
        self.rollbacks += 1


async def test_database_errors_never_raise():
    broken = BrokenSession()

    assert await resolve_rune_id(broken, "liquidiumtoken") == "liquidiumtoken"
    assert broken.rollbacks == 3
