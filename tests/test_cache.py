import pytest

from config.settings import CacheSettings
from runeswap.utils.cache import build_cache_config, cached_call


def test_memory_backend_config():
    config = build_cache_config(CacheSettings(backend="memory", ttl_seconds=45))

    assert config["cache"] == "aiocache.SimpleMemoryCache"
    assert config["ttl"] == 45
    assert config["namespace"] == "runeswap"


def test_redis_backend_config():
    config = build_cache_config(CacheSettings(backend="redis", redis_dsn="redis://:secret@cache.internal:6380/2"))

    assert config["cache"] == "aiocache.RedisCache"
    assert (config["endpoint"], config["port"], config["db"], config["password"]) == ("cache.internal", 6380, 2, "secret")


@pytest.mark.parametrize("dsn, error", [(None, RuntimeError), ("http://cache:6379", ValueError)])
def test_redis_backend_needs_valid_dsn(dsn, error):
    with pytest.raises(error):
        build_cache_config(CacheSettings(backend="redis", redis_dsn=dsn))


async def test_cached_call_skips_none():
    calls = []

    async def load():
        calls.append(1)
        return None if len(calls) == 1 else ["rune"]

    assert await cached_call("tests:cached-call", 30, load) is None
    assert await cached_call("tests:cached-call", 30, load) == ["rune"]
    assert await cached_call("tests:cached-call", 30, load) == ["rune"]
    assert len(calls) == 2
