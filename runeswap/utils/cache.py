"""Short-lived response cache for indexer routes, backed by aiocache.

``CACHE__BACKEND=memory`` keeps entries per process, ``redis`` shares them
between workers (needs ``aiocache[redis]``).
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable
from urllib.parse import urlparse

from aiocache import caches
from aiocache.base import BaseCache

from config.settings import CacheSettings, get_settings

NAMESPACE = "runeswap"

_configured = False


def _redis_endpoint(dsn: str | None) -> dict[str, Any]:
    if not dsn:
        raise RuntimeError("CACHE__BACKEND=redis but CACHE__REDIS_DSN is empty")
    parsed = urlparse(dsn)
    if parsed.scheme != "redis":
        raise ValueError(f"Unsupported Redis DSN scheme: {parsed.scheme}")
    path = parsed.path.lstrip("/")
    return {
        "endpoint": parsed.hostname or "localhost",
        "port": parsed.port or 6379,
        "password": parsed.password,
        "db": int(path) if path.isdigit() else 0,
    }


def build_cache_config(cfg: CacheSettings) -> dict[str, Any]:
    """aiocache ``default`` alias config for the selected backend."""

    if cfg.backend == "redis":
        backend = {"cache": "aiocache.RedisCache", **_redis_endpoint(cfg.redis_dsn)}
    else:
        backend = {"cache": "aiocache.SimpleMemoryCache"}
    return {
        **backend,
        "namespace": NAMESPACE,
        "ttl": cfg.ttl_seconds,
        "serializer": {"class": "aiocache.serializers.PickleSerializer"},
    }


def configure_cache() -> None:
    global _configured
    if _configured:
        return
    caches.set_config({"default": build_cache_config(get_settings().cache)})
    _configured = True


def get_cache(alias: str = "default") -> BaseCache:
    configure_cache()
    return caches.get(alias)


async def cached_call(key: str, ttl: int, factory: Callable[[], Awaitable[Any]]) -> Any:
    """Return the cached value for ``key``, or await ``factory`` and cache its result.

    ``None`` results are never cached, so a failed lookup is retried next time.
    """

    cache = get_cache()
    value = await cache.get(key)
    if value is not None:
        return value
    value = await factory()
    if value is not None:
        await cache.set(key, value, ttl=ttl)
    return value


__all__ = ["NAMESPACE", "build_cache_config", "cached_call", "configure_cache", "get_cache"]
