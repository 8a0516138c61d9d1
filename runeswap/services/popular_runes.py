"""Popular runes list served stale-while-revalidate.

The newest ``popular_runes_cache`` row is always answered immediately. Once it
is older than the expiry window a background refresh is started, at most once
per refresh interval. Rows older than the stale window are still served but
flagged, and the periodic script is expected to replace them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from config.settings import get_settings
from runeswap.models.base import as_utc, utcnow
from runeswap.repositories import popular_runes_repo
from runeswap.services.clients import SatsTerminalClient

FALLBACK_POPULAR_RUNES: list[dict[str, Any]] = [
    {
        "id": "liquidiumtoken",
        "rune": "LIQUIDIUM•TOKEN",
        "name": "LIQUIDIUM•TOKEN",
        "imageURI": "https://icon.unisat.io/icon/runes/LIQUIDIUM%E2%80%A2TOKEN",
        "etching": {"runeName": "LIQUIDIUM•TOKEN"},
    },
    {
        "id": "ordinals_ethtoken",
        "rune": "ETH•TOKEN",
        "name": "ETH•TOKEN",
        "imageURI": "https://icon.unisat.io/icon/runes/ETH%E2%80%A2TOKEN",
        "etching": {"runeName": "ETH•TOKEN"},
    },
    {
        "id": "ordinals_dogtoken",
        "rune": "DOG•TOKEN",
        "name": "DOG•TOKEN",
        "imageURI": "https://icon.unisat.io/icon/runes/DOG%E2%80%A2TOKEN",
        "etching": {"runeName": "DOG•TOKEN"},
    },
]


@dataclass(slots=True)
class CacheState:
    runes: list[dict[str, Any]]
    is_expired: bool
    is_stale: bool
    should_refresh: bool
    last_refresh_attempt: Optional[datetime]

    @property
    def cache_age(self) -> str | None:
        return self.last_refresh_attempt.isoformat() if self.last_refresh_attempt else None


def _fallback_state() -> CacheState:
    return CacheState(
        runes=list(FALLBACK_POPULAR_RUNES),
        is_expired=True,
        is_stale=False,
        should_refresh=True,
        last_refresh_attempt=None,
    )


async def get_cache_state(session: AsyncSession, now: datetime | None = None) -> CacheState:
    """Current snapshot and its freshness, the built-in list when none is readable."""

    cfg = get_settings().popular_runes
    now = now or utcnow()
    try:
        entry = await popular_runes_repo.get_latest_snapshot(session)
    except SQLAlchemyError as exc:
        logger.warning("Failed to read popular runes cache: {error}", error=exc)
        await session.rollback()
        return _fallback_state()
    if entry is None:
        return _fallback_state()

    age = now - as_utc(entry.created_at)
    last_attempt = as_utc(entry.last_refresh_attempt) if entry.last_refresh_attempt else None
    is_expired = age > timedelta(seconds=cfg.expiry_seconds)
    is_stale = age > timedelta(seconds=cfg.stale_after_seconds)
    should_refresh = is_expired and (
        last_attempt is None or now - last_attempt > timedelta(seconds=cfg.refresh_interval_seconds)
    )
    return CacheState(
        runes=list(entry.runes_data or []),
        is_expired=is_expired,
        is_stale=is_stale,
        should_refresh=should_refresh,
        last_refresh_attempt=last_attempt,
    )


async def record_refresh_attempt(session: AsyncSession) -> None:
    try:
        await popular_runes_repo.mark_refresh_attempt(session)
    except SQLAlchemyError as exc:
        logger.warning("Failed to record popular runes refresh attempt: {error}", error=exc)
        await session.rollback()


async def store_popular_runes(session: AsyncSession, runes: Any) -> bool:
    """Insert a new snapshot when ``runes`` is a non-empty list."""

    if not isinstance(runes, list) or not runes:
        logger.warning("Popular runes response is not a non-empty list, skipping")
        return False
    await popular_runes_repo.insert_snapshot(session, runes)
    logger.info("Cached {count} popular runes", count=len(runes))
    return True


async def refresh_popular_runes(session_maker, client: SatsTerminalClient) -> None:
    """Background refresh, failures are logged and never raised."""

    try:
        runes = await client.popular_tokens()
        async with session_maker() as session:
            await store_popular_runes(session, runes)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Background refresh of popular runes failed: {error}", error=repr(exc))


__all__ = [
    "CacheState",
    "FALLBACK_POPULAR_RUNES",
    "get_cache_state",
    "record_refresh_attempt",
    "refresh_popular_runes",
    "store_popular_runes",
]
