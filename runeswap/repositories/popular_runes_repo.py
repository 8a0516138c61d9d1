"""Queries against the popular_runes_cache table."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import delete
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from runeswap.models import PopularRunesCache
from runeswap.models.base import utcnow


async def get_latest_snapshot(session: AsyncSession) -> Optional[PopularRunesCache]:
    stmt = select(PopularRunesCache).order_by(col(PopularRunesCache.created_at).desc()).limit(1)
    return (await session.exec(stmt)).first()


async def insert_snapshot(session: AsyncSession, runes_data: list[dict[str, Any]]) -> PopularRunesCache:
    now = utcnow()
    entry = PopularRunesCache(runes_data=runes_data, created_at=now, last_refresh_attempt=now)
    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    return entry


async def mark_refresh_attempt(session: AsyncSession) -> None:
    entry = await get_latest_snapshot(session)
    if entry is None:
        return
    entry.last_refresh_attempt = utcnow()
    session.add(entry)
    await session.commit()


async def prune_snapshots(session: AsyncSession, keep: int) -> int:
    """Delete everything but the newest ``keep`` rows, returns the count removed."""

    stmt = select(PopularRunesCache.id).order_by(col(PopularRunesCache.created_at).desc())
    ids = list((await session.exec(stmt)).all())
    stale_ids = ids[keep:]
    if not stale_ids:
        return 0
    await session.execute(delete(PopularRunesCache).where(col(PopularRunesCache.id).in_(stale_ids)))
    await session.commit()
    return len(stale_ids)


__all__ = ["get_latest_snapshot", "insert_snapshot", "mark_refresh_attempt", "prune_snapshots"]
