"""Queries against the rune_borrow_ranges cache table."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from runeswap.models import RuneBorrowRange


async def get_borrow_range(session: AsyncSession, rune_id: str) -> Optional[RuneBorrowRange]:
    stmt = select(RuneBorrowRange).where(RuneBorrowRange.rune_id == rune_id).limit(1)
    return (await session.exec(stmt)).first()


async def upsert_borrow_range(
    session: AsyncSession,
    *,
    rune_id: str,
    min_amount: str,
    max_amount: str,
) -> RuneBorrowRange:
    entry = await get_borrow_range(session, rune_id)
    if entry is None:
        entry = RuneBorrowRange(rune_id=rune_id, min_amount=min_amount, max_amount=max_amount)
    else:
        entry.min_amount = min_amount
        entry.max_amount = max_amount
        entry.touch()
    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    return entry


__all__ = ["get_borrow_range", "upsert_borrow_range"]
