"""Queries against the runes table."""

from __future__ import annotations

from typing import Any, Optional

from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from runeswap.models import Rune
from runeswap.models.base import utcnow

_LIKE_ESCAPE = "\\"


def _escape_like(value: str) -> str:
    return (
        value.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", f"{_LIKE_ESCAPE}%")
        .replace("_", f"{_LIKE_ESCAPE}_")
    )


async def find_rune_id_by_name(session: AsyncSession, name: str) -> Optional[str]:
    """Case-insensitive exact name match."""

    stmt = select(Rune.id).where(col(Rune.name).ilike(_escape_like(name), escape=_LIKE_ESCAPE)).limit(1)
    return (await session.exec(stmt)).first()


async def find_rune_id_by_prefix(session: AsyncSession, prefix: str) -> Optional[str]:
    """Case-insensitive ``<prefix>:%`` match on the canonical id."""

    pattern = f"{_escape_like(prefix)}:%"
    stmt = select(Rune.id).where(col(Rune.id).ilike(pattern, escape=_LIKE_ESCAPE)).limit(1)
    return (await session.exec(stmt)).first()


async def find_rune_id_by_exact_name(session: AsyncSession, name: str) -> Optional[str]:
    stmt = select(Rune.id).where(Rune.name == name).limit(1)
    return (await session.exec(stmt)).first()


async def get_rune_by_name(session: AsyncSession, name: str) -> Optional[Rune]:
    stmt = select(Rune).where(Rune.name == name).limit(1)
    return (await session.exec(stmt)).first()


async def get_rune_by_id(session: AsyncSession, rune_id: str) -> Optional[Rune]:
    return await session.get(Rune, rune_id)


async def get_rune_by_id_prefix(session: AsyncSession, prefix: str) -> Optional[Rune]:
    pattern = f"{_escape_like(prefix)}:%"
    stmt = select(Rune).where(col(Rune.id).ilike(pattern, escape=_LIKE_ESCAPE)).limit(1)
    return (await session.exec(stmt)).first()


async def upsert_rune(session: AsyncSession, data: dict[str, Any]) -> Rune:
    """Insert or refresh a rune row from an indexer payload (unknown keys ignored)."""

    columns = Rune.column_names()
    values = {key: value for key, value in data.items() if key in columns and key != "last_updated_at"}
    rune = await session.get(Rune, values["id"])
    if rune is None:
        rune = Rune(**values)
    else:
        for key, value in values.items():
            setattr(rune, key, value)
    rune.last_updated_at = utcnow()
    session.add(rune)
    await session.commit()
    await session.refresh(rune)
    return rune


__all__ = [
    "find_rune_id_by_exact_name",
    "find_rune_id_by_name",
    "find_rune_id_by_prefix",
    "get_rune_by_id",
    "get_rune_by_id_prefix",
    "get_rune_by_name",
    "upsert_rune",
]
