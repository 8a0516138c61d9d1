"""Rune metadata: local table first, Ordiscan on a miss."""

from __future__ import annotations

from typing import Any

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from runeswap.repositories import rune_repo
from runeswap.services.clients import OrdiscanClient
from runeswap.utils.runes import normalize_rune_name


async def _store(session: AsyncSession, data: dict[str, Any]) -> None:
    if not data.get("id") or not data.get("name"):
        return
    try:
        await rune_repo.upsert_rune(session, data)
    except SQLAlchemyError as exc:
        # The indexer answer is still good, caching it is best effort.
        logger.warning("Failed to cache rune {name}: {error}", name=data.get("name"), error=exc)
        await session.rollback()


async def get_rune_data(
    session: AsyncSession,
    ordiscan: OrdiscanClient,
    name: str,
) -> dict[str, Any] | None:
    """Rune metadata by name, fetched from the indexer and cached when unknown locally."""

    rune = await rune_repo.get_rune_by_name(session, name)
    if rune is not None:
        return rune.as_dict()

    data = await ordiscan.get_rune_info(name)
    if not isinstance(data, dict):
        return None
    await _store(session, data)
    return data


async def get_rune_by_id_or_prefix(
    session: AsyncSession,
    ordiscan: OrdiscanClient,
    prefix: str,
) -> dict[str, Any] | None:
    """Look a rune up by exact id, then by ``<prefix>:%``, then by its etching block."""

    rune = await rune_repo.get_rune_by_id(session, prefix)
    if rune is None:
        rune = await rune_repo.get_rune_by_id_prefix(session, prefix)
    if rune is not None:
        return rune.as_dict()

    if ":" not in prefix:
        return None

    block = prefix.split(":", 1)[0]
    sibling = await rune_repo.get_rune_by_id_prefix(session, block)
    if sibling is None:
        return None

    data = await ordiscan.get_rune_info(normalize_rune_name(sibling.name))
    if not isinstance(data, dict):
        return sibling.as_dict()
    await _store(session, data)
    return data


__all__ = ["get_rune_by_id_or_prefix", "get_rune_data"]
