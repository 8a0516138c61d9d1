"""Resolve user-supplied rune names and id prefixes to canonical ``block:tx`` ids."""

from __future__ import annotations

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from runeswap.repositories import rune_repo

RESERVED_NAMES = {"liquidiumtoken": "LIQUIDIUMTOKEN"}


async def resolve_rune_id(session: AsyncSession, value: str) -> str:
    """Return the canonical rune id for ``value``.

    Lookups run in order (exact name, id prefix, reserved names) and the first
    hit wins. When nothing matches, or the database fails, the input comes back
    unchanged and the upstream API reports the unknown rune.
    """

    if not value or ":" in value:
        return value

    lookups = (
        ("name", rune_repo.find_rune_id_by_name, value),
        ("prefix", rune_repo.find_rune_id_by_prefix, value),
    )
    reserved = RESERVED_NAMES.get(value.lower())
    if reserved:
        lookups += (("reserved", rune_repo.find_rune_id_by_exact_name, reserved),)

    for kind, lookup, arg in lookups:
        try:
            rune_id = await lookup(session, arg)
        except SQLAlchemyError as exc:
            logger.warning(
                "Rune {kind} lookup for {value} failed: {error}",
                kind=kind,
                value=value,
                error=exc,
            )
            await session.rollback()
            continue
        if rune_id:
            return rune_id

    return value


__all__ = ["RESERVED_NAMES", "resolve_rune_id"]
