"""Cached popular runes (stale-while-revalidate)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from loguru import logger
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from runeswap.db import get_db_session, get_session_maker
from runeswap.errors import ServerConfigError
from runeswap.services.clients import SatsTerminalClient, get_sats_terminal_client
from runeswap.services.popular_runes import get_cache_state, record_refresh_attempt, refresh_popular_runes
from runeswap.web.responses import success

router = APIRouter(prefix="/api", tags=["popular"])


def optional_sats_terminal_client() -> Optional[SatsTerminalClient]:
    """The cached list is served even when the aggregator is not configured."""

    try:
        return get_sats_terminal_client()
    except ServerConfigError as exc:
        logger.warning("Popular runes refresh disabled: {details}", details=exc.details)
        return None


@router.get("/cached-popular-runes")
async def cached_popular_runes(
    background: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    session_maker: async_sessionmaker = Depends(get_session_maker),
    terminal: Optional[SatsTerminalClient] = Depends(optional_sats_terminal_client),
):
    state = await get_cache_state(session)

    if terminal is not None and not state.is_stale and state.should_refresh:
        await record_refresh_attempt(session)
        background.add_task(refresh_popular_runes, session_maker, terminal)

    return success(
        {
            "runes": state.runes,
            "isStale": state.is_stale,
            "cacheAge": state.cache_age,
        }
    )


__all__ = ["optional_sats_terminal_client", "router"]
