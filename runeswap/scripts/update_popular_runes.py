"""Refresh the popular runes cache (run from cron).

Fetches the aggregator's popular list, stores it as a new snapshot and
prunes everything but the newest ``POPULAR_RUNES__KEEP_ENTRIES`` rows.
"""

from __future__ import annotations

import asyncio
import sys

from loguru import logger

from config.settings import get_settings
from runeswap.db import get_session_maker
from runeswap.errors import RuneSwapError
from runeswap.logging_config import setup_logging
from runeswap.repositories import popular_runes_repo
from runeswap.services.clients import SatsTerminalClient, close_clients, get_sats_terminal_client
from runeswap.services.popular_runes import store_popular_runes


async def update_popular_runes(session_maker, client: SatsTerminalClient, keep: int) -> int:
    """Returns the process exit code."""

    try:
        runes = await client.popular_tokens()
    except RuneSwapError as exc:
        logger.error("Failed to fetch popular runes: {message} ({details})", message=exc.message, details=exc.details)
        return 1

    async with session_maker() as session:
        if not await store_popular_runes(session, runes):
            logger.error("Popular runes response was empty or malformed")
            return 1
        removed = await popular_runes_repo.prune_snapshots(session, keep)
    logger.info("Popular runes cache updated, pruned {removed} old rows", removed=removed)
    return 0


async def _main() -> int:
    settings = get_settings()
    try:
        client = get_sats_terminal_client()
    except RuneSwapError as exc:
        logger.error("{message}: {details}", message=exc.message, details=exc.details)
        return 1
    try:
        return await update_popular_runes(
            get_session_maker(), client, settings.popular_runes.keep_entries
        )
    finally:
        await close_clients()


def main() -> None:
    setup_logging(json=get_settings().log_json, level="INFO")
    sys.exit(asyncio.run(_main()))


if __name__ == "__main__":
    main()
