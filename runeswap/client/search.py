"""Debounced rune search for the asset picker."""

from __future__ import annotations

import asyncio
from typing import Optional

from loguru import logger

from .api import ApiClientError, RunesApiClient
from .assets import Asset
from .timing import Debouncer, RequestSequence


class AssetSearch:
    def __init__(self, api: RunesApiClient, *, delay: float = 0.3) -> None:
        self._api = api
        self._debouncer = Debouncer(delay)
        self._sequence = RequestSequence()
        self.query = ""
        self.results: list[Asset] = []
        self.error: Optional[str] = None
        self.is_searching = False

    def on_query_change(self, query: str, *, sell: bool = False) -> Optional[asyncio.Task]:
        self.query = query
        if not query.strip():
            self.clear()
            return None
        return self._debouncer.call(lambda: self.search(query, sell=sell))

    def clear(self) -> None:
        self._debouncer.cancel()
        self._sequence.next()
        self.results = []
        self.error = None
        self.is_searching = False

    def displayed(self, available: list[Asset]) -> list[Asset]:
        """Search results while a query is typed, the default list otherwise."""

        return self.results if self.query.strip() else available

    async def search(self, query: str, *, sell: bool = False) -> list[Asset]:
        request_id = self._sequence.next()
        self.is_searching = True
        self.error = None
        try:
            items = await self._api.search(query, sell=sell)
        except ApiClientError as exc:
            if self._sequence.is_current(request_id):
                logger.warning("Rune search failed: {message}", message=exc.message)
                self.error = exc.message or "Failed to search"
                self.results = []
                self.is_searching = False
            return self.results
        if self._sequence.is_current(request_id):
            self.results = [Asset.from_search_item(item) for item in items if isinstance(item, dict)]
            self.is_searching = False
        return self.results


__all__ = ["AssetSearch"]
