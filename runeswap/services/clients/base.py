"""Shared aiohttp plumbing for the external API clients."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any

import aiohttp
from loguru import logger

from runeswap.errors import UpstreamError


@dataclass(slots=True)
class RawResponse:
    """Undecoded upstream response."""

    status: int
    reason: str
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Parse the body, raises ValueError on non-JSON text."""

        return json.loads(self.text)

    def looks_like_html(self) -> bool:
        head = self.text.lstrip()[:15].lower()
        return head.startswith("<!doctype") or head.startswith("<html")


class BaseApiClient:
    """Keeps one aiohttp session per client and adds service auth headers."""

    service_name = "API"

    def __init__(
        self,
        api_url: str,
        api_key: str,
        *,
        session: aiohttp.ClientSession | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._api_url = str(api_url).rstrip("/")
        self._api_key = api_key
        self._session = session
        self._owns_session = session is None
        self._timeout = timeout

    @property
    def api_url(self) -> str:
        return self._api_url

    def _auth_headers(self) -> dict[str, str]:
        raise NotImplementedError

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self._timeout))
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def _send(
        self,
        method: str,
        path: str,
        *,
        context: str,
        headers: dict[str, str] | None = None,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> RawResponse:
        session = await self._ensure_session()
        merged = {"Accept": "application/json", **self._auth_headers(), **(headers or {})}
        url = f"{self._api_url}{path}"
        try:
            async with session.request(
                method,
                url,
                json=json_body,
                params=params,
                headers=merged,
            ) as resp:
                text = await resp.text(errors="replace")
                logger.debug(
                    "{service} {method} {path} -> {status}",
                    service=self.service_name,
                    method=method,
                    path=path,
                    status=resp.status,
                )
                return RawResponse(status=resp.status, reason=resp.reason or "", text=text)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning(
                "{service} request {path} failed: {error}",
                service=self.service_name,
                path=path,
                error=repr(exc),
            )
            raise UpstreamError(f"{context} failed", str(exc) or repr(exc), 500) from exc


__all__ = ["BaseApiClient", "RawResponse"]
