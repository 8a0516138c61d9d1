"""aiohttp client for the RuneSwap HTTP routes.

Unwraps the ``{"data": ...}`` envelope and turns error envelopes into
``ApiClientError``.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import aiohttp
from loguru import logger

from runeswap.utils.runes import normalize_rune_name


class ApiClientError(RuntimeError):
    def __init__(self, message: str, status: int | None = None, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details


class RunesApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        session: aiohttp.ClientSession | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._timeout = timeout

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self._timeout))
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        allow_not_found: bool = False,
    ) -> Any:
        session = await self._ensure_session()
        clean_params = {k: v for k, v in (params or {}).items() if v is not None}
        try:
            async with session.request(
                method,
                f"{self._base_url}{path}",
                params=clean_params or None,
                json=json_body,
            ) as resp:
                status = resp.status
                text = await resp.text(errors="replace")
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning("Request {path} failed: {error}", path=path, error=repr(exc))
            raise ApiClientError(f"network error: {str(exc) or 'timeout'}") from exc

        try:
            body = json.loads(text) if text else None
        except ValueError as exc:
            raise ApiClientError(f"Unexpected response from {path} ({status})", status, text[:100]) from exc

        if status == 404 and allow_not_found:
            return None
        if not 200 <= status < 300:
            envelope = body if isinstance(body, dict) else {}
            raise ApiClientError(
                str(envelope.get("error") or f"Request failed with status {status}"),
                status,
                envelope.get("details"),
            )
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    # SatsTerminal

    async def fetch_quote(self, *, btc_amount: float | str, rune_name: str, address: str, sell: bool) -> Any:
        return await self._request(
            "POST",
            "/api/sats-terminal/quote",
            json_body={"btcAmount": btc_amount, "runeName": rune_name, "address": address, "sell": sell},
        )

    async def search(self, query: str, sell: bool = False) -> list[dict[str, Any]]:
        if not query:
            return []
        data = await self._request(
            "GET",
            "/api/sats-terminal/search",
            params={"query": query, "sell": "true" if sell else None},
        )
        return data if isinstance(data, list) else []

    async def create_psbt(self, params: dict[str, Any]) -> Any:
        return await self._request("POST", "/api/sats-terminal/psbt/create", json_body=params)

    async def confirm_psbt(self, params: dict[str, Any]) -> Any:
        return await self._request("POST", "/api/sats-terminal/psbt/confirm", json_body=params)

    async def popular_runes(self) -> dict[str, Any]:
        return await self._request("GET", "/api/cached-popular-runes")

    # Ordiscan

    async def list_runes(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/api/ordiscan/list-runes")
        return data if isinstance(data, list) else []

    async def rune_info(self, name: str) -> dict[str, Any] | None:
        return await self._request(
            "GET",
            "/api/ordiscan/rune-info",
            params={"name": normalize_rune_name(name)},
            allow_not_found=True,
        )

    async def rune_info_by_id(self, prefix: str) -> dict[str, Any] | None:
        return await self._request(
            "GET",
            "/api/ordiscan/rune-info-by-id",
            params={"prefix": prefix},
            allow_not_found=True,
        )

    async def rune_activity(self, address: str) -> list[dict[str, Any]]:
        data = await self._request("GET", "/api/ordiscan/rune-activity", params={"address": address})
        return data if isinstance(data, list) else []

    # Liquidium

    async def liquidium_challenge(
        self, ordinals_address: str, payment_address: str, wallet: str | None = None
    ) -> Any:
        return await self._request(
            "GET",
            "/api/liquidium/challenge",
            params={
                "ordinalsAddress": ordinals_address,
                "paymentAddress": payment_address,
                "wallet": wallet,
            },
        )

    async def liquidium_auth(self, payload: dict[str, Any]) -> str:
        data = await self._request("POST", "/api/liquidium/auth", json_body=payload)
        return data["jwt"]

    async def borrow_ranges(self, rune_id: str, address: str) -> dict[str, Any]:
        return await self._request(
            "GET", "/api/liquidium/borrow/ranges", params={"runeId": rune_id, "address": address}
        )

    async def borrow_quotes(self, rune_id: str, rune_amount: str, address: str) -> Any:
        return await self._request(
            "GET",
            "/api/liquidium/borrow/quotes",
            params={"runeId": rune_id, "runeAmount": rune_amount, "address": address},
        )

    async def prepare_borrow(self, payload: dict[str, Any]) -> Any:
        return await self._request("POST", "/api/liquidium/borrow/prepare", json_body=payload)

    async def submit_borrow(self, payload: dict[str, Any]) -> Any:
        return await self._request("POST", "/api/liquidium/borrow/submit", json_body=payload)

    async def repay(self, loan_id: str, address: str, signed_psbt: str | None = None) -> Any:
        body: dict[str, Any] = {"loanId": loan_id, "address": address}
        if signed_psbt:
            body["signedPsbt"] = signed_psbt
        return await self._request("POST", "/api/liquidium/repay", json_body=body)

    async def liquidium_portfolio(self, address: str) -> list[dict[str, Any]]:
        data = await self._request("GET", "/api/liquidium/portfolio", params={"address": address})
        return data if isinstance(data, list) else []


__all__ = ["ApiClientError", "RunesApiClient"]
