"""SatsTerminal DEX aggregator client."""

from __future__ import annotations

from typing import Any

from runeswap.errors import UpstreamError
from .base import BaseApiClient, RawResponse

QUOTE_PATH = "/v1/swap/quote"
PSBT_PATH = "/v1/swap/psbt"
CONFIRM_PATH = "/v1/swap/confirm"
SEARCH_PATH = "/v1/search"
POPULAR_PATH = "/v1/popular"


class SatsTerminalClient(BaseApiClient):
    service_name = "SatsTerminal"

    def _auth_headers(self) -> dict[str, str]:
        return {"x-api-key": self._api_key}

    async def _call(
        self,
        method: str,
        path: str,
        *,
        context: str,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        raw = await self._send(method, path, context=context, json_body=payload)
        return self._decode(raw)

    @staticmethod
    def _decode(raw: RawResponse) -> Any:
        if raw.looks_like_html():
            raise UpstreamError(
                "Unexpected token '<' in SatsTerminal response",
                raw.text[:100],
                raw.status if not raw.ok else 502,
                non_json=True,
            )
        try:
            body = raw.json() if raw.text else None
        except ValueError:
            raise UpstreamError(
                f"Unexpected token in SatsTerminal response: {raw.text[:60]}",
                raw.text[:100],
                raw.status if not raw.ok else 502,
                non_json=True,
            )
        if not raw.ok:
            error_obj = body if isinstance(body, dict) else {}
            message = error_obj.get("message") or error_obj.get("error") or raw.reason or "Error"
            code = error_obj.get("code")
            raise UpstreamError(
                str(message),
                str(body),
                raw.status,
                code=str(code) if code is not None else None,
                payload=body,
            )
        return body

    async def fetch_quote(self, params: dict[str, Any]) -> Any:
        return await self._call("POST", QUOTE_PATH, context="SatsTerminal quote", payload=params)

    async def get_psbt(self, params: dict[str, Any]) -> Any:
        return await self._call("POST", PSBT_PATH, context="SatsTerminal PSBT", payload=params)

    async def confirm_psbt(self, params: dict[str, Any]) -> Any:
        return await self._call("POST", CONFIRM_PATH, context="SatsTerminal confirm", payload=params)

    async def search(self, query: str, sell: bool = False) -> Any:
        return await self._call(
            "POST",
            SEARCH_PATH,
            context="SatsTerminal search",
            payload={"query": query, "sell": sell},
        )

    async def popular_tokens(self) -> Any:
        return await self._call("GET", POPULAR_PATH, context="SatsTerminal popular tokens")


__all__ = ["SatsTerminalClient"]
