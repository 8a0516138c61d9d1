"""Ordiscan indexer client (read-only rune metadata and address activity)."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from runeswap.errors import UpstreamError
from .base import BaseApiClient, RawResponse


class OrdiscanClient(BaseApiClient):
    service_name = "Ordiscan"

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    async def _get(self, path: str, *, context: str, params: dict[str, Any] | None = None) -> Any:
        raw = await self._send("GET", path, context=context, params=params)
        return self._unwrap(raw, context)

    @staticmethod
    def _unwrap(raw: RawResponse, context: str) -> Any:
        try:
            body = raw.json() if raw.text else None
        except ValueError:
            raise UpstreamError(
                f"{context} returned invalid JSON",
                raw.text[:100],
                raw.status if not raw.ok else 502,
                non_json=True,
            )
        if not raw.ok:
            error_obj = body if isinstance(body, dict) else {}
            message = error_obj.get("error") or error_obj.get("message") or raw.reason or "Error"
            raise UpstreamError(f"{context}: {message}", str(body), raw.status, payload=body)
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    async def list_runes(self, sort: str = "newest") -> Any:
        return await self._get("/v1/runes", context="Ordiscan list runes", params={"sort": sort})

    async def get_rune_info(self, name: str) -> dict[str, Any] | None:
        """Rune metadata by spaced-or-plain name, None when the indexer does not know it."""

        try:
            data = await self._get(f"/v1/rune/{quote(name, safe='')}", context="Ordiscan rune info")
        except UpstreamError as exc:
            if exc.status == 404:
                return None
            raise
        return data or None

    async def get_address_rune_activity(self, address: str) -> Any:
        return await self._get(
            f"/v1/address/{quote(address, safe='')}/activity/runes",
            context="Ordiscan rune activity",
        )


__all__ = ["OrdiscanClient"]
