"""External API clients and their process-wide factories.

The factories double as FastAPI dependencies, tests swap them out through
``app.dependency_overrides``.
"""

from __future__ import annotations

from loguru import logger

from config.settings import get_settings
from runeswap.errors import ServerConfigError
from .base import BaseApiClient, RawResponse
from .liquidium import LiquidiumClient
from .ordiscan import OrdiscanClient
from .sats_terminal import SatsTerminalClient

_clients: dict[str, BaseApiClient] = {}


def _api_key(group, service: str) -> str:
    secret = group.api_key
    if secret is None or not secret.get_secret_value():
        logger.error("{service} API key is not configured", service=service)
        raise ServerConfigError(details=f"Missing {service} API Key")
    return secret.get_secret_value()


def get_liquidium_client() -> LiquidiumClient:
    settings = get_settings()
    key = _api_key(settings.liquidium, "Liquidium")
    client = _clients.get("liquidium")
    if client is None:
        client = LiquidiumClient(
            str(settings.liquidium.api_url), key, timeout=settings.http.request_timeout
        )
        _clients["liquidium"] = client
    return client


def get_ordiscan_client() -> OrdiscanClient:
    settings = get_settings()
    key = _api_key(settings.ordiscan, "Ordiscan")
    client = _clients.get("ordiscan")
    if client is None:
        client = OrdiscanClient(
            str(settings.ordiscan.api_url), key, timeout=settings.http.request_timeout
        )
        _clients["ordiscan"] = client
    return client


def get_sats_terminal_client() -> SatsTerminalClient:
    settings = get_settings()
    key = _api_key(settings.sats_terminal, "SatsTerminal")
    client = _clients.get("sats_terminal")
    if client is None:
        client = SatsTerminalClient(
            str(settings.sats_terminal.api_url), key, timeout=settings.http.request_timeout
        )
        _clients["sats_terminal"] = client
    return client


async def close_clients() -> None:
    """Close every aiohttp session opened by the factories."""

    while _clients:
        _, client = _clients.popitem()
        await client.close()


__all__ = [
    "BaseApiClient",
    "LiquidiumClient",
    "OrdiscanClient",
    "RawResponse",
    "SatsTerminalClient",
    "close_clients",
    "get_liquidium_client",
    "get_ordiscan_client",
    "get_sats_terminal_client",
]
