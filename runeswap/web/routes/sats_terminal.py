"""SatsTerminal swap routes: quote, search, PSBT create/confirm."""

from __future__ import annotations

import hashlib
from typing import Any

from fastapi import APIRouter, Depends, Request

from runeswap.errors import (
    QuoteExpiredError,
    RateLimitedError,
    RuneSwapError,
    UpstreamError,
    UpstreamUnavailableError,
)
from runeswap.services.clients import SatsTerminalClient, get_sats_terminal_client
from runeswap.web.responses import ErrorInfo, classify_error, error, error_from, success
from runeswap.web.schemas import PsbtConfirmBody, PsbtCreateBody, QuoteBody, SearchQuery
from runeswap.web.validation import validate_request

router = APIRouter(prefix="/api/sats-terminal", tags=["sats-terminal"])

QUOTE_EXPIRED_CODE = "ERR677K3"
UNAVAILABLE_DETAILS = "The SatsTerminal API is currently unavailable. Please try again later."


def translate_swap_error(exc: RuneSwapError, context_message: str) -> ErrorInfo:
    """Map aggregator failures onto stable, user-facing errors."""

    info = classify_error(exc, context_message)
    raw_message = exc.message or ""
    code = getattr(exc, "code", None)

    if "liquidity" in raw_message.lower():
        return ErrorInfo("No liquidity available", raw_message, 404)
    if "Quote expired" in raw_message or code == QUOTE_EXPIRED_CODE:
        return ErrorInfo(QuoteExpiredError.default_message, info.details, QuoteExpiredError.status)
    if "Rate limit" in raw_message or info.status == 429:
        return ErrorInfo(RateLimitedError.default_message, "Please try again later", RateLimitedError.status)
    if (isinstance(exc, UpstreamError) and exc.non_json) or "Unexpected token" in raw_message:
        return ErrorInfo(
            UpstreamUnavailableError.default_message,
            UNAVAILABLE_DETAILS,
            UpstreamUnavailableError.status,
        )
    return info


def search_result_id(item: dict[str, Any], index: int) -> str:
    """Native id when present, otherwise a stable hash of the item's fields and position."""

    native = item.get("token_id") or item.get("id")
    if native:
        return str(native)
    seed = "|".join(
        str(item.get(key) or "") for key in ("token", "name", "icon")
    ) + f"|{index}"
    return f"search_{hashlib.sha256(seed.encode('utf-8')).hexdigest()[:8]}"


def map_search_results(results: Any) -> list[dict[str, str]]:
    if not isinstance(results, list):
        return []
    mapped = []
    for index, item in enumerate(results):
        if not isinstance(item, dict):
            continue
        mapped.append(
            {
                "id": search_result_id(item, index),
                "name": item.get("token") or item.get("name") or "Unknown",
                "imageURI": item.get("icon") or item.get("imageURI") or "",
            }
        )
    return mapped


@router.post("/quote")
async def fetch_quote(
    request: Request,
    terminal: SatsTerminalClient = Depends(get_sats_terminal_client),
):
    validation = await validate_request(request, QuoteBody, "body")
    if not validation.success:
        return validation.error_response
    try:
        quote = await terminal.fetch_quote(validation.data.wire())
    except RuneSwapError as exc:
        return error_from(translate_swap_error(exc, "Failed to fetch quote"))
    if not isinstance(quote, dict):
        return error("Invalid quote response", "The quote service returned an unexpected payload", 500)
    return success(quote)


@router.get("/search")
async def search_runes(
    request: Request,
    terminal: SatsTerminalClient = Depends(get_sats_terminal_client),
):
    validation = await validate_request(request, SearchQuery, "query")
    if not validation.success:
        return validation.error_response
    params = validation.data
    try:
        results = await terminal.search(params.query, sell=params.sell == "true")
    except RuneSwapError as exc:
        return error_from(translate_swap_error(exc, "Failed to search"))
    return success(map_search_results(results))


@router.post("/psbt/create")
async def create_psbt(
    request: Request,
    terminal: SatsTerminalClient = Depends(get_sats_terminal_client),
):
    validation = await validate_request(request, PsbtCreateBody, "body")
    if not validation.success:
        return validation.error_response
    try:
        psbt = await terminal.get_psbt(validation.data.wire())
    except RuneSwapError as exc:
        return error_from(translate_swap_error(exc, "Failed to generate PSBT"))
    return success(psbt)


@router.post("/psbt/confirm")
async def confirm_psbt(
    request: Request,
    terminal: SatsTerminalClient = Depends(get_sats_terminal_client),
):
    validation = await validate_request(request, PsbtConfirmBody, "body")
    if not validation.success:
        return validation.error_response
    try:
        confirmation = await terminal.confirm_psbt(validation.data.wire())
    except RuneSwapError as exc:
        return error_from(translate_swap_error(exc, "Failed to confirm PSBT"))
    return success(confirmation)


__all__ = ["map_search_results", "router", "search_result_id", "translate_swap_error"]
