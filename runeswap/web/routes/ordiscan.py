"""Ordiscan indexer routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlmodel.ext.asyncio.session import AsyncSession

from config.settings import get_settings
from runeswap.db import get_db_session
from runeswap.errors import RuneSwapError
from runeswap.services.clients import OrdiscanClient, get_ordiscan_client
from runeswap.services.rune_data import get_rune_by_id_or_prefix, get_rune_data
from runeswap.utils.cache import cached_call
from runeswap.utils.runes import normalize_rune_name
from runeswap.web.responses import classify_error, error, error_from, success
from runeswap.web.schemas import AddressQuery, RuneInfoQuery
from runeswap.web.validation import validate_request

router = APIRouter(prefix="/api/ordiscan", tags=["ordiscan"])


def _as_list(value) -> list:
    return value if isinstance(value, list) else []


@router.get("/list-runes")
async def list_runes(ordiscan: OrdiscanClient = Depends(get_ordiscan_client)):
    ttl = get_settings().cache.ttl_seconds

    async def load() -> list:
        return _as_list(await ordiscan.list_runes(sort="newest"))

    try:
        runes = await cached_call("ordiscan:list-runes:newest", ttl, load)
    except RuneSwapError as exc:
        return error_from(classify_error(exc, "Failed to fetch runes list"))
    return success(runes)


@router.get("/rune-activity")
async def rune_activity(
    request: Request,
    ordiscan: OrdiscanClient = Depends(get_ordiscan_client),
):
    validation = await validate_request(request, AddressQuery, "query")
    if not validation.success:
        return validation.error_response
    address = validation.data.address
    ttl = get_settings().cache.ttl_seconds

    async def load() -> list:
        return _as_list(await ordiscan.get_address_rune_activity(address))

    try:
        activity = await cached_call(f"ordiscan:rune-activity:{address}", ttl, load)
    except RuneSwapError as exc:
        return error_from(classify_error(exc, "Failed to fetch rune activity"))
    return success(activity)


@router.get("/rune-info")
async def rune_info(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    ordiscan: OrdiscanClient = Depends(get_ordiscan_client),
):
    validation = await validate_request(request, RuneInfoQuery, "query")
    if not validation.success:
        return validation.error_response
    try:
        data = await get_rune_data(session, ordiscan, normalize_rune_name(validation.data.name))
    except RuneSwapError as exc:
        return error_from(classify_error(exc, "Failed to fetch rune info"))
    if data is None:
        return JSONResponse(status_code=404, content={"data": None})
    return success(data)


@router.get("/rune-info-by-id")
async def rune_info_by_id(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    ordiscan: OrdiscanClient = Depends(get_ordiscan_client),
):
    prefix = request.query_params.get("prefix")
    if not prefix:
        return error("Missing required parameter: prefix", None, 400)
    try:
        data = await get_rune_by_id_or_prefix(session, ordiscan, prefix)
    except RuneSwapError as exc:
        return error_from(classify_error(exc, "Failed to fetch rune info"))
    if data is None:
        return error("Rune not found", "Rune not found with the given prefix", 404)
    return success(data)


__all__ = ["router"]
