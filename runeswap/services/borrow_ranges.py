"""Borrow range lookup for a collateral rune.

Liquidium returns the valid ranges in one of two layouts: older responses put
``valid_ranges`` at the top level, current ones nest it under ``runeDetails``.
Both are parsed into an explicit variant, anything else fails loudly.

Amounts are compared as Python ints, upstream values routinely exceed 2**53.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Iterable, Union

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from config.settings import get_settings
from runeswap.errors import RuneSwapError, UpstreamNotFoundError
from runeswap.models import RuneBorrowRange
from runeswap.models.base import as_utc, utcnow
from runeswap.repositories import borrow_range_repo
from runeswap.services.clients import LiquidiumClient
from runeswap.services.token_store import require_valid_token


class RangeShapeError(RuneSwapError):
    status = 500
    default_message = "Invalid range data"


class NoRangesError(UpstreamNotFoundError):
    default_message = "No valid ranges found"


@dataclass(slots=True, frozen=True)
class AmountRange:
    min: int
    max: int


@dataclass(slots=True, frozen=True)
class ValidRanges:
    ranges: list[dict[str, Any]]
    loan_term_days: list[int] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class LegacyRanges:
    """``{"valid_ranges": {...}}``"""

    valid_ranges: ValidRanges


@dataclass(slots=True, frozen=True)
class RuneDetailsRanges:
    """``{"runeDetails": {"valid_ranges": {...}}}``"""

    valid_ranges: ValidRanges


OffersRanges = Union[LegacyRanges, RuneDetailsRanges]


@dataclass(slots=True)
class BorrowRangeResult:
    rune_id: str
    min_amount: str
    max_amount: str
    updated_at: datetime
    cached: bool
    loan_term_days: list[int] | None = None

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "runeId": self.rune_id,
            "minAmount": self.min_amount,
            "maxAmount": self.max_amount,
        }
        if not self.cached:
            payload["loanTermDays"] = self.loan_term_days or []
        payload["cached"] = self.cached
        payload["updatedAt"] = self.updated_at.isoformat()
        return payload


def _parse_valid_ranges(raw: Any) -> ValidRanges:
    if not isinstance(raw, dict):
        raise RangeShapeError(details="valid_ranges is not an object")
    rune_amount = raw.get("rune_amount")
    ranges = rune_amount.get("ranges") if isinstance(rune_amount, dict) else None
    if not isinstance(ranges, list):
        raise RangeShapeError(details="valid_ranges.rune_amount.ranges is missing")
    loan_term_days = raw.get("loan_term_days")
    return ValidRanges(
        ranges=ranges,
        loan_term_days=list(loan_term_days) if isinstance(loan_term_days, list) else [],
    )


def parse_offers_response(payload: Any) -> OffersRanges:
    """Normalize the offers response into one of the known layouts."""

    if isinstance(payload, dict):
        if "valid_ranges" in payload:
            return LegacyRanges(_parse_valid_ranges(payload["valid_ranges"]))
        details = payload.get("runeDetails")
        if isinstance(details, dict) and "valid_ranges" in details:
            return RuneDetailsRanges(_parse_valid_ranges(details["valid_ranges"]))
    raise RangeShapeError(details="valid_ranges field not found in Liquidium response")


def _to_int(value: Any) -> int | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, float):
        # Floats lose precision above 2**53, only accept whole values.
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def compute_global_range(ranges: Iterable[Any]) -> AmountRange:
    """Smallest min and largest max over every usable ``{min, max}`` entry."""

    global_min: int | None = None
    global_max: int | None = None
    for index, entry in enumerate(ranges):
        low = _to_int(entry.get("min")) if isinstance(entry, dict) else None
        high = _to_int(entry.get("max")) if isinstance(entry, dict) else None
        if low is None or high is None:
            logger.warning("Skipping invalid borrow range at {index}: {entry}", index=index, entry=entry)
            continue
        global_min = low if global_min is None else min(global_min, low)
        global_max = high if global_max is None else max(global_max, high)
    if global_min is None or global_max is None:
        raise NoRangesError(details="Liquidium returned no usable ranges for this rune")
    return AmountRange(min=global_min, max=global_max)


def is_fresh(entry: RuneBorrowRange, ttl_seconds: int, now: datetime | None = None) -> bool:
    return (now or utcnow()) - as_utc(entry.updated_at) < timedelta(seconds=ttl_seconds)


async def get_borrow_range(
    session: AsyncSession,
    liquidium: LiquidiumClient,
    *,
    rune_id: str,
    address: str,
) -> BorrowRangeResult:
    """Serve the cached range while fresh, otherwise probe Liquidium and cache the result.

    ``rune_id`` must already be resolved to its canonical form.
    """

    settings = get_settings().borrow
    try:
        cached = await borrow_range_repo.get_borrow_range(session, rune_id)
    except SQLAlchemyError as exc:
        logger.warning("Borrow range cache read failed for {rune_id}: {error}", rune_id=rune_id, error=exc)
        await session.rollback()
        cached = None
    if cached is not None and is_fresh(cached, settings.range_cache_ttl_seconds):
        logger.debug("Borrow range cache hit for {rune_id}", rune_id=rune_id)
        return BorrowRangeResult(
            rune_id=rune_id,
            min_amount=cached.min_amount,
            max_amount=cached.max_amount,
            updated_at=as_utc(cached.updated_at),
            cached=True,
        )

    user_jwt = await require_valid_token(session, address)
    payload = await liquidium.get_rune_offers(rune_id, settings.probe_amount, user_jwt=user_jwt)
    parsed = parse_offers_response(payload)
    amount_range = compute_global_range(parsed.valid_ranges.ranges)

    updated_at = utcnow()
    try:
        entry = await borrow_range_repo.upsert_borrow_range(
            session,
            rune_id=rune_id,
            min_amount=str(amount_range.min),
            max_amount=str(amount_range.max),
        )
        updated_at = as_utc(entry.updated_at)
    except SQLAlchemyError as exc:
        # Liquidium already answered, caching the range is best effort.
        logger.warning("Failed to cache borrow range for {rune_id}: {error}", rune_id=rune_id, error=exc)
        await session.rollback()
    return BorrowRangeResult(
        rune_id=rune_id,
        min_amount=str(amount_range.min),
        max_amount=str(amount_range.max),
        updated_at=updated_at,
        cached=False,
        loan_term_days=parsed.valid_ranges.loan_term_days,
    )


__all__ = [
    "AmountRange",
    "BorrowRangeResult",
    "LegacyRanges",
    "NoRangesError",
    "OffersRanges",
    "RangeShapeError",
    "RuneDetailsRanges",
    "ValidRanges",
    "compute_global_range",
    "get_borrow_range",
    "is_fresh",
    "parse_offers_response",
]
