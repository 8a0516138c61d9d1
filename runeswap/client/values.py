"""Number formatting and USD value derivation for the swap form."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .assets import Asset


def parse_amount(value: Any) -> float | None:
    """Parse ``"1,234.5"`` style input, None when it is not a number."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace(",", "").strip())
    except ValueError:
        return None


def format_number(value: float, max_fraction: int = 3) -> str:
    text = f"{value:,.{max_fraction}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_usd(value: float, min_fraction: int = 2, max_fraction: int = 2) -> str:
    text = f"{value:,.{max_fraction}f}"
    whole, _, fraction = text.partition(".")
    fraction = fraction.rstrip("0").ljust(min_fraction, "0")
    return f"${whole}.{fraction}" if fraction else f"${whole}"


def btc_per_rune(quote: Optional[Mapping[str, Any]]) -> float:
    if not quote:
        return 0.0
    total_price = parse_amount(quote.get("totalPrice"))
    total_amount = parse_amount(quote.get("totalFormattedAmount"))
    if not total_price or not total_amount or total_amount <= 0:
        return 0.0
    return total_price / total_amount


@dataclass(slots=True, frozen=True)
class UsdValues:
    input_usd: str | None = None
    output_usd: str | None = None


def _usd_for(
    amount: float,
    asset: Asset,
    btc_price_usd: float | None,
    market_price_usd: float | None,
    quote: Optional[Mapping[str, Any]],
    quote_error: str | None,
) -> float | None:
    if asset.is_btc:
        return amount * btc_price_usd if btc_price_usd else None
    if market_price_usd is not None:
        return amount * market_price_usd
    if quote and btc_price_usd and not quote_error:
        ratio = btc_per_rune(quote)
        if ratio > 0:
            return amount * ratio * btc_price_usd
    return None


def compute_usd_values(
    *,
    input_amount: str,
    output_amount: str,
    asset_in: Asset | None,
    asset_out: Asset | None,
    btc_price_usd: float | None,
    quote: Optional[Mapping[str, Any]] = None,
    quote_error: str | None = None,
    input_rune_price_usd: float | None = None,
    output_rune_price_usd: float | None = None,
) -> UsdValues:
    """USD value of both sides of the swap form.

    BTC uses the BTC price, runes use their market price when known and fall
    back to the quote's BTC-per-rune ratio otherwise.
    """

    if not input_amount or asset_in is None:
        return UsdValues()
    amount_in = parse_amount(input_amount)
    if amount_in is None or amount_in <= 0:
        return UsdValues()

    input_usd = _usd_for(amount_in, asset_in, btc_price_usd, input_rune_price_usd, quote, quote_error)

    output_usd = None
    amount_out = parse_amount(output_amount) if output_amount else None
    if asset_out is not None and amount_out and amount_out > 0:
        output_usd = _usd_for(
            amount_out, asset_out, btc_price_usd, output_rune_price_usd, quote, quote_error
        )

    def fmt(value: float | None) -> str | None:
        return format_usd(value) if value is not None and value > 0 else None

    return UsdValues(input_usd=fmt(input_usd), output_usd=fmt(output_usd))


__all__ = [
    "UsdValues",
    "btc_per_rune",
    "compute_usd_values",
    "format_number",
    "format_usd",
    "parse_amount",
]
