"""Swap quote fetching for the swap form.

Amount edits are debounced, fetch attempts are throttled to respect the
aggregator's rate limits, a failed fetch is retried once, and only the most
recent request may publish its result.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional

from loguru import logger

from .api import ApiClientError, RunesApiClient
from .assets import Asset
from .timing import Debouncer, RequestSequence, Throttle
from .values import format_number, format_usd, parse_amount

# Quotes do not depend on the buyer, any valid address works before a wallet is connected.
FALLBACK_QUOTE_ADDRESS = "34xp4vRoCGJym3xR7yCVPFHoCNxv4Twseo"

QuoteStatus = Literal["idle", "loading", "success", "error"]


@dataclass(slots=True)
class QuoteState:
    status: QuoteStatus = "idle"
    quote: Optional[dict[str, Any]] = None
    output_amount: str = ""
    exchange_rate: Optional[str] = None
    error: Optional[str] = None
    fetched_at: Optional[float] = None


def friendly_quote_error(message: str) -> str:
    """Rewrite server errors into something the user can act on."""

    if "Rate limit" in message:
        return "Too many quote requests. Please wait a few seconds and try again."
    if "Quote expired" in message:
        return "The quote has expired. Please fetch a new quote."
    if "No liquidity" in message:
        return "Not enough liquidity for this trade. Try a smaller amount or a different rune."
    if "API service unavailable" in message:
        return "The swap service is currently unavailable. Please try again later."
    if "500" in message or "Internal Server Error" in message:
        return "Server error: The quote service is temporarily unavailable. Please try again later."
    if "No valid orders" in message:
        return "No orders available for this trade. Try a different amount or rune."
    if "timeout" in message or "network" in message:
        return "Network error: Please check your connection and try again."
    return message


def derive_quote_output(
    quote: dict[str, Any],
    input_amount: float,
    asset_in: Asset,
    asset_out: Asset,
    btc_price_usd: float | None,
) -> tuple[str, Optional[str]]:
    """Output amount text and the USD-per-rune rate for a quote."""

    if asset_in.is_btc:
        output = parse_amount(quote.get("totalFormattedAmount") or "0") or 0.0
        btc_value, rune_value = input_amount, output
        output_text = format_number(output)
        rune_name = asset_out.name
    else:
        output = parse_amount(quote.get("totalPrice") or "0") or 0.0
        btc_value, rune_value = output, input_amount
        output_text = format_number(output, max_fraction=8)
        rune_name = asset_in.name

    rate = None
    if btc_value > 0 and rune_value > 0 and btc_price_usd:
        price_per_rune = btc_value * btc_price_usd / rune_value
        rate = f"{format_usd(price_per_rune, max_fraction=6)} per {rune_name}"
    return output_text, rate


class QuoteFetcher:
    def __init__(
        self,
        api: RunesApiClient,
        *,
        debounce_delay: float = 1.5,
        throttle_interval: float = 3.0,
        retry_delay: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        on_change: Callable[[QuoteState], None] | None = None,
    ) -> None:
        self._api = api
        self._debouncer = Debouncer(debounce_delay)
        self._throttle = Throttle(throttle_interval, clock=clock)
        self._sequence = RequestSequence()
        self._retry_delay = retry_delay
        self._on_change = on_change
        self._last_key = ""
        self.state = QuoteState()

    def _publish(self, state: QuoteState) -> QuoteState:
        self.state = state
        if self._on_change:
            self._on_change(state)
        return state

    def on_amount_change(
        self,
        amount: str,
        asset_in: Asset | None,
        asset_out: Asset | None,
        *,
        address: str | None = None,
        btc_price_usd: float | None = None,
    ) -> asyncio.Task:
        """Debounced entry point, identical (amount, pair) inputs are fetched once."""

        async def run() -> QuoteState:
            if asset_in is None or asset_out is None:
                return self.state
            key = f"{parse_amount(amount)}-{asset_in.id}-{asset_out.id}"
            if key == self._last_key:
                return self.state
            state = await self._attempt(
                amount, asset_in, asset_out, address=address, btc_price_usd=btc_price_usd
            )
            if state is None:
                return self.state
            self._last_key = key
            return state

        return self._debouncer.call(run)

    def cancel(self) -> None:
        """Drop the pending debounced fetch and ignore any in-flight result."""

        self._debouncer.cancel()
        self._sequence.next()

    async def fetch(
        self,
        amount: str,
        asset_in: Asset | None,
        asset_out: Asset | None,
        *,
        address: str | None = None,
        btc_price_usd: float | None = None,
    ) -> QuoteState:
        state = await self._attempt(
            amount, asset_in, asset_out, address=address, btc_price_usd=btc_price_usd
        )
        return self.state if state is None else state

    async def _attempt(
        self,
        amount: str,
        asset_in: Asset | None,
        asset_out: Asset | None,
        *,
        address: str | None = None,
        btc_price_usd: float | None = None,
    ) -> Optional[QuoteState]:
        """Run one fetch, or return ``None`` when nothing was sent (empty input, throttled)."""

        value = parse_amount(amount)
        if not value or asset_in is None or asset_out is None:
            return None
        if not self._throttle.try_acquire():
            logger.debug("Quote fetch throttled for {seconds:.1f}s", seconds=self._throttle.remaining)
            return None

        request_id = self._sequence.next()
        self._publish(QuoteState(status="loading"))

        if value <= 0:
            return self._publish(QuoteState(status="success", output_amount="0.0"))
        if asset_in.is_btc == asset_out.is_btc:
            return self._publish(QuoteState(status="error", error="Invalid asset pair selected."))

        rune_name = asset_out.name if asset_in.is_btc else asset_in.name
        try:
            quote = await self._fetch_with_retry(
                btc_amount=value,
                rune_name=rune_name,
                address=address or FALLBACK_QUOTE_ADDRESS,
                sell=not asset_in.is_btc,
            )
        except ApiClientError as exc:
            if not self._sequence.is_current(request_id):
                return self.state
            logger.warning("Quote fetch error: {message}", message=exc.message)
            return self._publish(QuoteState(status="error", error=friendly_quote_error(exc.message)))

        if not self._sequence.is_current(request_id):
            logger.debug("Discarding stale quote response #{request_id}", request_id=request_id)
            return self.state

        quote_dict = quote if isinstance(quote, dict) else {}
        output_amount, rate = derive_quote_output(quote_dict, value, asset_in, asset_out, btc_price_usd)
        return self._publish(
            QuoteState(
                status="success",
                quote=quote_dict,
                output_amount=output_amount,
                exchange_rate=rate,
                fetched_at=time.time(),
            )
        )

    async def _fetch_with_retry(self, **params: Any) -> Any:
        try:
            return await self._api.fetch_quote(**params)
        except ApiClientError as exc:
            logger.debug("Quote fetch failed, retrying once: {message}", message=exc.message)
            await asyncio.sleep(self._retry_delay)
        return await self._api.fetch_quote(**params)


__all__ = [
    "FALLBACK_QUOTE_ADDRESS",
    "QuoteFetcher",
    "QuoteState",
    "derive_quote_output",
    "friendly_quote_error",
]
