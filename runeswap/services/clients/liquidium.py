"""Liquidium lending API client.

Every call is authenticated with the server API key
(``Authorization: Bearer``), user-scoped calls also carry the borrower JWT in
``x-user-token``.
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

from loguru import logger

from runeswap.errors import UpstreamError
from .base import BaseApiClient, RawResponse

API_PREFIX = "/api/v1"
AUTH_PREPARE_PATH = f"{API_PREFIX}/auth/prepare"
AUTH_SUBMIT_PATH = f"{API_PREFIX}/auth/submit"
RUNE_OFFERS_PATH = f"{API_PREFIX}/borrower/collateral/runes/{{rune_id}}/offers"
START_PREPARE_PATH = f"{API_PREFIX}/borrower/loans/start/prepare"
START_SUBMIT_PATH = f"{API_PREFIX}/borrower/loans/start/submit"
REPAY_PREPARE_PATH = f"{API_PREFIX}/borrower/loans/repay/prepare"
REPAY_SUBMIT_PATH = f"{API_PREFIX}/borrower/loans/repay/submit"
PORTFOLIO_PATH = f"{API_PREFIX}/borrower/portfolio"

LOAN_STARTED_MESSAGE = "Loan successfully started"


class LiquidiumClient(BaseApiClient):
    service_name = "Liquidium"

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    async def request(
        self,
        method: str,
        path: str,
        *,
        context: str,
        user_jwt: str | None = None,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Call Liquidium and return the decoded body, raising UpstreamError on failure."""

        headers = {"x-user-token": user_jwt} if user_jwt else None
        raw = await self._send(
            method,
            path,
            context=context,
            headers=headers,
            json_body=json_body,
            params=params,
        )
        return self._decode(raw, context)

    @staticmethod
    def _decode(raw: RawResponse, context: str) -> Any:
        data: Any = None
        if raw.text:
            try:
                data = raw.json()
            except ValueError:
                if raw.ok:
                    return raw.text
                raise UpstreamError(
                    f"{context} returned invalid JSON",
                    raw.text[:100],
                    500,
                    non_json=True,
                )
        if not raw.ok:
            error_obj = data if isinstance(data, dict) else {}
            error_message = (
                error_obj.get("errorMessage") or error_obj.get("error") or raw.reason or "Error"
            )
            details = data if isinstance(data, str) else json.dumps(data)
            raise UpstreamError(
                f"{context}: {error_message}",
                details,
                raw.status,
                code=error_obj.get("code"),
                payload=data,
            )
        return data

    async def auth_prepare(
        self,
        *,
        payment_address: str,
        ordinals_address: str,
        wallet: str = "xverse",
    ) -> Any:
        """Request the messages and nonces the wallet has to sign."""

        return await self.request(
            "POST",
            AUTH_PREPARE_PATH,
            context="Liquidium auth prepare",
            json_body={
                "payment_address": payment_address,
                "ordinals_address": ordinals_address,
                "wallet": wallet,
            },
        )

    async def auth_submit(self, submit_data: dict[str, Any]) -> Any:
        """Submit signed challenges, Liquidium answers with ``user_jwt``."""

        return await self.request(
            "POST",
            AUTH_SUBMIT_PATH,
            context="Liquidium auth submit",
            json_body=submit_data,
        )

    async def get_rune_offers(self, rune_id: str, rune_amount: str, *, user_jwt: str) -> Any:
        return await self.request(
            "GET",
            RUNE_OFFERS_PATH.format(rune_id=quote(rune_id, safe="")),
            context="Liquidium borrow quotes",
            user_jwt=user_jwt,
            params={"rune_amount": rune_amount},
        )

    async def start_loan_prepare(self, payload: dict[str, Any], *, user_jwt: str) -> Any:
        return await self.request(
            "POST",
            START_PREPARE_PATH,
            context="Liquidium prepare borrow",
            user_jwt=user_jwt,
            json_body=payload,
        )

    async def start_loan_submit(self, payload: dict[str, Any], *, user_jwt: str) -> Any:
        """Submit the signed loan PSBT.

        Liquidium occasionally answers this call with an HTML page or a plain
        text body. A 2xx (or an HTML page mentioning success) counts as a
        started loan.
        """

        context = "Liquidium submit borrow"
        raw = await self._send(
            "POST",
            START_SUBMIT_PATH,
            context=context,
            headers={"x-user-token": user_jwt},
            json_body=payload,
        )
        fallback = {
            "loan_transaction_id": payload.get("prepare_offer_id"),
            "message": LOAN_STARTED_MESSAGE,
        }
        if raw.looks_like_html():
            if raw.ok or "success" in raw.text.lower():
                logger.info("Liquidium returned HTML for a successful loan submit")
                return {**fallback, "html_response": True}
            raise UpstreamError(
                "Liquidium API returned HTML instead of JSON",
                "The loan service returned an unexpected response format. Please try again later.",
                500,
                non_json=True,
            )
        try:
            data = raw.json()
        except ValueError:
            if raw.ok:
                return {**fallback, "raw_response": raw.text[:100]}
            raise UpstreamError(
                "Invalid response from Liquidium API",
                "The loan service returned an invalid response. Please try again later.",
                500,
                non_json=True,
            )
        if not raw.ok:
            error_obj = data if isinstance(data, dict) else {}
            raise UpstreamError(
                f"Liquidium API error: {error_obj.get('error') or raw.reason}",
                error_obj.get("errorMessage") or json.dumps(data),
                raw.status,
                payload=data,
            )
        return data

    async def repay_prepare(self, *, offer_id: str, fee_rate: int, user_jwt: str) -> Any:
        return await self.request(
            "POST",
            REPAY_PREPARE_PATH,
            context="Liquidium repay prepare",
            user_jwt=user_jwt,
            json_body={"offer_id": offer_id, "fee_rate": fee_rate},
        )

    async def repay_submit(self, *, offer_id: str, signed_psbt_base_64: str, user_jwt: str) -> Any:
        return await self.request(
            "POST",
            REPAY_SUBMIT_PATH,
            context="Liquidium repay submit",
            user_jwt=user_jwt,
            json_body={"offer_id": offer_id, "signed_psbt_base_64": signed_psbt_base_64},
        )

    async def get_portfolio(self, *, user_jwt: str) -> Any:
        return await self.request(
            "GET",
            PORTFOLIO_PATH,
            context="Liquidium portfolio",
            user_jwt=user_jwt,
        )


__all__ = ["LiquidiumClient"]
