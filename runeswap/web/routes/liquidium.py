"""Liquidium lending routes: wallet auth, borrow ranges/quotes, loan start, repay, portfolio."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from config.settings import get_settings
from runeswap.db import get_db_session
from runeswap.errors import RuneSwapError, UpstreamError
from runeswap.services import borrow_ranges, token_store
from runeswap.services.clients import LiquidiumClient, get_liquidium_client
from runeswap.services.rune_resolver import resolve_rune_id
from runeswap.utils.security import decode_token_expiry
from runeswap.web.responses import classify_error, error, error_from, success
from runeswap.web.schemas import (
    AddressQuery,
    AuthSubmitBody,
    BorrowPrepareBody,
    BorrowQuotesQuery,
    BorrowRangesQuery,
    BorrowSubmitBody,
    ChallengeQuery,
    RepayBody,
)
from runeswap.web.validation import validate_request

router = APIRouter(prefix="/api/liquidium", tags=["liquidium"])


@router.get("/challenge")
async def get_challenge(
    request: Request,
    liquidium: LiquidiumClient = Depends(get_liquidium_client),
):
    validation = await validate_request(request, ChallengeQuery, "query")
    if not validation.success:
        return validation.error_response
    params = validation.data
    try:
        challenge = await liquidium.auth_prepare(
            payment_address=params.payment_address,
            ordinals_address=params.ordinals_address,
            wallet=params.wallet or "xverse",
        )
    except RuneSwapError as exc:
        return error_from(classify_error(exc, "Failed to get Liquidium challenge"))
    return success(challenge)


@router.post("/auth")
async def submit_auth(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    liquidium: LiquidiumClient = Depends(get_liquidium_client),
):
    validation = await validate_request(request, AuthSubmitBody, "body")
    if not validation.success:
        return validation.error_response
    body = validation.data

    submit_data: dict[str, Any] = {
        "ordinals": {
            "address": body.ordinals_address,
            "signature": body.ordinals_signature,
            "nonce": body.ordinals_nonce,
        }
    }
    if body.payment_signature and body.payment_nonce:
        submit_data["payment"] = {
            "address": body.payment_address,
            "signature": body.payment_signature,
            "nonce": body.payment_nonce,
        }

    try:
        auth_result = await liquidium.auth_submit(submit_data)
    except RuneSwapError as exc:
        return error_from(classify_error(exc, "Liquidium authentication failed"))

    user_jwt = auth_result.get("user_jwt") if isinstance(auth_result, dict) else None
    if not user_jwt:
        return error("Liquidium authentication failed", "No JWT returned from Liquidium", 502)

    expires_at = decode_token_expiry(user_jwt)
    try:
        await token_store.upsert_token(
            session,
            body.ordinals_address,
            ordinals_address=body.ordinals_address,
            payment_address=body.payment_address,
            jwt=user_jwt,
            expires_at=expires_at,
        )
    except SQLAlchemyError as exc:
        logger.exception("Failed to store Liquidium JWT: {error}", error=exc)
        await session.rollback()
        return error("Failed to store Liquidium JWT", str(exc), 500)

    logger.info("Stored Liquidium token for {wallet}", wallet=body.ordinals_address)
    return success({"jwt": user_jwt})


@router.get("/borrow/ranges")
async def get_borrow_ranges(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    liquidium: LiquidiumClient = Depends(get_liquidium_client),
):
    validation = await validate_request(request, BorrowRangesQuery, "query")
    if not validation.success:
        return validation.error_response
    params = validation.data
    try:
        rune_id = await resolve_rune_id(session, params.rune_id)
        result = await borrow_ranges.get_borrow_range(
            session, liquidium, rune_id=rune_id, address=params.address
        )
    except RuneSwapError as exc:
        return error_from(classify_error(exc, "Failed to fetch borrow ranges"))
    return success(result.as_payload())


@router.get("/borrow/quotes")
async def get_borrow_quotes(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    liquidium: LiquidiumClient = Depends(get_liquidium_client),
):
    validation = await validate_request(request, BorrowQuotesQuery, "query")
    if not validation.success:
        return validation.error_response
    params = validation.data
    try:
        rune_id = await resolve_rune_id(session, params.rune_id)
        user_jwt = await token_store.require_valid_token(session, params.address)
        offers = await liquidium.get_rune_offers(rune_id, params.rune_amount, user_jwt=user_jwt)
    except RuneSwapError as exc:
        return error_from(classify_error(exc, "Failed to fetch borrow quotes"))
    return success(offers)


@router.post("/borrow/prepare")
async def prepare_borrow(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    liquidium: LiquidiumClient = Depends(get_liquidium_client),
):
    validation = await validate_request(request, BorrowPrepareBody, "body")
    if not validation.success:
        return validation.error_response
    body = validation.data
    try:
        user_jwt = await token_store.require_valid_token(session, body.address)
        prepared = await liquidium.start_loan_prepare(body.upstream_payload(), user_jwt=user_jwt)
    except RuneSwapError as exc:
        return error_from(classify_error(exc, "Failed to prepare borrow"))
    return success(prepared)


@router.post("/borrow/submit")
async def submit_borrow(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    liquidium: LiquidiumClient = Depends(get_liquidium_client),
):
    validation = await validate_request(request, BorrowSubmitBody, "body")
    if not validation.success:
        return validation.error_response
    body = validation.data
    try:
        user_jwt = await token_store.require_valid_token(session, body.address)
        submitted = await liquidium.start_loan_submit(body.upstream_payload(), user_jwt=user_jwt)
    except UpstreamError as exc:
        if exc.non_json:
            return error(exc.message, exc.details, exc.status)
        return error_from(classify_error(exc, "Failed to submit borrow"))
    except RuneSwapError as exc:
        return error_from(classify_error(exc, "Failed to submit borrow"))
    return success(submitted)


@router.post("/repay")
async def repay_loan(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    liquidium: LiquidiumClient = Depends(get_liquidium_client),
):
    """Without ``signedPsbt`` this prepares the repay PSBT, with it the signed PSBT is submitted."""

    validation = await validate_request(request, RepayBody, "body")
    if not validation.success:
        return validation.error_response
    body = validation.data
    try:
        user_jwt = await token_store.require_valid_token(session, body.address)
        if body.signed_psbt:
            result = await liquidium.repay_submit(
                offer_id=body.loan_id,
                signed_psbt_base_64=body.signed_psbt,
                user_jwt=user_jwt,
            )
        else:
            result = await liquidium.repay_prepare(
                offer_id=body.loan_id,
                fee_rate=get_settings().borrow.repay_fee_rate,
                user_jwt=user_jwt,
            )
    except RuneSwapError as exc:
        return error_from(classify_error(exc, "Failed to process repay request"))
    return success(result)


@router.get("/portfolio")
async def get_portfolio(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    liquidium: LiquidiumClient = Depends(get_liquidium_client),
):
    validation = await validate_request(request, AddressQuery, "query")
    if not validation.success:
        return validation.error_response
    params = validation.data
    try:
        user_jwt = await token_store.require_valid_token(session, params.address)
        portfolio = await liquidium.get_portfolio(user_jwt=user_jwt)
    except RuneSwapError as exc:
        return error_from(classify_error(exc, "Failed to fetch Liquidium portfolio"))
    offers = portfolio.get("offers") if isinstance(portfolio, dict) else None
    return success(offers or [])


__all__ = ["router"]
