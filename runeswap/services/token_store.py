"""Per-wallet Liquidium bearer tokens."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from loguru import logger
from sqlmodel.ext.asyncio.session import AsyncSession

from runeswap.errors import AuthRequiredError
from runeswap.models import LiquidiumToken
from runeswap.models.base import as_utc, utcnow
from runeswap.repositories import token_repo


async def get_token(session: AsyncSession, wallet_address: str) -> Optional[LiquidiumToken]:
    return await token_repo.get_token_by_wallet(session, wallet_address)


async def upsert_token(
    session: AsyncSession,
    wallet_address: str,
    *,
    ordinals_address: str,
    payment_address: str | None,
    jwt: str,
    expires_at: datetime | None,
) -> LiquidiumToken:
    """Insert or replace the token for ``wallet_address``, concurrent writers: last one wins."""

    return await token_repo.upsert_token(
        session,
        wallet_address=wallet_address,
        ordinals_address=ordinals_address,
        payment_address=payment_address,
        jwt=jwt,
        expires_at=expires_at,
    )


def is_expired(token: LiquidiumToken, now: datetime | None = None) -> bool:
    if token.expires_at is None:
        return False
    return as_utc(token.expires_at) < (now or utcnow())


async def require_valid_token(session: AsyncSession, wallet_address: str) -> str:
    """Return the usable JWT for ``wallet_address`` or raise AuthRequiredError.

    An expired token is reported the same way as a missing one, so every
    authenticated route answers 401 and the client re-runs the challenge.
    """

    token = await get_token(session, wallet_address)
    if token is None or not token.jwt:
        raise AuthRequiredError(details="Please authenticate with Liquidium first")
    if is_expired(token):
        logger.info("Liquidium token for {wallet} has expired", wallet=wallet_address)
        raise AuthRequiredError(
            "Authentication expired",
            "Your Liquidium session has expired, please re-authenticate",
        )
    return token.jwt


__all__ = ["get_token", "is_expired", "require_valid_token", "upsert_token"]
