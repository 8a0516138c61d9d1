"""Queries against the liquidium_tokens table."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from runeswap.models import LiquidiumToken
from runeswap.models.base import utcnow


async def get_token_by_wallet(session: AsyncSession, wallet_address: str) -> Optional[LiquidiumToken]:
    stmt = select(LiquidiumToken).where(LiquidiumToken.wallet_address == wallet_address).limit(1)
    result = await session.exec(stmt)
    return result.first()


async def upsert_token(
    session: AsyncSession,
    *,
    wallet_address: str,
    ordinals_address: str,
    payment_address: str | None,
    jwt: str,
    expires_at: datetime | None,
) -> LiquidiumToken:
    token = await get_token_by_wallet(session, wallet_address)
    now = utcnow()
    if token is None:
        token = LiquidiumToken(
            wallet_address=wallet_address,
            ordinals_address=ordinals_address,
            payment_address=payment_address,
            jwt=jwt,
            expires_at=expires_at,
            last_used_at=now,
        )
    else:
        token.ordinals_address = ordinals_address
        token.payment_address = payment_address
        token.jwt = jwt
        token.expires_at = expires_at
        token.last_used_at = now
        token.touch()
    session.add(token)
    await session.commit()
    await session.refresh(token)
    return token


__all__ = ["get_token_by_wallet", "upsert_token"]
