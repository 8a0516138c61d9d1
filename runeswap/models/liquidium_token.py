"""Per-wallet Liquidium bearer tokens."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from .base import TimeStampedModel, utcnow


class LiquidiumToken(TimeStampedModel, table=True):
    """JWT issued by Liquidium after the signed challenge, one row per wallet."""

    __tablename__ = "liquidium_tokens"

    id: Optional[int] = Field(default=None, primary_key=True)
    wallet_address: str = Field(max_length=128, unique=True, index=True)
    ordinals_address: str = Field(max_length=128)
    payment_address: Optional[str] = Field(default=None, max_length=128)
    jwt: str
    expires_at: Optional[datetime] = Field(default=None)
    last_used_at: datetime = Field(default_factory=utcnow, nullable=False)


__all__ = ["LiquidiumToken"]
