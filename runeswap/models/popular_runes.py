"""Snapshots of the aggregator's popular tokens list."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel

from .base import utcnow


class PopularRunesCache(SQLModel, table=True):
    __tablename__ = "popular_runes_cache"

    id: Optional[int] = Field(default=None, primary_key=True)
    runes_data: list = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)
    last_refresh_attempt: Optional[datetime] = Field(default=None)


__all__ = ["PopularRunesCache"]
