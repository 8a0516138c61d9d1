"""Cached min/max borrow ranges per collateral rune."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Field

from .base import TimeStampedModel


class RuneBorrowRange(TimeStampedModel, table=True):
    __tablename__ = "rune_borrow_ranges"

    id: Optional[int] = Field(default=None, primary_key=True)
    rune_id: str = Field(max_length=64, unique=True, index=True)
    # Stored as decimal strings, values can exceed 2**53.
    min_amount: str
    max_amount: str


__all__ = ["RuneBorrowRange"]
