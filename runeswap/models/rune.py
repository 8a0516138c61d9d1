"""Rune metadata mirrored from the indexer."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlmodel import Field, SQLModel

from .base import utcnow


class Rune(SQLModel, table=True):
    __tablename__ = "runes"

    id: str = Field(primary_key=True, max_length=64, description="block:tx")
    name: str = Field(max_length=128, index=True)
    formatted_name: Optional[str] = Field(default=None, max_length=160)
    spacers: Optional[int] = None
    number: Optional[int] = None
    inscription_id: Optional[str] = Field(default=None, max_length=128)
    decimals: Optional[int] = None
    mint_count_cap: Optional[str] = None
    symbol: Optional[str] = Field(default=None, max_length=16)
    etching_txid: Optional[str] = Field(default=None, max_length=80)
    amount_per_mint: Optional[str] = None
    timestamp_unix: Optional[str] = None
    premined_supply: Optional[str] = None
    mint_start_block: Optional[int] = None
    mint_end_block: Optional[int] = None
    current_supply: Optional[str] = None
    current_mint_count: Optional[int] = None
    last_updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    @classmethod
    def column_names(cls) -> set[str]:
        return set(cls.model_fields)

    def as_dict(self) -> dict[str, Any]:
        data = self.model_dump()
        data["last_updated_at"] = self.last_updated_at.isoformat()
        return data


__all__ = ["Rune"]
