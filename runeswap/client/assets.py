"""Swap-side asset selection (BTC or a rune)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Asset:
    id: str
    name: str
    image_uri: str = ""
    is_btc: bool = False

    @classmethod
    def from_search_item(cls, item: dict[str, Any]) -> "Asset":
        return cls(
            id=str(item.get("id") or ""),
            name=str(item.get("name") or "Unknown"),
            image_uri=str(item.get("imageURI") or ""),
            is_btc=False,
        )


BTC_ASSET = Asset(id="BTC", name="BTC", image_uri="/icons/btc.svg", is_btc=True)


__all__ = ["Asset", "BTC_ASSET"]
