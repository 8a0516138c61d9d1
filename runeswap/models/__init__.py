"""RuneSwap SQLModel tables."""

from .borrow_range import RuneBorrowRange  # noqa: F401
from .liquidium_token import LiquidiumToken  # noqa: F401
from .popular_runes import PopularRunesCache  # noqa: F401
from .rune import Rune  # noqa: F401

__all__ = [
    "LiquidiumToken",
    "PopularRunesCache",
    "Rune",
    "RuneBorrowRange",
]
