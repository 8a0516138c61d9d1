"""Database repositories."""

from .borrow_range_repo import get_borrow_range, upsert_borrow_range
from .popular_runes_repo import (
    get_latest_snapshot,
    insert_snapshot,
    mark_refresh_attempt,
    prune_snapshots,
)
from .rune_repo import (
    find_rune_id_by_exact_name,
    find_rune_id_by_name,
    find_rune_id_by_prefix,
    get_rune_by_id,
    get_rune_by_id_prefix,
    get_rune_by_name,
    upsert_rune,
)
from .token_repo import get_token_by_wallet, upsert_token

__all__ = [
    "find_rune_id_by_exact_name",
    "find_rune_id_by_name",
    "find_rune_id_by_prefix",
    "get_borrow_range",
    "get_latest_snapshot",
    "get_rune_by_id",
    "get_rune_by_id_prefix",
    "get_rune_by_name",
    "get_token_by_wallet",
    "insert_snapshot",
    "mark_refresh_attempt",
    "prune_snapshots",
    "upsert_borrow_range",
    "upsert_rune",
    "upsert_token",
]
