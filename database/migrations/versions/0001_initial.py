"""initial tables

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17 00:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "liquidium_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("wallet_address", sa.String(length=128), nullable=False),
        sa.Column("ordinals_address", sa.String(length=128), nullable=False),
        sa.Column("payment_address", sa.String(length=128), nullable=True),
        sa.Column("jwt", sa.String(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("last_used_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_liquidium_tokens_wallet_address", "liquidium_tokens", ["wallet_address"], unique=True
    )

    op.create_table(
        "runes",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("formatted_name", sa.String(length=160), nullable=True),
        sa.Column("spacers", sa.Integer(), nullable=True),
        sa.Column("number", sa.Integer(), nullable=True),
        sa.Column("inscription_id", sa.String(length=128), nullable=True),
        sa.Column("decimals", sa.Integer(), nullable=True),
        sa.Column("mint_count_cap", sa.String(), nullable=True),
        sa.Column("symbol", sa.String(length=16), nullable=True),
        sa.Column("etching_txid", sa.String(length=80), nullable=True),
        sa.Column("amount_per_mint", sa.String(), nullable=True),
        sa.Column("timestamp_unix", sa.String(), nullable=True),
        sa.Column("premined_supply", sa.String(), nullable=True),
        sa.Column("mint_start_block", sa.Integer(), nullable=True),
        sa.Column("mint_end_block", sa.Integer(), nullable=True),
        sa.Column("current_supply", sa.String(), nullable=True),
        sa.Column("current_mint_count", sa.Integer(), nullable=True),
        sa.Column("last_updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_runes_name", "runes", ["name"])

    op.create_table(
        "rune_borrow_ranges",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("rune_id", sa.String(length=64), nullable=False),
        sa.Column("min_amount", sa.String(), nullable=False),
        sa.Column("max_amount", sa.String(), nullable=False),
    )
    op.create_index(
        "ix_rune_borrow_ranges_rune_id", "rune_borrow_ranges", ["rune_id"], unique=True
    )

    op.create_table(
        "popular_runes_cache",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("runes_data", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("last_refresh_attempt", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_popular_runes_cache_created_at", "popular_runes_cache", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_popular_runes_cache_created_at", table_name="popular_runes_cache")
    op.drop_table("popular_runes_cache")
    op.drop_index("ix_rune_borrow_ranges_rune_id", table_name="rune_borrow_ranges")
    op.drop_table("rune_borrow_ranges")
    op.drop_index("ix_runes_name", table_name="runes")
    op.drop_table("runes")
    op.drop_index("ix_liquidium_tokens_wallet_address", table_name="liquidium_tokens")
    op.drop_table("liquidium_tokens")
