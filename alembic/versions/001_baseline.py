"""Baseline schema: users, rates and everything hanging off them.

Creates users, rates, follows, likes, bookmarks, comments, reports,
notifications and messages. Rate dependents cascade on delete.

Revision ID: 001_baseline
Revises:
Create Date: 2026-10-17
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _created_at(nullable: bool = False) -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=nullable)


def _rate_fk() -> sa.Column:
    return sa.Column("rate_id", sa.String(64), sa.ForeignKey("rates.id", ondelete="CASCADE"), nullable=False)


def upgrade() -> None:
    """Create all tables."""
    # --- Users ---
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("username_normalized", sa.String(64), nullable=False, unique=True),
        sa.Column("display_name", sa.String(128), nullable=False),
        sa.Column("bio", sa.Text(), server_default="", nullable=False),
        sa.Column("favorite_game_kinds", _JSON, nullable=False),
        sa.Column("feed_preference", sa.String(16), server_default="all", nullable=False),
        sa.Column("platform", sa.String(8), server_default="", nullable=False),
        sa.Column("password_hash", sa.String(256), nullable=True),
        _created_at(),
    )

    # --- Rates ---
    op.create_table(
        "rates",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("rater_name", sa.String(128), nullable=False),
        sa.Column("rater_handle", sa.String(64), nullable=False),
        sa.Column("rater_handle_normalized", sa.String(64), nullable=False),
        sa.Column("game_name", sa.String(256), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("images", _JSON, nullable=False),
        sa.Column("poll", _JSON, nullable=True),
        sa.Column("platform", sa.String(8), server_default="", nullable=False),
    )
    op.create_index("ix_rates_created_at", "rates", ["created_at"])
    op.create_index("ix_rates_rater_handle_normalized", "rates", ["rater_handle_normalized"])
    op.create_index("ix_rates_platform", "rates", ["platform"])

    # --- Engagement ---
    op.create_table(
        "follows",
        sa.Column("follower_username", sa.String(64), nullable=False),
        sa.Column("followee_username", sa.String(64), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("follower_username", "followee_username"),
    )
    op.create_table(
        "likes",
        _rate_fk(),
        sa.Column("username", sa.String(64), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("rate_id", "username"),
    )
    op.create_index("ix_likes_username", "likes", ["username"])
    op.create_table(
        "bookmarks",
        _rate_fk(),
        sa.Column("username", sa.String(64), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("rate_id", "username"),
    )
    op.create_index("ix_bookmarks_username", "bookmarks", ["username"])
    op.create_table(
        "comments",
        sa.Column("id", sa.String(64), primary_key=True),
        _rate_fk(),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("display_name", sa.String(128), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_comments_rate_id", "comments", ["rate_id"])
    op.create_table(
        "reports",
        sa.Column("id", sa.String(64), primary_key=True),
        _rate_fk(),
        sa.Column("reporter_username", sa.String(64), nullable=False),
        sa.Column("reason", sa.String(280), server_default="", nullable=False),
        _created_at(),
    )
    op.create_index("ix_reports_rate_id", "reports", ["rate_id"])

    # --- Notifications ---
    op.create_table(
        "notifications",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("type", sa.String(16), nullable=False),
        _created_at(),
        sa.Column("read", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("for_username", sa.String(64), nullable=False),
        sa.Column("actor_username", sa.String(64), nullable=False),
        sa.Column("actor_display_name", sa.String(128), nullable=True),
        sa.Column("rate_id", sa.String(64), sa.ForeignKey("rates.id", ondelete="CASCADE"), nullable=True),
        sa.Column("game_name", sa.String(256), nullable=True),
        sa.Column("body", sa.Text(), nullable=True),
    )
    op.create_index("ix_notifications_for_username", "notifications", ["for_username", "read", "created_at"])

    # --- Direct messages ---
    op.create_table(
        "messages",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("sender_username", sa.String(64), nullable=False),
        sa.Column("receiver_username", sa.String(64), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        _created_at(),
    )
    op.create_index(
        "ix_messages_participants",
        "messages",
        ["sender_username", "receiver_username", "created_at"],
    )


def downgrade() -> None:
    """Drop all tables."""
    for table in ("messages", "notifications", "reports", "comments", "bookmarks", "likes", "follows", "rates", "users"):
        op.drop_table(table)
