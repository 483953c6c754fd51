"""ORM models for the relational storage backend.

Column names match the fields of ``gameratez.storage.records`` one-to-one so
rows convert to records with ``model_validate(row, from_attributes=True)``.
Everything hanging off a rate cascades when the rate is deleted.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    PrimaryKeyConstraint,
    String,
    Text,
    false,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from gameratez.db.base import Base, JSONType


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the 'users' table."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    username: Mapped[str] = mapped_column(String(64), nullable=False)
    username_normalized: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(128), nullable=False)
    bio: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    favorite_game_kinds: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    feed_preference: Mapped[str] = mapped_column(String(16), nullable=False, server_default="all")
    platform: Mapped[str] = mapped_column(String(8), nullable=False, server_default="")
    password_hash: Mapped[str | None] = mapped_column(String(256), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


# ---------------------------------------------------------------------------
# Rates
# ---------------------------------------------------------------------------


class Rate(Base):
    """A rating + review of one game. created_at may lie in the future (scheduled)."""

    __tablename__ = "rates"
    __table_args__ = (
        Index("ix_rates_created_at", "created_at"),
        Index("ix_rates_rater_handle_normalized", "rater_handle_normalized"),
        Index("ix_rates_platform", "platform"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    rater_name: Mapped[str] = mapped_column(String(128), nullable=False)
    rater_handle: Mapped[str] = mapped_column(String(64), nullable=False)
    rater_handle_normalized: Mapped[str] = mapped_column(String(64), nullable=False)
    game_name: Mapped[str] = mapped_column(String(256), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    images: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    poll: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    platform: Mapped[str] = mapped_column(String(8), nullable=False, server_default="")


# ---------------------------------------------------------------------------
# Engagement
# ---------------------------------------------------------------------------


class Follow(Base):
    __tablename__ = "follows"
    __table_args__ = (PrimaryKeyConstraint("follower_username", "followee_username"),)

    follower_username: Mapped[str] = mapped_column(String(64), nullable=False)
    followee_username: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Like(Base):
    __tablename__ = "likes"
    __table_args__ = (
        PrimaryKeyConstraint("rate_id", "username"),
        Index("ix_likes_username", "username"),
    )

    rate_id: Mapped[str] = mapped_column(String(64), ForeignKey("rates.id", ondelete="CASCADE"), nullable=False)
    username: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Bookmark(Base):
    __tablename__ = "bookmarks"
    __table_args__ = (
        PrimaryKeyConstraint("rate_id", "username"),
        Index("ix_bookmarks_username", "username"),
    )

    rate_id: Mapped[str] = mapped_column(String(64), ForeignKey("rates.id", ondelete="CASCADE"), nullable=False)
    username: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Comment(Base):
    __tablename__ = "comments"
    __table_args__ = (Index("ix_comments_rate_id", "rate_id"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    rate_id: Mapped[str] = mapped_column(String(64), ForeignKey("rates.id", ondelete="CASCADE"), nullable=False)
    username: Mapped[str] = mapped_column(String(64), nullable=False)
    display_name: Mapped[str] = mapped_column(String(128), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Report(Base):
    __tablename__ = "reports"
    __table_args__ = (Index("ix_reports_rate_id", "rate_id"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    rate_id: Mapped[str] = mapped_column(String(64), ForeignKey("rates.id", ondelete="CASCADE"), nullable=False)
    reporter_username: Mapped[str] = mapped_column(String(64), nullable=False)
    reason: Mapped[str] = mapped_column(String(280), nullable=False, server_default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


class Notification(Base):
    """Persisted like/follow/comment notifications."""

    __tablename__ = "notifications"
    __table_args__ = (Index("ix_notifications_for_username", "for_username", "read", "created_at"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    for_username: Mapped[str] = mapped_column(String(64), nullable=False)
    actor_username: Mapped[str] = mapped_column(String(64), nullable=False)
    actor_display_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    rate_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("rates.id", ondelete="CASCADE"), nullable=True
    )
    game_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)


# ---------------------------------------------------------------------------
# Direct messages
# ---------------------------------------------------------------------------


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (Index("ix_messages_participants", "sender_username", "receiver_username", "created_at"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    sender_username: Mapped[str] = mapped_column(String(64), nullable=False)
    receiver_username: Mapped[str] = mapped_column(String(64), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
