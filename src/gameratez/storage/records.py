"""Persistent record types shared by both storage backends.

Records are plain pydantic models. The file store dumps them to JSON with
``model_dump(mode="json")``; the SQL store maps them onto ORM rows column by
column, so field names here match the table columns in ``gameratez.db.models``.
"""

from __future__ import annotations

import secrets
import time
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

VALID_PLATFORMS = ("ps", "xbox", "pc")
FEED_PREFERENCES = ("all", "favorites", "trending")
NOTIFICATION_TYPES = ("like", "follow", "comment")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    """Generate ids in the ``<prefix>-<epoch ms>-<random>`` shape used across collections."""
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


def normalize_platform(value: Any) -> str:
    """Return ps/xbox/pc, or "" for anything else."""
    if isinstance(value, str) and value.strip().lower() in VALID_PLATFORMS:
        return value.strip().lower()
    return ""


class Record(BaseModel):
    model_config = ConfigDict(extra="ignore")

    @field_validator("created_at", mode="after", check_fields=False)
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class UserRecord(Record):
    id: str
    email: str
    username: str
    username_normalized: str
    display_name: str
    bio: str = ""
    favorite_game_kinds: list[str] = Field(default_factory=list)
    feed_preference: str = "all"
    platform: str = ""
    password_hash: str | None = None
    created_at: datetime = Field(default_factory=utcnow)


class PollOption(BaseModel):
    id: str
    text: str
    votes: int = 0


class Poll(BaseModel):
    question: str
    options: list[PollOption]
    total_votes: int = 0


class RateRecord(Record):
    id: str
    rater_name: str
    rater_handle: str
    rater_handle_normalized: str
    game_name: str
    rating: int
    body: str
    created_at: datetime
    images: list[str] = Field(default_factory=list)
    poll: Poll | None = None
    platform: str = ""


class FollowRecord(Record):
    follower_username: str
    followee_username: str
    created_at: datetime = Field(default_factory=utcnow)


class LikeRecord(Record):
    rate_id: str
    username: str
    created_at: datetime = Field(default_factory=utcnow)


class BookmarkRecord(Record):
    rate_id: str
    username: str
    created_at: datetime = Field(default_factory=utcnow)


class CommentRecord(Record):
    id: str
    rate_id: str
    username: str
    display_name: str
    body: str
    created_at: datetime = Field(default_factory=utcnow)


class NotificationRecord(Record):
    id: str
    type: Literal["like", "follow", "comment"]
    created_at: datetime = Field(default_factory=utcnow)
    read: bool = False
    for_username: str
    actor_username: str
    actor_display_name: str | None = None
    rate_id: str | None = None
    game_name: str | None = None
    body: str | None = None


class MessageRecord(Record):
    id: str
    sender_username: str
    receiver_username: str
    body: str
    created_at: datetime = Field(default_factory=utcnow)


class ReportRecord(Record):
    id: str
    rate_id: str
    reporter_username: str
    reason: str = ""
    created_at: datetime = Field(default_factory=utcnow)
