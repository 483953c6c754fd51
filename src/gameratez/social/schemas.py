"""Pydantic schemas for follow and notification endpoints."""

from __future__ import annotations

from datetime import datetime

from gameratez.schemas import CamelModel

# --- Follows ---


class FollowRequest(CamelModel):
    follower_username: str | None = None
    followee_username: str | None = None


# --- Notifications ---


class NotificationResponse(CamelModel):
    id: str
    type: str
    created_at: datetime
    read: bool
    for_username: str
    actor_username: str
    actor_display_name: str | None = None
    rate_id: str | None = None
    game_name: str | None = None
    body: str | None = None


class UnreadCountResponse(CamelModel):
    count: int


class MarkAllReadRequest(CamelModel):
    username: str | None = None


class MarkAllReadResponse(CamelModel):
    success: bool = True
    marked: int
