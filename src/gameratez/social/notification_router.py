"""Notification API endpoints: 4 routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from gameratez.dependencies import get_store
from gameratez.errors import NotFoundError, ValidationError
from gameratez.schemas import SuccessResponse
from gameratez.social.notification_service import (
    list_notifications,
    mark_all_read,
    mark_read,
    unread_count,
)
from gameratez.social.schemas import (
    MarkAllReadRequest,
    MarkAllReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from gameratez.storage.base import Store

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


def _require_username(username: str | None) -> str:
    if not username or not username.strip():
        raise ValidationError("username required")
    return username


@router.get("", response_model=list[NotificationResponse])
async def get_notifications(
    username: str | None = Query(None),
    store: Store = Depends(get_store),
):
    """List a user's notifications, newest first (max 200)."""
    return await list_notifications(store, _require_username(username))


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_notification_count(
    username: str | None = Query(None),
    store: Store = Depends(get_store),
):
    count = await unread_count(store, _require_username(username))
    return UnreadCountResponse(count=count)


@router.patch("/read-all", response_model=MarkAllReadResponse)
async def mark_all_notifications_read(
    body: MarkAllReadRequest,
    store: Store = Depends(get_store),
):
    """Mark all of a user's notifications as read."""
    marked = await mark_all_read(store, _require_username(body.username))
    return MarkAllReadResponse(marked=marked)


@router.patch("/{notification_id}/read", response_model=SuccessResponse)
async def mark_notification_read(
    notification_id: str,
    store: Store = Depends(get_store),
):
    if not await mark_read(store, notification_id):
        raise NotFoundError("Notification not found")
    return SuccessResponse()
