"""Notification fan-out and inbox operations.

Notifications are created for three events:
1. follow  - addressed to the followee
2. like    - addressed to the rate's author, unless the liker is the author
3. comment - addressed to the rate's author, unless the commenter is the author

Recipients and actors are stored lowercased. Unlike and unbookmark leave
existing notifications alone.
"""

from __future__ import annotations

from datetime import datetime

import structlog

from gameratez.storage.base import NOTIFICATIONS, Store
from gameratez.storage.records import NotificationRecord, RateRecord, new_id, utcnow

logger = structlog.get_logger()

INBOX_LIMIT = 200
SNIPPET_LENGTH = 80


def comment_snippet(text: str) -> str:
    """First 80 characters of a comment, with an ellipsis when truncated."""
    if len(text) > SNIPPET_LENGTH:
        return text[:SNIPPET_LENGTH] + "…"
    return text


def _rate_owner(rate: RateRecord) -> str:
    return rate.rater_handle.strip().lower()


async def _create(store: Store, notification: NotificationRecord) -> NotificationRecord:
    await store.insert(NOTIFICATIONS, notification)
    logger.debug(
        "notification_created",
        notification_type=notification.type,
        for_username=notification.for_username,
        actor_username=notification.actor_username,
    )
    return notification


async def notify_follow(
    store: Store,
    follower: str,
    followee: str,
    now: datetime | None = None,
) -> NotificationRecord:
    return await _create(
        store,
        NotificationRecord(
            id=new_id("notif"),
            type="follow",
            created_at=now or utcnow(),
            for_username=followee.lower(),
            actor_username=follower.lower(),
        ),
    )


async def notify_like(
    store: Store,
    rate: RateRecord,
    actor: str,
    now: datetime | None = None,
) -> NotificationRecord | None:
    """Tell the rate's author about a like. Self-likes and authorless rates notify nobody."""
    owner = _rate_owner(rate)
    actor = actor.lower()
    if not owner or owner == actor:
        return None
    return await _create(
        store,
        NotificationRecord(
            id=new_id("notif"),
            type="like",
            created_at=now or utcnow(),
            for_username=owner,
            actor_username=actor,
            rate_id=rate.id,
            game_name=rate.game_name,
        ),
    )


async def notify_comment(
    store: Store,
    rate: RateRecord,
    actor: str,
    actor_display_name: str,
    text: str,
    now: datetime | None = None,
) -> NotificationRecord | None:
    """Tell the rate's author about a comment.

    A failure here is logged and swallowed; the comment itself has already
    been stored and must not be reported as failed.
    """
    owner = _rate_owner(rate)
    actor = actor.lower()
    if not owner or owner == actor:
        return None
    notification = NotificationRecord(
        id=new_id("notif"),
        type="comment",
        created_at=now or utcnow(),
        for_username=owner,
        actor_username=actor,
        actor_display_name=actor_display_name,
        rate_id=rate.id,
        body=comment_snippet(text),
    )
    try:
        return await _create(store, notification)
    except Exception:
        logger.warning("notification_create_failed", rate_id=rate.id, for_username=owner, exc_info=True)
        return None


async def list_notifications(store: Store, username: str) -> list[NotificationRecord]:
    """Newest first, at most 200."""
    found = await store.get(NOTIFICATIONS, for_username=username.strip().lower())
    found.sort(key=lambda n: n.created_at, reverse=True)
    return found[:INBOX_LIMIT]


async def unread_count(store: Store, username: str) -> int:
    return await store.count(NOTIFICATIONS, for_username=username.strip().lower(), read=False)


async def mark_read(store: Store, notification_id: str) -> bool:
    """Mark one notification as read. Returns False if the id is unknown."""
    return await store.update(NOTIFICATIONS, notification_id, {"read": True})


async def mark_all_read(store: Store, username: str) -> int:
    """Mark every unread notification for ``username`` as read. Returns how many changed."""
    return await store.update_many(
        NOTIFICATIONS,
        {"read": True},
        for_username=username.strip().lower(),
        read=False,
    )
