"""Follow edges between users."""

from __future__ import annotations

from datetime import datetime

import structlog

from gameratez.errors import ConflictError, NotFoundError, ValidationError
from gameratez.social.notification_service import notify_follow
from gameratez.storage.base import FOLLOWS, Store
from gameratez.storage.records import FollowRecord

logger = structlog.get_logger()


def _pair(follower: str | None, followee: str | None) -> tuple[str, str]:
    a = (follower or "").strip().lower()
    b = (followee or "").strip().lower()
    if not a or not b:
        raise ValidationError("followerUsername and followeeUsername required")
    return a, b


async def list_following(store: Store, username: str) -> list[str]:
    """Usernames that ``username`` follows."""
    follows = await store.get(FOLLOWS, follower_username=username.strip().lower())
    return [f.followee_username for f in follows]


async def follow(store: Store, follower: str | None, followee: str | None, now: datetime) -> None:
    """Create the edge and notify the followee."""
    a, b = _pair(follower, followee)
    if a == b:
        raise ValidationError("Cannot follow yourself")
    if not await store.insert(FOLLOWS, FollowRecord(follower_username=a, followee_username=b, created_at=now)):
        raise ConflictError("Already following")
    await notify_follow(store, a, b, now)
    logger.info("user_followed", follower=a, followee=b)


async def unfollow(store: Store, follower: str | None, followee: str | None) -> None:
    a, b = _pair(follower, followee)
    if not await store.delete(FOLLOWS, follower_username=a, followee_username=b):
        raise NotFoundError("Not following")
