"""Rate creation, engagement (likes, bookmarks, comments, reports) and admin removal."""

from __future__ import annotations

import hmac
import math
from datetime import datetime, timezone
from typing import Any

import structlog

from gameratez.errors import ConflictError, NotFoundError, RateNotFoundError, UnauthorizedError, ValidationError
from gameratez.games.catalog import GameCatalog
from gameratez.social.notification_service import notify_comment, notify_like
from gameratez.storage.base import BOOKMARKS, COMMENTS, LIKES, NOTIFICATIONS, RATES, REPORTS, Store
from gameratez.storage.records import (
    BookmarkRecord,
    CommentRecord,
    LikeRecord,
    Poll,
    PollOption,
    RateRecord,
    ReportRecord,
    new_id,
    normalize_platform,
)

logger = structlog.get_logger()

MAX_IMAGES = 4
MIN_POLL_OPTIONS = 2
MAX_POLL_OPTIONS = 4
REPORT_REASON_LENGTH = 280


def _username(value: str | None) -> str:
    username = (value or "").strip().lower()
    if not username:
        raise ValidationError("username required")
    return username


# ---------------------------------------------------------------------------
# Creation helpers
# ---------------------------------------------------------------------------


def normalize_poll(poll: Any) -> Poll | None:
    """Build a poll from loose input; anything invalid yields None."""
    if not isinstance(poll, dict):
        return None
    question = str(poll.get("question") or "").strip()
    raw_options = poll.get("options")
    if not isinstance(raw_options, list):
        return None
    texts = []
    for option in raw_options:
        text = str(option.get("text") or "").strip() if isinstance(option, dict) else ""
        if text:
            texts.append(text)
    if not question or not MIN_POLL_OPTIONS <= len(texts) <= MAX_POLL_OPTIONS:
        return None
    return Poll(
        question=question,
        options=[PollOption(id=f"opt-{i}", text=text) for i, text in enumerate(texts, start=1)],
        total_votes=0,
    )


def normalize_images(images: Any) -> list[str]:
    if not isinstance(images, list):
        return []
    urls = [url.strip() for url in images if isinstance(url, str) and url.strip()]
    return urls[:MAX_IMAGES]


def parse_scheduled_at(value: str | None, now: datetime) -> datetime | None:
    """Parse an ISO-8601 instant. Returns it only when it lies after ``now``.

    Naive timestamps are read as UTC.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed if parsed > now else None


def normalize_rating(value: float | None) -> int:
    if value is None or isinstance(value, bool) or not math.isfinite(value) or not 1 <= value <= 10:
        raise ValidationError("Rating must be a number between 1 and 10")
    return int(round(value))


async def create_rate(
    store: Store,
    catalog: GameCatalog,
    *,
    game_name: str | None,
    rating: float | None,
    body: str | None,
    rater_name: str | None,
    rater_handle: str | None,
    now: datetime,
    images: Any = None,
    poll: Any = None,
    scheduled_at: str | None = None,
    platform: Any = None,
) -> RateRecord:
    """Validate and store a new rate. A future ``scheduled_at`` becomes its created_at."""
    if not game_name or not game_name.strip():
        raise ValidationError("Game name required")
    canonical = catalog.canonical(game_name)
    if canonical is None:
        raise ValidationError("Unknown game")
    score = normalize_rating(rating)
    text = (body or "").strip()
    if not text:
        raise ValidationError("Review text required")

    handle = (rater_handle or "").strip() or "guest"
    rate = RateRecord(
        id=new_id("rate"),
        rater_name=(rater_name or "").strip() or "Guest",
        rater_handle=handle,
        rater_handle_normalized=handle.lower(),
        game_name=canonical,
        rating=score,
        body=text,
        created_at=parse_scheduled_at(scheduled_at, now) or now,
        images=normalize_images(images),
        poll=normalize_poll(poll),
        platform=normalize_platform(platform),
    )
    await store.insert(RATES, rate)
    logger.info(
        "rate_created",
        rate_id=rate.id,
        rater=rate.rater_handle_normalized,
        game=rate.game_name,
        scheduled=rate.created_at > now,
    )
    return rate


async def _require_rate(store: Store, rate_id: str) -> RateRecord:
    rate = await store.first(RATES, id=rate_id)
    if rate is None:
        raise RateNotFoundError
    return rate


# ---------------------------------------------------------------------------
# Likes & bookmarks
# ---------------------------------------------------------------------------


async def like_rate(store: Store, rate_id: str, username: str | None, now: datetime) -> int:
    """Like a rate and notify its author. Returns the new like count."""
    user = _username(username)
    rate = await _require_rate(store, rate_id)
    inserted = await store.insert(LIKES, LikeRecord(rate_id=rate_id, username=user, created_at=now))
    like_count = await store.count(LIKES, rate_id=rate_id)
    if not inserted:
        raise ConflictError("Already liked", likeCount=like_count)
    await notify_like(store, rate, user, now)
    return like_count


async def unlike_rate(store: Store, rate_id: str, username: str | None) -> int:
    user = _username(username)
    if not await store.delete(LIKES, rate_id=rate_id, username=user):
        raise NotFoundError("Not liked")
    return await store.count(LIKES, rate_id=rate_id)


async def bookmark_rate(store: Store, rate_id: str, username: str | None, now: datetime) -> int:
    user = _username(username)
    await _require_rate(store, rate_id)
    inserted = await store.insert(BOOKMARKS, BookmarkRecord(rate_id=rate_id, username=user, created_at=now))
    bookmark_count = await store.count(BOOKMARKS, rate_id=rate_id)
    if not inserted:
        raise ConflictError("Already bookmarked", bookmarkCount=bookmark_count)
    return bookmark_count


async def unbookmark_rate(store: Store, rate_id: str, username: str | None) -> int:
    user = _username(username)
    if not await store.delete(BOOKMARKS, rate_id=rate_id, username=user):
        raise NotFoundError("Not bookmarked")
    return await store.count(BOOKMARKS, rate_id=rate_id)


# ---------------------------------------------------------------------------
# Comments & reports
# ---------------------------------------------------------------------------


async def list_comments(store: Store, rate_id: str) -> list[CommentRecord]:
    """Comments on a rate, oldest first."""
    await _require_rate(store, rate_id)
    comments = await store.get(COMMENTS, rate_id=rate_id)
    comments.sort(key=lambda c: c.created_at)
    return comments


async def add_comment(
    store: Store,
    rate_id: str,
    username: str | None,
    display_name: str | None,
    body: str | None,
    now: datetime,
) -> tuple[CommentRecord, int]:
    """Store a comment and notify the rate's author. Returns the comment and the new count."""
    user = _username(username)
    text = (body or "").strip()
    if not text:
        raise ValidationError("body required")
    rate = await _require_rate(store, rate_id)

    comment = CommentRecord(
        id=new_id("comment"),
        rate_id=rate_id,
        username=user,
        display_name=(display_name or "").strip() or "Guest",
        body=text,
        created_at=now,
    )
    await store.insert(COMMENTS, comment)
    await notify_comment(store, rate, user, comment.display_name, text, now)
    return comment, await store.count(COMMENTS, rate_id=rate_id)


async def report_rate(store: Store, rate_id: str, username: str | None, reason: Any, now: datetime) -> ReportRecord:
    reporter = _username(username)
    await _require_rate(store, rate_id)
    report = ReportRecord(
        id=new_id("report"),
        rate_id=rate_id,
        reporter_username=reporter,
        reason=reason[:REPORT_REASON_LENGTH] if isinstance(reason, str) else "",
        created_at=now,
    )
    await store.insert(REPORTS, report)
    logger.info("rate_reported", rate_id=rate_id, reporter=reporter)
    return report


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


def check_admin_token(supplied: str | None, expected: str) -> None:
    """Raise UnauthorizedError unless an admin token is configured and matches."""
    token = (supplied or "").strip()
    expected = expected.strip()
    if not expected or not hmac.compare_digest(token.encode(), expected.encode()):
        raise UnauthorizedError("Unauthorized")


async def delete_rate(store: Store, rate_id: str) -> None:
    """Remove a rate and everything attached to it."""
    # Dependents first: the file backend has no cascade of its own.
    for collection in (LIKES, BOOKMARKS, COMMENTS, REPORTS, NOTIFICATIONS):
        await store.delete(collection, rate_id=rate_id)
    if not await store.delete(RATES, id=rate_id):
        raise RateNotFoundError
    logger.info("rate_deleted", rate_id=rate_id)
