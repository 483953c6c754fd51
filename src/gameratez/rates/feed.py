"""Feed assembly: pick the candidate rates for a view, hide scheduled ones, enrich.

Views, in precedence order:

1. following  - ``tab == "following"`` with a username: rates by raters the user follows
2. bookmarked - rates bookmarked by ``bookmarked_by``
3. by rater   - rates whose handle equals ``rater_handle`` (case-insensitive)
4. global     - every rate

A rate is visible once ``created_at <= now``. Scheduled rates are hidden
from every read path until then, including direct lookup by id.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from gameratez.errors import RateNotFoundError
from gameratez.rates.enrichment import EnrichedRate, enrich_rates
from gameratez.storage.base import BOOKMARKS, FOLLOWS, RATES, USERS, Store
from gameratez.storage.records import RateRecord, normalize_platform

SEARCH_USER_LIMIT = 20
SEARCH_RATE_LIMIT = 50
TRENDING_SIZE = 5


def _clean(value: str | None) -> str:
    return value.strip().lower() if isinstance(value, str) else ""


def is_visible(rate: RateRecord, now: datetime) -> bool:
    return rate.created_at <= now


def newest_visible(rates: Iterable[RateRecord], now: datetime) -> list[RateRecord]:
    """Visible rates, newest first."""
    return sorted((r for r in rates if is_visible(r, now)), key=lambda r: r.created_at, reverse=True)


@dataclass
class FeedQuery:
    tab: str | None = None
    username: str | None = None
    rater_handle: str | None = None
    bookmarked_by: str | None = None
    platform: str | None = None


async def _candidates(store: Store, username: str, rater: str, bookmarked_by: str, tab: str | None) -> list[RateRecord]:
    if tab == "following" and username:
        follows = await store.get(FOLLOWS, follower_username=username)
        followees = sorted({f.followee_username for f in follows})
        return await store.get(RATES, rater_handle_normalized=followees) if followees else []

    if bookmarked_by:
        marks = await store.get(BOOKMARKS, username=bookmarked_by)
        rate_ids = sorted({b.rate_id for b in marks})
        return await store.get(RATES, id=rate_ids) if rate_ids else []

    if rater:
        return await store.get(RATES, rater_handle_normalized=rater)

    return await store.get(RATES)


async def list_feed(store: Store, query: FeedQuery, now: datetime, limit: int = 200) -> list[EnrichedRate]:
    """Assemble one feed view, newest first, at most ``limit`` rates."""
    username = _clean(query.username)
    rater = _clean(query.rater_handle)
    bookmarked_by = _clean(query.bookmarked_by)

    rates = await _candidates(store, username, rater, bookmarked_by, query.tab)

    platform = normalize_platform(query.platform)
    if platform:
        rates = [r for r in rates if r.platform == platform]

    visible = newest_visible(rates, now)[:limit]
    viewer = username or bookmarked_by or None
    return await enrich_rates(store, visible, viewer)


async def get_visible_rate(store: Store, rate_id: str, viewer: str | None, now: datetime) -> EnrichedRate:
    """One enriched rate by id. Missing and not-yet-visible rates both raise RateNotFoundError."""
    rate = await store.first(RATES, id=rate_id)
    if rate is None or not is_visible(rate, now):
        raise RateNotFoundError
    enriched = await enrich_rates(store, [rate], viewer)
    return enriched[0]


async def search(store: Store, q: str | None, now: datetime) -> dict[str, list]:
    """Substring search over users (username, display name) and visible rates.

    Rates match on game name, body or rater handle and carry no viewer flags.
    """
    needle = _clean(q)
    if not needle:
        return {"users": [], "rates": []}

    users = [
        u
        for u in await store.get(USERS)
        if needle in u.username.lower() or needle in u.display_name.lower()
    ]
    users.sort(key=lambda u: u.created_at, reverse=True)

    rates = [
        r
        for r in newest_visible(await store.get(RATES), now)
        if needle in r.game_name.lower() or needle in r.body.lower() or needle in r.rater_handle_normalized
    ]

    return {
        "users": [
            {"username": u.username.strip(), "display_name": u.display_name.strip()}
            for u in users[:SEARCH_USER_LIMIT]
        ],
        "rates": await enrich_rates(store, rates[:SEARCH_RATE_LIMIT], None),
    }


def rank_games(rates: Iterable[RateRecord], size: int = TRENDING_SIZE) -> list[dict]:
    """Top ``size`` games by rate count.

    Grouping is case-insensitive on the trimmed name; the displayed name is
    the casing first seen in ``rates`` order. Ties keep first-seen order.
    """
    counts: dict[str, int] = {}
    display: dict[str, str] = {}
    for rate in rates:
        name = rate.game_name.strip()
        key = name.lower()
        if not key:
            continue
        if key not in counts:
            counts[key] = 0
            display[key] = name
        counts[key] += 1

    ranked = sorted(counts, key=lambda k: counts[k], reverse=True)[:size]
    return [
        {"rank": i, "game_name": display[key], "count": counts[key]}
        for i, key in enumerate(ranked, start=1)
    ]


async def trending(store: Store, now: datetime, size: int = TRENDING_SIZE) -> list[dict]:
    """Trending games among visible rates, counted oldest first."""
    visible = [r for r in await store.get(RATES) if is_visible(r, now)]
    visible.sort(key=lambda r: r.created_at)
    return rank_games(visible, size)
