"""Read-time engagement counts and per-viewer flags for rates."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from gameratez.storage.base import BOOKMARKS, COMMENTS, LIKES, Store
from gameratez.storage.records import RateRecord


class EnrichedRate(RateRecord):
    like_count: int = 0
    liked: bool = False
    comment_count: int = 0
    bookmark_count: int = 0
    bookmarked: bool = False


async def enrich_rates(
    store: Store,
    rates: Sequence[RateRecord],
    viewer: str | None = None,
) -> list[EnrichedRate]:
    """Attach like/comment/bookmark counts and the viewer's liked/bookmarked flags.

    One read per engagement collection, restricted to the given rate ids.
    Order of ``rates`` is preserved. With no viewer both flags are False.
    """
    if not rates:
        return []

    rate_ids = [r.id for r in rates]
    likes = await store.get(LIKES, rate_id=rate_ids)
    comments = await store.get(COMMENTS, rate_id=rate_ids)
    bookmarks = await store.get(BOOKMARKS, rate_id=rate_ids)

    like_counts = Counter(like.rate_id for like in likes)
    comment_counts = Counter(c.rate_id for c in comments)
    bookmark_counts = Counter(b.rate_id for b in bookmarks)

    who = (viewer or "").strip().lower()
    liked_ids = {like.rate_id for like in likes if who and like.username == who}
    bookmarked_ids = {b.rate_id for b in bookmarks if who and b.username == who}

    return [
        EnrichedRate(
            **rate.model_dump(),
            like_count=like_counts[rate.id],
            liked=rate.id in liked_ids,
            comment_count=comment_counts[rate.id],
            bookmark_count=bookmark_counts[rate.id],
            bookmarked=rate.id in bookmarked_ids,
        )
        for rate in rates
    ]
