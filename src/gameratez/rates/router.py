"""Rates router: feed, detail, compose, engagement, search and admin removal."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Header, Query

from gameratez.config import Settings
from gameratez.dependencies import get_app_settings, get_catalog, get_now, get_store
from gameratez.games.catalog import GameCatalog
from gameratez.rates import feed, service
from gameratez.rates.schemas import (
    BookmarkResponse,
    CommentResponse,
    CreateCommentRequest,
    CreateCommentResponse,
    CreateRateRequest,
    EnrichedRateResponse,
    LikeResponse,
    RateResponse,
    ReportRequest,
    SearchResponse,
    TrendingGameResponse,
    UsernameRequest,
)
from gameratez.schemas import SuccessResponse
from gameratez.storage.base import Store

router = APIRouter(prefix="/api", tags=["Rates"])


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@router.get("/rates", response_model=list[EnrichedRateResponse])
async def list_rates(
    tab: str | None = Query(None),
    username: str | None = Query(None),
    rater_handle: str | None = Query(None, alias="raterHandle"),
    bookmarked_by: str | None = Query(None, alias="bookmarkedBy"),
    platform: str | None = Query(None),
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
    now: datetime = Depends(get_now),
):
    """Feed view: following, bookmarked, by rater, or global."""
    query = feed.FeedQuery(
        tab=tab,
        username=username,
        rater_handle=rater_handle,
        bookmarked_by=bookmarked_by,
        platform=platform,
    )
    return await feed.list_feed(store, query, now, limit=settings.feed_limit)


@router.get("/rates/trending", response_model=list[TrendingGameResponse])
async def trending_games(
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
):
    """Top 5 games by number of visible rates."""
    return await feed.trending(store, now)


@router.get("/rates/{rate_id}", response_model=EnrichedRateResponse)
async def get_rate(
    rate_id: str,
    username: str | None = Query(None),
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
):
    return await feed.get_visible_rate(store, rate_id, username, now)


@router.get("/search", response_model=SearchResponse)
async def search(
    q: str | None = Query(None),
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
):
    """Search people and rates by substring."""
    return await feed.search(store, q, now)


# ---------------------------------------------------------------------------
# Compose
# ---------------------------------------------------------------------------


@router.post("/rates", response_model=RateResponse, status_code=201)
async def create_rate(
    body: CreateRateRequest,
    store: Store = Depends(get_store),
    catalog: GameCatalog = Depends(get_catalog),
    now: datetime = Depends(get_now),
):
    return await service.create_rate(
        store,
        catalog,
        game_name=body.game_name,
        rating=body.rating,
        body=body.body,
        rater_name=body.rater_name,
        rater_handle=body.rater_handle,
        now=now,
        images=body.images,
        poll=body.poll,
        scheduled_at=body.scheduled_at,
        platform=body.platform,
    )


# ---------------------------------------------------------------------------
# Engagement
# ---------------------------------------------------------------------------


@router.post("/rates/{rate_id}/like", response_model=LikeResponse, status_code=201)
async def like(
    rate_id: str,
    body: UsernameRequest,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
):
    like_count = await service.like_rate(store, rate_id, body.username, now)
    return LikeResponse(like_count=like_count)


@router.delete("/rates/{rate_id}/like", response_model=LikeResponse)
async def unlike(
    rate_id: str,
    body: UsernameRequest,
    store: Store = Depends(get_store),
):
    like_count = await service.unlike_rate(store, rate_id, body.username)
    return LikeResponse(like_count=like_count)


@router.post("/rates/{rate_id}/bookmark", response_model=BookmarkResponse, status_code=201)
async def bookmark(
    rate_id: str,
    body: UsernameRequest,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
):
    bookmark_count = await service.bookmark_rate(store, rate_id, body.username, now)
    return BookmarkResponse(bookmark_count=bookmark_count)


@router.delete("/rates/{rate_id}/bookmark", response_model=BookmarkResponse)
async def unbookmark(
    rate_id: str,
    body: UsernameRequest,
    store: Store = Depends(get_store),
):
    bookmark_count = await service.unbookmark_rate(store, rate_id, body.username)
    return BookmarkResponse(bookmark_count=bookmark_count)


@router.get("/rates/{rate_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    rate_id: str,
    store: Store = Depends(get_store),
):
    """Comments on a rate, oldest first."""
    return await service.list_comments(store, rate_id)


@router.post("/rates/{rate_id}/comments", response_model=CreateCommentResponse, status_code=201)
async def add_comment(
    rate_id: str,
    body: CreateCommentRequest,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
):
    comment, comment_count = await service.add_comment(
        store, rate_id, body.username, body.display_name, body.body, now
    )
    return CreateCommentResponse(
        comment=CommentResponse.model_validate(comment),
        comment_count=comment_count,
    )


@router.post("/rates/{rate_id}/report", response_model=SuccessResponse, status_code=201)
async def report(
    rate_id: str,
    body: ReportRequest,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
):
    await service.report_rate(store, rate_id, body.username, body.reason, now)
    return SuccessResponse()


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@router.delete("/admin/rates/{rate_id}", response_model=SuccessResponse)
async def admin_delete_rate(
    rate_id: str,
    x_admin_token: str | None = Header(None),
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """Remove a rate with its likes, bookmarks, comments, reports and notifications."""
    service.check_admin_token(x_admin_token, settings.admin_token)
    await service.delete_rate(store, rate_id)
    return SuccessResponse()
