"""Pydantic schemas for rate, engagement, search and trending endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import StrictFloat, StrictInt

from gameratez.schemas import CamelModel

# --- Requests ---


class CreateRateRequest(CamelModel):
    game_name: str | None = None
    rating: StrictFloat | StrictInt | None = None
    body: str | None = None
    rater_name: str | None = None
    rater_handle: str | None = None
    images: Any = None
    poll: Any = None
    scheduled_at: str | None = None
    platform: Any = None


class UsernameRequest(CamelModel):
    username: str | None = None


class CreateCommentRequest(CamelModel):
    username: str | None = None
    display_name: str | None = None
    body: str | None = None


class ReportRequest(CamelModel):
    username: str | None = None
    reason: Any = None


# --- Rates ---


class PollOptionResponse(CamelModel):
    id: str
    text: str
    votes: int


class PollResponse(CamelModel):
    question: str
    options: list[PollOptionResponse]
    total_votes: int


class RateResponse(CamelModel):
    id: str
    rater_name: str
    rater_handle: str
    game_name: str
    rating: int
    body: str
    created_at: datetime
    images: list[str] = []
    poll: PollResponse | None = None
    platform: str = ""


class EnrichedRateResponse(RateResponse):
    like_count: int
    liked: bool
    comment_count: int
    bookmark_count: int
    bookmarked: bool


class LikeResponse(CamelModel):
    success: bool = True
    like_count: int


class BookmarkResponse(CamelModel):
    success: bool = True
    bookmark_count: int


# --- Comments ---


class CommentResponse(CamelModel):
    id: str
    rate_id: str
    username: str
    display_name: str
    body: str
    created_at: datetime


class CreateCommentResponse(CamelModel):
    comment: CommentResponse
    comment_count: int


# --- Discovery ---


class TrendingGameResponse(CamelModel):
    rank: int
    game_name: str
    count: int


class SearchUserResponse(CamelModel):
    username: str
    display_name: str


class SearchResponse(CamelModel):
    users: list[SearchUserResponse]
    rates: list[EnrichedRateResponse]
