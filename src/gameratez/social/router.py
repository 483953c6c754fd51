"""Follow endpoints."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from gameratez.dependencies import get_now, get_store
from gameratez.errors import ValidationError
from gameratez.schemas import SuccessResponse
from gameratez.social import follow_service
from gameratez.social.schemas import FollowRequest
from gameratez.storage.base import Store

router = APIRouter(prefix="/api", tags=["Social"])


@router.get("/following", response_model=list[str])
async def following(
    username: str | None = Query(None),
    store: Store = Depends(get_store),
):
    """Usernames the given user follows."""
    if not username or not username.strip():
        raise ValidationError("username required")
    return await follow_service.list_following(store, username)


@router.post("/follow", response_model=SuccessResponse, status_code=201)
async def follow(
    body: FollowRequest,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
):
    await follow_service.follow(store, body.follower_username, body.followee_username, now)
    return SuccessResponse()


@router.delete("/follow", response_model=SuccessResponse)
async def unfollow(
    body: FollowRequest,
    store: Store = Depends(get_store),
):
    await follow_service.unfollow(store, body.follower_username, body.followee_username)
    return SuccessResponse()
