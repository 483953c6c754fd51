"""Public user profiles: /api/users/*."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from gameratez.dependencies import get_store
from gameratez.errors import NotFoundError, ValidationError
from gameratez.storage.base import Store
from gameratez.users.schemas import PublicProfileResponse
from gameratez.users.service import get_public_profile

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("/profile", response_model=PublicProfileResponse)
async def public_profile(
    username: str | None = Query(None),
    store: Store = Depends(get_store),
) -> PublicProfileResponse:
    """Display name, username and platform of another user."""
    if not username or not username.strip():
        raise ValidationError("username required")
    user = await get_public_profile(store, username)
    if user is None:
        raise NotFoundError("User not found")
    return PublicProfileResponse(
        username=user.username.strip(),
        display_name=user.display_name.strip(),
        platform=user.platform,
    )
