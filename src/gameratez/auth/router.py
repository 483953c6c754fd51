"""Authentication router: all /api/auth/* endpoints."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends

from gameratez.auth import service
from gameratez.auth.email_validation import MxResolver
from gameratez.auth.schemas import (
    AuthResponse,
    CompleteSignupRequest,
    LoginRequest,
    ProfileResponse,
    SignupRequest,
    SignupResponse,
)
from gameratez.auth.tokens import CompleteTokenStore
from gameratez.dependencies import get_mx_resolver, get_now, get_store, get_token_store
from gameratez.storage.base import Store

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/signup", response_model=SignupResponse)
async def signup(
    body: SignupRequest,
    store: Store = Depends(get_store),
    tokens: CompleteTokenStore = Depends(get_token_store),
    resolver: MxResolver = Depends(get_mx_resolver),
) -> SignupResponse:
    """Step 1: check the email and get a completion token (valid 10 minutes)."""
    email, token = await service.start_signup(store, tokens, resolver, body.email, body.password)
    return SignupResponse(email=email, complete_token=token)


@router.post("/complete", response_model=AuthResponse)
async def complete(
    body: CompleteSignupRequest,
    store: Store = Depends(get_store),
    tokens: CompleteTokenStore = Depends(get_token_store),
    now: datetime = Depends(get_now),
) -> AuthResponse:
    """Step 2: choose a username and preferences, creating the account."""
    user = await service.complete_signup(
        store,
        tokens,
        complete_token=body.complete_token,
        display_name=body.display_name,
        username=body.username,
        now=now,
        favorite_game_kinds=body.favorite_game_kinds,
        feed_preference=body.feed_preference,
        platform=body.platform,
    )
    return AuthResponse(profile=ProfileResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    store: Store = Depends(get_store),
) -> AuthResponse:
    user = await service.login(store, body.email, body.password)
    return AuthResponse(profile=ProfileResponse.model_validate(user))
