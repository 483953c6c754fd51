"""Request/response schemas for signup and login."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from gameratez.schemas import CamelModel


class SignupRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class SignupResponse(CamelModel):
    success: bool = True
    email: str
    complete_token: str


class CompleteSignupRequest(CamelModel):
    complete_token: str | None = None
    display_name: str | None = None
    username: str | None = None
    favorite_game_kinds: Any = None
    feed_preference: Any = None
    platform: Any = None


class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class ProfileResponse(CamelModel):
    """A user's own profile. Never carries the password hash."""

    id: str
    email: str
    display_name: str
    username: str
    bio: str
    favorite_game_kinds: list[str]
    feed_preference: str
    platform: str
    created_at: datetime


class AuthResponse(CamelModel):
    success: bool = True
    profile: ProfileResponse
