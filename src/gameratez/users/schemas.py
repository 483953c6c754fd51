"""Schemas for public user profiles."""

from __future__ import annotations

from gameratez.schemas import CamelModel


class PublicProfileResponse(CamelModel):
    username: str
    display_name: str
    platform: str
