"""Shared FastAPI dependencies.

Everything stateful is owned by the app (``app.state``) and built in
``create_app``; routes reach it only through these functions.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from fastapi import Request

from gameratez.auth.email_validation import MxResolver
from gameratez.auth.tokens import CompleteTokenStore
from gameratez.config import Settings
from gameratez.games.catalog import GameCatalog
from gameratez.storage.base import Store

Clock = Callable[[], datetime]


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_now(request: Request) -> datetime:
    """Current instant from the app clock."""
    return request.app.state.clock()


def get_catalog(request: Request) -> GameCatalog:
    return request.app.state.catalog


def get_token_store(request: Request) -> CompleteTokenStore:
    return request.app.state.token_store


def get_mx_resolver(request: Request) -> MxResolver:
    return request.app.state.mx_resolver
