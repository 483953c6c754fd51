"""Middleware registration."""

from fastapi import FastAPI

from gameratez.config import Settings
from gameratez.middleware.cors import setup_cors
from gameratez.middleware.error_handler import setup_error_handlers
from gameratez.middleware.logging import setup_logging
from gameratez.middleware.rate_limit import RateLimitMiddleware, RateLimitRule
from gameratez.middleware.request_id import RequestIdMiddleware


def rate_limit_rules(settings: Settings) -> list[RateLimitRule]:
    """Global limit plus a tighter one for the auth endpoints."""
    return [
        RateLimitRule(
            name="global",
            limit=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        ),
        RateLimitRule(
            name="auth",
            limit=settings.rate_limit_auth_requests,
            window_seconds=settings.rate_limit_auth_window_seconds,
            prefix="/api/auth",
        ),
    ]


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware in the correct order.

    FastAPI/Starlette executes middleware in reverse-add order (last added = outermost).
    CORS must be outermost so it wraps error responses from inner middleware (e.g. 429).
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RateLimitMiddleware, rules=rate_limit_rules(settings))
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)  # added last → outermost → wraps 429 responses
