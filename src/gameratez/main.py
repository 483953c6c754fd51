"""FastAPI application factory."""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from gameratez.auth.email_validation import MxResolver, StaticMxResolver
from gameratez.auth.router import router as auth_router
from gameratez.auth.tokens import CompleteTokenStore
from gameratez.config import Settings, get_settings
from gameratez.games.catalog import GameCatalog
from gameratez.health.router import router as health_router
from gameratez.messages.router import router as messages_router
from gameratez.middleware import setup_middleware
from gameratez.middleware.rate_limit import MemoryCounter, RedisCounter
from gameratez.rates.router import router as rates_router
from gameratez.redis_client import close_redis, create_redis
from gameratez.social.notification_router import router as notification_router
from gameratez.social.router import router as social_router
from gameratez.storage import Store, create_store
from gameratez.storage.records import utcnow
from gameratez.uploads.router import router as uploads_router
from gameratez.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings: Settings = app.state.settings
    store: Store = app.state.store

    Path(settings.uploads_dir).mkdir(parents=True, exist_ok=True)
    await store.open()

    if settings.redis_url:
        app.state.redis = create_redis(settings.redis_url)
        app.state.rate_limit_counter = RedisCounter(app.state.redis)

    logger.info(
        "app_started",
        environment=settings.environment,
        storage=store.backend,
        rate_limit_backend="redis" if settings.redis_url else "memory",
    )

    yield

    await store.close()
    await close_redis(app.state.redis)
    app.state.redis = None


def create_app(
    settings: Settings | None = None,
    *,
    store: Store | None = None,
    clock: Callable[[], datetime] | None = None,
    mx_resolver: MxResolver | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``store``, ``clock`` and ``mx_resolver`` default to the configured
    backends; tests pass their own.
    """
    settings = settings or get_settings()
    clock = clock or utcnow

    app = FastAPI(
        title="gameratez API",
        description="Backend API for gameratez: rate video games and follow the people who rate them",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.store = store or create_store(settings)
    app.state.clock = clock
    app.state.token_store = CompleteTokenStore(settings.complete_token_ttl_seconds, clock=clock)
    if mx_resolver is None:
        mx_resolver = (
            MxResolver(timeout=settings.mx_lookup_timeout_seconds)
            if settings.check_email_mx
            else StaticMxResolver(accept_all=True)
        )
    app.state.mx_resolver = mx_resolver
    app.state.catalog = GameCatalog.from_file(settings.games_file)
    app.state.redis = None
    app.state.rate_limit_counter = MemoryCounter()

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(rates_router)
    app.include_router(social_router)
    app.include_router(notification_router)
    app.include_router(messages_router)
    app.include_router(users_router)
    app.include_router(uploads_router)
    app.mount("/uploads", StaticFiles(directory=settings.uploads_dir, check_dir=False), name="uploads")

    return app


app = create_app()
