"""Health, readiness, and version endpoints."""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Request

from gameratez.config import Settings
from gameratez.dependencies import get_app_settings, get_store
from gameratez.storage.base import Store

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> dict[str, object]:
    """Liveness check: 200 while the process is alive, with seconds since startup."""
    started = getattr(request.app.state, "started_at", time.monotonic())
    return {"ok": True, "uptime": round(time.monotonic() - started, 3)}


@router.get("/ready")
async def readiness(
    request: Request,
    store: Store = Depends(get_store),
) -> dict[str, object]:
    """Readiness check: checks storage and, when configured, Redis."""
    checks: dict[str, object] = {}

    checks["storage"] = "ok" if await store.ping() else f"error: {store.backend} store unavailable"

    redis = getattr(request.app.state, "redis", None)
    if redis is not None:
        try:
            await redis.ping()
            checks["redis"] = "ok"
        except Exception as exc:
            checks["redis"] = f"error: {exc}"

    all_ok = all(v == "ok" for v in checks.values())
    return {"status": "ready" if all_ok else "degraded", "checks": checks}


@router.get("/version")
async def version(settings: Settings = Depends(get_app_settings)) -> dict[str, str]:
    """Return API version and environment."""
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
