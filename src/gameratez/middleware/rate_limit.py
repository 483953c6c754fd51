"""Fixed-window rate limiting per client IP.

Counters live in process memory unless a Redis client is configured, in
which case they are shared through Redis (INCR + EXPIRE). The counter is
looked up on ``app.state.rate_limit_counter`` per request, so the lifespan
can swap in Redis after the middleware stack is built.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import structlog
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = structlog.get_logger()

# Paths exempt from rate limiting
_EXEMPT_PATHS = frozenset({"/health", "/ready", "/version"})


@dataclass(frozen=True)
class RateLimitRule:
    """``limit`` requests per ``window_seconds`` for paths under ``prefix`` (all paths if empty)."""

    name: str
    limit: int
    window_seconds: int
    prefix: str = ""

    def applies_to(self, path: str) -> bool:
        return not self.prefix or path == self.prefix or path.startswith(self.prefix.rstrip("/") + "/")


class MemoryCounter:
    """Per-process counters. Only the current window is kept per rule and client.

    Entries whose window has closed are dropped on a later hit, so idle clients
    do not accumulate.
    """

    def __init__(self) -> None:
        self._windows: dict[str, tuple[int, int, int]] = {}
        self._next_sweep = 0

    def __len__(self) -> int:
        return len(self._windows)

    def _sweep(self, now: int) -> None:
        self._windows = {k: v for k, v in self._windows.items() if v[2] > now}
        self._next_sweep = min((v[2] for v in self._windows.values()), default=0)

    async def hit(self, key: str, window: int, window_seconds: int) -> int:
        now = window * window_seconds
        if self._next_sweep and now >= self._next_sweep:
            self._sweep(now)

        client_key = key.rsplit(":", 1)[0]
        expires_at = (window + 1) * window_seconds
        current, count, _ = self._windows.get(client_key, (window, 0, expires_at))
        count = count + 1 if current == window else 1
        self._windows[client_key] = (window, count, expires_at)
        if not self._next_sweep or expires_at < self._next_sweep:
            self._next_sweep = expires_at
        return count


class RedisCounter:
    """Counters shared across processes through Redis."""

    def __init__(self, redis: Any) -> None:  # noqa: ANN401
        self.redis = redis

    async def hit(self, key: str, window: int, window_seconds: int) -> int:  # noqa: ARG002
        pipe = self.redis.pipeline()
        pipe.incr(key)
        pipe.expire(key, window_seconds + 1)
        results: list[Any] = await pipe.execute()
        return int(results[0])


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limit requests per IP against every rule that covers the path."""

    def __init__(self, app: Any, rules: list[RateLimitRule]) -> None:  # noqa: ANN401
        super().__init__(app)
        self.rules = rules

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Check every applicable rule, return 429 if any is exceeded."""
        path = request.url.path
        rules = [r for r in self.rules if r.applies_to(path)]
        if path in _EXEMPT_PATHS or request.method == "OPTIONS" or not rules:
            return await call_next(request)

        counter = getattr(request.app.state, "rate_limit_counter", None)
        if counter is None:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = int(time.time())
        tightest: tuple[int, RateLimitRule] | None = None

        try:
            for rule in rules:
                window = now // rule.window_seconds
                count = await counter.hit(f"ratelimit:{rule.name}:{client_ip}:{window}", window, rule.window_seconds)
                if count > rule.limit:
                    retry_after = rule.window_seconds - (now % rule.window_seconds)
                    logger.info("rate_limited", rule=rule.name, client_ip=client_ip, path=path)
                    return JSONResponse(
                        status_code=429,
                        content={"detail": "Rate limit exceeded. Try again later."},
                        headers={
                            "Retry-After": str(retry_after),
                            "X-RateLimit-Remaining": "0",
                            "X-RateLimit-Limit": str(rule.limit),
                        },
                    )
                remaining = rule.limit - count
                if tightest is None or remaining < tightest[0]:
                    tightest = (remaining, rule)
        except RedisError as exc:
            # Redis unreachable: let the request through without rate limiting
            logger.warning("rate_limit_backend_error", error=str(exc))
            return await call_next(request)

        response = await call_next(request)
        if tightest is not None:
            response.headers["X-RateLimit-Remaining"] = str(tightest[0])
            response.headers["X-RateLimit-Limit"] = str(tightest[1].limit)
        return response
