"""Optional Redis connection used for shared rate-limit counters."""

from __future__ import annotations

import redis.asyncio as redis


def create_redis(url: str) -> redis.Redis:
    """Create a pooled client. Connections are opened lazily on first command."""
    return redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=50,
    )


async def close_redis(client: redis.Redis | None) -> None:
    if client is not None:
        await client.aclose()
