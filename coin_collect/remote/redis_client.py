"""Redis connection pool backing the remote account store."""

from __future__ import annotations

import redis.asyncio as redis

_pool: redis.Redis | None = None


async def init_redis(url: str) -> redis.Redis:
    """Initialize the Redis connection pool.

    Responses stay as bytes: profile photos are binary and JSON documents are
    decoded by the store.
    """
    global _pool  # noqa: PLW0603
    _pool = redis.from_url(url, decode_responses=False, max_connections=20)
    return _pool


async def close_redis() -> None:
    global _pool  # noqa: PLW0603
    if _pool is not None:
        await _pool.aclose()
        _pool = None


def get_redis() -> redis.Redis:
    if _pool is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _pool
