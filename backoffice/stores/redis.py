"""Redis store for distributed locks.

Handles:
- Per-day warranty code locks (serialize count-then-insert across workers)

TTL policies:
- Warranty code locks: configurable, 10 seconds by default
"""

import logging

import redis.asyncio as redis
from redis.asyncio.lock import Lock

from backoffice.settings import get_settings

# TTL constants (in seconds)
TTL_DEFAULT_LOCK = 10

# Key prefixes
PREFIX_LOCK = "lock:"

# Redis client (initialized on startup)
_redis: redis.Redis | None = None
logger = logging.getLogger("uvicorn.error")


async def init_redis() -> None:
    """Initialize Redis connection."""
    global _redis
    settings = get_settings()
    _redis = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    # Validate connectivity early (especially for `rediss://` in production).
    await _redis.ping()
    logger.info("Redis connected")


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def _get_redis() -> redis.Redis:
    """Get Redis client instance."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


# ============================================================
# Distributed locks
# ============================================================


def get_lock(key: str, *, ttl: int = TTL_DEFAULT_LOCK, wait: float | None = None) -> Lock:
    """Build a distributed lock (not yet acquired).

    The lock holds a per-owner token, so `release()` only deletes the key if
    this owner still holds it; after the TTL has passed and someone else took
    it, release raises LockNotOwnedError instead.

    Args:
        key: Lock key (e.g., warranty_code:20261019).
        ttl: Lock timeout in seconds.
        wait: Seconds `acquire()` blocks before giving up (None = forever).

    Raises:
        RuntimeError: If Redis is not initialized.
    """
    return _get_redis().lock(f"{PREFIX_LOCK}{key}", timeout=ttl, blocking_timeout=wait)
