"""Redis client for queue bookkeeping and invalidation messages."""

import logging
from functools import lru_cache

import redis

from jw_preload.core.config import settings

logger = logging.getLogger(__name__)

# Key prefix for "a preload for this media ID is already queued" markers
PENDING_PRELOAD_PREFIX = "jw_preload:pending:"


@lru_cache
def get_redis_pool() -> redis.ConnectionPool:
    """Shared connection pool, created on first use."""
    return redis.ConnectionPool.from_url(
        str(settings.redis_url),
        decode_responses=True,
        max_connections=50,
    )


def get_sync_redis() -> redis.Redis:
    """Get a Redis client from the shared connection pool."""
    return redis.Redis(connection_pool=get_redis_pool())


def close_redis_pool() -> None:
    """Close the Redis connection pool on shutdown."""
    if get_redis_pool.cache_info().currsize:
        get_redis_pool().disconnect()
        get_redis_pool.cache_clear()


def pending_preload_key(media_id: str) -> str:
    """Redis key marking a queued preload for ``media_id``."""
    return f"{PENDING_PRELOAD_PREFIX}{media_id}"
