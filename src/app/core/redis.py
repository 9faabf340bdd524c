"""Redis connection pool for the meeting store.

The pool is created lazily from REDIS_URL. When REDIS_URL is empty the store
is treated as unconfigured and ``get_redis_pool()`` returns None; callers
decide how to degrade (reads become "absent", writes fail).

Connection-level retry/backoff lives here on the client, not in the
application code that issues commands.
"""

from __future__ import annotations

import redis.asyncio as aioredis
import structlog
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError, TimeoutError

from src.app.config import Settings, get_settings

logger = structlog.get_logger(__name__)

# ── Module-level Redis pool (lazy init) ─────────────────────────────────────

_redis_pool: aioredis.Redis | None = None


def build_retry(settings: Settings) -> Retry:
    """Exponential backoff capped at REDIS_RETRY_CAP_SECONDS."""
    backoff = ExponentialBackoff(
        cap=settings.REDIS_RETRY_CAP_SECONDS,
        base=settings.REDIS_RETRY_BASE_SECONDS,
    )
    return Retry(backoff, settings.REDIS_MAX_RETRIES)


def get_redis_pool() -> aioredis.Redis | None:
    """Get or create the Redis connection pool singleton.

    Returns None if REDIS_URL is not set.
    """
    global _redis_pool
    if _redis_pool is None:
        settings = get_settings()
        if not settings.redis_configured:
            logger.warning("redis.not_configured")
            return None
        _redis_pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            retry=build_retry(settings),
            retry_on_error=[ConnectionError, TimeoutError],
        )
        logger.info("redis.pool_created")
    return _redis_pool


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _redis_pool
    if _redis_pool:
        await _redis_pool.aclose()
        _redis_pool = None
