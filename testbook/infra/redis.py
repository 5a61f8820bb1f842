"""
Redis infrastructure

Connection pool lifecycle for the async Redis client.
"""

from typing import Optional

from redis.asyncio import Redis

from testbook.core.config import settings
from testbook.core.logging import get_logger

logger = get_logger(__name__)

_redis: Optional[Redis] = None


async def init_redis_pool() -> None:
    global _redis
    _redis = Redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
    logger.info("Redis pool initialized", url=settings.redis_url)


async def close_redis_pool() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None
        logger.info("Redis pool closed")


async def get_redis() -> Redis:
    """Return the shared client, creating it lazily outside the app lifespan"""
    if _redis is None:
        await init_redis_pool()
    return _redis
