"""
Per-route rate limiting

Fixed-window counters kept in Redis, keyed by client address and route path.
"""

from fastapi import Depends, Request
from redis.asyncio import Redis

from testbook.core.config import settings
from testbook.core.errors import RateLimitError
from testbook.core.logging import get_logger
from testbook.infra.redis import get_redis

logger = get_logger(__name__)


def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


class RateLimiter:
    """
    FastAPI dependency allowing `requests` calls per `window_seconds`
    for each client on the route it is attached to.
    """

    def __init__(self, requests: int, window_seconds: int):
        self.requests = requests
        self.window_seconds = window_seconds

    async def hit(self, redis: Redis, key: str) -> None:
        count = await redis.incr(key)
        if count == 1:
            await redis.expire(key, self.window_seconds)

        if count > self.requests:
            retry_after = await redis.ttl(key)
            if retry_after is None or retry_after < 0:
                retry_after = self.window_seconds
            logger.warning("Rate limit exceeded", key=key, count=count)
            raise RateLimitError(
                f"Rate limit exceeded. Try again in {retry_after} seconds.",
                details={"retry_after": retry_after},
            )

    async def __call__(self, request: Request, redis: Redis = Depends(get_redis)) -> None:
        if not settings.rate_limit_enabled:
            return
        key = f"ratelimit:{client_address(request)}:{request.url.path}"
        await self.hit(redis, key)
