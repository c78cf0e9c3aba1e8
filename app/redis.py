"""Redis client and the sliding-window rate limiter built on it.

Redis backs rate limiting only, so the API keeps serving when it is down:
``get_redis`` returns ``None`` and callers skip their checks.
"""

import time
from typing import NamedTuple, Optional

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

from app.config import settings

logger = structlog.get_logger()

# Seconds to wait before trying an unreachable server again
RECONNECT_BACKOFF_SECONDS = 30.0

redis_client: Optional[redis.Redis] = None
_unavailable_until = 0.0


async def init_redis() -> redis.Redis:
    """Connect and ping; raises if the server is unreachable."""
    global redis_client

    client = redis.from_url(
        settings.redis_url,
        password=settings.redis_password or None,
        decode_responses=True,
        max_connections=50,
        socket_connect_timeout=2,
        socket_timeout=2,
    )
    try:
        await client.ping()
    except (RedisError, OSError):
        await client.aclose()
        raise

    redis_client = client
    return redis_client


async def get_redis() -> Optional[redis.Redis]:
    """
    Get Redis client dependency.

    Returns None while Redis is unreachable. After a failed connect no
    further attempt is made for ``RECONNECT_BACKOFF_SECONDS``.
    """
    global _unavailable_until

    if redis_client is not None:
        return redis_client
    if time.monotonic() < _unavailable_until:
        return None

    try:
        return await init_redis()
    except (RedisError, OSError) as exc:
        _unavailable_until = time.monotonic() + RECONNECT_BACKOFF_SECONDS
        logger.warning("redis_unavailable", error=str(exc))
        return None


async def close_redis() -> None:
    """Close the client and its connection pool."""
    global redis_client

    if redis_client is not None:
        await redis_client.aclose()
    redis_client = None


class RateLimitResult(NamedTuple):
    allowed: bool
    remaining: int
    retry_after: int


class RateLimiter:
    """Redis-based sliding window rate limiter.

    Each hit is a sorted-set member scored by its timestamp; hits older
    than the window are trimmed before counting.
    """

    PREFIX = "rate_limit:"

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    async def hit(
        self, key: str, max_requests: int, window_seconds: int = 60
    ) -> RateLimitResult:
        """Record a request under ``key`` and report whether it is allowed."""
        rate_key = f"{self.PREFIX}{key}"
        seconds, microseconds = await self.redis.time()
        window_start = seconds - window_seconds

        pipe = self.redis.pipeline()
        pipe.zremrangebyscore(rate_key, 0, window_start)
        pipe.zcard(rate_key)
        pipe.zadd(rate_key, {f"{seconds}.{microseconds}": seconds})
        pipe.expire(rate_key, window_seconds)
        _, current_count, _, _ = await pipe.execute()

        if current_count < max_requests:
            return RateLimitResult(True, max_requests - current_count - 1, 0)

        oldest = await self.redis.zrange(rate_key, 0, 0, withscores=True)
        if not oldest:
            return RateLimitResult(False, 0, window_seconds)
        retry_after = int(oldest[0][1]) + window_seconds - seconds
        return RateLimitResult(False, 0, max(retry_after, 1))

    async def reset(self, key: str) -> None:
        """Forget every recorded hit for ``key``."""
        await self.redis.delete(f"{self.PREFIX}{key}")
