"""Per-client API rate limiting."""

import time

import structlog
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings
from app.core.exceptions import error_body
from app.middleware.audit_logger import get_client_ip
from app.redis import RateLimiter, RateLimitResult, get_redis

logger = structlog.get_logger()

WINDOW_SECONDS = 60


def _limit_headers(result: RateLimitResult) -> dict[str, str]:
    headers = {
        "X-RateLimit-Limit": str(settings.rate_limit_per_minute),
        "X-RateLimit-Remaining": str(result.remaining),
    }
    if not result.allowed:
        headers["Retry-After"] = str(result.retry_after)
        headers["X-RateLimit-Reset"] = str(int(time.time()) + result.retry_after)
    return headers


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Limit each client IP to ``RATE_LIMIT_PER_MINUTE`` API requests.

    Health probes and the docs are never counted. Requests pass through
    unchecked when Redis is down or errors mid-check.
    """

    def __init__(self, app, exempt_prefixes: tuple[str, ...] | None = None):
        super().__init__(app)
        self.exempt_prefixes = exempt_prefixes or (
            f"{settings.api_prefix}/health",
            "/docs",
            "/redoc",
            "/openapi.json",
        )

    def is_exempt(self, path: str) -> bool:
        return not settings.rate_limit_enabled or path.startswith(self.exempt_prefixes)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if self.is_exempt(request.url.path):
            return await call_next(request)

        redis_client = await get_redis()
        if redis_client is None:
            return await call_next(request)

        client_ip = get_client_ip(request)
        try:
            result = await RateLimiter(redis_client).hit(
                f"api:{client_ip}", settings.rate_limit_per_minute, WINDOW_SECONDS
            )
        except RedisError as exc:
            logger.warning("rate_limit_check_failed", error=str(exc), client_ip=client_ip)
            return await call_next(request)

        if not result.allowed:
            logger.info("rate_limit_exceeded", client_ip=client_ip, path=request.url.path)
            return JSONResponse(
                status_code=429,
                content=error_body("RATE_LIMIT_EXCEEDED", "Too many requests. Please slow down."),
                headers=_limit_headers(result),
            )

        response = await call_next(request)
        response.headers.update(_limit_headers(result))
        return response
