"""Per-request timeout middleware."""

import asyncio

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.core.exceptions import RequestTimeoutError

logger = structlog.get_logger()


class RequestTimeoutMiddleware(BaseHTTPMiddleware):
    """Abort requests that run longer than ``timeout_seconds`` with a 504."""

    def __init__(self, app, timeout_seconds: float):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            request_id = getattr(request.state, "request_id", None)
            logger.error(
                "request_timeout",
                method=request.method,
                path=request.url.path,
                timeout_seconds=self.timeout_seconds,
                request_id=request_id,
            )
            exc = RequestTimeoutError()
            if request_id:
                exc.detail["error"]["request_id"] = request_id
            return JSONResponse(status_code=exc.status_code, content=exc.detail)
