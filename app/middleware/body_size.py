"""Reject request bodies over a size limit before they are read."""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.core.exceptions import error_body

DEFAULT_MAX_BODY_BYTES = 1024 * 1024


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Answer 413 ``REQUEST_TOO_LARGE`` when ``Content-Length`` exceeds ``max_bytes``."""

    def __init__(self, app, max_bytes: int = DEFAULT_MAX_BODY_BYTES):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        declared = request.headers.get("content-length", "")
        if not declared.isdigit() or int(declared) <= self.max_bytes:
            return await call_next(request)

        body = error_body(
            "REQUEST_TOO_LARGE",
            f"Request body too large. Maximum size is {self.max_bytes // 1024}KB.",
        )
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            body["error"]["request_id"] = request_id
        return JSONResponse(status_code=413, content=body)
