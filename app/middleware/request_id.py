"""Correlation IDs for requests, responses and log lines."""

import re
from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Upstream IDs are echoed into logs and headers, so only plain tokens are trusted
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def resolve_request_id(incoming: str | None) -> str:
    if incoming and _SAFE_REQUEST_ID.match(incoming):
        return incoming
    return uuid4().hex


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with an ID.

    A well-formed ``X-Request-ID`` from the client or a proxy is kept,
    otherwise a fresh one is generated. The ID is stored on
    ``request.state``, bound into the structlog context for the duration
    of the request and returned in the response header.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
