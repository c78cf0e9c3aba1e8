"""Request audit log and the auth / data-change event helpers."""

import time
from typing import Any, Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.config import settings

logger = structlog.get_logger("audit")

MASK = "***"

# Keys compared case-insensitively, with camelCase spellings folded in
SENSITIVE_KEYS = frozenset({
    "password",
    "passwordhash",
    "password_hash",
    "currentpassword",
    "current_password",
    "newpassword",
    "new_password",
    "token",
    "accesstoken",
    "access_token",
    "authorization",
    "secret",
})


def get_client_ip(request: Request) -> str:
    """
    Address of the connected peer.

    ``X-Forwarded-For`` is not read here: uvicorn rewrites the peer from it
    only for proxies listed in ``FORWARDED_ALLOW_IPS``, so a client cannot
    pick its own address to dodge the rate limits.
    """
    return request.client.host if request.client else "unknown"


def mask_sensitive(data: dict[str, Any]) -> dict[str, Any]:
    """Copy ``data`` with secrets replaced, descending into nested dicts."""
    return {
        key: MASK if key.lower() in SENSITIVE_KEYS
        else mask_sensitive(value) if isinstance(value, dict)
        else value
        for key, value in data.items()
    }


class AuditLogMiddleware(BaseHTTPMiddleware):
    """
    One ``request_completed`` line per request.

    The line carries method, path, masked query, client, status, duration
    and the authenticated user id if the route resolved one. Health
    probes are skipped. Level follows the status class: error for 5xx,
    warning for 4xx, info otherwise.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path.startswith(f"{settings.api_prefix}/health"):
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        if response.status_code >= 500:
            emit = logger.error
        elif response.status_code >= 400:
            emit = logger.warning
        else:
            emit = logger.info

        emit(
            "request_completed",
            method=request.method,
            path=path,
            query=mask_sensitive(dict(request.query_params)),
            client_ip=get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
            status_code=response.status_code,
            duration_ms=elapsed_ms,
            user_id=getattr(request.state, "user_id", None),
        )
        return response


def log_auth_event(
    event: str,
    user_id: Optional[int] = None,
    email: Optional[str] = None,
    success: bool = True,
    reason: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> None:
    """
    Record an authentication event.

    ``event`` is one of register, login, password_change or disable.
    Failed attempts keep only the first two characters of the email so
    the log cannot be used to enumerate accounts.
    """
    if success:
        logger.info(
            "auth_event",
            action=event,
            success=True,
            user_id=user_id,
            email=email,
            ip_address=ip_address,
        )
        return

    logger.warning(
        "auth_event",
        action=event,
        success=False,
        reason=reason,
        email_prefix=f"{email[:2]}***" if email else None,
        ip_address=ip_address,
    )


def log_data_modification(
    action: str,
    resource: str,
    resource_id: int,
    user_id: int,
    changes: Optional[dict[str, Any]] = None,
) -> None:
    """Record a create / update / delete of ``resource`` by ``user_id``."""
    fields: dict[str, Any] = {}
    if changes:
        # Enum members are logged by value
        fields["changes"] = mask_sensitive(
            {key: getattr(value, "value", value) for key, value in changes.items()}
        )
    logger.info(
        "data_modified",
        action=action,
        resource=resource,
        resource_id=resource_id,
        user_id=user_id,
        **fields,
    )
