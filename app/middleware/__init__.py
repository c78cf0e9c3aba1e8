"""Middleware components for the application."""

from app.middleware.audit_logger import AuditLogMiddleware
from app.middleware.body_size import BodySizeLimitMiddleware
from app.middleware.rate_limiter import RateLimitMiddleware
from app.middleware.request_id import RequestIDMiddleware
from app.middleware.security_headers import SecurityHeadersMiddleware
from app.middleware.timeout import RequestTimeoutMiddleware

__all__ = [
    "AuditLogMiddleware",
    "BodySizeLimitMiddleware",
    "RateLimitMiddleware",
    "RequestIDMiddleware",
    "RequestTimeoutMiddleware",
    "SecurityHeadersMiddleware",
]
