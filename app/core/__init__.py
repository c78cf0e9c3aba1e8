"""Errors, logging setup, password hashing and access tokens."""

from app.core.exceptions import (
    APIException,
    ConflictError,
    InternalError,
    NotFoundError,
    RateLimitError,
    RequestTimeoutError,
    UnauthorizedError,
    ValidationError,
    error_body,
)
from app.core.logging import configure_logging
from app.core.security import (
    create_access_token,
    decode_token_unverified,
    hash_password,
    verify_password,
    verify_token,
)

__all__ = [
    "APIException",
    "ConflictError",
    "InternalError",
    "NotFoundError",
    "RateLimitError",
    "RequestTimeoutError",
    "UnauthorizedError",
    "ValidationError",
    "error_body",
    "configure_logging",
    "create_access_token",
    "decode_token_unverified",
    "hash_password",
    "verify_password",
    "verify_token",
]
