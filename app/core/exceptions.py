"""API errors and the failure envelope they render to.

Every error leaves the API as::

    {"success": false, "message": ..., "error": {"code": ..., "message": ...}}

with an optional ``details`` list of ``{"field", "message"}`` entries.
"""

from typing import Any, Optional

from fastapi import HTTPException, status

FieldErrors = list[dict[str, Any]]


def error_body(code: str, message: str, details: Optional[FieldErrors] = None) -> dict[str, Any]:
    """Build the failure envelope."""
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"success": False, "message": message, "error": error}


class APIException(HTTPException):
    """
    Base class for errors raised on purpose by the API.

    Subclasses set the HTTP status and their default code and message;
    callers override ``code`` and ``message`` to be more specific.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_code = "BAD_REQUEST"
    default_message = "Bad request"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[FieldErrors] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        self.code = code or self.default_code
        self.error_message = message or self.default_message
        self.details = details
        super().__init__(
            status_code=type(self).status_code,
            detail=error_body(self.code, self.error_message, details),
            headers=headers,
        )


class UnauthorizedError(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHORIZED"
    default_message = "Authentication failed"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None, details=None):
        super().__init__(message, code, details, headers={"WWW-Authenticate": "Bearer"})


class NotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"

    def __init__(
        self,
        resource: str = "Resource",
        message: Optional[str] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message or f"{resource} not found", code)


class ValidationError(APIException):
    """Input that parsed but breaks a rule only the database can check."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class ConflictError(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_code = "CONFLICT_ERROR"
    default_message = "Resource conflict"


class RateLimitError(APIException):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_code = "RATE_LIMIT_EXCEEDED"
    default_message = "Too many requests"

    def __init__(
        self,
        message: Optional[str] = None,
        retry_after: int = 60,
        code: Optional[str] = None,
    ):
        super().__init__(message, code, headers={"Retry-After": str(retry_after)})


class InternalError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"


class RequestTimeoutError(APIException):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    default_code = "REQUEST_TIMEOUT"
    default_message = "Request timed out"
