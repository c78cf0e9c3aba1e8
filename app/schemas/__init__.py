"""Pydantic schemas for request/response validation."""

from app.schemas.auth import (
    AuthContext,
    AuthPayload,
    LoginRequest,
    PasswordChangeRequest,
    RegisterRequest,
)
from app.schemas.common import (
    DataResponse,
    ErrorResponse,
    MessageResponse,
    PaginatedResponse,
    PaginationMeta,
)
from app.schemas.issue import (
    IssueCreate,
    IssueFilters,
    IssueResponse,
    IssueStatusUpdate,
    IssueUpdate,
)
from app.schemas.user import (
    UserResponse,
    UserSummary,
    UserUpdate,
)

__all__ = [
    # Auth
    "AuthContext",
    "AuthPayload",
    "LoginRequest",
    "PasswordChangeRequest",
    "RegisterRequest",
    # User
    "UserResponse",
    "UserSummary",
    "UserUpdate",
    # Issue
    "IssueCreate",
    "IssueFilters",
    "IssueResponse",
    "IssueStatusUpdate",
    "IssueUpdate",
    # Common
    "DataResponse",
    "ErrorResponse",
    "MessageResponse",
    "PaginatedResponse",
    "PaginationMeta",
]
