"""Service layer for business logic."""

from app.services.auth import AuthService
from app.services.issue import IssueService
from app.services.user import UserService

__all__ = [
    "AuthService",
    "UserService",
    "IssueService",
]
