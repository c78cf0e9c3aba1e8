"""SQLAlchemy models for the Issue Tracker."""

from app.models.issue import Issue, IssuePriority, IssueSeverity, IssueStatus
from app.models.user import User

__all__ = [
    "User",
    "Issue",
    "IssueStatus",
    "IssuePriority",
    "IssueSeverity",
]
