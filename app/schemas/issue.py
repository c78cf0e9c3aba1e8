"""Issue schemas for request/response validation."""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from app.models.issue import IssuePriority, IssueSeverity, IssueStatus
from app.schemas.common import BaseSchema
from app.schemas.user import UserSummary


class IssueCreate(BaseSchema):
    """Schema for creating a new issue.

    The creator is never accepted from the client; it is always the
    authenticated caller.
    """

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Issue title",
    )
    description: Optional[str] = Field(
        default=None,
        max_length=5000,
        description="Issue description (markdown supported, max 5000 chars)",
    )
    status: IssueStatus = Field(default=IssueStatus.OPEN)
    priority: IssuePriority = Field(default=IssuePriority.MEDIUM)
    severity: IssueSeverity = Field(default=IssueSeverity.MINOR)
    assigned_to: Optional[int] = Field(
        default=None,
        ge=1,
        description="Assignee user ID (optional)",
    )


class IssueUpdate(BaseSchema):
    """Schema for updating an issue.

    Only fields present in the request body are written. ``description``
    and ``assignedTo`` may be sent as null to clear them.
    """

    title: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=255,
    )
    description: Optional[str] = Field(
        default=None,
        max_length=5000,
    )
    status: Optional[IssueStatus] = None
    priority: Optional[IssuePriority] = None
    severity: Optional[IssueSeverity] = None
    assigned_to: Optional[int] = Field(default=None, ge=1)

    @field_validator("title", "status", "priority", "severity")
    @classmethod
    def reject_null(cls, v):
        """These columns are NOT NULL; an explicit null is a client error."""
        if v is None:
            raise ValueError("Field may not be null")
        return v


class IssueStatusUpdate(BaseSchema):
    """Schema for the status-only update."""

    status: IssueStatus


class IssueResponse(BaseSchema):
    """Schema for issue response.

    ``description`` is returned exactly as stored. ``descriptionHtml`` is
    the same text made safe to embed in a page.
    """

    id: int
    title: str
    description: Optional[str]
    description_html: Optional[str] = None
    status: IssueStatus
    priority: IssuePriority
    severity: IssueSeverity
    created_by: UserSummary
    assigned_to: Optional[UserSummary]
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime]


class IssueFilters(BaseSchema):
    """Optional filters shared by listing and export; all combine with AND."""

    status: Optional[IssueStatus] = None
    priority: Optional[IssuePriority] = None
    severity: Optional[IssueSeverity] = None
    created_by: Optional[int] = None
    search: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Case-insensitive match on title or description",
    )

    @field_validator("search")
    @classmethod
    def normalize_search(cls, v: Optional[str]) -> Optional[str]:
        """Treat a blank search term as no filter."""
        if v is None:
            return None
        v = v.strip()
        return v or None
