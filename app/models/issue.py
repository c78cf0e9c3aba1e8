"""Issue model definition."""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.user import User


class IssueStatus(str, enum.Enum):
    """Issue status enumeration."""

    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


class IssuePriority(str, enum.Enum):
    """Issue priority enumeration."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class IssueSeverity(str, enum.Enum):
    """Issue severity enumeration."""

    MINOR = "Minor"
    MAJOR = "Major"
    CRITICAL = "Critical"


# Statuses that stamp resolved_at
RESOLVED_STATUSES: frozenset[IssueStatus] = frozenset(
    {IssueStatus.RESOLVED, IssueStatus.CLOSED}
)


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [e.value for e in enum_cls]


class Issue(Base):
    """Issue model for tracking work items."""

    __tablename__ = "issues"

    # Primary key
    id: Mapped[int] = mapped_column(
        "issue_id",
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    # Basic fields
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    # Status, priority and severity
    status: Mapped[IssueStatus] = mapped_column(
        Enum(IssueStatus, name="issue_status", values_callable=_enum_values),
        nullable=False,
        default=IssueStatus.OPEN,
        index=True,
    )
    priority: Mapped[IssuePriority] = mapped_column(
        Enum(IssuePriority, name="issue_priority", values_callable=_enum_values),
        nullable=False,
        default=IssuePriority.MEDIUM,
        index=True,
    )
    severity: Mapped[IssueSeverity] = mapped_column(
        Enum(IssueSeverity, name="issue_severity", values_callable=_enum_values),
        nullable=False,
        default=IssueSeverity.MINOR,
        index=True,
    )

    # Creator reference (restrict on delete - prevents user deletion if they created issues)
    created_by: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # Assignee reference (set null on delete)
    assigned_to: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    creator: Mapped[User] = relationship(
        User,
        lazy="joined",
        foreign_keys=[created_by],
    )
    assignee: Mapped[Optional[User]] = relationship(
        User,
        lazy="joined",
        foreign_keys=[assigned_to],
    )

    def __repr__(self) -> str:
        return f"<Issue(id={self.id}, title={self.title}, status={self.status})>"
