"""Tests for database models."""

import pytest
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.issue import (
    RESOLVED_STATUSES,
    Issue,
    IssuePriority,
    IssueSeverity,
    IssueStatus,
)
from app.models.user import User
from tests.conftest import make_user


class TestIssueEnums:
    """Tests for issue enumerations."""

    def test_issue_status_values(self):
        """Status values are the display strings stored in the database."""
        assert [s.value for s in IssueStatus] == ["Open", "In Progress", "Resolved", "Closed"]

    def test_issue_priority_values(self):
        assert [p.value for p in IssuePriority] == ["Low", "Medium", "High", "Critical"]

    def test_issue_severity_values(self):
        assert [s.value for s in IssueSeverity] == ["Minor", "Major", "Critical"]

    def test_resolved_statuses(self):
        assert RESOLVED_STATUSES == {IssueStatus.RESOLVED, IssueStatus.CLOSED}


class TestIssueDefaults:
    """Tests for column defaults."""

    @pytest.mark.asyncio
    async def test_defaults_applied(self, db_session: AsyncSession, test_user: User):
        """Only title and creator are required."""
        issue = Issue(title="Bare", created_by=test_user.id)
        db_session.add(issue)
        await db_session.commit()
        await db_session.refresh(issue)

        assert issue.status == IssueStatus.OPEN
        assert issue.priority == IssuePriority.MEDIUM
        assert issue.severity == IssueSeverity.MINOR
        assert issue.description is None
        assert issue.resolved_at is None
        assert issue.created_at is not None
        assert issue.updated_at is not None

    @pytest.mark.asyncio
    async def test_user_enabled_by_default(self, db_session: AsyncSession):
        user = User(name="New", email="new@example.com", password_hash="x")
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)

        assert user.is_enabled is True


class TestReferentialIntegrity:
    """Tests for foreign key behaviour on user deletion."""

    @pytest.mark.asyncio
    async def test_creator_cannot_be_deleted(
        self, db_session: AsyncSession, test_issue: Issue, test_user: User
    ):
        """A user who created issues cannot be hard-deleted."""
        with pytest.raises(IntegrityError):
            await db_session.execute(delete(User).where(User.id == test_user.id))

    @pytest.mark.asyncio
    async def test_assignee_deletion_unassigns(
        self, db_session: AsyncSession, test_user: User
    ):
        """Deleting an assignee leaves the issue unassigned."""
        assignee = await make_user(db_session, "Temp", "temp@example.com")
        issue = Issue(title="Assigned", created_by=test_user.id, assigned_to=assignee.id)
        db_session.add(issue)
        await db_session.commit()

        await db_session.execute(delete(User).where(User.id == assignee.id))
        await db_session.commit()

        result = await db_session.execute(
            select(Issue.assigned_to).where(Issue.id == issue.id)
        )
        assert result.scalar_one() is None

    @pytest.mark.asyncio
    async def test_email_unique(self, db_session: AsyncSession, test_user: User):
        """Two accounts cannot share an email."""
        db_session.add(User(name="Dup", email=test_user.email, password_hash="x"))

        with pytest.raises(IntegrityError):
            await db_session.commit()
