"""Issue service for issue management operations."""

from typing import Any, Optional

from sqlalchemy import Select, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.issue import Issue, IssueStatus, RESOLVED_STATUSES
from app.schemas.issue import IssueCreate, IssueFilters

# Columns a client may sort by; anything else falls back to created_at
SORT_COLUMNS = {
    "created_at": Issue.created_at,
    "updated_at": Issue.updated_at,
    "title": Issue.title,
    "priority": Issue.priority,
    "status": Issue.status,
    "severity": Issue.severity,
}
DEFAULT_SORT = "created_at"


def _escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def apply_filters(query: Select, filters: IssueFilters) -> Select:
    """
    Add the WHERE clauses for the given filters to a query.

    Every value is bound as a parameter; the same predicate is used for
    the page query and its count query.
    """
    if filters.status is not None:
        query = query.where(Issue.status == filters.status)

    if filters.priority is not None:
        query = query.where(Issue.priority == filters.priority)

    if filters.severity is not None:
        query = query.where(Issue.severity == filters.severity)

    if filters.created_by is not None:
        query = query.where(Issue.created_by == filters.created_by)

    if filters.search:
        pattern = f"%{_escape_like(filters.search)}%"
        query = query.where(
            or_(
                Issue.title.ilike(pattern, escape="\\"),
                Issue.description.ilike(pattern, escape="\\"),
            )
        )

    return query


def resolve_sort(sort_by: Optional[str], sort_order: Optional[str]):
    """Map client sort parameters onto an allow-listed ORDER BY clause."""
    column = SORT_COLUMNS.get(sort_by or DEFAULT_SORT, SORT_COLUMNS[DEFAULT_SORT])
    if (sort_order or "").lower() == "asc":
        return column.asc()
    return column.desc()


class IssueService:
    """Service for issue operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, issue_id: int) -> Optional[Issue]:
        """Get issue by ID with creator and assignee loaded."""
        result = await self.db.execute(
            select(Issue)
            .where(Issue.id == issue_id)
            .execution_options(populate_existing=True)
        )
        return result.unique().scalar_one_or_none()

    async def list_issues(
        self,
        filters: IssueFilters,
        page: int = 1,
        limit: int = 10,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> tuple[list[Issue], int]:
        """
        List issues with filters, sorting and pagination.

        Returns:
            Tuple of (issues on the page, total matching the filters)
        """
        count_query = apply_filters(select(func.count(Issue.id)), filters)
        count_result = await self.db.execute(count_query)
        total = count_result.scalar() or 0

        query = (
            apply_filters(select(Issue), filters)
            .order_by(resolve_sort(sort_by, sort_order), Issue.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        issues = list(result.unique().scalars().all())

        return issues, total

    async def list_for_export(self, filters: IssueFilters) -> list[Issue]:
        """All issues matching the filters, newest first, unpaginated."""
        query = (
            apply_filters(select(Issue), filters)
            .order_by(Issue.created_at.desc(), Issue.id.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return list(result.unique().scalars().all())

    async def create(self, data: IssueCreate, created_by: int) -> int:
        """
        Create a new issue.

        Args:
            data: Issue creation data
            created_by: ID of the authenticated caller

        Returns:
            ID of the created issue
        """
        issue = Issue(
            title=data.title,
            description=data.description,
            status=data.status,
            priority=data.priority,
            severity=data.severity,
            created_by=created_by,
            assigned_to=data.assigned_to,
        )
        if data.status in RESOLVED_STATUSES:
            issue.resolved_at = func.now()

        self.db.add(issue)
        await self.db.flush()

        return issue.id

    async def update(self, issue_id: int, changes: dict[str, Any]) -> int:
        """
        Apply a partial update.

        Only keys present in ``changes`` are written. A status of Resolved or
        Closed stamps ``resolved_at``; any other status clears it.

        Returns:
            Number of rows affected (0 when there is nothing to change)
        """
        allowed = {"title", "description", "status", "priority", "severity", "assigned_to"}
        values = {k: v for k, v in changes.items() if k in allowed}
        if not values:
            return 0

        if "status" in values:
            values["resolved_at"] = (
                func.now() if values["status"] in RESOLVED_STATUSES else None
            )
        values["updated_at"] = func.now()

        return await self._execute_update(issue_id, values)

    async def update_status(self, issue_id: int, status: IssueStatus) -> int:
        """Set only the status, stamping or clearing ``resolved_at``."""
        return await self._execute_update(
            issue_id,
            {
                "status": status,
                "resolved_at": func.now() if status in RESOLVED_STATUSES else None,
                "updated_at": func.now(),
            },
        )

    async def delete(self, issue_id: int) -> int:
        """Hard-delete an issue."""
        result = await self.db.execute(
            delete(Issue)
            .where(Issue.id == issue_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def status_counts(self) -> dict[str, int]:
        """Count issues per status; every status is present, plus a total."""
        result = await self.db.execute(
            select(Issue.status, func.count(Issue.id)).group_by(Issue.status)
        )

        counts = {s.value: 0 for s in IssueStatus}
        counts["total"] = 0
        for status, count in result.all():
            counts[IssueStatus(status).value] = count
            counts["total"] += count

        return counts

    async def _execute_update(self, issue_id: int, values: dict[str, Any]) -> int:
        result = await self.db.execute(
            update(Issue)
            .where(Issue.id == issue_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
