"""Issue API endpoints."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import CurrentAuth, DbSession
from app.core.exceptions import NotFoundError, ValidationError
from app.middleware.audit_logger import log_data_modification
from app.models.issue import Issue, IssuePriority, IssueSeverity, IssueStatus
from app.schemas.common import DataResponse, MessageResponse, PaginatedResponse
from app.schemas.issue import (
    IssueCreate,
    IssueFilters,
    IssueResponse,
    IssueStatusUpdate,
    IssueUpdate,
)
from app.schemas.user import UserSummary
from app.services.issue import IssueService
from app.services.user import UserService
from app.utils.export import export_filename, export_to_csv, export_to_json
from app.utils.sanitizer import clean_description

router = APIRouter()


def _issue_to_response(issue: Issue) -> IssueResponse:
    """Convert issue model to response schema."""
    return IssueResponse(
        id=issue.id,
        title=issue.title,
        description=issue.description,
        description_html=clean_description(issue.description),
        status=issue.status,
        priority=issue.priority,
        severity=issue.severity,
        created_by=UserSummary(
            id=issue.created_by,
            name=issue.creator.name,
            email=issue.creator.email,
        ),
        assigned_to=UserSummary(
            id=issue.assignee.id,
            name=issue.assignee.name,
            email=issue.assignee.email,
        ) if issue.assignee else None,
        created_at=issue.created_at,
        updated_at=issue.updated_at,
        resolved_at=issue.resolved_at,
    )


def issue_filters(
    status: Annotated[Optional[IssueStatus], Query()] = None,
    priority: Annotated[Optional[IssuePriority], Query()] = None,
    severity: Annotated[Optional[IssueSeverity], Query()] = None,
    search: Annotated[Optional[str], Query(max_length=100)] = None,
) -> IssueFilters:
    """Collect the filter query parameters shared by listing and export."""
    return IssueFilters(
        status=status,
        priority=priority,
        severity=severity,
        search=search,
    )


Filters = Annotated[IssueFilters, Depends(issue_filters)]
Page = Annotated[int, Query(ge=1)]
Limit = Annotated[int, Query(ge=1, le=100)]


async def _get_or_404(service: IssueService, issue_id: int) -> Issue:
    issue = await service.get_by_id(issue_id)
    if not issue:
        raise NotFoundError(resource="Issue")
    return issue


async def _ensure_assignee(db: AsyncSession, assignee_id: Optional[int]) -> None:
    """An assignee must be an enabled user."""
    if assignee_id is None:
        return
    if not await UserService(db).get_by_id(assignee_id):
        raise ValidationError(
            message="Assignee does not exist",
            details=[{"field": "assignedTo", "message": "No enabled user with this ID"}],
        )


# Static routes come before /{issue_id} so they are not captured as an ID


@router.get(
    "/stats/counts",
    response_model=DataResponse[dict[str, int]],
    summary="Issue counts by status",
    description="Number of issues in each status plus the overall total.",
)
async def get_status_counts(
    auth: CurrentAuth,
    db: DbSession,
) -> DataResponse[dict[str, int]]:
    """Get issue counts grouped by status."""
    counts = await IssueService(db).status_counts()
    return DataResponse(message="Status counts retrieved successfully", data=counts)


@router.get(
    "/export/csv",
    response_class=Response,
    summary="Export issues as CSV",
    description="Download every issue matching the filters as a CSV attachment.",
)
async def export_csv(
    auth: CurrentAuth,
    db: DbSession,
    filters: Filters,
) -> Response:
    """Export issues to CSV."""
    issues = await IssueService(db).list_for_export(filters)
    return Response(
        content=export_to_csv(issues),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename("csv")}"',
        },
    )


@router.get(
    "/export/json",
    summary="Export issues as JSON",
    description="Download every issue matching the filters as a JSON attachment.",
)
async def export_json(
    auth: CurrentAuth,
    db: DbSession,
    filters: Filters,
) -> JSONResponse:
    """Export issues to JSON."""
    issues = await IssueService(db).list_for_export(filters)
    return JSONResponse(
        content=export_to_json(issues),
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename("json")}"',
        },
    )


@router.get(
    "/my-issues",
    response_model=PaginatedResponse[IssueResponse],
    summary="List my issues",
    description="Issues created by the authenticated user, newest first.",
)
async def list_my_issues(
    auth: CurrentAuth,
    db: DbSession,
    filters: Filters,
    page: Page = 1,
    limit: Limit = 10,
) -> PaginatedResponse[IssueResponse]:
    """Get issues created by the authenticated user."""
    issues, total = await IssueService(db).list_issues(
        filters.model_copy(update={"created_by": auth.user_id}),
        page=page,
        limit=limit,
    )

    return PaginatedResponse.create(
        items=[_issue_to_response(i) for i in issues],
        total=total,
        page=page,
        limit=limit,
        message="Your issues retrieved successfully",
    )


@router.get(
    "",
    response_model=PaginatedResponse[IssueResponse],
    summary="List issues",
    description="Paginated list of issues with optional filters and sorting.",
)
async def list_issues(
    auth: CurrentAuth,
    db: DbSession,
    filters: Filters,
    page: Page = 1,
    limit: Limit = 10,
    sort_by: Annotated[Optional[str], Query(alias="sortBy")] = None,
    sort_order: Annotated[Optional[str], Query(alias="sortOrder")] = None,
) -> PaginatedResponse[IssueResponse]:
    """List issues with filters and pagination."""
    issues, total = await IssueService(db).list_issues(
        filters,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )

    return PaginatedResponse.create(
        items=[_issue_to_response(i) for i in issues],
        total=total,
        page=page,
        limit=limit,
        message="Issues retrieved successfully",
    )


@router.post(
    "",
    response_model=DataResponse[IssueResponse],
    status_code=201,
    summary="Create a new issue",
    description="Create an issue owned by the authenticated user.",
)
async def create_issue(
    data: IssueCreate,
    auth: CurrentAuth,
    db: DbSession,
) -> DataResponse[IssueResponse]:
    """Create a new issue."""
    await _ensure_assignee(db, data.assigned_to)

    service = IssueService(db)
    issue_id = await service.create(data, created_by=auth.user_id)
    issue = await _get_or_404(service, issue_id)

    log_data_modification(
        action="create",
        resource="issue",
        resource_id=issue_id,
        user_id=auth.user_id,
        changes=data.model_dump(),
    )

    return DataResponse(message="Issue created successfully", data=_issue_to_response(issue))


@router.get(
    "/{issue_id}",
    response_model=DataResponse[IssueResponse],
    summary="Get issue details",
    description="Get a single issue with its creator and assignee.",
)
async def get_issue(
    issue_id: int,
    auth: CurrentAuth,
    db: DbSession,
) -> DataResponse[IssueResponse]:
    """Get an issue by ID."""
    issue = await _get_or_404(IssueService(db), issue_id)
    return DataResponse(message="Issue retrieved successfully", data=_issue_to_response(issue))


@router.put(
    "/{issue_id}",
    response_model=DataResponse[IssueResponse],
    summary="Update an issue",
    description="Update any subset of the issue's fields.",
)
async def update_issue(
    issue_id: int,
    data: IssueUpdate,
    auth: CurrentAuth,
    db: DbSession,
) -> DataResponse[IssueResponse]:
    """Update an issue."""
    service = IssueService(db)
    await _get_or_404(service, issue_id)

    changes = data.model_dump(exclude_unset=True)
    if "assigned_to" in changes:
        await _ensure_assignee(db, changes["assigned_to"])

    if await service.update(issue_id, changes):
        log_data_modification(
            action="update",
            resource="issue",
            resource_id=issue_id,
            user_id=auth.user_id,
            changes=changes,
        )

    issue = await _get_or_404(service, issue_id)
    return DataResponse(message="Issue updated successfully", data=_issue_to_response(issue))


@router.patch(
    "/{issue_id}/status",
    response_model=DataResponse[IssueResponse],
    summary="Update issue status",
    description="Change only the status. Resolved and Closed stamp the resolution time.",
)
async def update_issue_status(
    issue_id: int,
    data: IssueStatusUpdate,
    auth: CurrentAuth,
    db: DbSession,
) -> DataResponse[IssueResponse]:
    """Update issue status only."""
    service = IssueService(db)
    await _get_or_404(service, issue_id)

    await service.update_status(issue_id, data.status)
    log_data_modification(
        action="update_status",
        resource="issue",
        resource_id=issue_id,
        user_id=auth.user_id,
        changes={"status": data.status},
    )

    issue = await _get_or_404(service, issue_id)
    return DataResponse(
        message=f'Issue status updated to "{data.status.value}"',
        data=_issue_to_response(issue),
    )


@router.delete(
    "/{issue_id}",
    response_model=MessageResponse,
    summary="Delete an issue",
    description="Permanently delete an issue.",
)
async def delete_issue(
    issue_id: int,
    auth: CurrentAuth,
    db: DbSession,
) -> MessageResponse:
    """Delete an issue."""
    service = IssueService(db)
    await _get_or_404(service, issue_id)

    await service.delete(issue_id)
    log_data_modification(
        action="delete",
        resource="issue",
        resource_id=issue_id,
        user_id=auth.user_id,
    )

    return MessageResponse(message="Issue deleted successfully")
