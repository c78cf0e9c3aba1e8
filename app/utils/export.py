"""CSV and JSON rendering for issue exports."""

import csv
import io
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from app.models.issue import Issue

CSV_COLUMNS = [
    "ID",
    "Title",
    "Description",
    "Status",
    "Priority",
    "Severity",
    "Created By",
    "Assigned To",
    "Created At",
    "Updated At",
    "Resolved At",
]


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def issue_to_export_row(issue: Issue) -> dict[str, Any]:
    """Flatten an issue into the export record shared by both formats."""
    return {
        "id": issue.id,
        "title": issue.title,
        "description": issue.description,
        "status": issue.status.value,
        "priority": issue.priority.value,
        "severity": issue.severity.value,
        "createdBy": issue.creator.name if issue.creator else None,
        "assignedTo": issue.assignee.name if issue.assignee else None,
        "createdAt": _iso(issue.created_at),
        "updatedAt": _iso(issue.updated_at),
        "resolvedAt": _iso(issue.resolved_at),
    }


def export_to_csv(issues: Iterable[Issue]) -> str:
    """
    Render issues as CSV with a header row.

    Fields containing the delimiter, quotes or line breaks are quoted and
    embedded quotes doubled, as RFC 4180 requires. No issues yields the
    header row alone.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
    writer.writerow(CSV_COLUMNS)

    for issue in issues:
        row = issue_to_export_row(issue)
        writer.writerow(["" if value is None else value for value in row.values()])

    return buffer.getvalue()


def export_to_json(issues: Iterable[Issue]) -> dict[str, Any]:
    """Render issues as a JSON-ready document."""
    rows = [issue_to_export_row(issue) for issue in issues]
    return {
        "exportedAt": datetime.now(timezone.utc).isoformat(),
        "totalIssues": len(rows),
        "issues": rows,
    }


def export_filename(extension: str, now: Optional[datetime] = None) -> str:
    """Build a download filename such as ``issues_export_20240201_120000.csv``."""
    now = now or datetime.now(timezone.utc)
    return f"issues_export_{now.strftime('%Y%m%d_%H%M%S')}.{extension}"
