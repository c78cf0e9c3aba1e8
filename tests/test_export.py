"""Tests for issue export endpoints."""

import csv
import io

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.issue import Issue, IssueStatus
from app.models.user import User
from app.utils.export import CSV_COLUMNS
from tests.conftest import auth_header


class TestExportCsv:
    """Tests for CSV export."""

    @pytest.mark.asyncio
    async def test_export_csv_empty(
        self, client: AsyncClient, test_user: User, user_token: str
    ):
        """No matching issues still yields a header-only CSV."""
        response = await client.get("/api/issues/export/csv", headers=auth_header(user_token))

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="issues_export_')
        assert disposition.endswith('.csv"')
        assert list(csv.reader(io.StringIO(response.text))) == [CSV_COLUMNS]

    @pytest.mark.asyncio
    async def test_export_csv_filters(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        test_user: User,
        user_token: str,
    ):
        """Exports honour the same filters as listing."""
        db_session.add(Issue(title="Open, with comma", created_by=test_user.id))
        db_session.add(
            Issue(title="Done", status=IssueStatus.CLOSED, created_by=test_user.id)
        )
        await db_session.commit()

        response = await client.get(
            "/api/issues/export/csv",
            params={"status": "Open"},
            headers=auth_header(user_token),
        )

        rows = list(csv.reader(io.StringIO(response.text)))
        assert len(rows) == 2
        assert rows[1][1] == "Open, with comma"
        assert rows[1][CSV_COLUMNS.index("Created By")] == test_user.name

    @pytest.mark.asyncio
    async def test_export_csv_keeps_description_text(
        self, client: AsyncClient, test_user: User, user_token: str
    ):
        """Descriptions are exported as submitted, not HTML-escaped."""
        await client.post(
            "/api/issues",
            headers=auth_header(user_token),
            json={"title": "Comparison bug", "description": "Fails when a < b & c > d"},
        )

        response = await client.get("/api/issues/export/csv", headers=auth_header(user_token))

        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[1][CSV_COLUMNS.index("Description")] == "Fails when a < b & c > d"

    @pytest.mark.asyncio
    async def test_export_csv_requires_auth(self, client: AsyncClient):
        """Exports are protected like every other issue route."""
        response = await client.get("/api/issues/export/csv")

        assert response.status_code == 401


class TestExportJson:
    """Tests for JSON export."""

    @pytest.mark.asyncio
    async def test_export_json(
        self,
        client: AsyncClient,
        test_issue: Issue,
        user_token: str,
    ):
        """The JSON export is a downloadable document of every issue."""
        response = await client.get("/api/issues/export/json", headers=auth_header(user_token))

        assert response.status_code == 200
        assert response.headers["content-disposition"].endswith('.json"')
        document = response.json()
        assert document["totalIssues"] == 1
        assert document["issues"][0]["id"] == test_issue.id
        assert document["issues"][0]["title"] == test_issue.title
        assert "exportedAt" in document

    @pytest.mark.asyncio
    async def test_export_json_search(
        self,
        client: AsyncClient,
        test_issue: Issue,
        user_token: str,
    ):
        """A search that matches nothing exports an empty list."""
        response = await client.get(
            "/api/issues/export/json",
            params={"search": "no such thing"},
            headers=auth_header(user_token),
        )

        document = response.json()
        assert document["totalIssues"] == 0
        assert document["issues"] == []
