"""Tests for per-request transaction handling."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.main import app
from app.models.user import User
from app.redis import get_redis
from tests.conftest import auth_header


@pytest_asyncio.fixture
async def failing_commit_client(
    db_session: AsyncSession, mock_redis
) -> AsyncGenerator[tuple[AsyncClient, list[str]], None]:
    """Client whose request transaction fails at commit time."""
    calls: list[str] = []

    async def session_with_failing_commit():
        yield db_session
        calls.append("commit")
        raise RuntimeError("commit failed")

    async def use_mock_redis():
        return mock_redis

    app.dependency_overrides[get_db] = session_with_failing_commit
    app.dependency_overrides[get_redis] = use_mock_redis
    # The error handler's response is wanted, not the re-raised exception
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac, calls
    finally:
        app.dependency_overrides.clear()


class TestCommitBeforeResponse:
    """A write is only reported as successful once it has been committed."""

    @pytest.mark.asyncio
    async def test_failed_commit_on_create_is_reported(
        self, failing_commit_client, test_user: User, user_token: str
    ):
        client, calls = failing_commit_client

        response = await client.post(
            "/api/issues",
            headers=auth_header(user_token),
            json={"title": "Bug A"},
        )

        assert calls == ["commit"]
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "INTERNAL_ERROR"

    @pytest.mark.asyncio
    async def test_failed_commit_on_status_change_is_reported(
        self, failing_commit_client, test_issue, user_token: str
    ):
        client, _ = failing_commit_client

        response = await client.patch(
            f"/api/issues/{test_issue.id}/status",
            headers=auth_header(user_token),
            json={"status": "Resolved"},
        )

        assert response.status_code == 500
