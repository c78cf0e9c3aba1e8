"""Shared fixtures: in-memory database, fake Redis, HTTP client and users."""

import os

# Settings are read once at import time
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import AsyncGenerator  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.security import create_access_token, hash_password  # noqa: E402
from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.issue import Issue, IssuePriority, IssueSeverity, IssueStatus  # noqa: E402
from app.models.user import User  # noqa: E402
from app.redis import get_redis  # noqa: E402

TEST_PASSWORD = "TestPass123!"

# Redis TIME at which every fake rate-limit window is evaluated
REDIS_NOW = 1704067200


def _sqlite_foreign_keys_on(dbapi_connection, _record):
    # RESTRICT / SET NULL are only enforced with the pragma on
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """One in-memory SQLite database per test, schema created from the models."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", _sqlite_foreign_keys_on)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(db_engine, expire_on_commit=False, autoflush=False)
    async with factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def mock_redis() -> AsyncMock:
    """
    A Redis stand-in that admits every request.

    The pipeline answers ``[trimmed, count, added, expire]`` the way the
    limiter's sliding-window pipeline does; tests change ``count`` (index
    1) and ``zrange`` to simulate a full window.
    """
    pipeline = MagicMock()
    for command in ("zremrangebyscore", "zcard", "zadd", "expire"):
        getattr(pipeline, command).return_value = pipeline
    pipeline.execute = AsyncMock(return_value=[0, 0, 1, True])

    fake = AsyncMock()
    fake.ping.return_value = True
    fake.delete.return_value = 1
    fake.time.return_value = (REDIS_NOW, 0)
    fake.zrange.return_value = []
    fake.pipeline = MagicMock(return_value=pipeline)
    return fake


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, mock_redis: AsyncMock
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, sharing the test session and fake Redis."""

    async def use_test_session():
        yield db_session

    async def use_mock_redis():
        return mock_redis

    app.dependency_overrides[get_db] = use_test_session
    app.dependency_overrides[get_redis] = use_mock_redis
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


async def make_user(
    db_session: AsyncSession,
    name: str,
    email: str,
    password: str = TEST_PASSWORD,
    is_enabled: bool = True,
) -> User:
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        is_enabled=is_enabled,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "Test User", "test@example.com")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "Other User", "other@example.com")


@pytest_asyncio.fixture
async def test_issue(db_session: AsyncSession, test_user: User) -> Issue:
    """An open, medium priority issue reported by ``test_user``."""
    issue = Issue(
        title="Test Issue",
        description="A test issue description",
        status=IssueStatus.OPEN,
        priority=IssuePriority.MEDIUM,
        severity=IssueSeverity.MINOR,
        created_by=test_user.id,
    )
    db_session.add(issue)
    await db_session.commit()
    await db_session.refresh(issue)
    return issue


def token_for(user: User) -> str:
    return create_access_token(user_id=user.id, email=user.email, name=user.name)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_token(test_user: User) -> str:
    return token_for(test_user)


@pytest.fixture
def other_token(other_user: User) -> str:
    return token_for(other_user)
