"""Database engine, session factory and declarative base."""

from typing import Any, AsyncGenerator

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

logger = structlog.get_logger()


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def _engine_options(url: str) -> dict[str, Any]:
    """Build engine keyword arguments for the configured backend."""
    options: dict[str, Any] = {"echo": settings.database_echo}

    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        return options

    options["pool_size"] = settings.database_pool_size
    options["max_overflow"] = settings.database_max_overflow
    options["pool_pre_ping"] = True
    if url.startswith("postgresql+asyncpg"):
        # Per-statement timeout in seconds
        options["connect_args"] = {"command_timeout": settings.database_command_timeout}
    return options


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a database session for a single request.

    The session is committed when the request handler returns and rolled
    back if it raises. Routes depend on it with ``scope="function"`` so
    the commit finishes before the response is sent.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Verify connectivity and create tables for local development."""
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        if settings.is_development:
            # Imported for its side effect of registering the models on Base
            import app.models  # noqa: F401

            await conn.run_sync(Base.metadata.create_all)

    logger.info("database_initialized", env=settings.app_env)


async def close_db() -> None:
    """Dispose of the engine connection pool."""
    await engine.dispose()
