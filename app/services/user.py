"""User service for user management operations."""

from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.models.user import User


class UserService:
    """Service for user operations.

    Every lookup except ``email_exists`` ignores disabled accounts.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Get an enabled user by ID."""
        result = await self.db.execute(
            select(User).where(User.id == user_id, User.is_enabled.is_(True))
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get an enabled user by email."""
        result = await self.db.execute(
            select(User).where(User.email == email, User.is_enabled.is_(True))
        )
        return result.scalar_one_or_none()

    async def get_or_404(self, user_id: int) -> User:
        """Get user by ID or raise NotFoundError."""
        user = await self.get_by_id(user_id)
        if not user:
            raise NotFoundError(resource="User")
        return user

    async def email_exists(self, email: str) -> bool:
        """Check whether any account, enabled or not, uses this email."""
        result = await self.db.execute(
            select(func.count(User.id)).where(User.email == email)
        )
        return (result.scalar() or 0) > 0

    async def list_users(self) -> list[User]:
        """List enabled users, newest first."""
        result = await self.db.execute(
            select(User)
            .where(User.is_enabled.is_(True))
            .order_by(User.created_at.desc(), User.id.desc())
        )
        return list(result.scalars().all())

    async def update_name(self, user: User, name: str) -> User:
        """Change a user's display name."""
        user.name = name
        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def disable(self, user_id: int) -> int:
        """
        Soft-delete a user by clearing ``is_enabled``.

        Returns:
            Number of rows affected
        """
        result = await self.db.execute(
            update(User)
            .where(User.id == user_id, User.is_enabled.is_(True))
            .values(is_enabled=False, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
