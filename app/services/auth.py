"""Authentication service for registration, login and credential changes."""

from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import ConflictError, UnauthorizedError
from app.core.security import (
    create_access_token,
    hash_password,
    needs_rehash,
    verify_password,
)
from app.models.user import User
from app.schemas.auth import AuthPayload, RegisterRequest
from app.schemas.user import UserResponse
from app.services.user import UserService


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserService(db)

    async def register(self, data: RegisterRequest) -> User:
        """
        Register a new user.

        Args:
            data: Registration data

        Returns:
            Created user

        Raises:
            ConflictError: If the email is already registered
        """
        # Disabled accounts still own their email
        if await self.users.email_exists(data.email):
            raise ConflictError(
                message="Email already registered",
                code="EMAIL_EXISTS",
                details=[{"field": "email", "message": "This email is already registered"}],
            )

        user = User(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password),
            is_enabled=True,
        )

        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)

        return user

    async def authenticate(self, email: str, password: str) -> User:
        """
        Check credentials against enabled accounts.

        Raises:
            UnauthorizedError: If the email is unknown or the password is wrong
        """
        user = await self.users.get_by_email(email)

        # Same message for both cases so accounts cannot be enumerated
        if not user or not verify_password(password, user.password_hash):
            raise UnauthorizedError(
                message="Invalid email or password",
                code="INVALID_CREDENTIALS",
            )

        if needs_rehash(user.password_hash):
            user.password_hash = hash_password(password)
            await self.db.flush()

        return user

    async def login(self, email: str, password: str) -> AuthPayload:
        """Authenticate and issue a token bound to the user's id, email and name."""
        user = await self.authenticate(email, password)
        return self.issue_token(user)

    def issue_token(self, user: User) -> AuthPayload:
        """Create the token response for a user."""
        expires_in = settings.jwt_expires_seconds
        token = create_access_token(
            user_id=user.id,
            email=user.email,
            name=user.name,
            expires_delta=timedelta(seconds=expires_in),
        )
        return AuthPayload(
            token=token,
            expires_in=expires_in,
            user=UserResponse.model_validate(user),
        )

    async def change_password(
        self, user: User, current_password: str, new_password: str
    ) -> None:
        """
        Change a user's password.

        Raises:
            UnauthorizedError: If current password is incorrect
        """
        if not verify_password(current_password, user.password_hash):
            raise UnauthorizedError(
                message="Current password is incorrect",
                code="INVALID_CREDENTIALS",
            )

        user.password_hash = hash_password(new_password)
        await self.db.flush()
