"""Authentication API endpoints."""

import structlog
from fastapi import APIRouter, Depends, Request
from redis.exceptions import RedisError

from app.api.deps import CurrentAuth, DbSession, RedisClient
from app.config import settings
from app.core.exceptions import RateLimitError, UnauthorizedError
from app.middleware.audit_logger import get_client_ip, log_auth_event
from app.redis import RateLimiter
from app.schemas.auth import (
    AuthPayload,
    LoginRequest,
    PasswordChangeRequest,
    RegisterRequest,
)
from app.schemas.common import DataResponse, MessageResponse
from app.schemas.user import UserResponse, UserUpdate
from app.services.auth import AuthService
from app.services.user import UserService

logger = structlog.get_logger()

router = APIRouter()


async def check_login_rate_limit(
    request: Request,
    redis_client: RedisClient,
) -> None:
    """Check rate limit for login attempts."""
    # Skip rate limiting if Redis is not available
    if redis_client is None or not settings.rate_limit_enabled:
        return

    try:
        result = await RateLimiter(redis_client).hit(
            f"login:{get_client_ip(request)}", settings.login_rate_limit_per_minute
        )
    except RedisError:
        return

    if not result.allowed:
        raise RateLimitError(
            message="Too many login attempts. Please try again later.",
            retry_after=result.retry_after,
        )


@router.post(
    "/register",
    response_model=DataResponse[AuthPayload],
    status_code=201,
    summary="Register a new user",
    description="Create a new user account and return an access token.",
)
async def register(
    request: Request,
    data: RegisterRequest,
    db: DbSession,
) -> DataResponse[AuthPayload]:
    """Register a new user and return a token."""
    auth_service = AuthService(db)
    user = await auth_service.register(data)

    log_auth_event(
        "register",
        user_id=user.id,
        email=user.email,
        ip_address=get_client_ip(request),
    )

    return DataResponse(
        message="User registered successfully",
        data=auth_service.issue_token(user),
    )


@router.post(
    "/login",
    response_model=DataResponse[AuthPayload],
    summary="Login to get a token",
    description="Authenticate with email and password to obtain an access token.",
    dependencies=[Depends(check_login_rate_limit)],
)
async def login(
    request: Request,
    data: LoginRequest,
    db: DbSession,
    redis_client: RedisClient,
) -> DataResponse[AuthPayload]:
    """Login and return an access token."""
    try:
        payload = await AuthService(db).login(data.email, data.password)
    except UnauthorizedError as exc:
        log_auth_event(
            "login",
            email=data.email,
            success=False,
            reason=exc.code,
            ip_address=get_client_ip(request),
        )
        raise

    log_auth_event(
        "login",
        user_id=payload.user.id,
        email=payload.user.email,
        ip_address=get_client_ip(request),
    )

    # A good login starts the client with a fresh window
    if redis_client is not None and settings.rate_limit_enabled:
        try:
            await RateLimiter(redis_client).reset(f"login:{get_client_ip(request)}")
        except RedisError as exc:
            logger.warning("login_limit_reset_failed", error=str(exc))

    return DataResponse(message="Login successful", data=payload)


@router.get(
    "/me",
    response_model=DataResponse[UserResponse],
    summary="Get current user profile",
    description="Profile of the authenticated user.",
)
async def get_me(auth: CurrentAuth, db: DbSession) -> DataResponse[UserResponse]:
    """Get current user profile."""
    user = await UserService(db).get_or_404(auth.user_id)
    return DataResponse(
        message="Profile retrieved successfully",
        data=UserResponse.model_validate(user),
    )


@router.patch(
    "/me",
    response_model=DataResponse[UserResponse],
    summary="Update current user profile",
    description="Change the authenticated user's display name.",
)
async def update_me(
    data: UserUpdate,
    auth: CurrentAuth,
    db: DbSession,
) -> DataResponse[UserResponse]:
    """Update current user profile."""
    users = UserService(db)
    user = await users.update_name(await users.get_or_404(auth.user_id), data.name)
    return DataResponse(
        message="Profile updated successfully",
        data=UserResponse.model_validate(user),
    )


@router.post(
    "/change-password",
    response_model=MessageResponse,
    summary="Change password",
    description="Change the authenticated user's password.",
)
async def change_password(
    request: Request,
    data: PasswordChangeRequest,
    auth: CurrentAuth,
    db: DbSession,
) -> MessageResponse:
    """Change user password."""
    user = await UserService(db).get_or_404(auth.user_id)
    await AuthService(db).change_password(
        user=user,
        current_password=data.current_password,
        new_password=data.new_password,
    )

    log_auth_event(
        "password_change",
        user_id=user.id,
        email=user.email,
        ip_address=get_client_ip(request),
    )

    return MessageResponse(message="Password changed successfully")


@router.delete(
    "/me",
    response_model=MessageResponse,
    summary="Disable current account",
    description="Soft-delete the authenticated user's account. Issues keep referencing it.",
)
async def disable_me(
    request: Request,
    auth: CurrentAuth,
    db: DbSession,
) -> MessageResponse:
    """Disable the current account."""
    if not await UserService(db).disable(auth.user_id):
        raise UnauthorizedError(message="Account not found or already disabled")

    log_auth_event(
        "disable",
        user_id=auth.user_id,
        email=auth.email,
        ip_address=get_client_ip(request),
    )

    return MessageResponse(message="Account disabled successfully")
