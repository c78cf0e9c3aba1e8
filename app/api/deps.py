"""API dependencies for authentication and request context."""

from typing import Annotated, Optional

import redis.asyncio as redis
import structlog
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import UnauthorizedError
from app.core.security import decode_token_unverified, verify_token
from app.database import get_db
from app.redis import get_redis
from app.schemas.auth import AuthContext

logger = structlog.get_logger()


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an ``Authorization: Bearer <token>`` header.

    Raises:
        UnauthorizedError: TOKEN_MISSING or TOKEN_MALFORMED
    """
    if not authorization:
        raise UnauthorizedError(
            message="No authorization token provided",
            code="TOKEN_MISSING",
        )

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise UnauthorizedError(
            message="Invalid authorization header format. Use: Bearer <token>",
            code="TOKEN_MALFORMED",
        )

    return parts[1]


async def get_auth_context(
    request: Request,
    authorization: Annotated[Optional[str], Header()] = None,
) -> AuthContext:
    """
    Verify the bearer token and return the caller's identity.

    Raises:
        UnauthorizedError: If the header is missing or malformed, or the
            token is invalid or expired
    """
    token = extract_bearer_token(authorization)

    try:
        auth = verify_token(token)
    except UnauthorizedError as exc:
        claims = decode_token_unverified(token) or {}
        logger.info(
            "token_rejected",
            reason=exc.code,
            claimed_sub=claims.get("sub"),
            request_id=getattr(request.state, "request_id", None),
        )
        raise

    # Kept on request state only for the audit log
    request.state.user_id = str(auth.user_id)

    return auth


# Type aliases for common dependencies
CurrentAuth = Annotated[AuthContext, Depends(get_auth_context)]
# Function scope: commit (or its failure) happens before the response is sent
DbSession = Annotated[AsyncSession, Depends(get_db, scope="function")]
RedisClient = Annotated[Optional[redis.Redis], Depends(get_redis)]
