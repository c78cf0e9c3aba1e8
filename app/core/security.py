"""Password hashing (Argon2id) and signed access tokens (JWT)."""

import base64
import binascii
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from jose import ExpiredSignatureError, JWTError, jwt

from app.config import settings
from app.core.exceptions import UnauthorizedError
from app.schemas.auth import AuthContext

# 64 MiB, 3 passes; raising these makes needs_rehash() upgrade hashes at next login
password_hasher = PasswordHasher(time_cost=3, memory_cost=64 * 1024, parallelism=4)


def hash_password(password: str) -> str:
    return password_hasher.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """True when ``password`` matches; a corrupt stored hash counts as a mismatch."""
    try:
        return password_hasher.verify(hashed_password, password)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(hashed_password: str) -> bool:
    return password_hasher.check_needs_rehash(hashed_password)


def _decode_key(value: str) -> str:
    """Keys may be supplied either as PEM text or base64-encoded PEM."""
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return value


def _get_algorithm() -> str:
    """Get the JWT algorithm to use."""
    # Asymmetric algorithms need a key pair; without one fall back to the shared secret
    if not settings.jwt_private_key:
        return "HS256"
    return settings.jwt_algorithm


def _get_signing_key() -> str:
    if settings.jwt_private_key:
        return _decode_key(settings.jwt_private_key)
    return settings.jwt_secret


def _get_verification_key() -> str:
    algorithm = _get_algorithm()
    if algorithm.startswith(("RS", "ES")) and settings.jwt_public_key:
        return _decode_key(settings.jwt_public_key)
    return _get_signing_key()


def create_access_token(
    user_id: int,
    email: str,
    name: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Sign a token carrying the user id (``sub``), email and name.

    Expires after ``JWT_EXPIRES_MINUTES`` unless ``expires_delta`` is given.
    """
    now = datetime.now(timezone.utc)
    expires_delta = expires_delta or timedelta(minutes=settings.jwt_expires_minutes)

    payload = {
        "sub": str(user_id),
        "email": email,
        "name": name,
        "iat": now,
        "exp": now + expires_delta,
        "type": "access",
    }

    return jwt.encode(payload, _get_signing_key(), algorithm=_get_algorithm())


def decode_token(token: str) -> dict[str, Any]:
    """Check signature and expiry; jose errors propagate to the caller."""
    return jwt.decode(
        token,
        _get_verification_key(),
        algorithms=[_get_algorithm()],
    )


def decode_token_unverified(token: str) -> Optional[dict[str, Any]]:
    """
    Read token claims without checking signature or expiry.

    Only for diagnostics; never base an authorization decision on the result.
    """
    try:
        return jwt.get_unverified_claims(token)
    except JWTError:
        return None


def verify_token(token: str) -> AuthContext:
    """
    Verify a token and return the caller identity it carries.

    Raises:
        UnauthorizedError: With code TOKEN_EXPIRED or TOKEN_INVALID
    """
    try:
        payload = decode_token(token)
    except ExpiredSignatureError:
        raise UnauthorizedError(message="Token has expired", code="TOKEN_EXPIRED")
    except JWTError:
        raise UnauthorizedError(message="Invalid token", code="TOKEN_INVALID")

    if payload.get("type") != "access":
        raise UnauthorizedError(message="Invalid token type", code="TOKEN_INVALID")

    try:
        user_id = int(payload["sub"])
        email = payload["email"]
        name = payload["name"]
    except (KeyError, TypeError, ValueError):
        raise UnauthorizedError(message="Invalid token payload", code="TOKEN_INVALID")

    return AuthContext(user_id=user_id, email=email, name=name)
