"""Authentication schemas."""

import re

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.schemas.common import BaseSchema
from app.schemas.user import UserResponse


def _check_password_complexity(v: str) -> str:
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", v):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"\d", v):
        raise ValueError("Password must contain at least one digit")
    if not re.search(r"[!@#$%^&*(),.?\":{}|<>]", v):
        raise ValueError("Password must contain at least one special character")
    return v


class LoginRequest(BaseSchema):
    """Login request schema."""

    email: EmailStr = Field(..., description="Registered email address")
    password: str = Field(..., min_length=1, max_length=128)


class RegisterRequest(BaseSchema):
    """User registration request schema."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name",
    )
    email: EmailStr = Field(..., description="Valid email address")
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (min 8 chars, must include uppercase, lowercase, digit, and special char)",
    )

    @field_validator("password")
    @classmethod
    def validate_password_complexity(cls, v: str) -> str:
        """Validate password complexity requirements."""
        return _check_password_complexity(v)


class PasswordChangeRequest(BaseSchema):
    """Password change request schema."""

    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="New password (min 8 chars, must include uppercase, lowercase, digit, and special char)",
    )

    @field_validator("new_password")
    @classmethod
    def validate_password_complexity(cls, v: str) -> str:
        """Validate password complexity requirements."""
        return _check_password_complexity(v)


class AuthPayload(BaseSchema):
    """Token plus the user it was issued for."""

    token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: UserResponse


class AuthContext(BaseModel):
    """Identity of the authenticated caller, taken from a verified token."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    email: str
    name: str
