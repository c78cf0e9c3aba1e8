"""User schemas for request/response validation."""

from datetime import datetime

from pydantic import Field

from app.schemas.common import BaseSchema


class UserUpdate(BaseSchema):
    """Schema for updating the caller's profile."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
    )


class UserResponse(BaseSchema):
    """Schema for user response."""

    id: int
    name: str
    email: str
    created_at: datetime
    updated_at: datetime


class UserSummary(BaseSchema):
    """Minimal user summary for embedding in other responses."""

    id: int
    name: str
    email: str
