"""Common Pydantic schemas used across the application."""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class BaseSchema(BaseModel):
    """Base schema with common configuration.

    Fields are exposed in camelCase on the wire and accepted in either
    camelCase or snake_case.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
    )


class ErrorResponse(BaseModel):
    """Standardized error response format."""

    success: bool = False
    message: str
    error: dict[str, Any] = Field(
        ...,
        examples=[
            {
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": [{"field": "body.title", "message": "Field required"}],
                "request_id": "550e8400-e29b-41d4-a716-446655440000",
            }
        ],
    )


class PaginationMeta(BaseSchema):
    """Pagination metadata attached to list responses."""

    page: int = Field(..., description="Current page number")
    limit: int = Field(..., description="Items per page")
    total: int = Field(..., description="Total number of items")
    total_pages: int = Field(..., description="Total number of pages")

    @classmethod
    def create(cls, total: int, page: int, limit: int) -> "PaginationMeta":
        """Build pagination metadata; total pages rounds up."""
        total_pages = (total + limit - 1) // limit if limit > 0 else 0
        return cls(page=page, limit=limit, total=total, total_pages=total_pages)


class DataResponse(BaseSchema, Generic[T]):
    """Success envelope wrapping a single payload."""

    success: bool = True
    message: str
    data: T


class PaginatedResponse(BaseSchema, Generic[T]):
    """Success envelope wrapping a page of items."""

    success: bool = True
    message: str
    data: list[T]
    pagination: PaginationMeta

    @classmethod
    def create(
        cls, items: list[T], total: int, page: int, limit: int, message: str
    ) -> "PaginatedResponse[T]":
        """Create a paginated response."""
        return cls(
            message=message,
            data=items,
            pagination=PaginationMeta.create(total=total, page=page, limit=limit),
        )


class MessageResponse(BaseSchema):
    """Success envelope without a payload."""

    success: bool = True
    message: str
    data: None = None


class HealthResponse(BaseSchema):
    """Health check response."""

    status: str
    message: Optional[str] = None
    version: str
    environment: Optional[str] = None
    timestamp: Optional[str] = None
    uptime: Optional[float] = None
    database: Optional[str] = None
    redis: Optional[str] = None
