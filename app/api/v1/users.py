"""User directory endpoints."""

from fastapi import APIRouter

from app.api.deps import CurrentAuth, DbSession
from app.schemas.common import DataResponse
from app.schemas.user import UserSummary
from app.services.user import UserService

router = APIRouter()


@router.get(
    "",
    response_model=DataResponse[list[UserSummary]],
    summary="List users",
    description="Enabled users, newest first. Used to pick an assignee.",
)
async def list_users(auth: CurrentAuth, db: DbSession) -> DataResponse[list[UserSummary]]:
    """List enabled users."""
    users = await UserService(db).list_users()
    return DataResponse(
        message="Users retrieved successfully",
        data=[UserSummary.model_validate(u) for u in users],
    )
