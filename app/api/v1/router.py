"""API router combining all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import auth, health_check, issues, users
from app.schemas.common import ErrorResponse

router = APIRouter()

# Documented failure shape for routes behind the bearer token
PROTECTED_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Missing, malformed, invalid or expired token"},
    422: {"model": ErrorResponse, "description": "Request validation failed"},
}

# Include all routers
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(
    issues.router, prefix="/issues", tags=["Issues"], responses=PROTECTED_RESPONSES
)
router.include_router(
    users.router, prefix="/users", tags=["Users"], responses=PROTECTED_RESPONSES
)
router.include_router(health_check.router, prefix="/health", tags=["Health"])
