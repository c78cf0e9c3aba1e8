"""ASGI entry point: ``uvicorn app.main:app``."""

from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import __version__
from app.api.v1.router import router as api_router
from app.config import settings
from app.core.exceptions import APIException, ConflictError, InternalError, error_body
from app.core.logging import configure_logging
from app.database import close_db, init_db
from app.middleware import (
    AuditLogMiddleware,
    BodySizeLimitMiddleware,
    RateLimitMiddleware,
    RequestIDMiddleware,
    RequestTimeoutMiddleware,
    SecurityHeadersMiddleware,
)
from app.redis import close_redis, init_redis

configure_logging(settings.log_level, settings.log_format)
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    await init_db()
    try:
        await init_redis()
    except (RedisError, OSError) as exc:
        # Rate limits stay off until a request manages to connect
        logger.warning("redis_unavailable", error=str(exc))
    logger.info("application_started", env=settings.app_env, version=__version__)

    yield

    await close_db()
    await close_redis()
    logger.info("application_stopped")


def _error_response(request: Request, status_code: int, body: dict, headers=None) -> JSONResponse:
    """Render a failure envelope, tagged with the request ID when there is one."""
    body = {**body, "error": dict(body["error"])}
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        body["error"]["request_id"] = request_id
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def handle_api_exception(request: Request, exc: APIException) -> JSONResponse:
    return _error_response(request, exc.status_code, exc.detail, exc.headers)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes, wrong methods and other framework-raised errors."""
    phrase = HTTPStatus(exc.status_code).phrase
    code = phrase.upper().replace(" ", "_").replace("-", "_")
    message = exc.detail if isinstance(exc.detail, str) else phrase
    return _error_response(
        request, exc.status_code, error_body(code, message), getattr(exc, "headers", None)
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        error_body("VALIDATION_ERROR", "Request validation failed", details),
    )


async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    """Constraint violations that got past request validation."""
    logger.warning("integrity_error", error=str(exc.orig), path=request.url.path)
    error = ConflictError(message="The request conflicts with existing data")
    return _error_response(request, error.status_code, error.detail)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=True,
    )
    body = InternalError().detail
    if settings.debug:
        body = {
            **body,
            "error": {
                **body["error"],
                "details": [{"type": type(exc).__name__, "message": str(exc)}],
            },
        }
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, body)


def create_app() -> FastAPI:
    """Build the application with its middleware stack, handlers and routes."""
    application = FastAPI(
        title=settings.app_name,
        description="Issue Tracker API for recording, triaging and exporting issues.",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # Listed innermost first; CORS ends up outermost so preflights never hit the limiter
    application.add_middleware(
        RequestTimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds
    )
    application.add_middleware(BodySizeLimitMiddleware)
    application.add_middleware(RateLimitMiddleware)
    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(AuditLogMiddleware)
    application.add_middleware(RequestIDMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=[
            "X-Request-ID",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "Retry-After",
            "Content-Disposition",
        ],
    )

    application.add_exception_handler(APIException, handle_api_exception)
    application.add_exception_handler(StarletteHTTPException, handle_http_exception)
    application.add_exception_handler(RequestValidationError, handle_validation_error)
    application.add_exception_handler(IntegrityError, handle_integrity_error)
    application.add_exception_handler(Exception, handle_unexpected_error)

    application.include_router(api_router, prefix=settings.api_prefix)

    @application.get("/", include_in_schema=False)
    async def root() -> dict:
        return {
            "name": settings.app_name,
            "version": __version__,
            "docs": "/docs" if settings.debug else None,
            "health": f"{settings.api_prefix}/health",
        }

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        proxy_headers=True,
        forwarded_allow_ips=settings.forwarded_allow_ips,
    )
