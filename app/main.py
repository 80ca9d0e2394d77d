import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
import sentry_sdk

from app.api.v1.health import router as health_router
from app.api.v1.resume import router as resume_router
from app.api.v1.match import router as match_router
from app.api.v1.cover_letter import router as cover_letter_router
from app.api.v1.profile import router as profile_router
from app.core.config import settings
from app.core.cors import cors_allowed_origins
from app.core.errors import AppError
from app.core.lifespan import lifespan
from app.core.rate_limit import limiter
from app.core.services import AppServices

logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def _error_body(message: str, details: dict | None = None) -> dict:
    body = {"success": False, "error": message}
    if details:
        body["details"] = details
    return body


def _describe_validation_error(exc: RequestValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "is invalid")
        problems.append(f"{location}: {message}" if location else message)
    return "Invalid request: " + "; ".join(problems) if problems else "Invalid request"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed path=%s status=%s: %s", request.url.path, exc.status_code, exc)
    return JSONResponse(status_code=exc.status_code, content=_error_body(str(exc), exc.details))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(_describe_validation_error(exc)),
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("rate_limit_exceeded path=%s limit=%s", request.url.path, exc.detail)
    response = JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=_error_body(f"Rate limit exceeded: {exc.detail}"),
    )
    return request.app.state.limiter._inject_headers(response, getattr(request.state, "view_rate_limit", None))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request_unhandled_error path=%s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(INTERNAL_ERROR_MESSAGE),
    )


def create_app(services: AppServices | None = None) -> FastAPI:
    """Build the API. Pre-built ``services`` are used as-is and not closed on shutdown."""
    app = FastAPI(title="Resume Match API", version="0.1.0", lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_allowed_origins(),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.include_router(health_router, prefix="/v1", tags=["Health"])
    app.include_router(resume_router, prefix="/v1", tags=["Resume"])
    app.include_router(match_router, prefix="/v1", tags=["Match"])
    app.include_router(cover_letter_router, prefix="/v1", tags=["Cover Letter"])
    app.include_router(profile_router, prefix="/v1", tags=["Profile"])
    return app


app = create_app()
