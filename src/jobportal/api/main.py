"""Main FastAPI application for the job portal matching core."""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from jobportal import __version__
from jobportal.api.models import ErrorResponse
from jobportal.api.routes import all_routers
from jobportal.config import settings
from jobportal.core.errors import (
    ApplicationNotFound,
    BulkTransitionError,
    ConcurrentModification,
    DataAccessError,
    DuplicateApplication,
    IncompleteInputError,
    InvalidTransition,
    JobPortalError,
    PermissionDenied,
)
from jobportal.data import build_repository
from jobportal.data.repository import ApplicationRepository
from jobportal.utils.logging import configure_logging, get_logger

# Configure logging
configure_logging()
logger = get_logger(__name__)

ERROR_STATUS_CODES = {
    InvalidTransition: 409,
    ConcurrentModification: 409,
    DuplicateApplication: 409,
    BulkTransitionError: 409,
    PermissionDenied: 403,
    ApplicationNotFound: 404,
    IncompleteInputError: 422,
    DataAccessError: 502,
}


def error_response(status_code: int, error: str, message: str, details: Optional[Dict[str, Any]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            message=message,
            details=details,
            timestamp=datetime.now(timezone.utc),
        ).model_dump(mode="json"),
    )


def error_details(exc: JobPortalError) -> Optional[Dict[str, Any]]:
    """Machine-readable context for the domain errors that carry any."""
    if isinstance(exc, InvalidTransition):
        return {
            "application_id": exc.application_id,
            "current_status": getattr(exc.current_status, "value", exc.current_status),
            "target_status": getattr(exc.target_status, "value", exc.target_status),
            "allowed_statuses": [getattr(s, "value", s) for s in exc.allowed],
        }
    if isinstance(exc, ConcurrentModification):
        return {
            "application_id": exc.application_id,
            "expected_status": getattr(exc.expected_status, "value", exc.expected_status),
            "actual_status": getattr(exc.actual_status, "value", exc.actual_status),
            "retryable": True,
        }
    if isinstance(exc, BulkTransitionError):
        return {"report": exc.report.to_dict()}
    if isinstance(exc, (ApplicationNotFound, PermissionDenied)):
        return {"application_id": exc.application_id}
    return None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting job portal API", data_backend=settings.data_backend)

    if getattr(app.state, "repository", None) is None:
        try:
            app.state.repository = build_repository(settings)
        except Exception as e:
            logger.error("Application startup failed", error=str(e))
            raise

    logger.info("Application startup completed successfully")

    yield

    # Shutdown
    logger.info("Shutting down job portal API")
    await app.state.repository.close()


def create_app(repository: Optional[ApplicationRepository] = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Job Portal Matching API",
        description="Match scoring and application status workflow",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.repository = repository

    # Add middleware
    setup_middleware(app)

    # Add exception handlers
    setup_exception_handlers(app)

    # Include routers
    for router in all_routers:
        app.include_router(router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "name": "Job Portal Matching API",
            "version": __version__,
            "status": "running",
            "docs": "/docs" if settings.debug else "disabled",
        }

    return app


def setup_middleware(app: FastAPI) -> None:
    """Setup application middleware."""

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = asyncio.get_running_loop().time()

        logger.info(
            "Request started",
            method=request.method,
            url=str(request.url),
            client_ip=request.client.host if request.client else None,
            user_id=request.headers.get("x-user-id"),
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                method=request.method,
                url=str(request.url),
                error=str(e),
                duration_seconds=asyncio.get_running_loop().time() - start_time,
            )
            raise

        logger.info(
            "Request completed",
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            duration_seconds=asyncio.get_running_loop().time() - start_time,
        )
        return response


def setup_exception_handlers(app: FastAPI) -> None:
    """Setup global exception handlers."""

    @app.exception_handler(JobPortalError)
    async def domain_exception_handler(request: Request, exc: JobPortalError):
        status_code = next(
            (code for error_type, code in ERROR_STATUS_CODES.items() if isinstance(exc, error_type)),
            500,
        )
        log = logger.error if status_code >= 500 else logger.warning
        log(
            "Domain error",
            error_type=type(exc).__name__,
            error=str(exc),
            status_code=status_code,
            url=str(request.url),
        )
        return error_response(status_code, type(exc).__name__, str(exc), error_details(exc))

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            url=str(request.url),
        )
        return error_response(exc.status_code, "HTTPException", str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            "Validation error",
            errors=exc.errors(),
            url=str(request.url),
        )
        return error_response(
            422,
            "ValidationError",
            "Request validation failed",
            {"validation_errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(
            "Starlette HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            url=str(request.url),
        )
        return error_response(exc.status_code, "StarletteHTTPException", str(exc.detail or "Internal server error"))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            url=str(request.url),
        )
        return error_response(
            500,
            "InternalServerError",
            "An unexpected error occurred",
            {"error_type": type(exc).__name__} if settings.debug else None,
        )


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "jobportal.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_config=None,
    )
