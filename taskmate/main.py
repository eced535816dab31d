"""FastAPI main application with app factory and route configuration."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import Settings
from .deps import get_settings
from .exceptions import TaskmateError
from .routes import auth, tasks
from .services.auth_service import get_auth_service, initialize_auth_service
from .services.suggestion_service import get_suggestion_service, initialize_suggestion_service
from .services.task_service import get_task_service, initialize_task_service
from .storage import TaskStore, UserStore
from .utils.logging import (
    configure_request_logging,
    log_shutdown_info,
    log_startup_info,
    setup_logging,
)

logger = logging.getLogger(__name__)

VERSION = __version__


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events.

    Args:
        app: FastAPI application instance
    """
    settings: Settings = app.state.settings

    try:
        setup_logging(settings)
        log_startup_info(settings)

        # Initialize stores and services
        initialize_auth_service(settings, UserStore())
        initialize_task_service(TaskStore())
        initialize_suggestion_service(settings)
        logger.info("Services initialized")

        logger.info("Application startup completed successfully")

    except Exception as e:
        logger.error(f"Error during application startup: {str(e)}")
        raise

    yield

    log_shutdown_info()


def _error_body(request: Request, status_code: int, message: str) -> dict:
    return {
        "msg": message,
        "status_code": status_code,
        "path": str(request.url),
    }


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use instead of the environment-derived ones

    Returns:
        Configured FastAPI application instance
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="Taskmate",
        description="Personal task management API with AI sub-task suggestions",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.dependency_overrides[get_settings] = lambda: settings

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging
    app.middleware("http")(configure_request_logging())

    # Custom exception handlers
    @app.exception_handler(TaskmateError)
    async def taskmate_exception_handler(request: Request, exc: TaskmateError):
        """Render domain errors with their mapped status code."""
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} for {request.method} {request.url}: {exc.message}")
        else:
            logger.warning(
                f"HTTP {exc.status_code}: {exc.message} for {request.method} {request.url}"
            )

        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.status_code, exc.message),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions with proper logging."""
        logger.warning(
            f"HTTP {exc.status_code}: {exc.detail} for {request.method} {request.url}"
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.status_code, str(exc.detail)),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        """Handle request validation errors with detailed information."""
        logger.warning(
            f"Validation error for {request.method} {request.url}: {exc.errors()}"
        )

        content = _error_body(request, status.HTTP_400_BAD_REQUEST, "Validation Error")
        content["errors"] = [
            {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
            for error in exc.errors()
        ]
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(
            f"Unexpected error for {request.method} {request.url}: {str(exc)}",
            exc_info=True,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"),
        )

    @app.get("/", tags=["root"])
    async def root():
        """Liveness endpoint."""
        return {"status": "Backend running fine"}

    @app.get("/healthz", tags=["health"])
    async def health_check():
        """Health check endpoint for monitoring and load balancers.

        Returns:
            Health status information
        """
        services = {
            "auth_service": get_auth_service(),
            "task_service": get_task_service(),
            "suggestion_service": get_suggestion_service(),
        }
        health_status = {
            "status": "healthy",
            "version": VERSION,
            "services": {
                name: "initialized" if service else "not_initialized"
                for name, service in services.items()
            },
            "suggestions_configured": bool(
                services["suggestion_service"] and services["suggestion_service"].is_configured
            ),
        }

        if not all(services.values()):
            health_status["status"] = "degraded"

        return health_status

    # Include routers with proper prefixes and tags
    app.include_router(auth.router, prefix="/api/auth")
    app.include_router(tasks.router, prefix="/api/tasks")

    logger.info("FastAPI application created and configured")

    return app


def run() -> None:
    """Run the API with uvicorn using environment settings."""
    settings = get_settings()
    uvicorn.run(
        "taskmate.main:create_app",
        factory=True,
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
