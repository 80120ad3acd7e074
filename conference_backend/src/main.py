"""
FastAPI application entry point for the conference backend.

This module initializes the FastAPI application with:
- Conference lifecycle routes under /api
- CORS middleware for the web client
- Exception handlers for consistent error responses
- The daily dashboard scheduler (when enabled)
- Logging configuration

Environment Variables:
    JWT_SECRET_KEY: Secret used to verify bearer credentials
    CONFERENCE_STORE_BACKEND: memory, sql or firestore
    DASHBOARD_SCHEDULER_ENABLED: Start the daily sweep with the application
    CONFERENCE_ENV: Environment (production/development, default: development)
    CONFERENCE_LOG_LEVEL: Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL, default: INFO)
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from conference_backend.src.api.conferences import router as conferences_router
from conference_backend.src.config.settings import get_settings
from conference_backend.src.dependencies import get_document_store, reset_document_store
from conference_backend.src.scheduler.daily_dashboard import DailyDashboardScheduler
from conference_backend.src.services.dashboard_service import DashboardService
from conference_backend.src.services.exceptions import ServiceError
from conference_backend.src.utils.logging_config import init_logging, get_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events:
    - Startup: Warn about missing JWT configuration, start the scheduler
    - Shutdown: Stop the scheduler, release the document store

    Args:
        app: FastAPI application instance

    Yields:
        Control to the application
    """
    logger = get_logger("api")
    settings = get_settings()
    logger.info("Starting conference backend application")

    if not settings.jwt_configured:
        logger.warning("JWT_SECRET_KEY is not set: every lifecycle request will be rejected")

    app.state.dashboard_scheduler = None
    if settings.dashboard_scheduler_enabled:
        scheduler = DailyDashboardScheduler(
            service_factory=lambda: DashboardService(
                get_document_store(),
                timezone_name=settings.dashboard_schedule_timezone,
            ),
            hour=settings.dashboard_schedule_hour,
            minute=settings.dashboard_schedule_minute,
            tz=settings.dashboard_schedule_timezone,
            budget_seconds=settings.dashboard_sweep_budget_seconds,
        )
        scheduler.start()
        app.state.dashboard_scheduler = scheduler
        logger.info("Daily dashboard scheduler enabled")

    logger.info("Conference backend started successfully")

    yield

    logger.info("Shutting down conference backend application")
    if app.state.dashboard_scheduler is not None:
        await app.state.dashboard_scheduler.stop()
    reset_document_store()
    if settings.store_backend == "sql":
        from conference_backend.src.db.database import dispose_engine
        dispose_engine()


# Initialize logging before creating app
init_logging()

app = FastAPI(
    title="Conference Lifecycle API",
    description="Backend API for conference lifecycle operations: "
                "duplicate, delete and dashboard refresh.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allowed_origins_list,
    allow_credentials=True,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)


# Exception handlers

@app.exception_handler(ServiceError)
async def service_exception_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """
    Handle service errors that escaped an endpoint.

    Args:
        request: HTTP request
        exc: ServiceError subclass

    Returns:
        JSON response with the error's status and message
    """
    logger = get_logger("api")
    logger.warning(
        "Service error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error": exc.message,
        }
    )
    if exc.status_code >= 500:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "Internal Server Error"},
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """
    Handle SQLAlchemy database errors.

    Args:
        request: HTTP request
        exc: SQLAlchemy exception

    Returns:
        JSON response with a generic database error message
    """
    logger = get_logger("store")
    logger.error(
        "Database error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error": str(exc),
        }
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Database Error"},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle all other unhandled exceptions.

    Args:
        request: HTTP request
        exc: Unhandled exception

    Returns:
        JSON response with generic error message
    """
    logger = get_logger("api")
    logger.error(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error": str(exc),
        },
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal Server Error"},
    )


app.include_router(conferences_router, prefix="/api")


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe."""
    return {"status": "healthy"}


@app.get("/", tags=["Health"])
async def root():
    """API entry point."""
    return {
        "name": "Conference Lifecycle API",
        "version": app.version,
        "docs": "/docs",
    }
