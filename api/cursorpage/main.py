"""Main FastAPI application for the cursorpage service."""

import logging
from contextlib import asynccontextmanager
from typing import Dict, Any, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .db.assignments import (
    AssignmentRepository,
    InMemoryAssignmentRepository,
    PostgresAssignmentRepository
)
from .db.connection import db_manager, get_db_pool
from .errors import register_exception_handlers
from .errors.problem_details import ServiceUnavailableError
from .middleware.request_logging import RequestLoggingMiddleware
from .routes import assignments_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format=get_settings().log_format
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_repository(settings: Settings) -> AssignmentRepository:
    """Pick the assignment data source from settings."""
    if settings.database_url:
        return PostgresAssignmentRepository()
    return InMemoryAssignmentRepository()


def uses_database(app: FastAPI) -> bool:
    return isinstance(app.state.assignments, PostgresAssignmentRepository)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting Cursor Pagination API")
    settings = app.state.settings

    logging.getLogger().setLevel(getattr(logging, settings.log_level))

    if uses_database(app):
        try:
            await db_manager.initialize()
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                await conn.execute("SELECT 1")
            logger.info("Database connectivity verified")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

    yield

    logger.info("Shutting down Cursor Pagination API")
    if uses_database(app):
        try:
            await db_manager.close()
        except Exception as e:
            logger.error(f"Error during shutdown: {e}")


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[AssignmentRepository] = None
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Cursor-based pagination for list endpoints",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.assignments = repository if repository is not None else create_repository(settings)

    if settings.log_requests:
        app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        expose_headers=["Link"],
    )

    register_exception_handlers(app)

    app.include_router(assignments_router, prefix="/v1")

    @app.get("/health", tags=["Health"])
    async def health_check() -> Dict[str, Any]:
        """Health check endpoint with data source connectivity test."""
        if not uses_database(app):
            return {
                "status": "healthy",
                "service": settings.app_name,
                "version": VERSION,
                "database": "in-memory"
            }

        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                await conn.execute("SELECT 1")
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            raise ServiceUnavailableError(
                detail="Database connection failed",
                database_error=str(e)
            )

        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": VERSION,
            "database": "connected"
        }

    @app.get("/live", tags=["Health"])
    async def liveness_check() -> Dict[str, str]:
        """Liveness check endpoint."""
        return {
            "status": "alive",
            "service": settings.app_name
        }

    @app.get("/", tags=["Root"])
    async def root() -> Dict[str, str]:
        """Root endpoint with API information."""
        return {
            "service": settings.app_name,
            "version": VERSION,
            "docs": "/docs",
            "health": "/health"
        }

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()

    uvicorn.run(
        "cursorpage.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
