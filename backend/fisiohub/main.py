"""Main FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fisiohub.api.v1 import api_router
from fisiohub.api.v1.endpoints import health
from fisiohub.core.config import Settings, get_settings
from fisiohub.core.database import Database
from fisiohub.core.errors import register_exception_handlers
from fisiohub.core.logging import setup_logging
from fisiohub.core.security import PasswordHasher, TokenService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan events.

    Handles startup and shutdown tasks:
    - Database handle creation (unless one was installed beforehand)
    - Optional table creation from ORM metadata
    - Database connection verification
    - Resource cleanup on shutdown
    """
    settings: Settings = app.state.settings
    logger.info(
        "Starting FisioHub API",
        extra={
            "version": settings.APP_VERSION,
            "env": settings.APP_ENV,
            "debug": settings.APP_DEBUG,
        },
    )

    owns_database = getattr(app.state, "database", None) is None
    if owns_database:
        app.state.database = Database.from_settings(settings)
    database: Database = app.state.database

    if settings.DB_CREATE_ALL:
        await database.create_all()
        logger.info("Database tables created from metadata")

    try:
        await database.ping()
        logger.info("Database connection verified")
    except Exception as e:
        logger.error(f"Failed to connect to database: {e}")
        raise

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down FisioHub API")
    if owns_database:
        await database.dispose()
        logger.info("Database connections closed")

    logger.info("Application shutdown complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use; defaults to the environment-derived ones

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    setup_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Multi-tenant clinical indicators platform for rehabilitation clinics",
        docs_url="/api/docs" if settings.APP_DEBUG else None,
        redoc_url="/api/redoc" if settings.APP_DEBUG else None,
        openapi_url="/api/openapi.json" if settings.APP_DEBUG else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = None
    app.state.tokens = TokenService.from_settings(settings)
    app.state.hasher = PasswordHasher(rounds=settings.PASSWORD_BCRYPT_ROUNDS)

    register_exception_handlers(app)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(api_router, prefix="/api")
    app.include_router(api_router, prefix="/api/t/{tenant_slug}")

    return app


app = create_app()
