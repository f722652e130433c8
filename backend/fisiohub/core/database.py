"""Database connection and session management with tenant isolation."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator
from uuid import UUID

from sqlalchemy import make_url, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from fisiohub.core.config import Settings

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for the configured database.

    PostgreSQL gets the pooled configuration. In-memory SQLite (tests)
    shares a single connection so the database survives across sessions;
    file-backed SQLite opens a connection per session.
    """
    url = settings.DATABASE_URL
    options: dict[str, Any] = {"echo": settings.DB_ECHO}

    if settings.is_sqlite:
        in_memory = make_url(url).database in (None, "", ":memory:")
        options.update(
            connect_args={"check_same_thread": False},
            poolclass=StaticPool if in_memory else NullPool,
        )
    else:
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=True,  # Verify connections before using them
        )

    return create_async_engine(url, **options)


class Database:
    """
    Explicit persistence handle: one engine and one session factory.

    Created once at application startup (see ``fisiohub.main.lifespan``),
    stored on ``app.state.database`` and disposed at shutdown. Nothing in the
    codebase reaches for a module-level engine.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_maker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build a handle from application settings."""
        return cls(build_engine(settings))

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get database session (context manager style).

        Usage:
            async with database.session() as session:
                # Use session
                pass
        """
        async with self.session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> None:
        """Run a trivial query; raises if the database is unreachable."""
        async with self.session() as session:
            await session.execute(text("SELECT 1"))

    async def create_all(self) -> None:
        """Create all tables from ORM metadata."""
        from fisiohub.models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()


async def set_tenant_context(session: AsyncSession, tenant_id: UUID) -> None:
    """
    Set tenant context for an existing session.

    On PostgreSQL this sets ``app.tenant_id`` (transaction-scoped with
    SET LOCAL) so row-level security policies, where installed, agree with
    the application-level tenant predicate. Other dialects have no
    equivalent and rely on the predicate alone.

    Args:
        session: The database session
        tenant_id: UUID of the tenant

    Raises:
        ValueError: If tenant_id is invalid
    """
    # Validate tenant_id to prevent SQL injection
    if not isinstance(tenant_id, UUID):
        raise ValueError(f"Invalid tenant_id type: {type(tenant_id)}")

    if session.bind is None or session.bind.dialect.name != "postgresql":
        return

    # UUID str() output is safe (always matches UUID format)
    tenant_id_str = str(tenant_id)
    await session.execute(text(f"SET LOCAL app.tenant_id = '{tenant_id_str}'"))
