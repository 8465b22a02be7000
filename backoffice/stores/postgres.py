"""PostgreSQL store with async SQLAlchemy.

Handles:
- Database session management
- Connection pooling
- Constraint violation classification
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from backoffice.settings import get_settings

# SQLSTATE codes (PostgreSQL) for the constraint violations we translate
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


# Engine and session factory (initialized on startup)
_engine = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


async def init_db() -> None:
    """Initialize database connection pool."""
    global _engine, _session_factory

    settings = get_settings()
    _engine = create_async_engine(
        settings.async_database_url,
        echo=settings.debug,
        connect_args=settings.asyncpg_connect_args,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )
    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def ping_db() -> None:
    """Run a trivial query to validate connectivity."""
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    async with _engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def close_db() -> None:
    """Close database connection pool."""
    global _engine, _session_factory
    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session context manager.

    Usage:
        async with get_session() as session:
            result = await session.execute(query)
    """
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    async with _session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a request-scoped session."""
    async with get_session() as session:
        yield session


async def create_tables() -> None:
    """Create all tables (for development/testing only)."""
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables() -> None:
    """Drop all tables (for testing only)."""
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


def is_unique_violation(exc: IntegrityError) -> bool:
    """True if the integrity error came from a unique constraint."""
    return _sqlstate(exc) == UNIQUE_VIOLATION or _message_has(
        exc, "unique constraint", "duplicate key"
    )


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    """True if the integrity error came from a foreign key constraint."""
    return _sqlstate(exc) == FOREIGN_KEY_VIOLATION or _message_has(
        exc, "foreign key constraint"
    )


def _sqlstate(exc: IntegrityError) -> str | None:
    # asyncpg (through SQLAlchemy's adapter) exposes sqlstate; psycopg exposes pgcode.
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return str(code) if code else None


def _message_has(exc: IntegrityError, *needles: str) -> bool:
    message = str(exc.orig).lower()
    return any(n in message for n in needles)
