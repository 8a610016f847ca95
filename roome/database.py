"""Database connection and session management."""

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Annotated, Any

from fastapi import Depends
from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


@lru_cache
def get_engine() -> AsyncEngine:
    """
    Get the async database engine (lazy initialization).

    The engine is created on first call and cached for subsequent calls.
    """
    from roome.config import get_settings

    settings = get_settings()
    kwargs: dict[str, Any] = {"echo": settings.debug}
    if not settings.is_sqlite:
        kwargs.update(
            pool_pre_ping=True,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
    return create_async_engine(settings.database_url, **kwargs)


@lru_cache
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Get the async session maker (lazy initialization)."""
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session."""
    session_maker = get_session_maker()
    async with session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# Type alias for dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]


def reset_engine() -> None:
    """
    Reset the cached engine and session maker.

    Useful for tests that need to reconfigure the database connection.
    """
    get_engine.cache_clear()
    get_session_maker.cache_clear()


# Session factory for work that outlives the request (background tasks)
SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_maker)]
