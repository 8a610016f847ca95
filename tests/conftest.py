"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Set test environment before any app code runs
os.environ["ENV"] = "test"
os.environ["AUTH_JWT_SECRET"] = "test-secret-key-with-at-least-32-bytes"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["USAGE_TRACKING_ENABLED"] = "true"


@pytest.fixture(autouse=True)
def fresh_settings() -> None:
    """Drop cached settings so per-test env changes are picked up."""
    from roome.config import get_settings

    get_settings.cache_clear()


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite database with all tables, one per test."""
    from roome.database import Base
    from roome.models import ComponentUsage, UIComponent, User  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for tests."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def app(session_maker: async_sessionmaker[AsyncSession]) -> Generator[FastAPI, None, None]:
    """The application wired to the test database."""
    from roome.database import get_db, get_session_maker
    from roome.main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_maker] = lambda: session_maker
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def admin_headers() -> dict[str, str]:
    """Bearer token for a user the identity provider marks as admin."""
    from roome.auth import create_access_token

    token = create_access_token("admin-subject", email="admin@roome.test", role="admin")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def guest_headers() -> dict[str, str]:
    from roome.auth import create_access_token

    token = create_access_token("guest-subject", email="guest@roome.test")
    return {"Authorization": f"Bearer {token}"}


def banner_payload(**overrides: Any) -> dict[str, Any]:
    """A valid create payload for a banner component."""
    payload: dict[str, Any] = {
        "name": "promo-banner",
        "displayName": "Promo Banner",
        "category": "banner",
        "componentType": "banner",
        "config": {
            "type": "warning",
            "title": "{{title}}",
            "message": "{{message}}",
            "dismissible": True,
        },
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_component(
    client: AsyncClient, admin_headers: dict[str, str]
) -> Callable[..., Awaitable[dict[str, Any]]]:
    """Create a component through the API and return its JSON body."""

    async def _create(**overrides: Any) -> dict[str, Any]:
        response = await client.post(
            "/api/ui-components", json=banner_payload(**overrides), headers=admin_headers
        )
        assert response.status_code == 201, response.text
        body: dict[str, Any] = response.json()
        return body

    return _create
