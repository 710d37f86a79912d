"""Shared test configuration and fixtures."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Ensure `bookshelf` resolves from the service directory
SERVICE_ROOT = Path(__file__).resolve().parent.parent / "api_service"
if str(SERVICE_ROOT) not in sys.path:
    sys.path.insert(0, str(SERVICE_ROOT))

# Settings are cached on first import, so the environment goes first
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

TEST_PASSWORD = "SecurePass123"


@pytest_asyncio.fixture
async def async_engine():
    """Fresh in-memory database per test."""
    from bookshelf.database import Base
    from bookshelf.models import book, profile, review, user  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def client(async_engine) -> AsyncGenerator[AsyncClient, None]:
    """Test client for the FastAPI app, bound to the per-test database."""
    from bookshelf.database import get_db
    from bookshelf.main import app

    session_factory = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def register(client: AsyncClient, email: str, name: str = "Reader") -> dict:
    """Sign up and return bearer headers for the new user."""
    response = await client.post(
        "/auth/register",
        json={"name": name, "email": email, "password": TEST_PASSWORD},
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


async def add_book(client: AsyncClient, headers: dict, **overrides) -> dict:
    payload = {
        "title": "The Hobbit",
        "author": "J.R.R. Tolkien",
        "genre": "Fantasy",
        "published_year": 1937,
        "description": "There and back again.",
    }
    payload.update(overrides)
    response = await client.post("/books", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest_asyncio.fixture
async def alice(client) -> dict:
    return await register(client, "alice@example.com", "Alice")


@pytest_asyncio.fixture
async def bob(client) -> dict:
    return await register(client, "bob@example.com", "Bob")
