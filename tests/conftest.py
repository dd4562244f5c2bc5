"""
Test configuration and fixtures for AFC Contests

Every test gets a fresh in-memory SQLite database (aiosqlite), so tests never
share rows and need no cleanup.

Usage:
    pytest tests/
"""

import os

# Must be set before afc.core.config is imported
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import afc.models  # noqa: F401  registers every table on Base.metadata
from afc.db.base import Base
from afc.db.session import get_db, get_session_factory
from afc.main import app
from afc.models.enums import UserRole
from afc.models.user import User
from tests.fixtures.database import create_test_user


@pytest.fixture
async def db_engine():
    """
    Create an isolated in-memory database with all tables.

    StaticPool keeps one connection so every session sees the same database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def file_database_url(tmp_path) -> str:
    """URL of a SQLite file, for tests that need several real connections."""
    return f"sqlite+aiosqlite:///{tmp_path / 'contests.db'}"


@pytest.fixture
async def file_session_factory(file_database_url) -> AsyncGenerator[async_sessionmaker, None]:
    """
    Session factory on a file-backed database with a real connection pool.

    Every session gets its own connection, so concurrent sessions interleave
    and lock the way separate API workers do.
    """
    engine = create_async_engine(file_database_url, echo=False, connect_args={"timeout": 30})
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def test_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client bound to the app with the database dependencies pointed at
    the test engine.
    """
    async def get_test_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Test data fixtures
@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await create_test_user(db_session, "artist")


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await create_test_user(db_session, "fan")


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await create_test_user(db_session, "moderator", role=UserRole.ADMIN.value)
