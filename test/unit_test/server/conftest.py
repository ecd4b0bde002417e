"""Fixtures for API tests.

Every test gets a fresh in-memory SQLite database, an in-process cache, a
temporary storage directory and a mailer that records messages instead of
sending them. The FastAPI dependencies are overridden to use them.
"""

from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlmodel.pool import StaticPool

from pdfshare.core.cache import CacheService, MemoryCacheBackend
from pdfshare.core.database import get_session
from pdfshare.core.database.base import Base
from pdfshare.core.database.entities import User  # noqa: F401  registers the tables
from pdfshare.core.database.utils import create_sessionmaker
from pdfshare.core.storage import LocalStorage

from .helpers import RecordingMailer

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """Create a test database engine with all tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    async with create_sessionmaker(test_engine)() as session:
        yield session


@pytest.fixture
def cache() -> CacheService:
    return CacheService(MemoryCacheBackend())


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(tmp_path / "uploads")


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest_asyncio.fixture(name="client")
async def client_fixture(
    session: AsyncSession, cache: CacheService, storage: LocalStorage, mailer: RecordingMailer
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with overridden dependencies."""
    from pdfshare.server.main import app
    from pdfshare.server.services.deps import get_cache, get_mailer, get_storage

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_mailer] = lambda: mailer

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()
