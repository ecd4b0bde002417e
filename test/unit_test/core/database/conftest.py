"""Test configuration for database unit tests.

Provides an in-memory SQLite engine with all tables created and a session
bound to it.
"""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlmodel.pool import StaticPool

from pdfshare.core.database.base import Base
from pdfshare.core.database.entities import User
from pdfshare.core.database.repositories import RepoBundle, build_repos_from_session
from pdfshare.core.database.utils import create_sessionmaker


@pytest.fixture
async def in_memory_engine() -> AsyncGenerator:
    """Create in-memory SQLite engine with every table."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def in_memory_session(in_memory_engine) -> AsyncGenerator[AsyncSession, None]:
    async with create_sessionmaker(in_memory_engine)() as session:
        yield session


@pytest.fixture
def repos(in_memory_session: AsyncSession) -> RepoBundle:
    return build_repos_from_session(session=in_memory_session)


@pytest.fixture
async def owner(repos: RepoBundle) -> User:
    return await repos.users.create(User(email="owner@example.com", name="Owner", is_email_verified=True))
