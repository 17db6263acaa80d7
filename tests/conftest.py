"""Shared pytest fixtures for API, store and resolver tests."""

import datetime
import logging
import os
from collections.abc import AsyncGenerator

# Must be set before shortener modules build their engine and settings.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CACHE_ENABLED", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from shortener.config import Settings
from shortener.database import Base, get_db
from shortener.main import app
from shortener.models import Link
from shortener.redis import get_redis
from shortener.store import LinkStore

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
FROZEN_NOW = datetime.datetime(2024, 1, 1, 12, 0, 0, tzinfo=datetime.UTC)


class FrozenClock:
    """Clock returning a fixed time; counts how often it was read."""

    def __init__(self, now: datetime.datetime = FROZEN_NOW) -> None:
        self.now = now
        self.reads = 0

    def __call__(self) -> datetime.datetime:
        self.reads += 1
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += datetime.timedelta(**kwargs)


@pytest.fixture
def settings() -> Settings:
    return Settings(DATABASE_URL=TEST_DATABASE_URL, CACHE_ENABLED=False)


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("linkshortener.tests")


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db_session: AsyncSession, settings: Settings, logger: logging.Logger, clock: FrozenClock) -> LinkStore:
    return LinkStore(db_session, settings=settings, logger=logger, clock=clock)


@pytest_asyncio.fixture
async def client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    async def override_get_redis() -> None:
        return None

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def count_links(session_factory: async_sessionmaker[AsyncSession]):
    """Count persisted links through a fresh session."""

    async def _count() -> int:
        async with session_factory() as session:
            return await session.scalar(select(func.count()).select_from(Link))

    return _count
