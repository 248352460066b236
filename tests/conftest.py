"""Shared fixtures: fast retry settings and an in-memory database."""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from domain.config import SchedulerConfig
from infrastructure.db.models import Base


@pytest.fixture
def fast_retry_config() -> SchedulerConfig:
    return SchedulerConfig(interval_seconds=3600, max_retries=3, retry_delay_ms=0, debounce_ms=10, enabled=False)


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session
