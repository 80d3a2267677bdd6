"""Shared fixtures: in-memory database, DB session and API client."""
from datetime import datetime

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import motioncore.models  # noqa: F401  registers all tables on Base.metadata
from motioncore.core.config import Settings
from motioncore.core.database import Base, get_db

# Wednesday; the week starts Monday 2025-03-10
NOW = datetime(2025, 3, 12, 12, 0)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(EXPORT_DIR=str(tmp_path), TRANSFER_DEBUG_LOG=True)


@pytest_asyncio.fixture
async def client(session_maker, tmp_path, monkeypatch):
    from motioncore.core.config import get_settings
    from motioncore.main import app

    monkeypatch.setattr(get_settings(), "EXPORT_DIR", str(tmp_path))

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
