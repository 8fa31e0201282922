"""
Repair Shop Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Service and API tests run against a fresh in-memory SQLite database
       (aiosqlite) per test, with the real schema from Base.metadata and
       foreign keys enforced.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── engine:            In-memory SQLite engine with all tables created
    ├── session_factory:   async_sessionmaker bound to that engine
    ├── db_session:        One AsyncSession for direct service tests
    ├── temp_storage:      Temporary upload directory
    ├── sample_image_bytes
    ├── mock_db_session:   AsyncMock session for failure-path tests
    └── test_client:       HTTPX AsyncClient wired to the app and the test DB
"""

import os
import tempfile

# Override settings for testing BEFORE any repairshop imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["UPLOAD_ROOT"] = tempfile.mkdtemp(prefix="repairshop_test_")
os.environ["LOG_LEVEL"] = "WARNING"

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from repairshop import database
from repairshop.database import Base
from repairshop.models import customer, employee, product  # noqa: F401
from repairshop.services.file_service import file_service


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest_asyncio.fixture
async def engine():
    """
    In-memory SQLite engine shared by every session of one test.

    StaticPool keeps the single connection alive, otherwise each new
    connection would see an empty database.
    """
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(test_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """
    A session for calling services directly.

    Write operations commit through it; tests read the results back
    through the same session.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "uploads"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """Smallest byte string that looks like a PNG; content is never decoded."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def mock_db_session():
    """
    Mock async session for failure paths that a real database cannot be
    made to produce on demand.
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def test_client(session_factory, temp_storage, monkeypatch):
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    The request-scoped session dependency and the health check pick up the
    test database through ``repairshop.database.async_session_factory``;
    uploads land in ``temp_storage``.
    """
    monkeypatch.setattr(database, "async_session_factory", session_factory)
    monkeypatch.setattr(file_service, "storage_root", Path(temp_storage).resolve())

    from repairshop.main import app

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
