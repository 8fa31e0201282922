"""
Repair Shop Backend — Database Session Management
==================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   Creates an async engine with connection pooling and provides a session
       dependency that rolls back on error and always closes.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.

Unit of Work:
    Every request runs inside one session, and therefore one transaction.
    Registration writes the parent row and its phone rows; full update
    overwrites the parent, deletes its phones and inserts the replacements;
    delete removes phones and parent. Each write operation flushes its steps
    and commits once as its last step, before the route builds the response,
    so a failed commit reaches the client as a 500. When any step raises,
    the dependency rolls the whole sequence back.

Connection Pooling:
    pool_size / max_overflow / pool_pre_ping come from settings.
    pool_recycle=3600 recycles connections every hour.
    SQLite URLs (used by the test suite) get the dialect's default pool.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from repairshop.config import settings


def _engine_options() -> Dict[str, Any]:
    options: Dict[str, Any] = {
        # Echo SQL statements only when debugging
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options())

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after commit without a
# new round trip, which response building relies on
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers its table on this shared metadata, which Alembic
    and the test suite use to create the schema.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler (write services commit before
           returning, so the response never goes out ahead of the commit)
        3. On error: rolls back everything the request wrote
        4. Always: closes the session (returns connection to pool)

    Nothing is committed here: the exit code of a yield dependency can run
    after the response has been sent, too late to turn a failed commit
    into an error response.

    Example usage in a route:
        @router.get("/api/customers/all")
        async def list_customers(db: AsyncSession = Depends(get_db_session)):
            return await customer_service.list_customers(db)

    Raises:
        Whatever the handler raised, after rolling back. The global exception
        handlers turn it into the HTTP response.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            # Any failure undoes the whole request, including parent rows
            # already flushed before a child insert failed
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Closes all pooled connections; called on application shutdown."""
    await engine.dispose()
