"""
Database engine, session and transaction management (SQLAlchemy 2.0 async).

Entities never receive a session argument. The active-record layer looks up
the session bound to the current transaction via current_session(), and
transactions are opened with transaction() or the @transactional decorator.

Design decisions:
- One session per transaction, bound in a context variable so concurrent
  requests never share a session
- Nested transaction() blocks join the outermost one
- In-memory SQLite uses a StaticPool so every session sees the same database
- All models import Base from here to keep metadata centralized
"""

from __future__ import annotations

import functools
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any, ParamSpec, TypeVar

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool, StaticPool

from panache_it.config import Settings, get_settings

log = structlog.get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


class Base(DeclarativeBase):
    """Declarative base for all ORM models.

    Centralizing the metadata here lets create_schema() discover all tables
    once panache_it.models has been imported.
    """

    # Type annotation map for SQLAlchemy 2.0 Mapped[] columns
    type_annotation_map: dict[Any, Any] = {}


class NoActiveSessionError(RuntimeError):
    """Raised when a persistence operation runs outside a transaction."""


def _build_engine(settings: Settings, *, for_test: bool = False) -> AsyncEngine:
    """Create an async SQLAlchemy engine from settings.

    In-memory SQLite needs a single shared connection, otherwise each
    checkout would see an empty database.
    """
    kwargs: dict[str, Any] = {"echo": settings.db_echo_sql}
    if settings.is_in_memory_database:
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    elif for_test:
        kwargs["poolclass"] = NullPool
    elif not settings.database_url.startswith("sqlite"):
        kwargs.update(
            {
                "pool_size": 5,
                "max_overflow": 10,
                "pool_pre_ping": True,
                "pool_recycle": 300,  # Recycle connections every 5 minutes
            }
        )
    return create_async_engine(settings.database_url, **kwargs)


# Module-level singletons, initialized in lifespan
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None

_current_session: ContextVar[AsyncSession | None] = ContextVar(
    "panache_it_current_session", default=None
)


def init_db(settings: Settings | None = None, *, for_test: bool = False) -> None:
    """Initialize the database engine and session factory.

    Called once during application startup (or test setup).
    """
    global _engine, _session_factory
    cfg = settings or get_settings()
    _engine = _build_engine(cfg, for_test=for_test)
    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Avoid lazy-load issues after commit
        autoflush=True,
    )
    log.info("database.initialized", url=cfg.database_url.split("@")[-1])


async def create_schema(*, drop_first: bool = False) -> None:
    """Create every table registered on Base.metadata."""
    import panache_it.models  # noqa: F401 - registers all models with Base.metadata

    engine = get_engine()
    async with engine.begin() as conn:
        if drop_first:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    log.info("database.schema_created", tables=sorted(Base.metadata.tables))


async def close_db() -> None:
    """Dispose the engine and release all connections."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        log.info("database.closed")
        _engine = None
        _session_factory = None


def get_engine() -> AsyncEngine:
    """Return the initialized engine (raises if not initialized)."""
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _engine


def current_session() -> AsyncSession:
    """Return the session bound to the running transaction."""
    session = _current_session.get()
    if session is None:
        raise NoActiveSessionError(
            "No active transaction. Wrap the call in 'async with transaction()' "
            "or decorate the endpoint with @transactional."
        )
    return session


def in_transaction() -> bool:
    return _current_session.get() is not None


@asynccontextmanager
async def transaction() -> AsyncIterator[AsyncSession]:
    """Open a transaction and bind its session for the active-record layer.

    Commits on success, rolls back on any exception. A nested block joins
    the enclosing transaction instead of opening a new one.
    """
    existing = _current_session.get()
    if existing is not None:
        yield existing
        return

    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    async with _session_factory() as session:
        token = _current_session.set(session)
        try:
            yield session
            await session.commit()
        except Exception as exc:
            await session.rollback()
            log.warning("transaction.rolled_back", error=str(exc), error_type=type(exc).__name__)
            raise
        finally:
            _current_session.reset(token)


def transactional(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
    """Run an async callable inside transaction().

    Usage:
        @router.get("/foo")
        @transactional
        async def endpoint() -> str:
            ...
    """

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        async with transaction():
            return await func(*args, **kwargs)

    return wrapper
