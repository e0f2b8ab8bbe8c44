"""
Shared test fixtures for pytest.

Provides common fixtures for all test modules:
- fake_settings: Test environment configuration (in-memory database)
- database: Fresh engine with the schema created, disposed after the test
- test_app: FastAPI application wired to the test database
- client: Async HTTP client for testing the FastAPI app

Active-record calls made directly from a test run inside an explicit
``async with transaction():`` block, like a transactional test method.
"""

from typing import AsyncGenerator

import httpx
import pytest
from fastapi import FastAPI

from panache_it.config import Environment, JsonProvider, Settings, get_settings
from panache_it.database import close_db, create_schema, init_db
from panache_it.telemetry import clear_context


# ------------------------------------------------------------------ #
# Session-scoped: clear settings cache between test sessions
# ------------------------------------------------------------------ #

@pytest.fixture(autouse=True, scope="session")
def _clear_settings_cache():
    """Clear the lru_cache on get_settings so test overrides take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Drop request ids bound by earlier requests."""
    clear_context()
    yield
    clear_context()


# ------------------------------------------------------------------ #
# Settings & Database Fixtures
# ------------------------------------------------------------------ #

@pytest.fixture
def fake_settings() -> Settings:
    """Test environment settings with an in-memory database."""
    return Settings(
        environment=Environment.TEST,
        database_url="sqlite+aiosqlite:///:memory:",
        debug=True,
        db_echo_sql=False,
        json_provider=JsonProvider.BINDING,
    )


@pytest.fixture
async def database(fake_settings: Settings) -> AsyncGenerator[None, None]:
    """Initialize a fresh in-memory database with every table created."""
    init_db(fake_settings, for_test=True)
    await create_schema()
    yield
    await close_db()


# ------------------------------------------------------------------ #
# App & HTTP Client Fixtures
# ------------------------------------------------------------------ #

@pytest.fixture
def test_app(fake_settings: Settings, database: None) -> FastAPI:
    """Create the FastAPI app against the test database.

    The lifespan does not run under ASGITransport; the database fixture
    stands in for it.
    """
    from panache_it.main import create_app

    app = create_app()
    app.dependency_overrides[get_settings] = lambda: fake_settings
    return app


@pytest.fixture
async def client(test_app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client for testing the FastAPI application.

    Uses httpx.AsyncClient with ASGITransport to test the app without
    spinning up a real HTTP server.
    """
    transport = httpx.ASGITransport(app=test_app)  # type: ignore[arg-type]
    async with httpx.AsyncClient(
        transport=transport,
        base_url="http://testserver",
    ) as ac:
        yield ac
