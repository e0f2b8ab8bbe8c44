"""FastAPI application entrypoint.

Application startup order:
1. Load settings (from environment)
2. Configure structured logging
3. Initialize database engine and session factory
4. Create the schema when generate_schema is on
5. Register middleware and routers

Shutdown order:
1. Close DB connection pool
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from panache_it.api.checks import CheckFailedError
from panache_it.api.negotiation import NotAcceptableError
from panache_it.api.router import checks_router, public_router
from panache_it.config import get_settings
from panache_it.database import close_db, create_schema, init_db
from panache_it.serialization import SerializationError
from panache_it.telemetry.logging import RequestIdMiddleware, configure_logging

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown."""
    settings = get_settings()

    # Configure structured logging first (before any log calls)
    configure_logging(
        json_logs=settings.json_logs,
        log_level="DEBUG" if settings.debug else settings.log_level,
    )

    log.info(
        "app.starting",
        environment=settings.environment,
        db_url=settings.database_url.split("@")[-1],
    )

    init_db(settings)
    if settings.generate_schema:
        await create_schema(drop_first=not settings.is_in_memory_database)

    log.info("app.ready")
    yield

    await close_db()
    log.info("app.shutdown")


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()

    app = FastAPI(
        title="Active-record serialization checks",
        description="Check endpoints for the active-record layer and its JSON/XML serializers.",
        version="0.1.0",
        docs_url="/docs" if settings.is_dev else None,
        redoc_url="/redoc" if settings.is_dev else None,
        openapi_url="/openapi.json" if settings.is_dev else None,
        lifespan=lifespan,
    )

    # Unique request ID for log correlation
    app.add_middleware(RequestIdMiddleware)

    app.include_router(public_router)
    app.include_router(checks_router)

    # ------------------------------------------------------------------ #
    # Exception handlers
    # ------------------------------------------------------------------ #

    @app.exception_handler(CheckFailedError)
    async def check_failed_handler(request: Request, exc: CheckFailedError) -> PlainTextResponse:
        log.error("app.check_failed", path=request.url.path, error=str(exc))
        return PlainTextResponse(str(exc), status_code=500)

    @app.exception_handler(NotAcceptableError)
    async def not_acceptable_handler(request: Request, exc: NotAcceptableError) -> JSONResponse:
        return JSONResponse(status_code=406, content={"detail": str(exc)})

    @app.exception_handler(SerializationError)
    async def serialization_error_handler(request: Request, exc: SerializationError) -> JSONResponse:
        log.error("app.serialization_failed", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        log.error(
            "app.unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


# Module-level app instance for uvicorn
app = create_app()
