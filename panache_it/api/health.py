"""Service probes.

/health/live   - the process answers
/health/ready  - the database answers and every mapped table exists, so the
                 check endpoints can run; 503 otherwise
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError

from panache_it.database import Base, get_engine

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


async def missing_tables() -> list[str]:
    """Mapped tables absent from the connected database."""
    import panache_it.models  # noqa: F401 - registers all models with Base.metadata

    async with get_engine().connect() as conn:
        existing = await conn.run_sync(lambda sync_conn: set(sa_inspect(sync_conn).get_table_names()))
    return sorted(set(Base.metadata.tables) - existing)


@router.get("/live")
async def liveness() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/ready")
async def readiness() -> JSONResponse:
    body: dict[str, Any]
    try:
        missing = await missing_tables()
    except (RuntimeError, SQLAlchemyError) as exc:
        log.warning("health.database_unavailable", error=str(exc))
        body = {"status": "not_ready", "database": "unavailable", "missing_tables": []}
        return JSONResponse(status_code=503, content=body)

    if missing:
        log.warning("health.schema_incomplete", missing_tables=missing)
    body = {
        "status": "not_ready" if missing else "ready",
        "database": "ok",
        "missing_tables": missing,
    }
    return JSONResponse(status_code=503 if missing else 200, content=body)
