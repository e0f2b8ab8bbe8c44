"""Main API router - aggregates all sub-routers."""

from __future__ import annotations

from fastapi import APIRouter

from panache_it.api import checks, health

# Probes
public_router = APIRouter()
public_router.include_router(health.router)

# Active-record and serialization checks under /test
checks_router = APIRouter()
checks_router.include_router(checks.router)
