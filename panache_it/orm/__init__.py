"""Active-record convenience layer over SQLAlchemy."""

from __future__ import annotations

from panache_it.database import NoActiveSessionError
from panache_it.orm.active_record import ActiveRecord, ActiveRecordBase
from panache_it.orm.exceptions import (
    EntityTypeResolutionError,
    NoResultError,
    NonUniqueResultError,
    PagingError,
    PersistenceError,
    UnknownFieldError,
)
from panache_it.orm.query import Page, Query
from panache_it.orm.repository import Repository

__all__ = [
    "ActiveRecord",
    "ActiveRecordBase",
    "EntityTypeResolutionError",
    "NoActiveSessionError",
    "NoResultError",
    "NonUniqueResultError",
    "Page",
    "PagingError",
    "PersistenceError",
    "Query",
    "Repository",
    "UnknownFieldError",
]
