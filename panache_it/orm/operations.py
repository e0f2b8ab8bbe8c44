"""Persistence operations shared by ActiveRecordBase and Repository.

Every function works on the session bound to the current transaction.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import Any, TypeVar

import structlog
from sqlalchemy import ColumnElement, delete, update
from sqlalchemy import inspect as sa_inspect

from panache_it.database import current_session
from panache_it.orm.query import Query, SortSpec

log = structlog.get_logger(__name__)

EntityT = TypeVar("EntityT")

Criteria = Sequence[ColumnElement[bool]]


async def persist(*entities: Any) -> None:
    """Add entities to the session and flush so identifiers are assigned."""
    session = current_session()
    session.add_all(entities)
    await session.flush()
    log.debug(
        "orm.persisted",
        entities=[type(entity).__name__ for entity in entities],
    )


async def remove(entity: Any) -> None:
    session = current_session()
    await session.delete(entity)
    await session.flush()
    log.debug("orm.deleted", entity=type(entity).__name__)


async def refresh(entity: Any) -> None:
    await current_session().refresh(entity)


async def flush() -> None:
    await current_session().flush()


def is_persistent(entity: Any) -> bool:
    """True once the entity has a database identity in an open session."""
    return bool(sa_inspect(entity).persistent)


def is_dirty(entity: Any) -> bool:
    """True when any loaded attribute has changes not yet flushed."""
    state = sa_inspect(entity)
    return any(attr.history.has_changes() for attr in state.attrs)


async def find_by_id(entity_class: type[EntityT], ident: Any) -> EntityT | None:
    return await current_session().get(entity_class, ident)


def find(
    entity_class: type[EntityT],
    criteria: Criteria = (),
    filters: dict[str, Any] | None = None,
    sort: SortSpec = None,
) -> Query[EntityT]:
    return Query(entity_class, criteria, filters, sort)


async def list_all(entity_class: type[EntityT], sort: SortSpec = None) -> list[EntityT]:
    return await Query(entity_class, sort=sort).all()


async def stream_all(entity_class: type[EntityT], sort: SortSpec = None) -> AsyncIterator[EntityT]:
    async for entity in Query(entity_class, sort=sort).stream():
        yield entity


async def count(
    entity_class: type[Any],
    criteria: Criteria = (),
    filters: dict[str, Any] | None = None,
) -> int:
    return await Query(entity_class, criteria, filters).count()


async def delete_where(
    entity_class: type[Any],
    criteria: Criteria = (),
    filters: dict[str, Any] | None = None,
) -> int:
    """Bulk delete matching rows. ORM cascades are not applied."""
    stmt = delete(entity_class)
    if criteria:
        stmt = stmt.where(*criteria)
    if filters:
        stmt = stmt.filter_by(**filters)
    result = await current_session().execute(stmt)
    log.debug("orm.bulk_deleted", entity=entity_class.__name__, rows=result.rowcount)
    return result.rowcount


async def bulk_update(
    entity_class: type[Any],
    values: dict[str, Any],
    criteria: Criteria = (),
    filters: dict[str, Any] | None = None,
) -> int:
    """Bulk update matching rows, keeping loaded instances in sync."""
    stmt = update(entity_class).values(**values)
    if criteria:
        stmt = stmt.where(*criteria)
    if filters:
        stmt = stmt.filter_by(**filters)
    result = await current_session().execute(stmt)
    log.debug("orm.bulk_updated", entity=entity_class.__name__, rows=result.rowcount)
    return result.rowcount
