"""Active-record mixins.

Entities inherit persistence operations on themselves:

    class Person(ActiveRecord, Base):
        __tablename__ = "person"
        name: Mapped[str | None]

    async with transaction():
        person = Person(name="stef")
        await person.persist()
        assert await Person.count() == 1

ActiveRecordBase carries the operations for an entity with any primary key;
ActiveRecord adds an autoincrement integer ``id``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any, Self

from sqlalchemy import ColumnElement
from sqlalchemy.orm import Mapped, mapped_column

from panache_it.orm import operations
from panache_it.orm.query import Query, SortSpec


class ActiveRecordBase:
    """Persistence operations for a mapped entity class."""

    # ------------------------------------------------------------------ #
    # Instance operations
    # ------------------------------------------------------------------ #

    async def persist(self) -> None:
        await operations.persist(self)

    async def delete(self) -> None:
        await operations.remove(self)

    async def refresh(self) -> None:
        await operations.refresh(self)

    def is_persistent(self) -> bool:
        return operations.is_persistent(self)

    def is_dirty(self) -> bool:
        return operations.is_dirty(self)

    # ------------------------------------------------------------------ #
    # Class operations
    # ------------------------------------------------------------------ #

    @classmethod
    async def persist_all(cls, *entities: Self) -> None:
        await operations.persist(*entities)

    @classmethod
    async def flush(cls) -> None:
        await operations.flush()

    @classmethod
    async def find_by_id(cls, ident: Any) -> Self | None:
        return await operations.find_by_id(cls, ident)

    @classmethod
    def find(
        cls,
        *criteria: ColumnElement[bool],
        sort: SortSpec = None,
        **filters: Any,
    ) -> Query[Self]:
        return operations.find(cls, criteria, filters, sort)

    @classmethod
    def find_all(cls, sort: SortSpec = None) -> Query[Self]:
        return operations.find(cls, sort=sort)

    @classmethod
    async def list_all(cls, sort: SortSpec = None) -> list[Self]:
        return await operations.list_all(cls, sort)

    @classmethod
    def stream_all(cls, sort: SortSpec = None) -> AsyncIterator[Self]:
        return operations.stream_all(cls, sort)

    @classmethod
    async def count(cls, *criteria: ColumnElement[bool], **filters: Any) -> int:
        return await operations.count(cls, criteria, filters)

    @classmethod
    async def delete_where(cls, *criteria: ColumnElement[bool], **filters: Any) -> int:
        return await operations.delete_where(cls, criteria, filters)

    @classmethod
    async def delete_all(cls) -> int:
        return await operations.delete_where(cls)

    @classmethod
    async def update(
        cls,
        values: dict[str, Any],
        *criteria: ColumnElement[bool],
        **filters: Any,
    ) -> int:
        return await operations.bulk_update(cls, values, criteria, filters)


class ActiveRecord(ActiveRecordBase):
    """Active record with a generated integer primary key."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
