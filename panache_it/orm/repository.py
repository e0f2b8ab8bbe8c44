"""Generic repositories (the DAO flavour of the active-record layer).

The managed entity class comes from the generic parameter, possibly through
intermediate generic repositories:

    class AuditedRepository(Repository[EntityT]):
        ...

    class PersonRepository(AuditedRepository[Person]):
        ...

    PersonRepository().entity_class  # -> Person
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any, ClassVar, Generic, TypeVar, get_args, get_origin

from sqlalchemy import ColumnElement

from panache_it.orm import operations
from panache_it.orm.exceptions import EntityTypeResolutionError
from panache_it.orm.query import Query, SortSpec

EntityT = TypeVar("EntityT")


def _resolve_entity_class(cls: type) -> type | None:
    """Find the concrete entity class among the generic bases of ``cls``."""
    for base in cls.__dict__.get("__orig_bases__", ()):
        origin = get_origin(base)
        if not (isinstance(origin, type) and issubclass(origin, Repository)):
            continue
        args = get_args(base)
        if args and isinstance(args[0], type):
            return args[0]
    return None


class Repository(Generic[EntityT]):
    """Persistence operations for the entity class named by the type parameter."""

    entity_class: ClassVar[type[Any] | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        resolved = _resolve_entity_class(cls)
        if resolved is not None:
            cls.entity_class = resolved

    def __init__(self) -> None:
        if self.entity_class is None:
            raise EntityTypeResolutionError(
                f"{type(self).__name__} does not bind a concrete entity type; "
                "subclass it as SomeRepository[Entity]"
            )

    @property
    def _entity(self) -> type[EntityT]:
        return self.entity_class  # type: ignore[return-value]

    # ------------------------------------------------------------------ #
    # Entity operations
    # ------------------------------------------------------------------ #

    async def persist(self, *entities: EntityT) -> None:
        await operations.persist(*entities)

    async def delete(self, entity: EntityT) -> None:
        await operations.remove(entity)

    async def refresh(self, entity: EntityT) -> None:
        await operations.refresh(entity)

    def is_persistent(self, entity: EntityT) -> bool:
        return operations.is_persistent(entity)

    def is_dirty(self, entity: EntityT) -> bool:
        return operations.is_dirty(entity)

    async def flush(self) -> None:
        await operations.flush()

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    async def find_by_id(self, ident: Any) -> EntityT | None:
        return await operations.find_by_id(self._entity, ident)

    def find(
        self,
        *criteria: ColumnElement[bool],
        sort: SortSpec = None,
        **filters: Any,
    ) -> Query[EntityT]:
        return operations.find(self._entity, criteria, filters, sort)

    def find_all(self, sort: SortSpec = None) -> Query[EntityT]:
        return operations.find(self._entity, sort=sort)

    async def list_all(self, sort: SortSpec = None) -> list[EntityT]:
        return await operations.list_all(self._entity, sort)

    def stream_all(self, sort: SortSpec = None) -> AsyncIterator[EntityT]:
        return operations.stream_all(self._entity, sort)

    async def count(self, *criteria: ColumnElement[bool], **filters: Any) -> int:
        return await operations.count(self._entity, criteria, filters)

    async def delete_where(self, *criteria: ColumnElement[bool], **filters: Any) -> int:
        return await operations.delete_where(self._entity, criteria, filters)

    async def delete_all(self) -> int:
        return await operations.delete_where(self._entity)

    async def update(
        self,
        values: dict[str, Any],
        *criteria: ColumnElement[bool],
        **filters: Any,
    ) -> int:
        return await operations.bulk_update(self._entity, values, criteria, filters)
