"""Lazy, pageable queries over a single entity class.

A Query keeps its criteria, sort and window separately so that count()
always reflects the full result set, whatever page is selected. Like the
rest of the active-record layer it runs against current_session().
"""

from __future__ import annotations

import math
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy import inspect as sa_inspect

from panache_it.database import current_session
from panache_it.orm.exceptions import (
    NoResultError,
    NonUniqueResultError,
    PagingError,
    UnknownFieldError,
)

EntityT = TypeVar("EntityT")

SortSpec = str | Sequence[str] | None


@dataclass(frozen=True)
class Page:
    index: int
    size: int

    def __post_init__(self) -> None:
        if self.index < 0:
            raise PagingError(f"Page index must be >= 0, got {self.index}")
        if self.size < 1:
            raise PagingError(f"Page size must be >= 1, got {self.size}")


def order_by_clauses(entity_class: type, sort: SortSpec) -> list[Any]:
    """Translate "name" / "-name" sort fields into ORDER BY clauses."""
    if sort is None:
        return []
    fields = [sort] if isinstance(sort, str) else list(sort)
    mapped = sa_inspect(entity_class).attrs
    clauses: list[Any] = []
    for field in fields:
        descending = field.startswith("-")
        name = field.lstrip("-")
        if name not in mapped:
            raise UnknownFieldError(f"{entity_class.__name__} has no mapped field {name!r}")
        column = getattr(entity_class, name)
        clauses.append(column.desc() if descending else column.asc())
    return clauses


class Query(Generic[EntityT]):
    """A query built by find()/find_all(); nothing runs until it is awaited."""

    def __init__(
        self,
        entity_class: type[EntityT],
        criteria: Sequence[ColumnElement[bool]] = (),
        filters: dict[str, Any] | None = None,
        sort: SortSpec = None,
    ) -> None:
        self._entity_class = entity_class
        self._criteria = list(criteria)
        self._filters = dict(filters or {})
        self._order_by = order_by_clauses(entity_class, sort)
        self._page: Page | None = None
        self._range: tuple[int, int] | None = None

    def __repr__(self) -> str:
        return (
            f"<Query entity={self._entity_class.__name__} "
            f"filters={self._filters!r} page={self._page} range={self._range}>"
        )

    # ------------------------------------------------------------------ #
    # Statement building
    # ------------------------------------------------------------------ #

    def _select(self) -> Select[Any]:
        stmt = select(self._entity_class)
        if self._criteria:
            stmt = stmt.where(*self._criteria)
        if self._filters:
            stmt = stmt.filter_by(**self._filters)
        return stmt

    def _windowed(self) -> Select[Any]:
        stmt = self._select().order_by(*self._order_by)
        if self._page is not None:
            stmt = stmt.offset(self._page.index * self._page.size).limit(self._page.size)
        elif self._range is not None:
            start, end = self._range
            stmt = stmt.offset(start).limit(end - start + 1)
        return stmt

    # ------------------------------------------------------------------ #
    # Paging
    # ------------------------------------------------------------------ #

    def page(self, index: int, size: int) -> Query[EntityT]:
        self._page = Page(index, size)
        self._range = None
        return self

    def range(self, start: int, end: int) -> Query[EntityT]:
        """Select rows start..end, both inclusive. Replaces any paging."""
        if start < 0 or end < start:
            raise PagingError(f"Invalid range {start}..{end}")
        self._range = (start, end)
        self._page = None
        return self

    def _require_page(self) -> Page:
        if self._page is None:
            raise PagingError("Query is not paged; call page() first")
        return self._page

    def next_page(self) -> Query[EntityT]:
        page = self._require_page()
        self._page = Page(page.index + 1, page.size)
        return self

    def previous_page(self) -> Query[EntityT]:
        page = self._require_page()
        self._page = Page(max(page.index - 1, 0), page.size)
        return self

    def first_page(self) -> Query[EntityT]:
        page = self._require_page()
        self._page = Page(0, page.size)
        return self

    async def last_page(self) -> Query[EntityT]:
        page = self._require_page()
        self._page = Page(max(await self.page_count() - 1, 0), page.size)
        return self

    async def page_count(self) -> int:
        page = self._require_page()
        return math.ceil(await self.count() / page.size)

    async def has_next_page(self) -> bool:
        page = self._require_page()
        return page.index + 1 < await self.page_count()

    def has_previous_page(self) -> bool:
        return self._require_page().index > 0

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #

    async def count(self) -> int:
        """Count every matching row, ignoring sort and window."""
        stmt = select(func.count()).select_from(self._select().subquery())
        result = await current_session().execute(stmt)
        return int(result.scalar_one())

    async def all(self) -> list[EntityT]:
        result = await current_session().scalars(self._windowed())
        return list(result.all())

    async def first(self) -> EntityT | None:
        result = await current_session().scalars(self._windowed().limit(1))
        return result.first()

    async def one(self) -> EntityT:
        result = await current_session().scalars(self._windowed().limit(2))
        rows = list(result.all())
        if not rows:
            raise NoResultError(f"No {self._entity_class.__name__} matched {self!r}")
        if len(rows) > 1:
            raise NonUniqueResultError(
                f"More than one {self._entity_class.__name__} matched {self!r}"
            )
        return rows[0]

    async def stream(self) -> AsyncIterator[EntityT]:
        result = await current_session().scalars(self._windowed())
        for entity in result:
            yield entity
