"""Serializer interface and the entity-to-tree walk shared by the JSON providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar
from uuid import UUID

from panache_it.serialization.introspection import Dialect, is_entity, ordered_properties

SCALAR_TYPES = (str, int, float, bool, datetime, date, time, UUID, Decimal)


class SerializationError(Exception):
    """Raised when an object graph cannot be rendered."""


class Serializer(ABC):
    """Renders one entity to text."""

    media_type: ClassVar[str]

    @abstractmethod
    def serialize(self, entity: Any) -> str:
        """Return the serialized form of ``entity``."""


def check_acyclic(entity: Any, path: tuple[int, ...]) -> tuple[int, ...]:
    if id(entity) in path:
        raise SerializationError(
            f"Cycle detected while serializing {type(entity).__name__}; "
            "hide the back reference with json_ignore()/xml_transient()"
        )
    return (*path, id(entity))


def json_tree(
    entity: Any,
    *,
    include_nulls: bool,
    lexicographic: bool,
    path: tuple[int, ...] = (),
) -> dict[str, Any]:
    """Convert an entity into nested dicts and lists of JSON-ready values."""
    path = check_acyclic(entity, path)
    tree: dict[str, Any] = {}
    for prop in ordered_properties(type(entity), Dialect.JSON, lexicographic=lexicographic):
        value = prop.read(entity)
        if value is None and not include_nulls:
            continue
        tree[prop.json_name] = _json_value(
            value, include_nulls=include_nulls, lexicographic=lexicographic, path=path
        )
    return tree


def _json_value(value: Any, *, include_nulls: bool, lexicographic: bool, path: tuple[int, ...]) -> Any:
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, SCALAR_TYPES):
        return value
    if isinstance(value, (list, tuple, set, frozenset)):
        return [
            _json_value(item, include_nulls=include_nulls, lexicographic=lexicographic, path=path)
            for item in value
        ]
    if is_entity(value):
        return json_tree(value, include_nulls=include_nulls, lexicographic=lexicographic, path=path)
    raise SerializationError(f"Cannot serialize value of type {type(value).__name__}")
