"""Discover the serializable properties of an entity class.

Properties are collected base class first. Within a class, mapped columns,
relationships and synonyms come in declaration order, followed by @exposed
accessors. Names with a leading underscore, unmapped attributes and plain
methods (``is_persistent`` and friends) are never published.
"""

from __future__ import annotations

import functools
import inspect
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import ColumnProperty, MapperProperty, RelationshipProperty, SynonymProperty

from panache_it.serialization.metadata import INFO_KEY, ExposedProperty, Metadata, merge_metadata


class PropertyKind(StrEnum):
    COLUMN = "column"
    RELATIONSHIP = "relationship"
    SYNONYM = "synonym"
    COMPUTED = "computed"


class Dialect(StrEnum):
    JSON = "json"
    XML = "xml"


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def decapitalize(name: str) -> str:
    """Lower the first letter unless the name starts with an acronym."""
    if len(name) > 1 and name[0].isupper() and name[1].isupper():
        return name
    return name[:1].lower() + name[1:]


@dataclass(frozen=True)
class PropertyDescriptor:
    attribute: str
    declared_by: type
    kind: PropertyKind
    metadata: Metadata = field(default_factory=dict)

    def _options(self, dialect: Dialect) -> dict[str, Any]:
        return self.metadata.get(dialect.value, {})

    def name_for(self, dialect: Dialect) -> str:
        return self._options(dialect).get("name") or camel_case(self.attribute)

    def hidden_for(self, dialect: Dialect) -> bool:
        options = self._options(dialect)
        return bool(options.get("ignore") or options.get("transient"))

    @property
    def json_name(self) -> str:
        return self.name_for(Dialect.JSON)

    @property
    def xml_name(self) -> str:
        return self.name_for(Dialect.XML)

    @property
    def is_xml_attribute(self) -> bool:
        return bool(self._options(Dialect.XML).get("attribute"))

    def read(self, entity: Any) -> Any:
        return getattr(entity, self.attribute)


def is_entity(value: Any) -> bool:
    """True for instances of mapped classes."""
    return sa_inspect(type(value), raiseerr=False) is not None


def _kind_of(prop: MapperProperty[Any]) -> PropertyKind:
    if isinstance(prop, RelationshipProperty):
        return PropertyKind.RELATIONSHIP
    if isinstance(prop, SynonymProperty):
        return PropertyKind.SYNONYM
    return PropertyKind.COLUMN


def _metadata_of(prop: MapperProperty[Any]) -> Metadata:
    sources = [prop.info.get(INFO_KEY, {})]
    if isinstance(prop, ColumnProperty):
        sources = [column.info.get(INFO_KEY, {}) for column in prop.columns] + sources
    return merge_metadata(*sources)


@functools.cache
def describe(entity_class: type) -> tuple[PropertyDescriptor, ...]:
    mapper = sa_inspect(entity_class, raiseerr=False)
    mapped = mapper.attrs if mapper is not None else {}

    seen: set[str] = set()
    descriptors: list[PropertyDescriptor] = []
    for klass in reversed(entity_class.__mro__):
        if klass is object:
            continue
        namespace = vars(klass)
        computed: list[PropertyDescriptor] = []
        for name in dict.fromkeys([*inspect.get_annotations(klass), *namespace]):
            if name in seen or name.startswith("_"):
                continue
            if name in mapped:
                prop = mapped[name]
                descriptors.append(
                    PropertyDescriptor(name, klass, _kind_of(prop), _metadata_of(prop))
                )
                seen.add(name)
            elif isinstance(namespace.get(name), ExposedProperty):
                accessor = namespace[name]
                computed.append(
                    PropertyDescriptor(name, klass, PropertyKind.COMPUTED, accessor.metadata)
                )
                seen.add(name)
        descriptors.extend(computed)
    return tuple(descriptors)


def ordered_properties(
    entity_class: type,
    dialect: Dialect,
    *,
    lexicographic: bool,
) -> list[PropertyDescriptor]:
    """Visible properties for ``dialect``.

    With ``lexicographic`` the base-class-first grouping is kept and each
    class's own properties are sorted by their serialized name.
    """
    visible = [prop for prop in describe(entity_class) if not prop.hidden_for(dialect)]
    if not lexicographic:
        return visible
    groups: dict[type, list[PropertyDescriptor]] = {}
    for prop in visible:
        groups.setdefault(prop.declared_by, []).append(prop)
    return [
        prop
        for group in groups.values()
        for prop in sorted(group, key=lambda p: p.name_for(dialect))
    ]
