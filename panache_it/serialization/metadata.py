"""Serialization metadata attached to mapped attributes and computed accessors.

Metadata lives under the ``"serialization"`` key of a column's or
relationship's ``info`` dictionary:

    unique_name: Mapped[str | None] = mapped_column(
        unique=True,
        info=serialization_info(xml_element("login"), json_property("login")),
    )

Computed values are published with @exposed, which is a property carrying
the same metadata:

    @exposed(xml_element("trick"))
    def serialisation_trick(self) -> int:
        ...
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

INFO_KEY = "serialization"

Metadata = dict[str, dict[str, Any]]


def xml_element(name: str) -> Metadata:
    return {"xml": {"name": name}}


def xml_attribute(name: str | None = None) -> Metadata:
    meta: dict[str, Any] = {"attribute": True}
    if name is not None:
        meta["name"] = name
    return {"xml": meta}


def xml_transient() -> Metadata:
    return {"xml": {"transient": True}}


def json_property(name: str) -> Metadata:
    return {"json": {"name": name}}


def json_ignore() -> Metadata:
    return {"json": {"ignore": True}}


def merge_metadata(*parts: Mapping[str, Mapping[str, Any]]) -> Metadata:
    merged: Metadata = {}
    for part in parts:
        for dialect, options in part.items():
            merged.setdefault(dialect, {}).update(options)
    return merged


def serialization_info(*parts: Mapping[str, Mapping[str, Any]]) -> dict[str, Any]:
    """Build an ``info=`` dictionary for mapped_column() or relationship()."""
    return {INFO_KEY: merge_metadata(*parts)}


class ExposedProperty(property):
    """A read (and optionally write) accessor published to serializers."""

    def __init__(
        self,
        fget: Callable[[Any], Any] | None = None,
        fset: Callable[[Any, Any], None] | None = None,
        fdel: Callable[[Any], None] | None = None,
        doc: str | None = None,
        metadata: Metadata | None = None,
    ) -> None:
        super().__init__(fget, fset, fdel, doc)
        self.metadata: Metadata = metadata or {}

    def setter(self, fset: Callable[[Any, Any], None]) -> ExposedProperty:
        return type(self)(self.fget, fset, self.fdel, self.__doc__, self.metadata)


def exposed(
    fget: Callable[[Any], Any] | Mapping[str, Any] | None = None,
    /,
    *metadata: Mapping[str, Mapping[str, Any]],
) -> Any:
    """Publish a computed accessor. Usable bare or with metadata arguments."""
    if callable(fget):
        return ExposedProperty(fget, doc=fget.__doc__, metadata=merge_metadata(*metadata))

    parts = metadata if fget is None else (fget, *metadata)

    def decorator(func: Callable[[Any], Any]) -> ExposedProperty:
        return ExposedProperty(func, doc=func.__doc__, metadata=merge_metadata(*parts))

    return decorator
