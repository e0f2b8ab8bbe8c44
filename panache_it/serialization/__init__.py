"""Entity serialization providers (JSON and XML)."""

from __future__ import annotations

from panache_it.serialization.base import SerializationError, Serializer
from panache_it.serialization.introspection import (
    Dialect,
    PropertyDescriptor,
    PropertyKind,
    describe,
    ordered_properties,
)
from panache_it.serialization.json_binding import JsonBindingSerializer
from panache_it.serialization.json_default import JsonSerializer
from panache_it.serialization.metadata import (
    exposed,
    json_ignore,
    json_property,
    serialization_info,
    xml_attribute,
    xml_element,
    xml_transient,
)
from panache_it.serialization.xml_binding import XmlSerializer

__all__ = [
    "Dialect",
    "JsonBindingSerializer",
    "JsonSerializer",
    "PropertyDescriptor",
    "PropertyKind",
    "SerializationError",
    "Serializer",
    "XmlSerializer",
    "describe",
    "exposed",
    "json_ignore",
    "json_property",
    "ordered_properties",
    "serialization_info",
    "xml_attribute",
    "xml_element",
    "xml_transient",
]
