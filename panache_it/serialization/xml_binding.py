"""XML binding provider built on ElementTree.

Layout rules:
- the root element is the decapitalized class name, or ``__xml_root__``
- properties are ordered like the JSON binding provider
- ``None`` values produce nothing
- a collection produces one repeated element per item, so an empty
  collection produces nothing
- xml_attribute() properties are written as attributes of the parent
"""

from __future__ import annotations

from datetime import date, datetime, time
from enum import Enum
from typing import Any
from xml.etree import ElementTree as ET

from panache_it.serialization.base import SCALAR_TYPES, SerializationError, Serializer, check_acyclic
from panache_it.serialization.introspection import Dialect, decapitalize, is_entity, ordered_properties

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'

_COLLECTIONS = (list, tuple, set, frozenset)


def root_name(entity_class: type) -> str:
    return getattr(entity_class, "__xml_root__", None) or decapitalize(entity_class.__name__)


def xml_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, SCALAR_TYPES):
        return str(value)
    raise SerializationError(f"Cannot write value of type {type(value).__name__} as XML text")


class XmlSerializer(Serializer):
    media_type = "application/xml"

    def serialize(self, entity: Any) -> str:
        return XML_DECLARATION + ET.tostring(self.to_element(entity), encoding="unicode")

    def to_element(self, entity: Any) -> ET.Element:
        root = ET.Element(root_name(type(entity)))
        self._fill(root, entity, ())
        return root

    def _fill(self, element: ET.Element, entity: Any, path: tuple[int, ...]) -> None:
        path = check_acyclic(entity, path)
        for prop in ordered_properties(type(entity), Dialect.XML, lexicographic=True):
            value = prop.read(entity)
            if value is None:
                continue
            name = prop.xml_name
            if prop.is_xml_attribute:
                if isinstance(value, _COLLECTIONS) or is_entity(value):
                    raise SerializationError(
                        f"{type(entity).__name__}.{prop.attribute} cannot be an XML attribute"
                    )
                element.set(name, xml_text(value))
                continue
            items = value if isinstance(value, _COLLECTIONS) else (value,)
            for item in items:
                child = ET.SubElement(element, name)
                if is_entity(item):
                    self._fill(child, item, path)
                elif item is not None:
                    child.text = xml_text(item)
