"""Tests for property discovery and serialization metadata."""

import pytest

from panache_it.models import AccessorEntity, Dog, JAXBEntity, Person
from panache_it.serialization import Dialect, PropertyKind, describe, exposed, ordered_properties
from panache_it.serialization.introspection import camel_case, decapitalize
from panache_it.serialization.metadata import (
    ExposedProperty,
    json_ignore,
    merge_metadata,
    serialization_info,
    xml_element,
    xml_transient,
)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("name", "name"),
        ("unique_name", "uniqueName"),
        ("serialisation_trick", "serialisationTrick"),
        ("a_b_c", "aBC"),
    ],
)
def test_camel_case(name: str, expected: str):
    assert camel_case(name) == expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Person", "person"),
        ("AccessorEntity", "accessorEntity"),
        ("JAXBEntity", "JAXBEntity"),
        ("X", "x"),
    ],
)
def test_decapitalize(name: str, expected: str):
    assert decapitalize(name) == expected


class TestDescribe:
    def test_person_declaration_order(self):
        names = [prop.attribute for prop in describe(Person)]
        assert names == [
            "id",
            "name",
            "unique_name",
            "address",
            "status",
            "dogs",
            "serialisation_trick",
        ]

    def test_kinds(self):
        kinds = {prop.attribute: prop.kind for prop in describe(Person)}
        assert kinds["id"] == PropertyKind.COLUMN
        assert kinds["address"] == PropertyKind.RELATIONSHIP
        assert kinds["serialisation_trick"] == PropertyKind.COMPUTED
        assert {p.attribute: p.kind for p in describe(AccessorEntity)}["l"] == PropertyKind.SYNONYM

    def test_inherited_id_is_declared_by_base(self):
        declared_by = {prop.attribute: prop.declared_by for prop in describe(Person)}
        assert declared_by["id"] is not Person
        assert declared_by["name"] is Person

    def test_private_and_derived_members_are_not_published(self):
        names = {prop.attribute for prop in describe(Person)}
        assert "_address_id" not in names
        assert "is_persistent" not in names
        assert "persistent" not in names

    def test_hidden_back_reference(self):
        owner = {prop.attribute: prop for prop in describe(Dog)}["owner"]
        assert owner.hidden_for(Dialect.JSON)
        assert owner.hidden_for(Dialect.XML)
        assert "owner" not in [p.attribute for p in ordered_properties(Dog, Dialect.JSON, lexicographic=False)]

    def test_column_metadata(self):
        props = {prop.attribute: prop for prop in describe(JAXBEntity)}
        assert props["named_annotated"].xml_name == "annotated"
        assert props["named_annotated"].json_name == "namedAnnotated"
        assert props["named_attribute"].is_xml_attribute
        assert props["renamed"].json_name == "jsonName"
        assert props["renamed"].xml_name == "xmlName"
        assert props["transient_field"].hidden_for(Dialect.XML)
        assert not props["transient_field"].hidden_for(Dialect.JSON)


class TestOrderedProperties:
    def test_lexicographic_keeps_base_class_first(self):
        names = [p.json_name for p in ordered_properties(Person, Dialect.JSON, lexicographic=True)]
        assert names == [
            "id",
            "address",
            "dogs",
            "name",
            "serialisationTrick",
            "status",
            "uniqueName",
        ]

    def test_sorts_by_serialized_name(self):
        names = [p.json_name for p in ordered_properties(JAXBEntity, Dialect.JSON, lexicographic=True)]
        assert names == ["id", "jsonName", "namedAnnotated", "namedAttribute", "transientField", "unannotated"]

    def test_xml_drops_transient(self):
        names = [p.xml_name for p in ordered_properties(JAXBEntity, Dialect.XML, lexicographic=True)]
        assert names == ["id", "annotated", "attribute", "unannotated", "xmlName"]


class TestMetadata:
    def test_merge_metadata(self):
        merged = merge_metadata(json_ignore(), xml_element("a"), xml_transient())
        assert merged == {"json": {"ignore": True}, "xml": {"name": "a", "transient": True}}

    def test_serialization_info(self):
        assert serialization_info(json_ignore()) == {"serialization": {"json": {"ignore": True}}}

    def test_exposed_bare(self):
        class Thing:
            @exposed
            def value(self) -> int:
                """Computed."""
                return 1

        assert isinstance(Thing.__dict__["value"], ExposedProperty)
        assert Thing.__dict__["value"].metadata == {}
        assert Thing().value == 1

    def test_exposed_with_metadata_and_setter(self):
        class Thing:
            @exposed(xml_element("v"))
            def value(self) -> int:
                return getattr(self, "_value", 0)

            @value.setter
            def value(self, new: int) -> None:
                self._value = new

        accessor = Thing.__dict__["value"]
        assert accessor.metadata == {"xml": {"name": "v"}}

        thing = Thing()
        thing.value = 3
        assert thing.value == 3
