"""Tests for entity-level behaviour: defaults, validators and accessors."""

import pytest

from panache_it.database import transaction
from panache_it.models import AccessorEntity, Bug7721Entity, Person


class TestBug7721Entity:
    def test_constructor_defaults(self):
        entity = Bug7721Entity()
        assert entity.foo == "default"
        assert entity.super_field == "default"

    def test_validators_reject_none(self):
        entity = Bug7721Entity()
        with pytest.raises(ValueError):
            entity.foo = None
        with pytest.raises(ValueError):
            entity.super_field = None

    def test_subclass_validator_strips(self):
        assert Bug7721Entity(foo="  bar ").foo == "bar"

    @pytest.mark.usefixtures("database")
    async def test_super_class_column_is_persisted(self):
        async with transaction():
            await Bug7721Entity(super_field="up").persist()
            assert await Bug7721Entity.count(super_field="up") == 1


class TestAccessorEntity:
    def test_counts_reads_and_writes(self):
        entity = AccessorEntity()
        entity.reset_counters()

        entity.l = 3
        assert entity.l == 3
        assert entity.l == 3

        assert entity.l_writes == 1
        assert entity.l_reads == 2


class TestPerson:
    def test_dogs_default_to_empty_list(self):
        assert Person().dogs == []

    def test_serialisation_trick_counts_reads(self):
        person = Person()
        assert person.serialisation_trick == 1
        assert person.serialisation_trick == 2
        person.serialisation_trick = 10
        assert person.serialisation_trick == 11
