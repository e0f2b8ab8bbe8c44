"""Tests for the active-record mixin and its queries."""

import pytest

from panache_it.database import NoActiveSessionError, transaction
from panache_it.models import Address, Dog, Person, Status
from panache_it.orm import NonUniqueResultError, NoResultError, PagingError, UnknownFieldError

pytestmark = pytest.mark.usefixtures("database")


def _person(name: str, **kwargs) -> Person:
    return Person(name=name, unique_name=f"{name}-unique", **kwargs)


class TestInstanceOperations:
    async def test_persist_assigns_id(self):
        async with transaction():
            person = _person("stef")
            assert person.id is None
            assert not person.is_persistent()

            await person.persist()

            assert person.id is not None
            assert person.is_persistent()

    async def test_persist_cascades_to_relationships(self):
        async with transaction():
            person = _person("stef", address=Address(street="main"))
            person.dogs.append(Dog(name="rex", race="beagle"))
            await person.persist()

            assert await Dog.count() == 1
            assert await Address.count() == 1
            assert person.dogs[0].owner is person

    async def test_delete_cascades_to_dogs(self):
        async with transaction():
            person = _person("stef")
            person.dogs.append(Dog(name="rex", race="beagle"))
            await person.persist()

            await person.delete()

            assert not person.is_persistent()
            assert await Person.count() == 0
            assert await Dog.count() == 0

    async def test_dirty_tracking(self):
        async with transaction():
            person = _person("stef")
            await person.persist()
            assert not person.is_dirty()

            person.name = "other"
            assert person.is_dirty()

            await Person.flush()
            assert not person.is_dirty()

    async def test_refresh_reloads_bulk_update(self):
        async with transaction():
            person = _person("stef", status=Status.LIVING)
            await person.persist()

            await Person.update({"status": Status.DECEASED}, Person.id == person.id)
            await person.refresh()

            assert person.status == Status.DECEASED

    async def test_persist_all(self):
        async with transaction():
            await Person.persist_all(_person("a"), _person("b"))
            assert await Person.count() == 2

    async def test_one_flush_inserts_several_rows_of_a_class(self):
        async with transaction():
            person = _person("stef")
            person.dogs.extend([Dog(name="rex"), Dog(name="fido"), Dog(name="lassie")])
            await Person.persist_all(person, _person("eddie"), _person("max"))

            assert await Person.count() == 3
            assert await Dog.count() == 3
            assert len({dog.id for dog in person.dogs}) == 3
            assert Person().id is None


class TestClassQueries:
    async def test_empty_database(self):
        async with transaction():
            assert await Person.count() == 0
            assert await Person.list_all() == []
            assert await Person.find_by_id(1) is None
            assert await Person.find_all().first() is None

    async def test_find_by_keyword_and_criterion(self):
        async with transaction():
            stef = _person("stef", status=Status.LIVING)
            eddie = _person("eddie", status=Status.DECEASED)
            await Person.persist_all(stef, eddie)

            assert await Person.find(name="stef").one() is stef
            assert await Person.find(Person.status == Status.DECEASED).all() == [eddie]
            assert await Person.count(status=Status.LIVING) == 1

    async def test_find_by_id_returns_identity(self):
        async with transaction():
            person = _person("stef")
            await person.persist()
            assert await Person.find_by_id(person.id) is person

    async def test_sorting(self):
        async with transaction():
            await Person.persist_all(_person("b"), _person("a"), _person("c"))

            ascending = await Person.list_all(sort="name")
            descending = await Person.list_all(sort="-name")

            assert [p.name for p in ascending] == ["a", "b", "c"]
            assert [p.name for p in descending] == ["c", "b", "a"]
            assert [p.name for p in await Person.find_ordered().all()] == ["a", "b", "c"]

    async def test_sort_by_unknown_field_is_rejected(self):
        async with transaction():
            with pytest.raises(UnknownFieldError):
                Person.find_all(sort="nope")

    async def test_one_raises_on_zero_or_many(self):
        async with transaction():
            await Person.persist_all(_person("a"), _person("b"))

            with pytest.raises(NoResultError):
                await Person.find(name="nobody").one()
            with pytest.raises(NonUniqueResultError):
                await Person.find_all().one()

    async def test_stream_all(self):
        async with transaction():
            await Person.persist_all(_person("a"), _person("b"))
            names = [p.name async for p in Person.stream_all(sort="name")]
            assert names == ["a", "b"]

    async def test_delete_where_and_delete_all(self):
        async with transaction():
            await Person.persist_all(_person("a"), _person("b"), _person("c"))

            assert await Person.delete_where(name="a") == 1
            assert await Person.count() == 2
            assert await Person.delete_all() == 2
            assert await Person.count() == 0

    async def test_update_synchronizes_loaded_instances(self):
        async with transaction():
            person = _person("a")
            await person.persist()

            assert await Person.update({"name": "z"}, name="a") == 1
            assert person.name == "z"


class TestPaging:
    async def test_page_navigation(self):
        async with transaction():
            await Person.persist_all(*(_person(name) for name in "abcde"))

            query = Person.find_all(sort="name").page(0, 2)
            assert [p.name for p in await query.all()] == ["a", "b"]
            assert await query.page_count() == 3
            assert await query.count() == 5
            assert await query.has_next_page()
            assert not query.has_previous_page()

            query.next_page()
            assert [p.name for p in await query.all()] == ["c", "d"]
            assert query.has_previous_page()

            await query.last_page()
            assert [p.name for p in await query.all()] == ["e"]
            assert not await query.has_next_page()

            query.previous_page()
            assert [p.name for p in await query.all()] == ["c", "d"]

            query.first_page()
            assert [p.name for p in await query.all()] == ["a", "b"]

    async def test_range_is_inclusive(self):
        async with transaction():
            await Person.persist_all(*(_person(name) for name in "abcde"))
            query = Person.find_all(sort="name").range(1, 3)
            assert [p.name for p in await query.all()] == ["b", "c", "d"]

    async def test_page_navigation_requires_paging(self):
        async with transaction():
            with pytest.raises(PagingError):
                Person.find_all().next_page()

    async def test_invalid_page_is_rejected(self):
        async with transaction():
            with pytest.raises(PagingError):
                Person.find_all().page(0, 0)
            with pytest.raises(PagingError):
                Person.find_all().range(3, 1)


class TestTransactions:
    async def test_outside_transaction_raises(self):
        with pytest.raises(NoActiveSessionError):
            await Person.count()

    async def test_rollback_on_error(self):
        with pytest.raises(RuntimeError, match="boom"):
            async with transaction():
                await _person("stef").persist()
                raise RuntimeError("boom")

        async with transaction():
            assert await Person.count() == 0

    async def test_commit_is_visible_in_next_transaction(self):
        async with transaction():
            person = _person("stef")
            await person.persist()
            person_id = person.id

        async with transaction():
            loaded = await Person.find_by_id(person_id)
            assert loaded is not None
            assert loaded is not person
            assert loaded.name == "stef"

    async def test_nested_transaction_joins_outer(self):
        async with transaction() as outer:
            async with transaction() as inner:
                assert inner is outer
                await _person("stef").persist()
            assert await Person.count() == 1
