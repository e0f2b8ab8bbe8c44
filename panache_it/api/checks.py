"""Check endpoints driven by the integration suite.

Each endpoint exercises one area of the active-record layer end to end and
answers the plain-text body "OK". A failed expectation raises
CheckFailedError, which the application renders as HTTP 500 with the
failure message.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse

from panache_it.api.negotiation import negotiate
from panache_it.config import Settings, get_settings
from panache_it.database import transaction
from panache_it.models import (
    AccessorEntity,
    Address,
    Bug7721Entity,
    Dog,
    JAXBEntity,
    Person,
    Status,
)
from panache_it.orm import NonUniqueResultError, NoResultError, Repository
from panache_it.repositories import (
    AddressRepository,
    Bug5274EntityRepository,
    Bug5885EntityRepository,
    DogRepository,
    PersonRepository,
)
from panache_it.serialization import (
    Dialect,
    JsonBindingSerializer,
    XmlSerializer,
    describe,
)
from panache_it.serialization.metadata import INFO_KEY
from panache_it.serialization.xml_binding import XML_DECLARATION

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/test", tags=["checks"])

OK = "OK"


class CheckFailedError(Exception):
    """An expectation inside a check endpoint did not hold."""


def expect(condition: bool, message: str) -> None:
    if not condition:
        log.warning("checks.expectation_failed", message=message)
        raise CheckFailedError(message)


async def expect_raises(exc_type: type[Exception], awaitable: Any, message: str) -> None:
    try:
        await awaitable
    except exc_type:
        return
    raise CheckFailedError(message)


def make_person(name: str, *, dogs: int = 1) -> Person:
    person = Person(
        name=name,
        unique_name=f"{name}-unique",
        status=Status.LIVING,
        address=Address(street=f"{name} street"),
    )
    for number in range(1, dogs + 1):
        person.dogs.append(Dog(name=f"{name}'s dog #{number}", race="dalmatian"))
    return person


# ------------------------------------------------------------------ #
# Active record
# ------------------------------------------------------------------ #


@router.get("/model", response_class=PlainTextResponse)
async def check_model() -> str:
    async with transaction():
        expect(await Person.count() == 0, "database should start empty")
        expect(await Person.list_all() == [], "list_all() should be empty")
        expect(await Person.find_by_id(1) is None, "find_by_id() should miss")

        person = make_person("stef", dogs=2)
        expect(not person.is_persistent(), "new person should not be persistent")
        await person.persist()
        expect(person.is_persistent(), "persisted person should be persistent")
        expect(person.id is not None, "persist() should assign an id")

        expect(await Person.count() == 1, "count() after persist")
        expect(await Person.count(name="stef") == 1, "count() by keyword filter")
        expect(await Person.count(Person.status == Status.LIVING) == 1, "count() by criterion")
        expect(await Person.find(name="stef").all() == [person], "find().all()")
        expect(await Person.find(name="stef").first() is person, "find().first()")
        expect(await Person.find(name="stef").one() is person, "find().one()")
        expect(await Person.find_by_id(person.id) is person, "find_by_id() identity")
        expect([p async for p in Person.stream_all()] == [person], "stream_all()")

        expect(await Dog.count() == 2, "dogs cascaded on persist")
        expect(all(dog.owner is person for dog in person.dogs), "dog owner back reference")
        expect(await Address.count() == 1, "address cascaded on persist")

        other = make_person("stef2", dogs=0)
        await other.persist()
        ordered = await Person.find_ordered().all()
        expect([p.name for p in ordered] == ["stef", "stef2"], "ascending sort")
        descending = await Person.list_all(sort="-name")
        expect([p.name for p in descending] == ["stef2", "stef"], "descending sort")

        query = Person.find_all(sort="name").page(0, 1)
        expect(await query.all() == [person], "first page")
        expect(await query.page_count() == 2, "page_count()")
        expect(await query.count() == 2, "count() ignores paging")
        expect(await query.has_next_page(), "has_next_page() on first page")
        expect(not query.has_previous_page(), "has_previous_page() on first page")
        expect(await query.next_page().all() == [other], "second page")
        expect(not await query.has_next_page(), "has_next_page() on last page")
        expect(await query.first_page().all() == [person], "first_page()")
        expect(await (await query.last_page()).all() == [other], "last_page()")
        expect(await Person.find_all(sort="name").range(1, 1).all() == [other], "range()")

        await expect_raises(
            NonUniqueResultError, Person.find_all().one(), "one() over two rows should fail"
        )
        await expect_raises(
            NoResultError, Person.find(name="nobody").one(), "one() over no rows should fail"
        )

        batch = [make_person("batch1", dogs=2), make_person("batch2", dogs=2)]
        await Person.persist_all(*batch)
        expect(all(p.id is not None for p in batch), "persist_all() assigns every id")
        expect(await Person.count() == 4, "persist_all() inserts every person")
        expect(await Dog.count() == 6, "persist_all() cascades to every dog")
        for member in batch:
            await member.delete()
        expect(await Person.count() == 2, "batch removed")
        expect(await Dog.count() == 2, "batch dogs removed")

        person_id = person.id

    async with transaction():
        loaded = await Person.find_by_id(person_id)
        expect(loaded is not None, "person visible in a new transaction")
        expect(loaded.address.street == "stef street", "address reloaded")
        expect([dog.name for dog in loaded.dogs] == ["stef's dog #1", "stef's dog #2"], "dogs reloaded")

        updated = await Person.update({"status": Status.DECEASED}, name="stef2")
        expect(updated == 1, "update() row count")
        expect(await Person.count(status=Status.DECEASED) == 1, "update() applied")

        await loaded.delete()
        expect(not loaded.is_persistent(), "deleted person should not be persistent")
        expect(await Person.count() == 1, "delete() removed one person")
        expect(await Dog.count() == 0, "delete() cascaded to dogs")
        expect(await Person.delete_where(name="stef2") == 1, "delete_where() row count")
        expect(await Person.count() == 0, "all persons deleted")
        await Address.delete_all()

    return OK


@router.get("/model-dao", response_class=PlainTextResponse)
async def check_model_dao() -> str:
    persons = PersonRepository()
    dogs = DogRepository()
    addresses = AddressRepository()

    async with transaction():
        expect(persons.entity_class is Person, "repository entity type")
        expect(await persons.count() == 0, "database should start empty")
        expect(await persons.find_by_id(1) is None, "find_by_id() should miss")

        person = make_person("stef", dogs=2)
        expect(not persons.is_persistent(person), "new person should not be persistent")
        await persons.persist(person)
        expect(persons.is_persistent(person), "persisted person should be persistent")

        expect(await persons.count() == 1, "count() after persist")
        expect(await persons.count(name="stef") == 1, "count() by keyword filter")
        expect(await persons.find(name="stef").one() is person, "find().one()")
        expect(await persons.find_by_id(person.id) is person, "find_by_id() identity")
        expect([p async for p in persons.stream_all()] == [person], "stream_all()")
        expect(await dogs.count() == 2, "dogs cascaded on persist")

        other = make_person("stef2", dogs=0)
        await persons.persist(other)
        ordered = await persons.find_ordered().all()
        expect([p.name for p in ordered] == ["stef", "stef2"], "ascending sort")

        query = persons.find_all(sort="name").page(1, 1)
        expect(await query.all() == [other], "second page")
        expect(query.has_previous_page(), "has_previous_page() on second page")
        expect(await query.previous_page().all() == [person], "previous_page()")

        extra = [make_person("stef4"), make_person("stef5")]
        await persons.persist(*extra)
        expect(await persons.count() == 4, "persist() of several entities")
        expect(await dogs.count() == 4, "persist() of several entities cascades")
        for member in extra:
            await persons.delete(member)
        expect(await persons.count() == 2, "extra persons removed")

        expect(await persons.update({"name": "stef3"}, name="stef2") == 1, "update() row count")
        expect(other.name == "stef3", "update() synchronized the loaded instance")

        await persons.delete(person)
        expect(await dogs.count() == 0, "delete() cascaded to dogs")
        expect(await persons.delete_all() == 1, "delete_all() row count")
        expect(await persons.count() == 0, "all persons deleted")
        await addresses.delete_all()

    return OK


@router.get("/accessors", response_class=PlainTextResponse)
async def check_accessors() -> str:
    async with transaction():
        entity = AccessorEntity(label="accessors")
        entity.reset_counters()

        entity.l = 5
        expect(entity.l_writes == 1, "setter should run on assignment")
        expect(entity.l == 5, "getter returns the stored value")
        expect(entity.l_reads == 1, "getter should run on read")

        await entity.persist()
        expect(await AccessorEntity.find(l=5).one() is entity, "synonym usable as filter")
        expect(await AccessorEntity.count(AccessorEntity.l == 5) == 1, "synonym usable in criteria")
        expect(await AccessorEntity.list_all(sort="-l") == [entity], "synonym usable as sort")

        reads = entity.l_reads
        body = JsonBindingSerializer().serialize(entity)
        expect(
            body == f'{{"id":{entity.id},"l":5,"label":"accessors"}}',
            f"serialized accessor entity: {body}",
        )
        expect(entity.l_reads == reads + 1, "serializers should go through the getter once")

        await AccessorEntity.delete_all()

    return OK


@router.get("/model1", response_class=PlainTextResponse)
async def check_dirty_tracking() -> str:
    async with transaction():
        person = Person(name="1")
        expect(person.is_dirty(), "a new entity carries unsaved changes")
        await person.persist()
        expect(not person.is_dirty(), "flushed entity should be clean")

        person.name = "2"
        expect(person.is_dirty(), "modified entity should be dirty")
        await Person.flush()
        expect(not person.is_dirty(), "flush() should clean the entity")

        await person.delete()
        expect(await Person.count() == 0, "person deleted")

    return OK


@router.get("/model2", response_class=PlainTextResponse)
async def check_relationships() -> str:
    async with transaction():
        person = make_person("2")
        await person.persist()
        person_id = person.id

    async with transaction():
        loaded = await Person.find_by_id(person_id)
        expect(loaded is not None and loaded is not person, "fresh instance in a new transaction")
        expect(loaded.address is not None, "address reloaded")
        expect(loaded.address.street == "2 street", "address fields reloaded")
        expect(len(loaded.dogs) == 1, "dogs reloaded")
        expect(loaded.dogs[0].owner is loaded, "dog owner resolved to the loaded person")

        await loaded.delete()
        await Address.delete_all()
        expect(await Person.count() == 0, "person deleted")
        expect(await Dog.count() == 0, "dogs deleted with their owner")

    return OK


@router.get("/model3", response_class=PlainTextResponse)
async def check_update_and_refresh() -> str:
    async with transaction():
        person = Person(name="3", status=Status.LIVING)
        await person.persist()

        updated = await Person.update({"status": Status.DECEASED}, Person.id == person.id)
        expect(updated == 1, "update() row count")
        await person.refresh()
        expect(person.status == Status.DECEASED, "refresh() reloads the updated status")
        expect(await Person.count(status=Status.LIVING) == 0, "no living person left")

        await person.delete()
        expect(await Person.count() == 0, "person deleted")

    return OK


# ------------------------------------------------------------------ #
# Serialization
# ------------------------------------------------------------------ #


@router.get("/ignored-properties")
async def ignored_properties(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Response:
    person = Person(id=666, name="Eddie", status=Status.DECEASED)
    serializer = negotiate(request.headers.get("accept"), settings)
    return Response(content=serializer.serialize(person), media_type=serializer.media_type)


@router.get("/testJaxbAnnotationTransfer", response_class=PlainTextResponse)
async def check_annotation_transfer() -> str:
    expect(
        JAXBEntity.named_annotated.info.get(INFO_KEY) == {"xml": {"name": "annotated"}},
        "column metadata should be visible on the class accessor",
    )
    expect(
        JAXBEntity.named_attribute.info.get(INFO_KEY) == {"xml": {"attribute": True, "name": "attribute"}},
        "attribute metadata should be visible on the class accessor",
    )

    descriptors = {prop.attribute: prop for prop in describe(JAXBEntity)}
    expect(descriptors["named_annotated"].xml_name == "annotated", "element rename")
    expect(descriptors["named_attribute"].is_xml_attribute, "attribute flag")
    expect(descriptors["transient_field"].hidden_for(Dialect.XML), "transient hidden from XML")
    expect(not descriptors["transient_field"].hidden_for(Dialect.JSON), "transient kept in JSON")
    expect(descriptors["renamed"].json_name == "jsonName", "JSON rename")
    expect(descriptors["unannotated"].xml_name == "unannotated", "default element name")

    async with transaction():
        entity = JAXBEntity(
            named_annotated="a",
            named_attribute="b",
            transient_field="c",
            renamed="d",
            unannotated="e",
        )
        await entity.persist()

        xml = XmlSerializer().serialize(entity)
        expect(
            xml
            == XML_DECLARATION
            + f'<JAXBEntity attribute="b"><id>{entity.id}</id><annotated>a</annotated>'
            "<unannotated>e</unannotated><xmlName>d</xmlName></JAXBEntity>",
            f"XML honours column metadata: {xml}",
        )
        json = JsonBindingSerializer().serialize(entity)
        expect(
            json
            == f'{{"id":{entity.id},"jsonName":"d","namedAnnotated":"a",'
            '"namedAttribute":"b","transientField":"c","unannotated":"e"}',
            f"JSON honours column metadata: {json}",
        )
        await JAXBEntity.delete_all()

    return OK


# ------------------------------------------------------------------ #
# Regression checks
# ------------------------------------------------------------------ #


@router.get("/5274", response_class=PlainTextResponse)
async def check_bug5274() -> str:
    repository = Bug5274EntityRepository()
    expect(repository.entity_class is Person, "entity type resolved through the abstract repository")

    async with transaction():
        await repository.persist(Person(name="5274"))
        expect(await repository.count() == 0, "override in the abstract repository wins")
        expect(await Repository.count(repository) == 1, "inherited implementation still reachable")
        await repository.delete_all()

    return OK


@router.get("/5885", response_class=PlainTextResponse)
async def check_bug5885() -> str:
    repository = Bug5885EntityRepository()

    async with transaction():
        person = Person(name="5885")
        await repository.persist(person)
        expect(await repository.find_by_id(person.id) is person, "find_by_id() through generic base")
        await repository.delete(person)
        expect(await repository.find_by_id(person.id) is None, "deleted entity no longer found")

    return OK


@router.get("/7721", response_class=PlainTextResponse)
async def check_bug7721() -> str:
    async with transaction():
        entity = Bug7721Entity()
        expect(entity.foo == "default", "subclass column default")
        expect(entity.super_field == "default", "super class column default")

        entity.foo = "  bar  "
        expect(entity.foo == "bar", "subclass validator applied")
        await entity.persist()

        for field in ("foo", "super_field"):
            try:
                setattr(entity, field, None)
            except ValueError:
                continue
            raise CheckFailedError(f"{field} accepted None")

        expect(await Bug7721Entity.find(foo="bar").one() is entity, "entity found by subclass column")
        await Bug7721Entity.delete_all()

    return OK
