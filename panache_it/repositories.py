"""Repositories used by the DAO-style checks."""

from __future__ import annotations

from typing import Any

from sqlalchemy import ColumnElement

from panache_it.models import Address, Dog, Person
from panache_it.orm import Query, Repository
from panache_it.orm.repository import EntityT


class PersonRepository(Repository[Person]):
    def find_ordered(self) -> Query[Person]:
        return self.find_all(sort="name")


class DogRepository(Repository[Dog]):
    pass


class AddressRepository(Repository[Address]):
    pass


class Bug5274AbstractRepository(Repository[EntityT]):
    """Intermediate generic repository overriding an inherited operation."""

    async def count(self, *criteria: ColumnElement[bool], **filters: Any) -> int:
        return 0


class Bug5274EntityRepository(Bug5274AbstractRepository[Person]):
    pass


class Bug5885AbstractRepository(Repository[EntityT]):
    pass


class Bug5885EntityRepository(Bug5885AbstractRepository[Person]):
    pass
