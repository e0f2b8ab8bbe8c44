"""ORM models package.

Import all models here so that SQLAlchemy's metadata is fully populated
before create_schema() runs.
"""

from panache_it.models.accessor import AccessorEntity
from panache_it.models.address import Address
from panache_it.models.bug7721 import Bug7721Entity, Bug7721EntitySuper
from panache_it.models.dog import Dog
from panache_it.models.jaxb import JAXBEntity
from panache_it.models.person import Person, Status

__all__ = [
    "AccessorEntity",
    "Address",
    "Bug7721Entity",
    "Bug7721EntitySuper",
    "Dog",
    "JAXBEntity",
    "Person",
    "Status",
]
