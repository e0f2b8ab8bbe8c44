"""Person model - the entity every serialization check is written against.

A person has an optional address, a status and a list of dogs. The
``serialisation_trick`` accessor is computed, never persisted, and counts
its own reads, so a freshly built person serializes it as ``1``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from sqlalchemy import Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from panache_it.database import Base
from panache_it.orm import ActiveRecord, Query
from panache_it.serialization.metadata import exposed


class Status(StrEnum):
    LIVING = "LIVING"
    DECEASED = "DECEASED"


class Person(ActiveRecord, Base):
    __tablename__ = "person"

    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    unique_name: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)

    _address_id: Mapped[int | None] = mapped_column(
        "address_id",
        ForeignKey("address.id"),
        nullable=True,
    )
    address: Mapped[Address | None] = relationship(  # type: ignore[name-defined]
        "Address",
        lazy="selectin",
    )

    status: Mapped[Status | None] = mapped_column(
        Enum(Status, name="person_status", native_enum=False, length=16),
        nullable=True,
    )

    dogs: Mapped[list[Dog]] = relationship(  # type: ignore[name-defined]
        "Dog",
        back_populates="owner",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Dog.id",
    )

    def __init__(self, **kwargs: Any) -> None:
        # A loaded collection lets transient instances serialize without I/O
        kwargs.setdefault("dogs", [])
        super().__init__(**kwargs)

    @exposed
    def serialisation_trick(self) -> int:
        """Not persisted. Every read increments the counter."""
        self._serialisation_trick = getattr(self, "_serialisation_trick", 0) + 1
        return self._serialisation_trick

    @serialisation_trick.setter
    def serialisation_trick(self, value: int) -> None:
        self._serialisation_trick = value

    @classmethod
    def find_ordered(cls) -> Query[Person]:
        return cls.find_all(sort="name")

    def __repr__(self) -> str:
        return f"<Person id={self.id} name={self.name!r} status={self.status}>"
