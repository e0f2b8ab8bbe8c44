"""Dog model - owned by a Person."""

from __future__ import annotations

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from panache_it.database import Base
from panache_it.orm import ActiveRecord
from panache_it.serialization.metadata import json_ignore, serialization_info, xml_transient


class Dog(ActiveRecord, Base):
    __tablename__ = "dog"

    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    race: Mapped[str | None] = mapped_column(String(255), nullable=True)

    _owner_id: Mapped[int | None] = mapped_column(
        "owner_id",
        ForeignKey("person.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    # Back reference; hidden from serializers to keep Person -> dogs acyclic
    owner: Mapped[Person | None] = relationship(  # type: ignore[name-defined]
        "Person",
        back_populates="dogs",
        lazy="selectin",
        info=serialization_info(json_ignore(), xml_transient()),
    )

    def __repr__(self) -> str:
        return f"<Dog id={self.id} name={self.name!r} race={self.race!r}>"
