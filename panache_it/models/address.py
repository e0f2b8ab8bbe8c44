"""Postal address shared by persons (many-to-one from Person)."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from panache_it.database import Base
from panache_it.orm import ActiveRecord


class Address(ActiveRecord, Base):
    __tablename__ = "address"

    street: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Address id={self.id} street={self.street!r}>"
