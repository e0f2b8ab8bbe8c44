"""Non-null columns declared on both an abstract super class and its entity.

The constructor fills both with "default"; validators declared on each
level reject None whichever class declares the column.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, validates

from panache_it.database import Base
from panache_it.orm import ActiveRecord

DEFAULT_VALUE = "default"


class Bug7721EntitySuper(ActiveRecord):
    """Unmapped super class contributing a column to every subclass table."""

    super_field: Mapped[str] = mapped_column(String(255), nullable=False)

    @validates("super_field")
    def _validate_super_field(self, key: str, value: str | None) -> str:
        if value is None:
            raise ValueError(f"{key} must not be None")
        return value


class Bug7721Entity(Bug7721EntitySuper, Base):
    __tablename__ = "bug7721_entity"

    foo: Mapped[str] = mapped_column(String(255), nullable=False)

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("foo", DEFAULT_VALUE)
        kwargs.setdefault("super_field", DEFAULT_VALUE)
        super().__init__(**kwargs)

    @validates("foo")
    def _validate_foo(self, key: str, value: str | None) -> str:
        if value is None:
            raise ValueError(f"{key} must not be None")
        return value.strip()

    def __repr__(self) -> str:
        return f"<Bug7721Entity id={self.id} foo={self.foo!r} super_field={self.super_field!r}>"
