"""Entity whose column is reached through a hand-written Python accessor.

The ``l`` synonym wraps the ``_l`` column with a getter/setter pair that
counts calls; the synonym keeps ``l`` usable in queries, sorts and
serialization.
"""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, synonym

from panache_it.database import Base
from panache_it.orm import ActiveRecord


class AccessorEntity(ActiveRecord, Base):
    __tablename__ = "accessor_entity"

    _l: Mapped[int | None] = mapped_column("l", Integer, nullable=True)
    label: Mapped[str | None] = mapped_column(String(255), nullable=True)

    @property
    def l_reads(self) -> int:
        return getattr(self, "_l_reads", 0)

    @property
    def l_writes(self) -> int:
        return getattr(self, "_l_writes", 0)

    def reset_counters(self) -> None:
        self._l_reads = 0
        self._l_writes = 0

    def _get_l(self) -> int | None:
        self._l_reads = self.l_reads + 1
        return self._l

    def _set_l(self, value: int | None) -> None:
        self._l_writes = self.l_writes + 1
        self._l = value

    l = synonym("_l", descriptor=property(_get_l, _set_l))  # noqa: E741

    def __repr__(self) -> str:
        return f"<AccessorEntity id={self.id} l={self._l}>"
