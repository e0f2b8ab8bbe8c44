"""Default JSON provider backed by pydantic's serializer.

Every published property is written in declaration order (base classes
first) and absent values are kept as ``null``.
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter

from panache_it.serialization.base import Serializer, json_tree

_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)


class JsonSerializer(Serializer):
    media_type = "application/json"

    def serialize(self, entity: Any) -> str:
        tree = json_tree(entity, include_nulls=True, lexicographic=False)
        return _ADAPTER.dump_json(tree).decode("utf-8")
