"""JSON binding provider.

Properties are grouped base class first and sorted by serialized name
within each class; ``null`` values are omitted while empty collections are
kept.
"""

from __future__ import annotations

import json
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any
from uuid import UUID

from panache_it.serialization.base import SerializationError, Serializer, json_tree


def _encode_scalar(value: Any) -> str:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    raise SerializationError(f"Cannot encode {type(value).__name__}")


class JsonBindingSerializer(Serializer):
    media_type = "application/json"

    def serialize(self, entity: Any) -> str:
        tree = json_tree(entity, include_nulls=False, lexicographic=True)
        return json.dumps(tree, separators=(",", ":"), ensure_ascii=False, default=_encode_scalar)
