"""Best-effort coercion of ``_id`` values to ``bson.ObjectId``."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from bson import ObjectId

ID_FIELD = "_id"


@dataclass(frozen=True)
class IdCoercion:
    """Outcome of a single coercion attempt.

    ``coerced`` is False when ``value`` is the raw input passed through.
    """

    value: Any
    coerced: bool


def coerce_object_id(raw: Any) -> IdCoercion:
    """Convert a scalar to ``ObjectId`` when it is convertible.

    ``ObjectId`` instances are returned as already coerced. Strings and
    bytes are converted only when they hold a valid id (24 hex chars or 12
    bytes); anything else passes through untouched. ``None`` is never
    converted, because ``ObjectId(None)`` would mint a new id.
    """
    if isinstance(raw, ObjectId):
        return IdCoercion(raw, True)
    if isinstance(raw, (str, bytes)) and ObjectId.is_valid(raw):
        return IdCoercion(ObjectId(raw), True)
    return IdCoercion(raw, False)


def ensure_object_id(raw: Any) -> Any:
    """Coerce an id, or every id of a list/tuple/mapping, to ``ObjectId``."""
    if isinstance(raw, (list, tuple)):
        return [ensure_object_id(value) for value in raw]
    if isinstance(raw, Mapping):
        return {key: ensure_object_id(value) for key, value in raw.items()}
    return coerce_object_id(raw).value


def ensure_id_value(field: str, value: Any) -> Any:
    """Coerce ``value`` only when ``field`` is the identifier field."""
    if field == ID_FIELD:
        return ensure_object_id(value)
    return value
