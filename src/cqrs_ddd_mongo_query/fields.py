"""Projection and sort field normalization."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pymongo import ASCENDING, DESCENDING


class SortDirection(str, Enum):
    """Portable sort directions."""

    ASC = "asc"
    DESC = "desc"


_DIRECTIONS = {
    SortDirection.ASC.value: ASCENDING,
    SortDirection.DESC.value: DESCENDING,
}

_SCALARS = (bool, int, float, str)

# Strings read as "off" in a projection.
_FALSE_STRINGS = frozenset({"", "0"})


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value not in _FALSE_STRINGS
    return bool(value)


def _entries(fields: Any) -> Iterable[tuple[Any, Any, bool]]:
    """Yield ``(field, value, explicit)``; ``explicit`` is False for bare names."""
    if isinstance(fields, str):
        fields = [fields]
    if isinstance(fields, Mapping):
        for key, value in fields.items():
            yield key, value, True
        return
    for item in fields or ():
        if isinstance(item, (list, tuple)) and len(item) == 2:
            yield item[0], item[1], True
        else:
            yield item, None, False


def build_select_fields(fields: Any) -> dict[str, Any]:
    """Normalize a projection to ``{field: bool | sub-spec}``.

    ``["a", "b"]`` -> ``{"a": True, "b": True}``; ``{"a": 0}`` -> ``{"a": False}``;
    non-scalar values such as ``{"$slice": 5}`` are kept as given. The
    strings ``"0"`` and ``""`` mean exclusion, any other string inclusion.
    """
    select: dict[str, Any] = {}
    for field, value, explicit in _entries(fields):
        if not explicit:
            select[field] = True
        else:
            select[field] = _flag(value) if isinstance(value, _SCALARS) else value
    return select


def _direction(value: Any) -> Any:
    if isinstance(value, str):
        return _DIRECTIONS.get(value.lower(), value)
    return value


def build_sort_fields(fields: Any) -> dict[str, Any]:
    """Normalize a sort spec to ``{field: 1 | -1 | native}``.

    Bare names sort ascending. ``SortDirection`` members (or ``"asc"`` /
    ``"desc"`` in any case) become ``1`` / ``-1``; other values such as
    ``"text"`` or ``{"$meta": "textScore"}`` are kept verbatim.
    """
    sort: dict[str, Any] = {}
    for field, value, explicit in _entries(fields):
        sort[field] = _direction(value) if explicit else ASCENDING
    return sort
