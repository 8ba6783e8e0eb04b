"""Portable operator keywords -> MongoDB operator tokens."""

from __future__ import annotations

from types import MappingProxyType

OPERATOR_SIGIL = "$"

_CONDITION_KEYWORDS = MappingProxyType(
    {
        "AND": "$and",
        "OR": "$or",
        "IN": "$in",
        "NOT IN": "$nin",
    }
)

COMPARISON_ALIASES = MappingProxyType(
    {
        ">": "$gt",
        "<": "$lt",
        ">=": "$gte",
        "<=": "$lte",
        "!=": "$ne",
        "<>": "$ne",
        "=": "$eq",
        "==": "$eq",
    }
)


def is_native(key: str) -> bool:
    """Return True when ``key`` is already a MongoDB operator."""
    return key.startswith(OPERATOR_SIGIL)


def normalize_condition_keyword(key: str) -> str:
    """Map ``AND``/``OR``/``IN``/``NOT IN`` (any case) to the native token.

    Unknown keys are returned unchanged.
    """
    return _CONDITION_KEYWORDS.get(key.upper(), key)
