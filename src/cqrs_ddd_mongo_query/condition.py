"""Translate portable condition expressions into MongoDB filter documents.

Two input forms are accepted:

* hash form: ``{"status": 1, "tags": ["a", "b"]}``
* operator form: ``["OR", ["AND", {...}, {...}], [">=", "age", 18]]``

For example::

    build_condition(
        ["OR", ["AND", {"first_name": "John"}, {"last_name": "Smith"}], {"status": [1, 2, 3]}]
    )
    # {"$or": [{"first_name": "John", "last_name": "Smith"},
    #          {"status": {"$in": [1, 2, 3]}}]}

Values addressed at ``_id`` are converted to ``ObjectId`` when they hold a
valid id. Other fields are never type-cast.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from types import MappingProxyType
from typing import Any

from .exceptions import MalformedConditionError
from .identifiers import ensure_id_value
from .operators import (
    build_between_condition,
    build_in_condition,
    build_like_condition,
    build_regex_condition,
    build_simple_condition,
    is_native,
    normalize_condition_keyword,
)
from .operators.operands import unpack_operands

ConditionBuilder = Callable[[str, Sequence[Any]], dict[str, Any]]


def _is_expression(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def build_condition(condition: Any) -> dict[str, Any]:
    """Parse a condition specification into a MongoDB filter document.

    Raises:
        MalformedConditionError: if the condition is not a mapping or a
            sequence, or an operator gets the wrong number of operands.
        UnsupportedOperatorError: for an unknown non-``$`` operator.
    """
    if not _is_expression(condition):
        raise MalformedConditionError(
            f"Condition should be a mapping or a list, got {type(condition).__name__}."
        )
    if not condition:
        return {}
    if isinstance(condition, Mapping):
        return build_hash_condition(condition)

    raw_operator, *operands = condition
    if not isinstance(raw_operator, str):
        raise MalformedConditionError(
            f"Condition operator should be a string, got {type(raw_operator).__name__}."
        )
    operator = raw_operator.upper()
    builder = _BUILDERS.get(operator)
    if builder is None:
        return build_simple_condition(raw_operator, operands)
    return builder(operator, operands)


def build_hash_condition(condition: Mapping[str, Any]) -> dict[str, Any]:
    """Build a condition from ``field: value`` pairs.

    ``$``-prefixed keys and mapping values are native syntax and pass
    through; list values become an ``IN`` condition.
    """
    result: dict[str, Any] = {}
    for name, value in condition.items():
        if (isinstance(name, str) and is_native(name)) or isinstance(value, Mapping):
            result[name] = value
        elif isinstance(value, (list, tuple)):
            result.update(build_in_condition("IN", [name, value]))
        else:
            result[name] = ensure_id_value(name, value)
    return result


def build_not_condition(operator: str, operands: Sequence[Any]) -> dict[str, Any]:
    """``["NOT", field, value]`` -> ``$not`` for expressions, ``$ne`` otherwise."""
    name, value = unpack_operands(operator, operands, 2)
    if _is_expression(value):
        return {name: {"$not": build_condition(value)}}
    return {name: {"$ne": ensure_id_value(name, value)}}


def build_and_condition(operator: str, operands: Sequence[Any]) -> dict[str, Any]:
    """Connect conditions with ``$and``.

    When the translated operands share no keys they are merged into a single
    document, which MongoDB evaluates as an implicit AND. This keeps nested
    groups such as ``["AND", {"first_name": ...}, {"last_name": ...}]`` in
    their flat form; operands that share a key (including two ``$or``
    groups) always produce the ``$and`` list.
    """
    parts = [build_condition(operand) for operand in operands]
    merged: dict[str, Any] = {}
    for part in parts:
        if merged.keys() & part.keys():
            return {normalize_condition_keyword(operator): parts}
        merged.update(part)
    return merged


def build_or_condition(operator: str, operands: Sequence[Any]) -> dict[str, Any]:
    """Connect conditions with ``$or``."""
    return {
        normalize_condition_keyword(operator): [
            build_condition(operand) for operand in operands
        ]
    }


_BUILDERS: Mapping[str, ConditionBuilder] = MappingProxyType(
    {
        "NOT": build_not_condition,
        "AND": build_and_condition,
        "OR": build_or_condition,
        "BETWEEN": build_between_condition,
        "NOT BETWEEN": build_between_condition,
        "IN": build_in_condition,
        "NOT IN": build_in_condition,
        "REGEX": build_regex_condition,
        "LIKE": build_like_condition,
    }
)
