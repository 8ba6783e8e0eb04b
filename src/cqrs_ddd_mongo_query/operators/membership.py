"""``IN`` / ``NOT IN`` conditions, including composite (multi-field) IN."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from ..exceptions import MalformedConditionError
from ..identifiers import ensure_id_value
from .keywords import normalize_condition_keyword
from .operands import unpack_operands


def _as_list(values: Any) -> list[Any]:
    if values is None:
        return []
    if isinstance(values, Mapping):
        return list(values.values())
    if isinstance(values, (list, tuple, set, frozenset)):
        return list(values)
    return [values]


def _membership(operator: str, values: list[Any]) -> Any:
    # A single value under $in is a plain equality match.
    if len(values) == 1 and operator == "$in":
        return values[0]
    return {operator: values}


def build_in_condition(operator: str, operands: Sequence[Any]) -> dict[str, Any]:
    """Build a ``$in`` / ``$nin`` condition.

    The first operand is a field name or a list of field names. With more
    than one field, the second operand is a list of row mappings and a
    composite condition is generated (see :func:`build_composite_in_condition`).
    """
    fields, values = unpack_operands(operator, operands, 2)
    native = normalize_condition_keyword(operator)
    values = _as_list(values)

    if isinstance(fields, (list, tuple)):
        if not fields:
            raise MalformedConditionError(
                f"Operator '{operator}' requires at least one field."
            )
        if len(fields) > 1:
            return build_composite_in_condition(native, fields, values)
        field = fields[0]
    else:
        field = fields

    in_values = _as_list(ensure_id_value(field, values))
    return {field: _membership(native, in_values)}


def build_composite_in_condition(
    operator: str, fields: Sequence[str], rows: Sequence[Any]
) -> dict[str, Any]:
    """Regroup row mappings per field and emit one membership per field.

    ``["a", "b"]`` with ``[{"a": 1, "b": 2}, {"a": 3, "b": 4}]`` becomes
    ``{"a": {"$in": [1, 3]}, "b": {"$in": [2, 4]}}``.
    """
    grouped: dict[str, list[Any]] = {}
    for row in rows:
        if not isinstance(row, Mapping):
            raise MalformedConditionError(
                "Composite IN condition requires a mapping per row, "
                f"got {type(row).__name__}."
            )
        for field, value in row.items():
            grouped.setdefault(field, []).append(ensure_id_value(field, value))

    return {field: _membership(operator, grouped.get(field, [])) for field in fields}
