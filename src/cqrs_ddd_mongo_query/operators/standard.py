"""Simple comparison and range conditions."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..exceptions import UnsupportedOperatorError
from .keywords import COMPARISON_ALIASES, is_native
from .operands import unpack_operands


def build_simple_condition(operator: str, operands: Sequence[Any]) -> dict[str, Any]:
    """Build ``{field: {operator: value}}``.

    Besides native operators (``$gt``, ``$size``, ...) the aliases ``>``,
    ``<``, ``>=``, ``<=``, ``!=``, ``<>``, ``=`` and ``==`` are accepted.
    """
    field, value = unpack_operands(operator, operands, 2)
    if not is_native(operator):
        native = COMPARISON_ALIASES.get(operator)
        if native is None:
            raise UnsupportedOperatorError(operator)
        operator = native
    return {field: {operator: value}}


def build_between_condition(operator: str, operands: Sequence[Any]) -> dict[str, Any]:
    """Emulate ``BETWEEN`` / ``NOT BETWEEN`` on a single field.

    ``NOT BETWEEN`` yields ``{"$lt": low, "$gt": high}`` in one document,
    not ``{"$not": {"$gte": low, "$lte": high}}``. Both bounds apply to the
    same field at once, so for scalar fields the server matches only values
    that are below ``low`` and above ``high``.
    """
    field, low, high = unpack_operands(operator, operands, 3)
    if operator.upper().startswith("NOT"):
        return {field: {"$lt": low, "$gt": high}}
    return {field: {"$gte": low, "$lte": high}}
