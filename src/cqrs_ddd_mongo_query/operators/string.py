"""String operators -> ``bson.Regex`` values."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

from bson.regex import Regex

from ..exceptions import MalformedConditionError
from .operands import unpack_operands

# Conventional "/body/flags" notation.
_DELIMITED_REGEX = re.compile(r"/(.+)/(.*)")


def _to_regex(operator: str, value: Any) -> Regex[Any]:
    if isinstance(value, Regex):
        return value
    if isinstance(value, re.Pattern):
        return Regex.from_native(value)
    if not isinstance(value, str):
        raise MalformedConditionError(
            f"Operator '{operator}' requires a string pattern, "
            f"got {type(value).__name__}."
        )
    match = _DELIMITED_REGEX.search(value)
    if match:
        return Regex(match.group(1), match.group(2))
    return Regex(value, "")


def build_regex_condition(operator: str, operands: Sequence[Any]) -> dict[str, Any]:
    """Build ``{field: Regex(...)}`` from a pattern or ``/pattern/flags``."""
    field, value = unpack_operands(operator, operands, 2)
    return {field: _to_regex(operator, value)}


def build_like_condition(operator: str, operands: Sequence[Any]) -> dict[str, Any]:
    """Emulate ``LIKE``: case-insensitive match of the literal substring."""
    field, value = unpack_operands(operator, operands, 2)
    if not isinstance(value, Regex):
        value = Regex(re.escape(str(value)), "i")
    return {field: value}
