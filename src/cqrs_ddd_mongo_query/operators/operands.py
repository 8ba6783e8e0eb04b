"""Operand list validation shared by the condition builders."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..exceptions import MalformedConditionError

_COUNT_WORDS = {2: "two", 3: "three"}


def unpack_operands(operator: str, operands: Sequence[Any], count: int) -> list[Any]:
    """Return ``operands`` as a list, requiring exactly ``count`` items."""
    if len(operands) != count:
        raise MalformedConditionError(
            f"Operator '{operator}' requires {_COUNT_WORDS.get(count, count)} operands."
        )
    return list(operands)
