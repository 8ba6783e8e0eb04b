"""Leaf condition builders for MongoDB query compilation."""

from __future__ import annotations

from .keywords import (
    COMPARISON_ALIASES,
    OPERATOR_SIGIL,
    is_native,
    normalize_condition_keyword,
)
from .membership import build_composite_in_condition, build_in_condition
from .standard import build_between_condition, build_simple_condition
from .string import build_like_condition, build_regex_condition

__all__ = [
    "COMPARISON_ALIASES",
    "OPERATOR_SIGIL",
    "is_native",
    "normalize_condition_keyword",
    "build_between_condition",
    "build_composite_in_condition",
    "build_in_condition",
    "build_like_condition",
    "build_regex_condition",
    "build_simple_condition",
]
