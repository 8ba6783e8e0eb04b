"""Unit tests for REGEX and LIKE conditions."""

from __future__ import annotations

import re

import pytest
from bson.regex import Regex

from cqrs_ddd_mongo_query.exceptions import MalformedConditionError
from cqrs_ddd_mongo_query.operators.string import (
    build_like_condition,
    build_regex_condition,
)


class TestRegexCondition:
    """Tests for REGEX."""

    def test_delimited_pattern_is_split(self):
        result = build_regex_condition("REGEX", ["name", "/^jo/i"])
        assert result == {"name": Regex("^jo", "i")}

    def test_delimited_pattern_without_flags(self):
        result = build_regex_condition("REGEX", ["name", "/smith$/"])
        assert result == {"name": Regex("smith$", "")}

    def test_plain_pattern_has_no_flags(self):
        result = build_regex_condition("REGEX", ["name", "^jo"])
        assert result["name"].pattern == "^jo"
        assert result["name"].flags == 0

    def test_existing_regex_passes_through(self):
        regex = Regex("abc", "m")
        assert build_regex_condition("REGEX", ["name", regex])["name"] is regex

    def test_compiled_pattern_is_converted(self):
        result = build_regex_condition("REGEX", ["name", re.compile("ab+c", re.I)])
        assert isinstance(result["name"], Regex)
        assert result["name"].pattern == "ab+c"
        assert result["name"].flags & re.I

    def test_non_string_pattern_raises(self):
        with pytest.raises(MalformedConditionError, match="string pattern"):
            build_regex_condition("REGEX", ["name", 42])

    def test_wrong_operand_count(self):
        with pytest.raises(MalformedConditionError, match="requires two operands"):
            build_regex_condition("REGEX", ["name"])


class TestLikeCondition:
    """Tests for LIKE."""

    def test_like_is_case_insensitive_literal(self):
        result = build_like_condition("LIKE", ["name", "a.b*c"])
        assert result == {"name": Regex(re.escape("a.b*c"), "i")}
        assert result["name"].pattern == "a\\.b\\*c"

    def test_like_plain_word(self):
        assert build_like_condition("LIKE", ["name", "john"]) == {
            "name": Regex("john", "i")
        }

    def test_existing_regex_passes_through(self):
        regex = Regex("^x", "")
        assert build_like_condition("LIKE", ["name", regex]) == {"name": regex}

    def test_wrong_operand_count(self):
        with pytest.raises(MalformedConditionError, match="requires two operands"):
            build_like_condition("LIKE", ["name", "a", "b"])
