"""Tests for argument type classification."""

import pytest

from lua_api_annotator.extraction.type_heuristics import (
    classify_argument,
    is_concatenation,
    is_varargs_table,
)


class TestClassifyArgument:
    @pytest.mark.parametrize(
        "argument, expected",
        [
            ("true", "boolean"),
            ("false", "boolean"),
            ('"hello"', "string"),
            ("'hello'", "string"),
            ("42", "number"),
            ("3.5", "number"),
            ("{ 1, 2 }", "table"),
            ("{ ... }", "table"),
            ("someVariable", "any"),
            ("nil", "any"),
        ],
    )
    def test_classifies_literals(self, argument, expected):
        """Literal expressions map to their Lua type."""
        assert classify_argument(argument) == expected

    def test_concatenation_is_string(self):
        """A '..' expression is a string even when it starts with a literal."""
        assert classify_argument('"count: " .. n') == "string"

    def test_string_format_call_is_string(self):
        assert classify_argument('string.format("%d", n)') == "string"

    def test_tostring_call_is_string(self):
        assert classify_argument("tostring(value)") == "string"

    def test_other_nested_call_is_any(self):
        """A nested call hides its type, even if it contains literals."""
        assert classify_argument('GetText("x", 1)') == "any"

    def test_varargs_marker_is_not_concatenation(self):
        assert is_concatenation("...") is False
        assert is_concatenation("a .. b") is True

    def test_varargs_table_needs_braces(self):
        assert is_varargs_table("{ 1, ... }") is True
        assert is_varargs_table("...") is False
