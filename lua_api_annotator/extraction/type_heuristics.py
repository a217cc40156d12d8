"""Classify argument expressions into Lua types from their surface syntax."""

import re

VARARGS_TABLE_PATTERN = re.compile(r"^\{.*\.\.\..*\}$", re.DOTALL)
NESTED_CALL_PATTERN = re.compile(r"\w+\s*\([^)]*\)")
STRING_FORMAT_PATTERN = re.compile(r"string\.format\s*\(", re.IGNORECASE)
TOSTRING_PATTERN = re.compile(r"tostring\s*\(")
QUOTED_PATTERN = re.compile(r"""^(".*?"|'.*?')$""", re.DOTALL)
NUMBER_PATTERN = re.compile(r"^[0-9]+(\.[0-9]+)?$")
TABLE_PATTERN = re.compile(r"^\{.*\}$", re.DOTALL)
# ".." but not the "..." varargs marker
CONCAT_PATTERN = re.compile(r"(?<!\.)\.\.(?!\.)")


def is_varargs_table(arg: str) -> bool:
    """True for a table constructor holding '...', e.g. {1, ...}."""
    return bool(VARARGS_TABLE_PATTERN.match(arg))


def is_concatenation(arg: str) -> bool:
    return bool(CONCAT_PATTERN.search(arg))


def is_string_format(arg: str) -> bool:
    return bool(STRING_FORMAT_PATTERN.search(arg))


def classify_argument(arg: str) -> str:
    """Classify one argument (or default value) expression.

    Order matters: a concatenation such as "a" .. b starts with something
    that looks like a string literal, and a nested call can contain
    literals of any type.

    Args:
        arg: A single stripped argument expression

    Returns:
        One of "boolean", "string", "number", "table", "function", "any"
    """
    if is_varargs_table(arg):
        return "table"

    if NESTED_CALL_PATTERN.search(arg):
        if is_string_format(arg) or TOSTRING_PATTERN.search(arg):
            return "string"
        return "any"

    if is_concatenation(arg):
        return "string"

    if arg in ("true", "false"):
        return "boolean"
    if QUOTED_PATTERN.match(arg):
        return "string"
    if NUMBER_PATTERN.match(arg):
        return "number"
    if TABLE_PATTERN.match(arg):
        return "table"
    if arg.startswith("function"):
        return "function"

    return "any"


def classify_arguments(args: list[str]) -> list[str]:
    """Classify every argument of a call."""
    return [classify_argument(arg) for arg in args]
