"""Strip comments and string literals from Lua source before pattern matching."""

import re

BLOCK_COMMENT_PATTERN = re.compile(r"--\[\[[\s\S]*?\]\]")

DOUBLE_QUOTED_PATTERN = re.compile(r'"(?:[^"\\]|\\.)*"')
SINGLE_QUOTED_PATTERN = re.compile(r"'(?:[^'\\]|\\.)*'")

# Either kind of literal, for locating spans in unscrubbed text
STRING_LITERAL_PATTERN = re.compile(r""""(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*'""")


def strip_comments(content: str) -> str:
    """Remove block comments and line comments, keeping string literals.

    Args:
        content: Raw Lua source

    Returns:
        Source with every comment removed
    """
    content = BLOCK_COMMENT_PATTERN.sub("", content)

    lines = content.split("\n")
    for i, line in enumerate(lines):
        comment_start = line.find("--")
        if comment_start >= 0:
            lines[i] = line[:comment_start]

    return "\n".join(lines)


def clean_lua_content(content: str) -> str:
    """Remove comments and blank out string literals.

    String literals become "" or '' so extractor patterns never match
    inside documentation or string data.

    Args:
        content: Raw Lua source

    Returns:
        Scrubbed source
    """
    lines = strip_comments(content).split("\n")
    for i, line in enumerate(lines):
        line = DOUBLE_QUOTED_PATTERN.sub('""', line)
        line = SINGLE_QUOTED_PATTERN.sub("''", line)
        lines[i] = line

    return "\n".join(lines)


def string_literal_spans(content: str) -> list[tuple[int, int]]:
    """Return (start, end) offsets of every string literal, in order."""
    return [m.span() for m in STRING_LITERAL_PATTERN.finditer(content)]
