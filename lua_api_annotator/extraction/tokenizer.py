"""Split raw call-argument strings into top-level argument expressions."""

OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {")": "(", "]": "[", "}": "{"}
QUOTES = "\"'"


def parse_argument_string(args_str: str) -> list[str]:
    """Parse argument string into individual arguments.

    Handles nested calls, table constructors and quoted strings containing
    commas. A comma only separates arguments when no bracket of any kind is
    open and no string literal is open.

    Args:
        args_str: Text between the parentheses of a call

    Returns:
        Ordered list of stripped argument expressions
    """
    if not args_str or not args_str.strip():
        return []

    arguments = []
    current = ""
    depth = {"(": 0, "[": 0, "{": 0}
    in_string = False
    string_char = None
    previous = ""

    for char in args_str:
        if in_string:
            current += char
            if char == string_char and previous != "\\":
                in_string = False
        elif char in QUOTES:
            in_string = True
            string_char = char
            current += char
        elif char in OPENERS:
            depth[char] += 1
            current += char
        elif char in CLOSERS:
            depth[CLOSERS[char]] -= 1
            current += char
        elif char == "," and not any(depth.values()):
            arguments.append(current.strip())
            current = ""
        else:
            current += char
        previous = char

    if current.strip():
        arguments.append(current.strip())

    return arguments
