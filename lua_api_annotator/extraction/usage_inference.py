"""Infer signatures of undocumented functions from the calls made to them.

Every call to a name that no definition, reference entry or FFI block
explains is tokenized, its arguments classified, and the result merged
into a per-name parameter hypothesis. The hypothesis only ever grows:
new calls can add parameters, sharpen `any` types and replace placeholder
names, but never remove anything.
"""

import logging
import re
from bisect import bisect_right
from collections.abc import Iterable
from dataclasses import dataclass, replace
from functools import reduce
from pathlib import Path
from typing import TYPE_CHECKING

from lua_api_annotator.extraction.scrubber import string_literal_spans, strip_comments
from lua_api_annotator.extraction.tokenizer import parse_argument_string
from lua_api_annotator.extraction.type_heuristics import (
    classify_arguments,
    is_concatenation,
    is_string_format,
    is_varargs_table,
)
from lua_api_annotator.models import (
    FFI_NAMESPACE,
    Parameter,
    UndocumentedRecord,
    Usage,
)

if TYPE_CHECKING:
    from lua_api_annotator.catalog import Catalog
    from lua_api_annotator.corpus import SourceFile

logger = logging.getLogger(__name__)

# name(args) with one level of nested parentheses inside args
CALL_PATTERN = re.compile(r"\b(\w+)\s*\(((?:[^()]|\([^()]*\))*)\)")

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_]\w*$")
NUMBER_PATTERN = re.compile(r"^[0-9]+(\.[0-9]+)?$")
STRING_LITERAL_PATTERN = re.compile(r"""^["'](.+)["']$""", re.DOTALL)
SIMPLE_WORD_PATTERN = re.compile(r"^\w+$")
TABLE_PATTERN = re.compile(r"^\{.*\}$", re.DOTALL)

RESERVED_WORDS = frozenset({"true", "false", "nil", "function"})

TEXT_DESCRIPTION = "The text string (supports concatenation and formatting)"
VARARGS_TABLE_DESCRIPTION = "Table with variable arguments"

LUA_STDLIB = frozenset(
    {
        # Base library
        "assert", "collectgarbage", "dofile", "error", "getmetatable", "ipairs",
        "load", "loadfile", "loadstring", "module", "next", "pairs", "pcall",
        "print", "rawequal", "rawget", "rawlen", "rawset", "require", "select",
        "setfenv", "getfenv", "setmetatable", "tonumber", "tostring", "type",
        "unpack", "xpcall",
        # string
        "byte", "char", "dump", "find", "format", "gmatch", "gsub", "len",
        "lower", "match", "rep", "reverse", "sub", "upper",
        # table
        "concat", "insert", "maxn", "remove", "sort", "pack",
        # math
        "abs", "acos", "asin", "atan", "atan2", "ceil", "cos", "cosh", "deg",
        "exp", "floor", "fmod", "frexp", "huge", "ldexp", "log", "log10", "max",
        "min", "modf", "pi", "pow", "rad", "random", "randomseed", "sin", "sinh",
        "sqrt", "tan", "tanh", "tointeger", "ult",
        # io
        "close", "flush", "input", "lines", "open", "output", "popen", "read",
        "tmpfile", "write",
        # os
        "clock", "date", "difftime", "execute", "exit", "getenv", "rename",
        "setlocale", "time", "tmpname",
        # coroutine
        "create", "isyieldable", "resume", "running", "status", "wrap", "yield",
        # utf8
        "charpattern", "codepoint", "codes", "offset",
        # debug
        "debug", "gethook", "getinfo", "getlocal", "getregistry", "getupvalue",
        "getuservalue", "sethook", "setlocal", "setupvalue", "setuservalue",
        "traceback", "upvalueid", "upvaluejoin",
    }
)


def placeholder_name(index: int) -> str:
    """Positional name given to a parameter before anything better is known."""
    return f"arg{index + 1}"


def _collapse(
    params: list[Parameter], name: str, param_type: str, description: str
) -> list[Parameter]:
    if not params or params[0].name == placeholder_name(0):
        return [Parameter(name=name, type=param_type, description=description)]
    return [replace(params[0], type=param_type)]


def _specialize_name(param: Parameter, arg: str) -> None:
    """Replace a placeholder name based on the shape of one argument."""
    if IDENTIFIER_PATTERN.match(arg) and arg not in RESERVED_WORDS:
        param.name = arg
    elif NUMBER_PATTERN.match(arg):
        param.name = "value"
        param.description = f"Literal value: {arg}"
    elif string_match := STRING_LITERAL_PATTERN.match(arg):
        content = string_match.group(1)
        if SIMPLE_WORD_PATTERN.match(content):
            param.name = content
        else:
            param.name = "text"
            param.description = f"Example: {content}"
    elif arg in ("true", "false"):
        param.name = "flag"
        param.type = "boolean"
        param.description = f"Boolean flag, example: {arg}"
    elif TABLE_PATTERN.match(arg):
        if is_varargs_table(arg):
            param.name = "args"
            param.description = VARARGS_TABLE_DESCRIPTION
        else:
            param.name = "options"
            param.description = "Table of options"


def merge_call(params: list[Parameter], args: list[str]) -> list[Parameter]:
    """Refine a parameter hypothesis with the arguments of one more call.

    Args:
        params: Current hypothesis (not modified)
        args: Tokenized arguments of the observed call

    Returns:
        The refined hypothesis, never shorter than params
    """
    types = classify_arguments(args)

    # Message-style calls: DebugError("x: " .. tostring(x))
    if types and types[0] == "string":
        first = args[0]
        if is_concatenation(first) or is_string_format(first):
            multi_arg_format = is_string_format(first) and len(args) > 1
            if (is_concatenation(first) or not multi_arg_format) and len(params) <= 1:
                return _collapse(params, "text", "string", TEXT_DESCRIPTION)

    # A single table holding varargs: Call({a, b, ...})
    if len(args) == 1 and types[0] == "table" and is_varargs_table(args[0]):
        if len(params) <= 1:
            return _collapse(params, "args", "table", VARARGS_TABLE_DESCRIPTION)

    merged = [replace(p) for p in params]
    while len(merged) < len(args):
        merged.append(Parameter(name=placeholder_name(len(merged))))

    for i, (arg, arg_type) in enumerate(zip(args, types)):
        param = merged[i]
        if arg_type != "any" and param.type == "any":
            param.type = arg_type
        if param.name == placeholder_name(i):
            _specialize_name(param, arg)

    return merged


def infer_parameters(calls: Iterable[list[str]]) -> list[Parameter]:
    """Fold a sequence of tokenized calls into one parameter hypothesis."""
    return reduce(merge_call, calls, [])


@dataclass
class CallFilter:
    """Decides which called names are worth inferring a signature for."""

    known: set[str]
    local: set[str]
    c_prefixed: set[str]

    def __post_init__(self):
        self._known_lower = {name.lower() for name in self.known}
        self._local_lower = {name.lower() for name in self.local}

    @classmethod
    def from_catalog(cls, catalog: "Catalog") -> "CallFilter":
        return cls(
            known=catalog.known_names() | set(catalog.ffi_functions),
            local=set(catalog.local_names),
            c_prefixed={
                name
                for name, prefixes in catalog.prefixed_calls.items()
                if FFI_NAMESPACE in prefixes
            },
        )

    def excludes(self, name: str) -> bool:
        """True when a name is documented elsewhere or looks like a local helper."""
        if name in self.known or name in self.local or name in LUA_STDLIB:
            return True
        if name.lower() in self._known_lower or name.lower() in self._local_lower:
            return True
        if name == name.lower() or name == name.upper():
            return True
        if name[0].islower():
            return True
        return name in self.c_prefixed


def _inside_string(
    position: int, spans: list[tuple[int, int]], starts: list[int]
) -> bool:
    index = bisect_right(starts, position) - 1
    return index >= 0 and spans[index][0] <= position < spans[index][1]


def _preceding_char(text: str, position: int) -> str:
    """The last non-whitespace character before position, or ""."""
    index = position - 1
    while index >= 0 and text[index].isspace():
        index -= 1
    return text[index] if index >= 0 else ""


def find_unknown_calls(
    stripped: str, call_filter: CallFilter
) -> Iterable[tuple[str, list[str]]]:
    """Yield (name, arguments) for every unexplained call in a file.

    Args:
        stripped: Source with comments removed and string literals intact
        call_filter: Names to leave out

    Yields:
        Function name and its tokenized arguments
    """
    spans = string_literal_spans(stripped)
    starts = [start for start, _ in spans]

    for match in CALL_PATTERN.finditer(stripped):
        name = match.group(1)
        if _inside_string(match.start(), spans, starts):
            continue
        if call_filter.excludes(name):
            continue
        # obj:Method() and ns.Func() are qualified calls
        preceding = _preceding_char(stripped, match.start())
        if preceding in (":", "."):
            continue
        yield name, parse_argument_string(match.group(2).strip())


def infer_undocumented(
    files: Iterable["SourceFile"], catalog: "Catalog"
) -> dict[str, UndocumentedRecord]:
    """Scan every file for calls to unknown names and refine their records.

    Must run after every definition pass, since the exclusion set is built
    from the finished catalog.

    Args:
        files: The corpus
        catalog: Finished catalog; its undocumented store is updated

    Returns:
        The catalog's undocumented store
    """
    logger.info("Analyzing for undocumented function calls...")
    call_filter = CallFilter.from_catalog(catalog)
    records = catalog.undocumented

    for source in files:
        file_name = Path(source.path).name
        stripped = strip_comments(source.text)

        for name, args in find_unknown_calls(stripped, call_filter):
            record = records.get(name)
            if record is None:
                record = UndocumentedRecord(
                    name=name,
                    description=f"Undocumented function found in {file_name}",
                )
                records[name] = record

            record.files.add(file_name)
            record.usages.append(Usage(file=file_name, arguments=args))
            record.parameters = merge_call(record.parameters, args)

    logger.info(f"Found {len(records)} potentially undocumented functions")
    return records
