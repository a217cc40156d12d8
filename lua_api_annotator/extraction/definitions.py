"""Extract Lua function definitions from scrubbed source text.

Each extractor is an independent pass over the same text and yields
candidate records. A definition may match more than one pass (a local
function also looks like a global one), in which case every match is
recorded under its own namespace.
"""

import logging
import re
from collections.abc import Iterator
from typing import TYPE_CHECKING

from lua_api_annotator.extraction.type_heuristics import classify_argument
from lua_api_annotator.models import (
    GLOBAL_NAMESPACE,
    LOCAL_NAMESPACE,
    FunctionRecord,
    Parameter,
)

if TYPE_CHECKING:
    from lua_api_annotator.catalog import Catalog

logger = logging.getLogger(__name__)

# function name(params) body end
GLOBAL_FUNCTION_PATTERN = re.compile(
    r"function\s+(\w+)\s*\((.*?)\)(.*?)\bend\b", re.DOTALL
)

# function namespace.name(params) body end
NAMESPACED_FUNCTION_PATTERN = re.compile(
    r"function\s+(\w+)\.(\w+)\s*\((.*?)\)(.*?)\bend\b", re.DOTALL
)

# namespace.name = function(params) body end
TABLE_FUNCTION_PATTERN = re.compile(
    r"(\w+)\.(\w+)\s*=\s*function\s*\((.*?)\)(.*?)\bend\b", re.DOTALL
)

# local function name(params) body end
LOCAL_FUNCTION_PATTERN = re.compile(
    r"local\s+function\s+(\w+)\s*\((.*?)\)(.*?)\bend\b", re.DOTALL
)

LOCAL_NAME_PATTERN = re.compile(r"local\s+function\s+(\w+)")
GLOBAL_NAME_PATTERN = re.compile(r"function\s+(\w+)\s*\(")
MODULE_PATTERN = re.compile(r"^local\s+(\w+)\s*=\s*require")

# prefix.name( -- used to recognise names that are only ever called qualified
PREFIXED_CALL_PATTERN = re.compile(r"(\w+)\.(\w+)\s*\(")

RETURN_NUMBER_PATTERN = re.compile(r"return\s+[0-9]")
RETURN_STRING_PATTERN = re.compile(r"""return\s+["']""")
RETURN_TABLE_PATTERN = re.compile(r"return\s+\{")


def parse_parameters(params_str: str) -> list[Parameter]:
    """Parse a definition's parameter list.

    A '[' marks the parameter as optional; a '= default' suffix gives the
    type of the default value.

    Args:
        params_str: Text between the definition's parentheses

    Returns:
        List of Parameter objects, empty names dropped
    """
    if not params_str or not params_str.strip():
        return []

    parameters = []
    for raw in params_str.split(","):
        raw = raw.strip()
        optional = "[" in raw
        name = raw.replace("[", "").replace("]", "").strip()

        param_type = "any"
        if "=" in name:
            name, default = (part.strip() for part in name.split("=", 1))
            param_type = classify_argument(default)

        if name:
            parameters.append(Parameter(name=name, type=param_type, optional=optional))

    return parameters


def infer_return_type(body: str) -> str:
    """Guess a return type from literal return statements in a body."""
    if not body:
        return "any"
    if "return true" in body or "return false" in body:
        return "boolean"
    if RETURN_NUMBER_PATTERN.search(body):
        return "number"
    if RETURN_STRING_PATTERN.search(body):
        return "string"
    if RETURN_TABLE_PATTERN.search(body):
        return "table"
    return "any"


def _record(
    namespace: str, name: str, params: str, body: str, file_name: str, kind: str
) -> FunctionRecord:
    return FunctionRecord(
        name=name,
        namespace=namespace,
        parameters=parse_parameters(params),
        return_type=infer_return_type(body),
        source=file_name,
        kind=kind,
        body=body,
    )


def extract_global_functions(cleaned: str, file_name: str) -> Iterator[FunctionRecord]:
    for match in GLOBAL_FUNCTION_PATTERN.finditer(cleaned):
        name, params, body = match.groups()
        yield _record(GLOBAL_NAMESPACE, name, params, body, file_name, "global")


def extract_namespaced_functions(
    cleaned: str, file_name: str
) -> Iterator[FunctionRecord]:
    for match in NAMESPACED_FUNCTION_PATTERN.finditer(cleaned):
        namespace, name, params, body = match.groups()
        yield _record(namespace, name, params, body, file_name, "namespaced")


def extract_table_functions(cleaned: str, file_name: str) -> Iterator[FunctionRecord]:
    for match in TABLE_FUNCTION_PATTERN.finditer(cleaned):
        namespace, name, params, body = match.groups()
        yield _record(namespace, name, params, body, file_name, "table")


def extract_local_functions(cleaned: str, file_name: str) -> Iterator[FunctionRecord]:
    for match in LOCAL_FUNCTION_PATTERN.finditer(cleaned):
        name, params, body = match.groups()
        yield _record(LOCAL_NAMESPACE, name, params, body, file_name, "local")


# Applied in this order so catalog tie-breaks are stable
DEFINITION_EXTRACTORS = (
    extract_global_functions,
    extract_namespaced_functions,
    extract_table_functions,
    extract_local_functions,
)


def extract_definitions(cleaned: str, file_name: str, catalog: "Catalog") -> int:
    """Run every definition pass over a scrubbed file and feed the catalog.

    Args:
        cleaned: Source with comments and string contents removed
        file_name: Name recorded as the records' source
        catalog: Catalog receiving the records

    Returns:
        Number of records the catalog accepted
    """
    accepted = 0
    for extractor in DEFINITION_EXTRACTORS:
        for record in extractor(cleaned, file_name):
            if catalog.insert(record.namespace, record.name, record):
                accepted += 1
            if record.namespace == LOCAL_NAMESPACE:
                catalog.local_names.add(record.name)

    logger.debug(f"{file_name}: {accepted} definitions accepted")
    return accepted


def collect_definition_names(cleaned: str, catalog: "Catalog") -> None:
    """Record every locally and globally defined name, line by line."""
    for line in cleaned.split("\n"):
        if MODULE_PATTERN.match(line):
            continue
        for match in LOCAL_NAME_PATTERN.finditer(line):
            catalog.local_names.add(match.group(1))
        for match in GLOBAL_NAME_PATTERN.finditer(line):
            catalog.global_names.add(match.group(1))


def collect_prefixed_calls(cleaned: str, catalog: "Catalog") -> None:
    """Index which prefixes each name is called with, e.g. C.GetPlayerID()."""
    for match in PREFIXED_CALL_PATTERN.finditer(cleaned):
        prefix, name = match.groups()
        catalog.prefixed_calls[name].add(prefix)
