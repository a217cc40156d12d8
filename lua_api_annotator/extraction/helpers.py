"""Extract Helper.* functions and infer parameter types from type() guards."""

import logging
import re
from collections.abc import Iterator
from typing import TYPE_CHECKING

from lua_api_annotator.extraction.definitions import infer_return_type
from lua_api_annotator.models import HELPER_NAMESPACE, FunctionRecord, Parameter

if TYPE_CHECKING:
    from lua_api_annotator.catalog import Catalog

logger = logging.getLogger(__name__)

# function Helper.name(params) body end
HELPER_FUNCTION_PATTERN = re.compile(
    r"function\s+Helper\.(\w+)\s*\((.*?)\)(.*?)\bend\b", re.DOTALL
)

# Helper.name = function(params) body end
HELPER_TABLE_PATTERN = re.compile(
    r"Helper\.(\w+)\s*=\s*function\s*\((.*?)\)(.*?)\bend\b", re.DOTALL
)

# Checked in this order; the first guard found decides
GUARDED_TYPES = ("string", "number", "boolean", "table", "function")


def infer_guarded_type(param: str, body: str) -> str:
    """Find a `type(param) == "..."` guard for a parameter in a body.

    Args:
        param: Parameter name
        body: Function body with string literals intact

    Returns:
        The guarded type, or "any" when the body has no guard
    """
    for guarded in GUARDED_TYPES:
        guard = re.compile(
            rf"""type\s*\(\s*{re.escape(param)}\s*\)\s*==\s*["']{guarded}["']"""
        )
        if guard.search(body):
            return guarded
    return "any"


def _helper_record(
    name: str, params_str: str, body: str, file_name: str
) -> FunctionRecord:
    params = [p.strip() for p in params_str.split(",") if p.strip()]
    return FunctionRecord(
        name=name,
        namespace=HELPER_NAMESPACE,
        parameters=[
            Parameter(name=p, type=infer_guarded_type(p, body)) for p in params
        ],
        return_type=infer_return_type(body),
        source=file_name,
        kind="helper",
        body=body,
    )


def extract_helper_functions(
    stripped: str, file_name: str
) -> Iterator[FunctionRecord]:
    """Yield Helper functions in both definition forms.

    Args:
        stripped: Source with comments removed but string literals intact,
            so type guards such as `type(x) == "string"` stay visible
        file_name: Name recorded as the records' source
    """
    for pattern in (HELPER_FUNCTION_PATTERN, HELPER_TABLE_PATTERN):
        for match in pattern.finditer(stripped):
            name, params_str, body = match.groups()
            yield _helper_record(name, params_str, body, file_name)


def extract_helpers(stripped: str, file_name: str, catalog: "Catalog") -> int:
    """Add every Helper function of a file to the catalog's helper store."""
    added = 0
    for record in extract_helper_functions(stripped, file_name):
        if catalog.insert_helper(record):
            added += 1

    if added:
        logger.info(f"{file_name}: {added} Helper functions")
    return added
