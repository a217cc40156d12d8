"""Extract C declarations from ffi.cdef[[ ... ]] blocks."""

import logging
import re
from collections.abc import Iterator
from typing import TYPE_CHECKING

from lua_api_annotator.models import FfiFunction, FfiType, Parameter

if TYPE_CHECKING:
    from lua_api_annotator.catalog import Catalog

logger = logging.getLogger(__name__)

CDEF_BLOCK_PATTERN = re.compile(r"ffi\.cdef\s*\[\[([\s\S]*?)\]\]")

# Indented typedefs: typedef struct { ... } Name;  typedef int32_t Name;
TYPEDEF_PATTERN = re.compile(
    r"[ \t]+typedef\s+(struct|enum|union|\w+)(\s+\{\s*[\s\S]*?\s*\}|\s+\w+)?\s+(\w+);"
)

# [const] type[*[const]...] Name(params);
FUNCTION_PATTERN = re.compile(
    r"(?:((?:const\s+)?(?:\w+(?:\s*\*\s*(?:const)?)*?))\s+)?(\w+)\s*\((.*?)\);"
)

# [const] type[*...] name  or  ...
PARAM_PATTERN = re.compile(
    r"(?:((?:const\s+)?(?:\w+(?:\s*\*\s*(?:const)?)*?))\s+)?(\w+|\.\.\.)$"
)


def find_cdef_blocks(content: str) -> list[str]:
    """Return the inner text of every ffi.cdef block in a file."""
    return [match.group(1) for match in CDEF_BLOCK_PATTERN.finditer(content)]


def parse_c_parameters(params_str: str) -> list[Parameter]:
    """Parse a C parameter list into typed parameters.

    'void' means no parameters, and '...' becomes a parameter named
    'varargs'.
    """
    params_str = params_str.strip()
    if not params_str or params_str == "void":
        return []

    parameters = []
    for param in (p.strip() for p in params_str.split(",")):
        match = PARAM_PATTERN.search(param)
        if match:
            param_type = match.group(1).strip() if match.group(1) else param
            name = match.group(2) if match.group(2) != "..." else "varargs"
            parameters.append(Parameter(name=name, type=param_type))
        else:
            parameters.append(Parameter(name="", type=param))

    return parameters


def extract_ffi_types(block: str, file_name: str) -> Iterator[FfiType]:
    for match in TYPEDEF_PATTERN.finditer(block):
        yield FfiType(
            name=match.group(3),
            kind=match.group(1),
            declaration=match.group(0),
            source=file_name,
        )


def extract_ffi_functions(block: str, file_name: str) -> Iterator[FfiFunction]:
    for match in FUNCTION_PATTERN.finditer(block):
        return_type = match.group(1).strip() if match.group(1) else "void"
        yield FfiFunction(
            name=match.group(2),
            return_type=return_type,
            parameters=parse_c_parameters(match.group(3)),
            declaration=match.group(0).strip(),
            source=file_name,
        )


def extract_ffi_declarations(content: str, file_name: str, catalog: "Catalog") -> int:
    """Record every typedef and C function declared in a file's cdef blocks.

    A name already in the catalog's FFI stores is never overwritten, even
    by a longer declaration.

    Args:
        content: Raw Lua source
        file_name: Name recorded as the declarations' source
        catalog: Catalog receiving the declarations

    Returns:
        Number of new functions recorded
    """
    added = 0
    for block in find_cdef_blocks(content):
        for ffi_type in extract_ffi_types(block, file_name):
            catalog.insert_ffi_type(ffi_type)
        for function in extract_ffi_functions(block, file_name):
            if catalog.insert_ffi_function(function):
                added += 1
            else:
                logger.debug(f"Ignoring duplicate C declaration of {function.name}")

    if added:
        logger.info(f"{file_name}: {added} FFI functions")
    return added
