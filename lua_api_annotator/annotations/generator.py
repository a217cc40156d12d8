"""Render the catalog as LuaLS ---@meta annotation files."""

import logging
from collections import defaultdict
from pathlib import Path

from lua_api_annotator.config import AnnotatorConfig
from lua_api_annotator.models import (
    CatalogResult,
    FfiFunction,
    FfiType,
    FunctionRecord,
    Parameter,
    ResolvedExposure,
    UndocumentedRecord,
    WrapperExposure,
)
from lua_api_annotator.persistence import load_namespace_file

logger = logging.getLogger(__name__)

META_HEADER = "---@meta\n\n"

# Logging helpers whose one argument is usually built by concatenation
SINGLE_MESSAGE_FUNCTIONS = frozenset({"DebugError", "Logf", "ErrorLog", "DebugLog"})

# Return types that produce no ---@return line
SILENT_RETURN_TYPES = ("unknown", "void")

DEFAULT_FFI_NAMESPACE = {
    "description": (
        "-- X4: Foundations FFI API\n"
        "-- Generated automatically from game files\n\n"
        "---@class ffi\n"
        'ffi = require("ffi")'
    ),
    "methods": [
        {
            "name": "string",
            "description": "Converts arg to a Lua string",
            "parameters": [{"name": "arg", "type": "any"}],
            "return_type": "string",
        },
        {
            "name": "new",
            "description": "Creates a new cdata object",
            "parameters": [
                {
                    "name": "typeDescription",
                    "type": "string",
                    "description": "C data type",
                },
                {"name": "arg", "type": "any", "description": "Lua value"},
            ],
            "return_type": "cdata",
        },
    ],
}

DEFAULT_C_NAMESPACE = {
    "description": "---@class C\nC = ffi.C",
    "methods": [],
}


def _comment(text: str) -> str:
    return "-- " + text.replace("\n", "\n-- ")


def _notes(notes: str) -> str:
    lines = notes.splitlines()
    if not lines:
        return ""
    if len(lines) == 1:
        return f"-- Notes: {lines[0]}\n"
    return "-- Notes:\n" + "".join(f"--   {line}\n" for line in lines)


def _param_line(param: Parameter, with_optional: bool = True) -> str:
    flag = "?" if with_optional and param.optional else ""
    description = f" # {param.description}" if param.description else ""
    return f"---@param {param.name}{flag} {param.type}{description}\n"


def _return_line(return_type: str) -> str:
    if not return_type or return_type in SILENT_RETURN_TYPES:
        return ""
    return f"---@return {return_type}\n"


def _declaration(qualified_name: str, parameters: list[Parameter]) -> str:
    params = ", ".join(p.name for p in parameters)
    return f"function {qualified_name}({params}) end\n\n"


def render_lua_function(record: FunctionRecord) -> str:
    """Render one reference function with its documentation comments."""
    output = ""
    if record.description:
        output += _comment(record.description) + "\n"
    if record.detailed:
        output += "-- Detailed: " + record.detailed.replace("\n", "\n-- ") + "\n"
    if record.notes:
        output += _notes(record.notes)
    if record.deprecated:
        output += "---@deprecated\n"
    output += "".join(
        f"---@param {p.name}{'?' if p.optional else ''} {p.type}\n"
        for p in record.parameters
    )
    output += _return_line(record.return_type)
    output += _declaration(record.name, record.parameters)
    return output


def render_lua_api(records: dict[str, FunctionRecord]) -> str:
    """Render the documented Lua API file, sorted by name."""
    output = META_HEADER
    output += "-- X4: Foundations Lua API\n"
    output += "-- Generated automatically from Wiki documentation\n\n"
    for name in sorted(records):
        output += render_lua_function(records[name])
    return output


def _render_namespace(prefix: str, namespace: dict) -> str:
    output = namespace.get("description", "") + "\n\n"
    for method in namespace.get("methods", []):
        if method.get("description"):
            output += f"--{method['description']}\n"
        params = [Parameter(**p) for p in method.get("parameters", [])]
        for param in params:
            description = f" {param.description}" if param.description else ""
            output += f"---@param {param.name} {param.type}{description}\n"
        if method.get("return_type"):
            output += f"---@return {method['return_type']}\n"
        output += _declaration(f"{prefix}.{method['name']}", params)
    return output


def render_ffi_function(function: FfiFunction) -> str:
    output = f"-- FFI Function: {function.declaration}\n"
    for param in function.parameters:
        output += f"---@param {param.name or 'arg'} {param.type or 'any'}\n"
    output += _return_line(function.return_type)
    params = ", ".join(p.name or "arg" for p in function.parameters)
    output += f"function C.{function.name}({params}) end\n\n"
    return output


def render_ffi_api(
    functions: dict[str, FfiFunction],
    ffi_namespace: dict | None = None,
    c_namespace: dict | None = None,
) -> str:
    """Render the FFI API file: ffi and C preambles, then every C function.

    Args:
        functions: FFI functions keyed by name
        ffi_namespace: Description and methods of the ffi table
        c_namespace: Description and methods of the C table

    Returns:
        The file content
    """
    output = META_HEADER
    output += _render_namespace("ffi", ffi_namespace or DEFAULT_FFI_NAMESPACE)
    output += _render_namespace("C", c_namespace or DEFAULT_C_NAMESPACE)
    for name in sorted(functions):
        output += render_ffi_function(functions[name])
    return output


def render_ffi_type(ffi_type: FfiType) -> str:
    output = f"-- {ffi_type.declaration}\n"
    output += f"---@class {ffi_type.name}\n"
    for field_name, field_type, is_array in ffi_type.fields():
        if "*" in field_type:
            field_type = "cdata*"
        output += f"---@field {field_name} {field_type}{'[]' if is_array else ''}\n"
    return output + "\n"


def render_ffi_types(types: dict[str, FfiType]) -> str:
    output = META_HEADER
    output += "-- X4: Foundations FFI Types\n"
    output += "-- Generated automatically from game files\n\n"
    for name in sorted(types):
        output += render_ffi_type(types[name])
    return output


def render_helper_api(records: dict[str, FunctionRecord]) -> str:
    """Render the Helper table and its functions."""
    output = META_HEADER
    output += "-- X4: Foundations Helper API\n"
    output += "-- Generated automatically from game files\n\n"
    output += "Helper = {}\n\n"

    for name in sorted(records):
        record = records[name]
        if record.description:
            output += _comment(record.description) + "\n"
        output += f"-- Source: {record.source}\n"
        if record.notes:
            output += _notes(record.notes)
        output += "".join(
            _param_line(p, with_optional=False) for p in record.parameters
        )
        output += _return_line(record.return_type)
        output += _declaration(f"Helper.{name}", record.parameters)
    return output


def render_undocumented_function(record: UndocumentedRecord) -> str:
    output = ""
    if record.description:
        output += _comment(record.description) + "\n"
    if record.files:
        output += f"-- Found in: {', '.join(sorted(record.files))}\n"

    if record.name in SINGLE_MESSAGE_FUNCTIONS:
        output += (
            "---@param message string "
            "# Message to display/log (can include string concatenation)\n"
        )
        return output + f"function {record.name}(message) end\n\n"

    if record.notes:
        output += _notes(record.notes)
    output += "".join(_param_line(p, with_optional=False) for p in record.parameters)
    output += _return_line(record.return_type)
    output += _declaration(record.name, record.parameters)
    return output


def render_undocumented_api(records: dict[str, UndocumentedRecord]) -> str:
    output = META_HEADER
    output += "-- X4: Foundations Undocumented API\n"
    output += "-- Generated automatically by analyzing game files\n"
    output += (
        "-- These functions are not officially documented "
        "and may change without notice\n\n"
    )
    for name in sorted(records):
        output += render_undocumented_function(records[name])
    return output


def render_exposed_function(resolved: ResolvedExposure) -> str:
    exposure = resolved.exposure
    output = f"-- {exposure.description}\n"
    output += f"-- Mapped from: {exposure.original}\n"
    output += f"-- Source: {exposure.source}\n"
    if isinstance(exposure, WrapperExposure):
        output += f"-- Parameter transformation: {exposure.transformation}\n"
    output += "".join(_param_line(p) for p in resolved.parameters)
    output += _return_line(resolved.return_type)
    output += _declaration(resolved.name, resolved.parameters)
    return output


def group_exposures(
    exposures: dict[str, ResolvedExposure],
) -> dict[str, list[ResolvedExposure]]:
    """Group exposures by the namespace of their target, names sorted.

    Targets that are not "namespace.name" paths belong to no group.
    """
    groups: dict[str, list[ResolvedExposure]] = defaultdict(list)
    for name in sorted(exposures):
        resolved = exposures[name]
        if resolved.namespace:
            groups[resolved.namespace].append(resolved)
    return dict(groups)


def render_exposed_namespace(
    namespace: str, exposures: list[ResolvedExposure]
) -> str:
    output = META_HEADER
    output += f"-- X4: Foundations Globally Exposed Functions from {namespace}\n"
    output += "-- Generated automatically from game files\n"
    output += (
        "-- These functions are made globally accessible via AddGlobalAccess "
        f"from the {namespace} module\n\n"
    )
    for resolved in exposures:
        output += render_exposed_function(resolved)
    return output


def exposed_file_name(namespace: str) -> str:
    return f"X4GloballyExposed_{namespace}.lua"


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info(f"Generated annotations at {path}")
    return path


def write_annotations(
    result: CatalogResult, config: AnnotatorConfig, kinds: list[str]
) -> list[Path]:
    """Write the annotation file of every enabled kind.

    Args:
        result: Finished catalog result
        config: Configuration naming the output directory and files
        kinds: Enabled kinds ("lua", "ffi", "helper", "undocumented", "exposed")

    Returns:
        Paths of every file written
    """
    written = []

    if "lua" in kinds:
        written.append(
            _write(config.output_path("lua"), render_lua_api(result.lua_functions))
        )

    if "ffi" in kinds:
        ffi_namespace = load_namespace_file(config.fragment_path("ffi_namespace"))
        c_namespace = load_namespace_file(config.fragment_path("c_namespace"))
        written.append(
            _write(
                config.output_path("ffi"),
                render_ffi_api(result.ffi_functions, ffi_namespace, c_namespace),
            )
        )
        written.append(
            _write(config.output_path("ffi_types"), render_ffi_types(result.ffi_types))
        )

    if "helper" in kinds:
        written.append(
            _write(
                config.output_path("helper"), render_helper_api(result.helper_functions)
            )
        )

    if "undocumented" in kinds:
        written.append(
            _write(
                config.output_path("undocumented"),
                render_undocumented_api(result.undocumented_functions),
            )
        )

    if "exposed" in kinds:
        for namespace, exposures in group_exposures(result.exposures).items():
            written.append(
                _write(
                    config.annotation_dir / exposed_file_name(namespace),
                    render_exposed_namespace(namespace, exposures),
                )
            )

    return written
