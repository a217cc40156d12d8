"""LuaLS annotation output for the catalog."""

from lua_api_annotator.annotations.generator import (
    render_exposed_namespace,
    render_ffi_api,
    render_ffi_types,
    render_helper_api,
    render_lua_api,
    render_undocumented_api,
    write_annotations,
)

__all__ = [
    # One renderer per output file
    "render_lua_api",
    "render_ffi_api",
    "render_ffi_types",
    "render_helper_api",
    "render_undocumented_api",
    "render_exposed_namespace",
    # Writing
    "write_annotations",
]
