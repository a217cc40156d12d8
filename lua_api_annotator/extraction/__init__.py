"""Pattern extractors and call-site inference over Lua source text."""

from lua_api_annotator.extraction.definitions import (
    collect_definition_names,
    collect_prefixed_calls,
    extract_definitions,
    infer_return_type,
    parse_parameters,
)
from lua_api_annotator.extraction.exposure import (
    classify_forwarding,
    extract_exposures,
    record_exposures,
    resolve_exposure,
)
from lua_api_annotator.extraction.ffi import extract_ffi_declarations
from lua_api_annotator.extraction.helpers import extract_helpers
from lua_api_annotator.extraction.scrubber import clean_lua_content, strip_comments
from lua_api_annotator.extraction.tokenizer import parse_argument_string
from lua_api_annotator.extraction.type_heuristics import classify_argument
from lua_api_annotator.extraction.usage_inference import (
    infer_parameters,
    infer_undocumented,
    merge_call,
)

__all__ = [
    # Scrubbing and tokenizing
    "clean_lua_content",
    "strip_comments",
    "parse_argument_string",
    "classify_argument",
    # Definition passes
    "extract_definitions",
    "collect_definition_names",
    "collect_prefixed_calls",
    "parse_parameters",
    "infer_return_type",
    "extract_ffi_declarations",
    "extract_helpers",
    # Exposures
    "extract_exposures",
    "record_exposures",
    "classify_forwarding",
    "resolve_exposure",
    # Usage inference
    "merge_call",
    "infer_parameters",
    "infer_undocumented",
]
