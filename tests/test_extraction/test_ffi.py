"""Tests for ffi.cdef declaration extraction."""

from lua_api_annotator.catalog import Catalog
from lua_api_annotator.extraction.ffi import (
    extract_ffi_declarations,
    find_cdef_blocks,
    parse_c_parameters,
)
from lua_api_annotator.models import Parameter

WIDGET_BLOCK = """
local ffi = require("ffi")
ffi.cdef[[
	typedef struct {
		const char* name;
		int32_t amount;
		float values[4];
	} WidgetInfo;
	typedef uint64_t UniverseID;
	UniverseID GetPlayerID(void);
	const char* GetComponentName(UniverseID componentid);
]]
"""


class TestExtractFfiDeclarations:
    def given_content(self, content):
        self.content = content
        self.catalog = Catalog()

    def when_declarations_are_extracted(self):
        self.added = extract_ffi_declarations(self.content, "ffi.lua", self.catalog)

    def then_function_is(self, name, return_type, parameters):
        function = self.catalog.ffi_functions[name]
        assert function.return_type == return_type
        assert function.parameters == parameters
        return function

    def test_extracts_functions_and_types(self):
        self.given_content(WIDGET_BLOCK)
        self.when_declarations_are_extracted()
        assert self.added == 2
        self.then_function_is("GetPlayerID", "UniverseID", [])
        self.then_function_is(
            "GetComponentName",
            "const char*",
            [Parameter(name="componentid", type="UniverseID")],
        )
        assert set(self.catalog.ffi_types) == {"WidgetInfo", "UniverseID"}
        assert self.catalog.ffi_types["WidgetInfo"].kind == "struct"
        assert self.catalog.ffi_types["UniverseID"].kind == "uint64_t"

    def test_first_declaration_wins(self):
        """A later, longer declaration of the same name is ignored."""
        self.given_content(
            "ffi.cdef[[\n\tint Foo(int a);\n\tint Foo(int a, int b);\n]]"
        )
        self.when_declarations_are_extracted()
        function = self.then_function_is(
            "Foo", "int", [Parameter(name="a", type="int")]
        )
        assert function.declaration == "int Foo(int a);"

    def test_functions_are_also_catalog_records(self):
        self.given_content(WIDGET_BLOCK)
        self.when_declarations_are_extracted()
        record = self.catalog.get("C.GetPlayerID")
        assert record is not None
        assert record.kind == "ffi"

    def test_struct_fields(self):
        self.given_content(WIDGET_BLOCK)
        self.when_declarations_are_extracted()
        fields = self.catalog.ffi_types["WidgetInfo"].fields()
        assert fields == [
            ("name", "const char*", False),
            ("amount", "int32_t", False),
            ("values", "float", True),
        ]

    def test_text_outside_cdef_is_ignored(self):
        self.given_content("int NotDeclared(int a);\nffi.cdef[[ ]]")
        self.when_declarations_are_extracted()
        assert self.catalog.ffi_functions == {}


class TestParseCParameters:
    def test_void_means_no_parameters(self):
        assert parse_c_parameters("void") == []
        assert parse_c_parameters("") == []

    def test_pointer_and_varargs(self):
        params = parse_c_parameters("const char* fmt, ...")
        assert params[0] == Parameter(name="fmt", type="const char*")
        assert params[1].name == "varargs"


def test_finds_every_cdef_block():
    content = "ffi.cdef[[ int A(void); ]]\nx = 1\nffi.cdef [[ int B(void); ]]"
    assert len(find_cdef_blocks(content)) == 2
