"""Tests for JSON fragment persistence."""

import json

import pytest

from lua_api_annotator.catalog import Catalog
from lua_api_annotator.models import (
    CatalogResult,
    DirectExposure,
    FfiFunction,
    FfiType,
    FunctionRecord,
    Parameter,
    ResolvedExposure,
    UndocumentedRecord,
)
from lua_api_annotator.persistence import (
    export_fragment,
    fragment_size,
    load_fragment,
    seed_catalog,
)


@pytest.fixture
def result():
    return CatalogResult(
        lua_functions={
            "GetMoney": FunctionRecord(
                name="GetMoney", namespace="global", return_type="int"
            )
        },
        ffi_functions={
            "GetPlayerID": FfiFunction(
                name="GetPlayerID",
                return_type="UniverseID",
                parameters=[],
                declaration="UniverseID GetPlayerID(void);",
                source="ffi.lua",
            )
        },
        ffi_types={
            "UniverseID": FfiType(
                name="UniverseID",
                kind="uint64_t",
                declaration="typedef uint64_t UniverseID;",
                source="ffi.lua",
            )
        },
        undocumented_functions={
            "Ping": UndocumentedRecord(
                name="Ping", parameters=[Parameter(name="value")], files={"a.lua"}
            )
        },
        exposures={
            "Bar": ResolvedExposure(
                exposure=DirectExposure(name="Bar", original="ns.baz", source="x"),
                parameters=[Parameter(name="a")],
                return_type="any",
                resolved=True,
            )
        },
    )


class TestFragments:
    def when_exported_and_loaded(self, kind, result, tmp_path):
        self.path = tmp_path / f"{kind}.json"
        export_fragment(kind, result, self.path)
        self.records = load_fragment(kind, self.path)

    def test_lua_fragment(self, result, tmp_path):
        self.when_exported_and_loaded("lua", result, tmp_path)
        assert self.records["GetMoney"].return_type == "int"

    def test_ffi_fragment_holds_functions_and_types(self, result, tmp_path):
        self.when_exported_and_loaded("ffi", result, tmp_path)
        assert set(self.records) == {"functions", "types"}
        assert self.records["types"]["UniverseID"].kind == "uint64_t"
        assert fragment_size("ffi", self.records) == 2

    def test_undocumented_fragment_restores_sets(self, result, tmp_path):
        self.when_exported_and_loaded("undocumented", result, tmp_path)
        assert self.records["Ping"].files == {"a.lua"}

    def test_fragment_file_is_sorted_and_indented(self, result, tmp_path):
        self.when_exported_and_loaded("ffi", result, tmp_path)
        text = self.path.read_text(encoding="utf-8")
        assert text == json.dumps(json.loads(text), indent=2, sort_keys=True)

    def test_unknown_kind_is_rejected(self, result, tmp_path):
        with pytest.raises(ValueError):
            export_fragment("errors", result, tmp_path / "errors.json")


class TestLoadFragmentFailures:
    def test_missing_file(self, tmp_path):
        assert load_fragment("lua", tmp_path / "none.json") is None

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "lua.json"
        path.write_text("{ broken", encoding="utf-8")
        assert load_fragment("lua", path) is None

    def test_wrongly_shaped_file(self, tmp_path):
        path = tmp_path / "lua.json"
        path.write_text(json.dumps({"GetMoney": {"unexpected": 1}}), encoding="utf-8")
        assert load_fragment("lua", path) is None


class TestSeedCatalog:
    def test_seeds_every_store(self, result, tmp_path):
        catalog = Catalog()
        for kind in ("lua", "ffi", "undocumented", "exposed"):
            path = tmp_path / f"{kind}.json"
            export_fragment(kind, result, path)
            seed_catalog(catalog, kind, load_fragment(kind, path))

        assert "GetMoney" in catalog.reference_functions
        assert "GetPlayerID" in catalog.ffi_functions
        assert "C.GetPlayerID" in catalog
        assert "UniverseID" in catalog.ffi_types
        assert "Ping" in catalog.undocumented
        assert catalog.exposures["Bar"].original == "ns.baz"
