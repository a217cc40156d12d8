"""Tests for data models."""

import json

from lua_api_annotator.models import (
    CatalogError,
    CatalogResult,
    DirectExposure,
    ExposureTransform,
    FfiType,
    FunctionRecord,
    Parameter,
    ResolvedExposure,
    UndocumentedRecord,
    Usage,
    WrapperExposure,
    exposure_from_dict,
)


class TestCatalogResult:
    def given_empty_result(self):
        self.result = CatalogResult()

    def given_result_with_records(self):
        self.result = CatalogResult(
            lua_functions={
                "Zeta": FunctionRecord(name="Zeta", namespace="global"),
                "Alpha": FunctionRecord(
                    name="Alpha",
                    namespace="global",
                    parameters=[Parameter(name="id", optional=True)],
                    body="return id",
                ),
            },
            undocumented_functions={
                "Ping": UndocumentedRecord(
                    name="Ping",
                    files={"b.lua", "a.lua"},
                    usages=[Usage(file="a.lua", arguments=["1"])],
                )
            },
            errors=[CatalogError(file="x.lua", error="boom", phase="reading")],
        )

    def when_serialized(self):
        self.json_str = self.result.to_json()
        self.parsed = json.loads(self.json_str)

    def test_empty_result_has_every_section(self):
        self.given_empty_result()
        self.when_serialized()
        assert set(self.parsed) == {
            "lua",
            "ffi",
            "helper",
            "undocumented",
            "exposed",
            "definitions",
            "errors",
        }
        assert self.parsed["ffi"] == {"functions": {}, "types": {}}

    def test_records_are_sorted_and_bodies_dropped(self):
        self.given_result_with_records()
        self.when_serialized()
        assert list(self.parsed["lua"]) == ["Alpha", "Zeta"]
        assert "body" not in self.parsed["lua"]["Alpha"]
        assert self.parsed["lua"]["Alpha"]["parameters"][0]["optional"] is True

    def test_undocumented_files_are_sorted_lists(self):
        self.given_result_with_records()
        self.when_serialized()
        assert self.parsed["undocumented"]["Ping"]["files"] == ["a.lua", "b.lua"]

    def test_errors_are_serialized(self):
        self.given_result_with_records()
        self.when_serialized()
        assert self.parsed["errors"] == [
            {"file": "x.lua", "error": "boom", "phase": "reading"}
        ]

    def test_output_is_deterministic(self):
        self.given_result_with_records()
        assert self.result.to_json() == self.result.to_json()


class TestRecordRoundTrips:
    def test_function_record_from_dict(self):
        record = FunctionRecord(
            name="f",
            namespace="ns",
            parameters=[Parameter(name="a", type="number")],
            deprecated=True,
        )
        assert FunctionRecord.from_dict(record.to_dict()) == record

    def test_undocumented_record_restores_file_set(self):
        record = UndocumentedRecord(name="Ping", files={"a.lua"})
        restored = UndocumentedRecord.from_dict(record.to_dict())
        assert restored.files == {"a.lua"}

    def test_resolved_exposure_from_dict(self):
        resolved = ResolvedExposure(
            exposure=DirectExposure(name="Bar", original="ns.baz", source="x.lua"),
            parameters=[Parameter(name="a")],
            return_type="number",
            resolved=True,
        )
        restored = ResolvedExposure.from_dict(resolved.to_dict())
        assert restored == resolved


class TestExposures:
    def test_wrapper_transform(self):
        wrapper = WrapperExposure(
            name="All",
            original="ns.all",
            source="x",
            wrapper_params="...",
            target_params="...",
            fixed_params=[],
            forwards_rest=True,
        )
        assert wrapper.transform is ExposureTransform.FORWARDS_ALL
        assert wrapper.transformation == "Passes all parameters directly"
        assert wrapper.description == "Wrapper for ns.all with parameter transformation"

    def test_exposure_from_dict_dispatches_on_type(self):
        direct = DirectExposure(name="Bar", original="ns.baz", source="x")
        assert exposure_from_dict(direct.to_dict()) == direct
        assert direct.description == "Global access to ns.baz"

    def test_resolved_namespace(self):
        resolved = ResolvedExposure(
            exposure=DirectExposure(name="Bar", original="ns.baz", source="x"),
            parameters=[],
            return_type="any",
            resolved=False,
        )
        assert resolved.namespace == "ns"


def test_ffi_type_without_body_has_no_fields():
    alias = FfiType(
        name="UniverseID",
        kind="uint64_t",
        declaration="typedef uint64_t UniverseID;",
        source="ffi.lua",
    )
    assert alias.fields() == []
