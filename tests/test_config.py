"""Tests for configuration loading."""

import json

import pytest

from lua_api_annotator.config import (
    DEFAULT_WIKI_URL,
    AnnotatorConfig,
    ensure_output_dirs,
    load_config,
)


class TestLoadConfig:
    def given_config_file(self, tmp_path, data):
        self.path = tmp_path / "configuration.json"
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def given_no_config_file(self, tmp_path):
        self.path = tmp_path / "configuration.json"

    def when_config_is_loaded(self):
        self.config = load_config(self.path)

    def test_missing_file_writes_defaults(self, tmp_path):
        self.given_no_config_file(tmp_path)
        self.when_config_is_loaded()
        assert self.config.wiki_url == DEFAULT_WIKI_URL
        assert self.path.exists()
        saved = json.loads(self.path.read_text(encoding="utf-8"))
        assert saved["output_files"]["lua"] == "X4LuaAPI.lua"
        assert "base_dir" not in saved

    def test_file_values_override_defaults(self, tmp_path):
        self.given_config_file(
            tmp_path,
            {
                "lua_folder_path": "game/ui",
                "fetch_timeout_ms": 500,
                "output_files": {"lua": "Custom.lua"},
                "unknown_key": True,
            },
        )
        self.when_config_is_loaded()
        assert self.config.lua_folder == tmp_path.resolve() / "game" / "ui"
        assert self.config.fetch_timeout_ms == 500
        assert self.config.output_files["lua"] == "Custom.lua"
        assert self.config.output_files["ffi"] == "X4FFIAPI.lua"

    def test_absolute_paths_are_kept(self, tmp_path):
        target = tmp_path / "elsewhere"
        self.given_config_file(tmp_path, {"annotation_output_path": str(target)})
        self.when_config_is_loaded()
        assert self.config.annotation_dir == target
        assert self.config.output_path("helper") == target / "X4HelperAPI.lua"

    def test_malformed_file_falls_back_to_defaults(self, tmp_path):
        self.path = tmp_path / "configuration.json"
        self.path.write_text("{ not json", encoding="utf-8")
        self.when_config_is_loaded()
        assert self.config.wiki_url == DEFAULT_WIKI_URL


def test_ensure_output_dirs_creates_both(tmp_path):
    config = AnnotatorConfig(
        fragment_output_path="out/fragments",
        annotation_output_path="out/library",
        base_dir=tmp_path,
    )
    ensure_output_dirs(config)
    assert (tmp_path / "out" / "fragments").is_dir()
    assert (tmp_path / "out" / "library").is_dir()
    assert config.fragment_path("lua") == (
        tmp_path / "out" / "fragments" / "x4-lua-functions.json"
    )


def test_output_path_rejects_fragment_only_kinds(tmp_path):
    config = AnnotatorConfig(base_dir=tmp_path)
    assert config.output_path("ffi_types").name == "X4FFITypes.lua"
    with pytest.raises(ValueError):
        config.output_path("exposed")
