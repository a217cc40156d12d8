"""Tests for corpus discovery."""

from pathlib import Path

import pytest

from lua_api_annotator.corpus import CorpusError, discover_lua_files, read_corpus


@pytest.fixture
def sample_lua_path():
    return Path(__file__).parent / "fixtures" / "sample_lua"


class TestReadCorpus:
    def test_discovers_lua_files_sorted(self, sample_lua_path):
        paths = discover_lua_files(sample_lua_path)
        assert [p.name for p in paths] == ["menu_options.lua", "widget_system.lua"]

    def test_reads_nested_files(self, tmp_path):
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "deep.lua").write_text("x = 1", encoding="utf-8")
        (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

        files, failures = read_corpus(tmp_path)

        assert [f.name for f in files] == ["deep.lua"]
        assert files[0].text == "x = 1"
        assert failures == []

    def test_skips_undecodable_files(self, tmp_path):
        (tmp_path / "good.lua").write_text("x = 1", encoding="utf-8")
        (tmp_path / "bad.lua").write_bytes(b"\xff\xfe\xfa")

        files, failures = read_corpus(tmp_path)

        assert [f.name for f in files] == ["good.lua"]
        assert len(failures) == 1
        assert failures[0][0].endswith("bad.lua")

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(CorpusError) as exc_info:
            read_corpus(tmp_path / "missing")
        assert exc_info.value.phase == "discovery"
