"""Tests for the reference page loader."""

from pathlib import Path

import pytest

from lua_api_annotator.page_loader import ReferencePageError, ReferencePageLoader


@pytest.fixture
def reference_page_path():
    return (
        Path(__file__).parent / "fixtures" / "reference" / "lua_function_overview.html"
    )


class TestReferencePageLoader:
    def given_local_file_url(self, reference_page_path):
        self.url = reference_page_path.resolve().as_uri()

    def given_invalid_url(self):
        self.url = "not-a-valid-url"

    def given_unreachable_url(self):
        self.url = "https://localhost:99999/nonexistent"

    async def when_page_is_loaded(self, cache_path=None):
        async with ReferencePageLoader(timeout_ms=5000) as loader:
            page = await loader.load(self.url, cache_path=cache_path)
            self.title = await page.title()

    async def when_page_load_fails(self, cache_path=None):
        async with ReferencePageLoader(timeout_ms=5000) as loader:
            with pytest.raises(ReferencePageError) as exc_info:
                await loader.load(self.url, cache_path=cache_path)
            self.error = exc_info.value

    @pytest.mark.asyncio
    async def test_loads_local_file(self, reference_page_path):
        """A file:// URL loads directly."""
        self.given_local_file_url(reference_page_path)
        await self.when_page_is_loaded()
        assert self.title == "Lua function overview"

    @pytest.mark.asyncio
    async def test_successful_fetch_refreshes_cached_copy(
        self, reference_page_path, tmp_path
    ):
        cache_path = tmp_path / "cache" / "overview.html"
        self.given_local_file_url(reference_page_path)
        await self.when_page_is_loaded(cache_path=cache_path)
        assert cache_path.exists()
        assert "GetPlayerMoney" in cache_path.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_raises_error_for_invalid_url(self):
        self.given_invalid_url()
        await self.when_page_load_fails()
        assert "Invalid URL" in str(self.error)

    @pytest.mark.asyncio
    async def test_falls_back_to_cached_copy(self, reference_page_path):
        """An unreachable URL is replaced by the cached copy."""
        self.given_unreachable_url()
        await self.when_page_is_loaded(cache_path=reference_page_path)
        assert self.title == "Lua function overview"

    @pytest.mark.asyncio
    async def test_raises_when_no_cached_copy(self, tmp_path):
        self.given_unreachable_url()
        await self.when_page_load_fails(cache_path=tmp_path / "missing.html")
        assert self.error.phase == "loading"
        assert "No reference data available" in str(self.error)
