"""Load the Lua function reference page using Playwright."""

import logging
from pathlib import Path
from urllib.parse import urlparse

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, async_playwright

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 10000


class ReferencePageError(Exception):
    """Error loading or reading the reference page."""

    def __init__(self, message: str, phase: str = "loading"):
        super().__init__(message)
        self.phase = phase


class ReferencePageLoader:
    """Fetch the reference page online, falling back to a cached copy.

    One attempt is made per load; the browser follows redirects on its own.
    A successful fetch refreshes the cached copy.
    """

    def __init__(self, timeout_ms: int = DEFAULT_TIMEOUT_MS):
        self._timeout_ms = timeout_ms
        self._playwright = None
        self._browser = None

    async def __aenter__(self):
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch()
        logger.info("Browser launched")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the browser and cleanup resources."""
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
        logger.info("Browser closed")

    async def load(self, url: str, cache_path: Path | None = None) -> Page:
        """Load the reference page, or its cached copy if the fetch fails.

        Args:
            url: The page URL (http, https, or file://)
            cache_path: Local copy to refresh on success and read on failure

        Returns:
            The loaded Playwright Page object

        Raises:
            ReferencePageError: If the URL is invalid, or the fetch failed
                and there is no cached copy
        """
        parsed = urlparse(url)
        if not parsed.scheme or parsed.scheme not in ("http", "https", "file"):
            logger.error(f"Invalid URL scheme: {url}")
            raise ReferencePageError(f"Invalid URL: {url}")

        page = await self._browser.new_page()
        try:
            logger.info(f"Fetching Lua function data from: {url}")
            response = await page.goto(url, timeout=self._timeout_ms)
            if response is not None and not response.ok:
                raise ReferencePageError(f"HTTP Error: {response.status}")
            logger.info("Successfully fetched reference page")
            if cache_path is not None:
                await self._save_copy(page, cache_path)
            return page
        except (PlaywrightError, ReferencePageError) as e:
            logger.warning(f"Failed to fetch reference page: {e}")

        if cache_path is None or not cache_path.exists():
            await page.close()
            raise ReferencePageError(
                "No reference data available - both online fetch and local file failed",
                phase="loading",
            )

        logger.info(f"Falling back to local HTML file: {cache_path}")
        try:
            await page.goto(cache_path.resolve().as_uri(), timeout=self._timeout_ms)
        except PlaywrightError as e:
            await page.close()
            logger.error(f"Failed to load cached page: {e}")
            raise ReferencePageError(str(e), phase="loading") from e
        return page

    async def _save_copy(self, page: Page, cache_path: Path) -> None:
        try:
            cache_path.parent.mkdir(parents=True, exist_ok=True)
            cache_path.write_text(await page.content(), encoding="utf-8")
            logger.info(f"Saved a local copy to: {cache_path}")
        except OSError as e:
            logger.warning(f"Could not save local copy to {cache_path}: {e}")
