"""Playwright browser lifecycle for the analysis phase."""

from typing import Any

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from pagescribe.constants import DEFAULT_VIEWPORT_HEIGHT, DEFAULT_VIEWPORT_WIDTH
from pagescribe.types import BrowserName


class BrowserManager:
    def __init__(self, browser_name: BrowserName = BrowserName.CHROMIUM, headless: bool = True):
        self._browser_name = BrowserName(browser_name)
        self._headless = headless
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None

    async def launch(self) -> None:
        """Launch the configured browser engine."""
        self._playwright = await async_playwright().__aenter__()
        browser_type = getattr(self._playwright, self._browser_name.value)
        self._browser = await browser_type.launch(headless=self._headless)

    async def new_page(
        self,
        base_url: str | None = None,
        timeout_ms: int | None = None,
        viewport_width: int = DEFAULT_VIEWPORT_WIDTH,
        viewport_height: int = DEFAULT_VIEWPORT_HEIGHT,
    ) -> Page:
        """Open a page in a fresh context."""
        if not self._browser:
            raise RuntimeError("Browser not launched. Call launch() first.")

        kwargs: dict[str, Any] = {
            "viewport": {"width": viewport_width, "height": viewport_height},
        }
        if base_url:
            kwargs["base_url"] = base_url

        self._context = await self._browser.new_context(**kwargs)
        if timeout_ms is not None:
            self._context.set_default_timeout(timeout_ms)
        return await self._context.new_page()

    async def close(self) -> None:
        """Close context, browser and playwright."""
        if self._context:
            await self._context.close()
        if self._browser:
            await self._browser.close()
        if self._playwright:
            await self._playwright.__aexit__(None, None, None)
