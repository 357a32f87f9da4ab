"""
Browser Manager
===============

Owns the single Chromium process shared by every conversion and hands out
isolated, request-scoped pages on top of it.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from playwright.async_api import async_playwright, Browser, Page, Playwright

from src.config.logging import get_logger
from src.config.settings import Settings, get_settings
from src.core.rendering.errors import BrowserLaunchError

logger = get_logger(__name__)


# The host may lack a display server and run as an unprivileged container user.
CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--disable-web-security",
    "--disable-features=VizDisplayCompositor",
    "--disable-background-timer-throttling",
    "--disable-renderer-backgrounding",
    "--disable-backgrounding-occluded-windows",
]


class BrowserManager:
    """Lazily launched, memoized browser process with per-request pages."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="browser_manager")  # structlog.BoundLoggerBase
        self.active_pages = 0
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._launch_task: Optional["asyncio.Future[Browser]"] = None

    @property
    def browser(self) -> Optional[Browser]:
        """The live browser handle, if one has been launched."""
        return self._browser

    def is_connected(self) -> bool:
        """True when a browser handle exists and reports itself connected."""
        return self._browser is not None and self._browser.is_connected()

    async def ensure_browser(self) -> Browser:
        """
        Return the shared browser, launching it on first use.

        Concurrent callers await the same launch, so at most one browser
        process is started. A failed launch is not memoized; the next call
        tries again.

        Returns:
            The shared Browser instance

        Raises:
            BrowserLaunchError: If the browser could not be started
        """
        if self._launch_task is None:
            self._launch_task = asyncio.ensure_future(self._launch())

        task = self._launch_task
        try:
            # Shielded so one cancelled request does not abort a launch others await.
            return await asyncio.shield(task)
        except Exception:
            if self._launch_task is task:
                self._launch_task = None
            raise

    async def _launch(self) -> Browser:
        """Start Playwright and launch Chromium."""
        # A driver left behind by a disconnected browser
        stale, self._playwright = self._playwright, None
        if stale is not None:
            try:
                await stale.stop()
            except Exception as e:
                self.logger.warning("Failed to stop previous Playwright driver", error=str(e))

        self.logger.info("Launching browser", headless=self.settings.playwright_headless)
        playwright = None
        try:
            playwright = await async_playwright().start()
            browser = await playwright.chromium.launch(
                headless=self.settings.playwright_headless,
                args=CHROMIUM_ARGS,
            )
        except Exception as e:
            self.logger.error("Failed to launch browser", error=str(e))
            if playwright is not None:
                try:
                    await playwright.stop()
                except Exception as stop_error:
                    self.logger.warning(
                        "Failed to stop Playwright after launch failure", error=str(stop_error)
                    )
            raise BrowserLaunchError(
                "Browser launch failed", detail=f"Browser launch failed: {e}"
            ) from e

        self._playwright = playwright
        self._browser = browser
        browser.on("disconnected", self._on_disconnected)
        self.logger.info("Browser launched successfully", version=browser.version)
        return browser

    def _on_disconnected(self, browser: Browser) -> None:
        """Forget a browser that went away so the next request relaunches it."""
        if browser is not self._browser:
            return
        self.logger.warning("Browser disconnected")
        self._browser = None
        self._launch_task = None

    @asynccontextmanager
    async def open_page(self, width: int, height: int) -> AsyncGenerator[Page, None]:
        """
        Open an isolated page sized to the given viewport.

        The page is closed on every exit path. A failure while closing is
        logged and never replaces an error raised inside the block.

        Args:
            width: Viewport width in pixels
            height: Viewport height in pixels

        Yields:
            A fresh Page in its own browser context
        """
        browser = await self.ensure_browser()
        page = await browser.new_page(viewport={"width": width, "height": height})
        self.active_pages += 1
        try:
            yield page
        finally:
            self.active_pages -= 1
            try:
                await page.close()
            except Exception as close_error:
                self.logger.error("Error closing page", error=str(close_error))

    async def close(self) -> None:
        """Close the browser and stop Playwright."""
        pending = self._launch_task
        if pending is not None and not pending.done():
            # Launch failures are already logged by _launch
            await asyncio.gather(pending, return_exceptions=True)

        browser, playwright = self._browser, self._playwright
        self._browser = None
        self._playwright = None
        self._launch_task = None

        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                self.logger.error("Error closing browser", error=str(e))
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                self.logger.error("Error stopping Playwright", error=str(e))

        if browser is not None:
            self.logger.info("Browser closed")
