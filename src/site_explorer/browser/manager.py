"""
Browser lifecycle management using Playwright.

Handles browser instance creation, configuration and cleanup.
Supports chromium, firefox and webkit engines.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Playwright,
)

from site_explorer.browser.page_context import PageContext
from site_explorer.config.settings import BrowserSettings
from site_explorer.core.exceptions import BrowserError
from site_explorer.utils.logging import get_logger

logger = get_logger(__name__)


class BrowserManager:
    """
    Manages Playwright browser lifecycle.

    Example:
        >>> async with BrowserManager(settings) as manager:
        ...     async with manager.open_page() as page:
        ...         await page.load("https://example.com")
    """

    def __init__(self, settings: BrowserSettings) -> None:
        """
        Args:
            settings: Browser configuration from app settings
        """
        self.settings = settings
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    async def start(self) -> None:
        """
        Start Playwright and launch browser.

        Raises:
            BrowserError: If browser fails to launch
        """
        if self._browser is not None:
            logger.warning("Browser already started, skipping launch")
            return

        try:
            logger.info(
                f"Starting {self.settings.browser_type} browser "
                f"(headless={self.settings.headless})"
            )

            self._playwright = await async_playwright().start()
            browser_type = getattr(self._playwright, self.settings.browser_type)
            self._browser = await browser_type.launch(headless=self.settings.headless)

            logger.info("Browser started successfully")

        except Exception as e:
            await self._cleanup()
            raise BrowserError(
                f"Failed to launch browser: {e}",
                details={"browser_type": self.settings.browser_type},
            ) from e

    async def stop(self) -> None:
        """
        Stop browser and cleanup Playwright resources.

        Safe to call multiple times.
        """
        await self._cleanup()
        logger.info("Browser stopped")

    async def _cleanup(self) -> None:
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
            self._browser = None

        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping Playwright: {e}")
            self._playwright = None

    async def new_context(self) -> BrowserContext:
        """
        Create a new browser context with configured settings.

        Each context has isolated cookies, cache and storage.

        Raises:
            BrowserError: If browser not started or context creation fails
        """
        if self._browser is None:
            raise BrowserError("Browser not started. Call start() first.")

        try:
            context_options: dict = {
                "viewport": {
                    "width": self.settings.viewport_width,
                    "height": self.settings.viewport_height,
                },
                "ignore_https_errors": self.settings.ignore_https_errors,
            }

            if self.settings.user_agent:
                context_options["user_agent"] = self.settings.user_agent

            context = await self._browser.new_context(**context_options)
            context.set_default_navigation_timeout(self.settings.navigation_timeout_ms)

            logger.debug("Created new browser context")
            return context

        except Exception as e:
            raise BrowserError(f"Failed to create browser context: {e}") from e

    @asynccontextmanager
    async def open_page(self) -> AsyncGenerator[PageContext, None]:
        """
        Open a page in a fresh context and close both on exit.

        Yields:
            PageContext configured with this manager's timeouts
        """
        context = await self.new_context()
        try:
            page = await context.new_page()
            yield PageContext(
                page,
                navigation_timeout_ms=self.settings.navigation_timeout_ms,
                network_idle_timeout_ms=self.settings.network_idle_timeout_ms,
            )
        finally:
            try:
                await context.close()
            except Exception as e:
                logger.warning(f"Error closing browser context: {e}")

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def __aenter__(self) -> "BrowserManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()


@asynccontextmanager
async def create_browser(
    settings: BrowserSettings,
) -> AsyncGenerator[BrowserManager, None]:
    """
    Convenience context manager for browser creation.

    Example:
        >>> async with create_browser(settings) as browser:
        ...     async with browser.open_page() as page:
        ...         ...
    """
    manager = BrowserManager(settings)
    try:
        await manager.start()
        yield manager
    finally:
        await manager.stop()
