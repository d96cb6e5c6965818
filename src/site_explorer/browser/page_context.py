"""
Page wrapper with navigation and content helpers.

Provides consistent error handling for navigation and the small set of
page reads the explorer needs: title, visible text and in-page scripts.
"""

import time
from typing import Any

from playwright.async_api import Page, Response
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from site_explorer.core.exceptions import NavigationError, PageLoadError
from site_explorer.utils.logging import get_logger

logger = get_logger(__name__)


_VISIBLE_TEXT_SCRIPT = """
() => {
    if (!document.body) return '';
    const clone = document.body.cloneNode(true);
    const removeSelectors = [
        'script', 'style', 'noscript', 'iframe',
        'svg', 'canvas', 'video', 'audio',
        '[hidden]', '[aria-hidden="true"]',
    ];
    removeSelectors.forEach(selector => {
        clone.querySelectorAll(selector).forEach(el => el.remove());
    });
    return (clone.innerText || clone.textContent || '')
        .replace(/\\s+/g, ' ')
        .trim();
}
"""


class PageContext:
    """
    Wrapper around a Playwright Page.

    Example:
        >>> ctx = PageContext(page)
        >>> await ctx.load("https://example.com")
        >>> title = await ctx.title()
    """

    def __init__(
        self,
        page: Page,
        navigation_timeout_ms: int = 30000,
        network_idle_timeout_ms: int = 10000,
    ) -> None:
        self.page = page
        self.navigation_timeout_ms = navigation_timeout_ms
        self.network_idle_timeout_ms = network_idle_timeout_ms
        self._last_response: Response | None = None

    @property
    def current_url(self) -> str:
        return self.page.url

    async def navigate(
        self,
        url: str,
        wait_until: str = "domcontentloaded",
    ) -> Response | None:
        """
        Navigate to URL and wait for the given load state.

        Returns:
            Response object if available

        Raises:
            NavigationError: If navigation fails, times out or the server
                answers with an HTTP error status
        """
        start_time = time.perf_counter()

        try:
            logger.debug(f"Navigating to: {url}")

            response = await self.page.goto(
                url,
                wait_until=wait_until,
                timeout=self.navigation_timeout_ms,
            )
            self._last_response = response

            elapsed = (time.perf_counter() - start_time) * 1000
            logger.debug(f"Navigation complete in {elapsed:.0f}ms")

            if response and response.status >= 400:
                raise NavigationError(
                    f"HTTP {response.status} error",
                    url=url,
                    status_code=response.status,
                    retry_after=5.0 if response.status == 429 else None,
                )

            return response

        except NavigationError:
            raise
        except Exception as e:
            error_msg = str(e)

            if "timeout" in error_msg.lower():
                raise NavigationError(
                    f"Navigation timeout: {error_msg}",
                    url=url,
                    retry_after=10.0,
                ) from e

            if any(x in error_msg.lower() for x in ["net::", "dns", "connection"]):
                raise NavigationError(
                    f"Network error: {error_msg}",
                    url=url,
                    retry_after=5.0,
                ) from e

            raise NavigationError(f"Navigation failed: {error_msg}", url=url) from e

    async def wait_for_network_idle(self) -> bool:
        """
        Wait for the network to go quiet, up to the configured timeout.

        Pages that poll or stream never reach idle, so a timeout here is
        not an error.

        Returns:
            True if the page reached network idle
        """
        if self.network_idle_timeout_ms <= 0:
            return False

        try:
            await self.page.wait_for_load_state(
                "networkidle",
                timeout=self.network_idle_timeout_ms,
            )
            return True
        except PlaywrightTimeoutError:
            logger.debug(
                f"Network not idle after {self.network_idle_timeout_ms}ms on "
                f"{self.page.url}, continuing"
            )
            return False

    async def load(self, url: str) -> Response | None:
        """Navigate to url (DOM ready) then wait for network idle."""
        response = await self.navigate(url, wait_until="domcontentloaded")
        await self.wait_for_network_idle()
        return response

    async def title(self) -> str:
        try:
            return await self.page.title()
        except Exception as e:
            raise PageLoadError(f"Failed to read page title: {e}", url=self.page.url) from e

    async def visible_text(self, max_chars: int | None = None) -> str:
        """
        Visible body text with scripts, styles and hidden elements removed.

        Raises:
            PageLoadError: If the page cannot be read
        """
        text = await self.evaluate(_VISIBLE_TEXT_SCRIPT) or ""
        if max_chars is not None and len(text) > max_chars:
            text = text[:max_chars]
        return text

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """
        Run a script in the page.

        Raises:
            PageLoadError: If evaluation fails
        """
        try:
            if arg is None:
                return await self.page.evaluate(script)
            return await self.page.evaluate(script, arg)
        except Exception as e:
            raise PageLoadError(
                f"Page script failed: {e}",
                url=self.page.url,
            ) from e

    async def close(self) -> None:
        try:
            await self.page.close()
        except Exception as e:
            logger.warning(f"Error closing page: {e}")
