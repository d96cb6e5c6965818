"""
Single-page analysis: documentation plus navigation discovery.
"""

import time
from typing import Any, AsyncContextManager, Protocol

from site_explorer.core.exceptions import PageAnalysisError, SiteExplorerError
from site_explorer.explorer.link_extractor import LinkExtractor
from site_explorer.explorer.models import PageAnalysisResult
from site_explorer.explorer.navigation_filter import NavigationFilter
from site_explorer.explorer.urls import url_to_screen_name
from site_explorer.utils.logging import get_logger_with_context
from site_explorer.utils.metrics import (
    ANALYSIS_FAILURES,
    PAGE_ANALYSIS_MS,
    PAGES_ANALYZED,
    Metrics,
)


class DocumentationGenerator(Protocol):
    """Produces a documentation artifact for a page and returns its reference."""

    async def generate(self, url: str, screen_name: str) -> str: ...


class LoadedPage(Protocol):
    async def load(self, url: str) -> Any: ...

    async def title(self) -> str: ...

    async def evaluate(self, script: str) -> Any: ...


class PageOpener(Protocol):
    """Source of fresh pages; BrowserManager satisfies this."""

    def open_page(self) -> AsyncContextManager[LoadedPage]: ...


class PageAnalyzer:
    """
    Analyzes one URL at a time.

    Documentation is generated first, then the page is loaded again to
    extract and filter its navigation links. Any failure propagates to
    the caller as PageAnalysisError.

    Example:
        >>> analyzer = PageAnalyzer(browser, planner, NavigationFilter(classifier))
        >>> result = await analyzer.analyze("http://localhost:3000/users")
    """

    def __init__(
        self,
        browser: PageOpener,
        documentation: DocumentationGenerator,
        navigation_filter: NavigationFilter,
        extractor: LinkExtractor | None = None,
    ) -> None:
        self.browser = browser
        self.documentation = documentation
        self.navigation_filter = navigation_filter
        self.extractor = extractor or LinkExtractor()

    async def analyze(self, url: str) -> PageAnalysisResult:
        """
        Raises:
            PageAnalysisError: If documentation, loading or extraction fails
        """
        metrics = Metrics.get()
        start = time.perf_counter()
        page_logger = get_logger_with_context(__name__, url=url)
        page_logger.info("Analyzing page")

        try:
            screen_name = url_to_screen_name(url)
            test_cases_doc = await self.documentation.generate(url, screen_name)
            page_logger.info(f"Test cases generated: {test_cases_doc}")

            async with self.browser.open_page() as page:
                await page.load(url)
                page_title = await page.title()
                raw_links = await self.extractor.extract(page)
                links = await self.navigation_filter.filter(raw_links, url)

        except PageAnalysisError:
            metrics.increment(ANALYSIS_FAILURES)
            raise
        except SiteExplorerError as e:
            metrics.increment(ANALYSIS_FAILURES)
            raise PageAnalysisError(
                f"Failed to analyze {url}: {e.message}",
                url=url,
                details={"cause": type(e).__name__, **e.details},
            ) from e
        except Exception as e:
            metrics.increment(ANALYSIS_FAILURES)
            raise PageAnalysisError(
                f"Failed to analyze {url}: {e}",
                url=url,
                details={"cause": type(e).__name__},
            ) from e

        metrics.increment(PAGES_ANALYZED)
        metrics.observe(PAGE_ANALYSIS_MS, (time.perf_counter() - start) * 1000)
        page_logger.info(f"Found {len(links)} navigation link(s)")

        return PageAnalysisResult(
            url=url,
            test_cases_doc=test_cases_doc,
            page_title=page_title,
            discovered_links=links,
        )
