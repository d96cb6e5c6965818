"""
The interactive exploration loop.

The engine walks a site one page at a time: analyze the current URL,
record it in the map, offer the operator the page's pending links and
follow the chosen one. Pages already in the map are not analyzed again;
their remaining links are offered instead. A failed analysis is logged
and the operator picks from the map-wide pending links.

States:
    idle -> analyzing -> presenting -> navigating -> analyzing ...
                 \\-> recovering -> navigating | done
    presenting -> done (quit or nothing left)
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from site_explorer.explorer.analyzer import PageAnalyzer
from site_explorer.explorer.map_store import ExplorationMapStore
from site_explorer.explorer.models import DiscoveredLink, ExploredPage
from site_explorer.explorer.prompt import OperatorPrompt
from site_explorer.explorer.urls import canonicalize, url_to_screen_name
from site_explorer.utils.logging import get_logger

logger = get_logger(__name__)


class ExplorerState(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    PRESENTING = "presenting"
    NAVIGATING = "navigating"
    RECOVERING = "recovering"
    DONE = "done"


class EndReason(str, Enum):
    """Why a session stopped."""

    OPERATOR_QUIT = "operator_quit"
    NO_PENDING_LINKS = "no_pending_links"


@dataclass
class GeneratedDoc:
    label: str
    path: str


@dataclass
class ExplorationReport:
    """
    Summary of one exploration session.

    Counts describe the whole map after the session, not just the pages
    added during it.
    """

    start_url: str
    map_path: Path
    pages_explored: int = 0
    links_discovered: int = 0
    links_pending: int = 0
    pages_added: list[str] = field(default_factory=list)
    failed_urls: list[str] = field(default_factory=list)
    end_reason: EndReason | None = None
    docs: list[GeneratedDoc] = field(default_factory=list)
    transitions: list[ExplorerState] = field(default_factory=list)


class ExplorationEngine:
    """
    Drives exploration from a start URL until the operator quits or no
    pending links remain.

    The engine owns the map store for the duration of run(); the map is
    saved after every successfully analyzed page.

    Example:
        >>> engine = ExplorationEngine(store, analyzer, ConsoleOperatorPrompt())
        >>> report = await engine.run("http://localhost:3000/")
    """

    def __init__(
        self,
        store: ExplorationMapStore,
        analyzer: PageAnalyzer,
        prompt: OperatorPrompt,
    ) -> None:
        self.store = store
        self.analyzer = analyzer
        self.prompt = prompt
        self.state = ExplorerState.IDLE
        self._report: ExplorationReport | None = None

    def _enter(self, state: ExplorerState) -> None:
        logger.debug(f"Engine state: {self.state.value} -> {state.value}")
        self.state = state
        if self._report is not None:
            self._report.transitions.append(state)

    @staticmethod
    def _pending_on(page: ExploredPage, visited: set[str]) -> list[DiscoveredLink]:
        return [
            link for link in page.discovered_links
            if link.is_pending and canonicalize(link.url) not in visited
        ]

    def _pending_anywhere(self, visited: set[str]) -> list[DiscoveredLink]:
        return [
            link for link in self.store.unexplored_links()
            if canonicalize(link.url) not in visited
        ]

    async def _present(self, candidates: list[DiscoveredLink]) -> str | None:
        """Offer candidates; returns the chosen destination or None on quit."""
        self._enter(ExplorerState.PRESENTING)
        choice = await self.prompt.choose(candidates)
        if choice.is_quit:
            logger.info("Exploration ended by user")
            return None

        self._enter(ExplorerState.NAVIGATING)
        return candidates[choice.index].url

    async def run(self, start_url: str) -> ExplorationReport:
        """
        Explore interactively starting at start_url.

        Returns:
            Session report, also when the session ends on the first page

        Raises:
            StorageError: If the map cannot be saved after a page is added
        """
        self.state = ExplorerState.IDLE
        report = ExplorationReport(start_url=start_url, map_path=self.store.path)
        self._report = report
        report.transitions.append(ExplorerState.IDLE)

        self.store.ensure_base_url(start_url)
        visited = self.store.explored_canonical_urls()
        current_url = start_url

        logger.info(f"Starting interactive site exploration from: {start_url}")

        while True:
            canonical = canonicalize(current_url)

            if canonical in visited:
                page = self.store.find_page(current_url)
                if page is not None:
                    logger.info(f"Page already explored: {current_url}")
                    candidates = self._pending_on(page, visited)
                    if not candidates:
                        logger.info("No more unexplored links from this page")
                        report.end_reason = EndReason.NO_PENDING_LINKS
                        break

                    next_url = await self._present(candidates)
                    if next_url is None:
                        report.end_reason = EndReason.OPERATOR_QUIT
                        break
                    current_url = next_url
                    continue

            self._enter(ExplorerState.ANALYZING)
            try:
                result = await self.analyzer.analyze(current_url)
            except Exception as e:
                self._enter(ExplorerState.RECOVERING)
                report.failed_urls.append(current_url)
                logger.error(f"Error analyzing page {current_url}: {e}")
                logger.info("Skipping to next page")

                candidates = self._pending_anywhere(visited)
                if not candidates:
                    logger.info("No more pages to explore")
                    report.end_reason = EndReason.NO_PENDING_LINKS
                    break

                next_url = await self._present(candidates)
                if next_url is None:
                    report.end_reason = EndReason.OPERATOR_QUIT
                    break
                current_url = next_url
                continue

            # StorageError from save() ends the session; the page is not recorded
            page = self.store.add_explored_page(result)
            self.store.save()
            visited.add(canonical)
            report.pages_added.append(page.url)

            candidates = self._pending_on(page, visited)
            if not candidates:
                logger.info("No more unexplored links from this page")
                candidates = self._pending_anywhere(visited)
                if candidates:
                    logger.info(
                        f"Found {len(candidates)} unexplored link(s) from previous pages"
                    )

            if not candidates:
                report.end_reason = EndReason.NO_PENDING_LINKS
                break

            next_url = await self._present(candidates)
            if next_url is None:
                report.end_reason = EndReason.OPERATOR_QUIT
                break
            current_url = next_url

        self._enter(ExplorerState.DONE)
        self._finish(report)
        self._report = None
        return report

    def _finish(self, report: ExplorationReport) -> None:
        stats = self.store.stats()
        report.pages_explored = stats.pages_explored
        report.links_discovered = stats.links_discovered
        report.links_pending = stats.links_pending
        report.docs = [
            GeneratedDoc(
                label=page.page_title or url_to_screen_name(page.url),
                path=page.test_cases_doc,
            )
            for page in self.store.map.explored
        ]

        logger.info(
            f"Exploration finished ({report.end_reason.value}): "
            f"{stats.pages_explored} pages, {stats.links_discovered} links, "
            f"{stats.links_pending} pending"
        )
