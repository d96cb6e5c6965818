"""
Persistent store for the exploration map.

The store is the only reader and writer of the map file. It keeps a
working copy in memory; callers mutate through the store and call
save() after every change that must survive an interruption.
"""

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from site_explorer.core.exceptions import MapCorruptedError, StorageError
from site_explorer.explorer.models import (
    DiscoveredLink,
    ExplorationMap,
    ExploredPage,
    PageAnalysisResult,
    utc_now_iso,
)
from site_explorer.explorer.urls import canonicalize, origin_of
from site_explorer.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class MapStats:
    """Counts shown in exploration summaries."""

    pages_explored: int
    links_discovered: int
    links_pending: int


class ExplorationMapStore:
    """
    Single-writer store for one exploration map file.

    There is no cross-process locking: two stores pointed at the same
    file will overwrite each other's changes.

    Example:
        >>> store = ExplorationMapStore(".exploration-map.json")
        >>> store.load()
        >>> store.add_explored_page(result)
        >>> store.save()
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._map: ExplorationMap | None = None

    @property
    def map(self) -> ExplorationMap:
        """The working copy, loaded on first access."""
        if self._map is None:
            self.load()
        return self._map

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    def load(self) -> ExplorationMap:
        """
        Read the persisted map into the working copy.

        A missing file yields a fresh empty map. An unreadable or
        malformed file is logged and also yields a fresh map; its
        contents are discarded the next time save() runs.
        """
        if not self.path.exists():
            logger.debug(f"No exploration map at {self.path}, starting fresh")
            self._map = ExplorationMap()
            return self._map

        try:
            self._map = self.read_strict()
            logger.info(f"Loaded existing exploration map: {self.path}")
        except MapCorruptedError as e:
            logger.warning(f"Failed to load exploration map, creating new one: {e}")
            self._map = ExplorationMap()

        return self._map

    def read_strict(self) -> ExplorationMap:
        """
        Parse the map file without any fallback.

        Raises:
            MapCorruptedError: If the file cannot be read or parsed
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return ExplorationMap.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise MapCorruptedError(
                f"Unreadable exploration map: {e}",
                path=str(self.path),
            ) from e

    def save(self) -> None:
        """
        Stamp lastUpdatedAt and write the full map.

        The JSON is written to a temporary file in the same directory and
        moved over the target, so the file on disk is always either the
        previous or the new complete map.

        Raises:
            StorageError: If the file cannot be written
        """
        exploration_map = self.map
        exploration_map.last_updated_at = utc_now_iso()

        directory = self.path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                dir=str(directory),
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(exploration_map.to_dict(), f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            raise StorageError(
                f"Failed to save exploration map: {e}",
                details={"path": str(self.path)},
            ) from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.debug(f"Saved exploration map ({len(exploration_map.explored)} pages)")

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def ensure_base_url(self, url: str) -> str:
        """Set the map's base origin from url unless one is already recorded."""
        exploration_map = self.map
        if not exploration_map.base_url:
            exploration_map.base_url = origin_of(url)
        return exploration_map.base_url

    def add_explored_page(self, result: PageAnalysisResult | ExploredPage) -> ExploredPage:
        """
        Record an analyzed page.

        Any existing entry with the same canonical URL is replaced, the new
        entry goes to the end, and every link in the map that points at the
        page's canonical URL is marked explored. Links on the new page that
        point at already explored or ignored destinations are marked too.
        """
        page = (
            ExploredPage.from_result(result)
            if isinstance(result, PageAnalysisResult)
            else result
        )
        exploration_map = self.map
        canonical = canonicalize(page.url)

        exploration_map.explored = [
            existing for existing in exploration_map.explored
            if canonicalize(existing.url) != canonical
        ]
        exploration_map.explored.append(page)

        # The new page's own links follow the map's existing state
        ignored = set(exploration_map.ignored)
        explored = self.explored_canonical_urls()
        for link in page.discovered_links:
            destination = canonicalize(link.url)
            if destination in ignored:
                link.ignored = True
            if destination in explored:
                link.explored = True

        marked = 0
        for explored_page in exploration_map.explored:
            for link in explored_page.discovered_links:
                if canonicalize(link.url) == canonical:
                    if not link.explored:
                        marked += 1
                    link.explored = True

        logger.debug(
            f"Recorded page {canonical} ({len(page.discovered_links)} links, "
            f"{marked} references marked explored)"
        )
        return page

    def ignore_link(self, url: str) -> int:
        """
        Permanently exclude a destination from the pending set.

        Returns:
            Number of link entries newly marked ignored
        """
        exploration_map = self.map
        canonical = canonicalize(url)

        changed = 0
        for page in exploration_map.explored:
            for link in page.discovered_links:
                if canonicalize(link.url) == canonical and not link.ignored:
                    link.ignored = True
                    changed += 1

        if canonical not in exploration_map.ignored:
            exploration_map.ignored.append(canonical)

        return changed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def unexplored_links(self) -> list[DiscoveredLink]:
        """
        Pending links across the whole map.

        Deduplicated by canonical destination; the first occurrence in page
        order wins.
        """
        links: list[DiscoveredLink] = []
        seen: set[str] = set()

        for page in self.map.explored:
            for link in page.discovered_links:
                canonical = canonicalize(link.url)
                if link.is_pending and canonical not in seen:
                    seen.add(canonical)
                    links.append(link)

        return links

    def find_page(self, url: str) -> ExploredPage | None:
        canonical = canonicalize(url)
        for page in self.map.explored:
            if canonicalize(page.url) == canonical:
                return page
        return None

    def is_explored(self, url: str) -> bool:
        return self.find_page(url) is not None

    def explored_canonical_urls(self) -> set[str]:
        return {canonicalize(page.url) for page in self.map.explored}

    def stats(self) -> MapStats:
        exploration_map = self.map
        return MapStats(
            pages_explored=len(exploration_map.explored),
            links_discovered=exploration_map.total_links,
            links_pending=len(self.unexplored_links()),
        )
