"""
Data model for the exploration map.

These dataclasses mirror the persisted JSON document one-to-one. The
JSON keys are camelCase so map files stay compatible with existing
exploration maps; Python attributes are snake_case.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


NO_TEXT = "No text"


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class LinkType(str, Enum):
    """Kinds of navigation candidates found on a page."""

    BUTTON = "button"
    LINK = "link"
    NAV = "nav"
    FORM_ACTION = "form-action"

    @classmethod
    def parse(cls, value: Any) -> "LinkType":
        """Coerce a raw kind string, falling back to LINK for unknown kinds."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.LINK


@dataclass
class RawLink:
    """One candidate as returned by in-page extraction, before filtering."""

    type: str
    text: str
    href: str
    selector: str

    def to_dict(self) -> dict[str, str]:
        return {
            "type": self.type,
            "text": self.text,
            "href": self.href,
            "selector": self.selector,
        }


@dataclass
class DiscoveredLink:
    """
    A navigation target discovered on an explored page.

    Attributes:
        url: Absolute destination URL
        type: Kind of element the link came from
        text: Display text (may be "No text")
        selector: Locator that re-finds the element; opaque to the explorer
        explored: Destination page has been analyzed (anywhere in the map)
        ignored: Excluded permanently by the operator
    """

    url: str
    type: LinkType = LinkType.LINK
    text: str = NO_TEXT
    selector: str = ""
    explored: bool = False
    ignored: bool = False

    @property
    def is_pending(self) -> bool:
        return not self.explored and not self.ignored

    @classmethod
    def from_raw(cls, raw: RawLink) -> "DiscoveredLink":
        return cls(
            url=raw.href,
            type=LinkType.parse(raw.type),
            text=raw.text or NO_TEXT,
            selector=raw.selector,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "type": self.type.value,
            "text": self.text,
            "selector": self.selector,
            "explored": self.explored,
            "ignored": self.ignored,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DiscoveredLink":
        return cls(
            url=str(data["url"]),
            type=LinkType.parse(data.get("type", LinkType.LINK.value)),
            text=str(data.get("text") or NO_TEXT),
            selector=str(data.get("selector") or ""),
            explored=bool(data.get("explored", False)),
            ignored=bool(data.get("ignored", False)),
        )


@dataclass
class PageAnalysisResult:
    """What analyzing one page produces, before it is recorded in the map."""

    url: str
    test_cases_doc: str
    page_title: str
    discovered_links: list[DiscoveredLink] = field(default_factory=list)


@dataclass
class ExploredPage:
    """An analyzed page and the links found on it at analysis time."""

    url: str
    explored_at: str
    test_cases_doc: str
    page_title: str
    discovered_links: list[DiscoveredLink] = field(default_factory=list)

    @classmethod
    def from_result(cls, result: PageAnalysisResult) -> "ExploredPage":
        return cls(
            url=result.url,
            explored_at=utc_now_iso(),
            test_cases_doc=result.test_cases_doc,
            page_title=result.page_title,
            discovered_links=list(result.discovered_links),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "exploredAt": self.explored_at,
            "testCasesDoc": self.test_cases_doc,
            "pageTitle": self.page_title,
            "discoveredLinks": [link.to_dict() for link in self.discovered_links],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExploredPage":
        return cls(
            url=str(data["url"]),
            explored_at=str(data.get("exploredAt", "")),
            test_cases_doc=str(data.get("testCasesDoc", "")),
            page_title=str(data.get("pageTitle", "")),
            discovered_links=[
                DiscoveredLink.from_dict(item)
                for item in data.get("discoveredLinks", [])
            ],
        )


@dataclass
class ExplorationMap:
    """
    The persistent state of a crawl.

    `explored` is kept in analysis order. `queue` is carried through
    load/save unchanged. `ignored` holds canonical destinations and is only
    written by ExplorationMapStore.ignore_link() (the `ignore` command); the
    exploration loop reads it but never changes it.
    """

    base_url: str = ""
    started_at: str = field(default_factory=utc_now_iso)
    last_updated_at: str = field(default_factory=utc_now_iso)
    explored: list[ExploredPage] = field(default_factory=list)
    queue: list[str] = field(default_factory=list)
    ignored: list[str] = field(default_factory=list)

    @property
    def total_links(self) -> int:
        return sum(len(page.discovered_links) for page in self.explored)

    def to_dict(self) -> dict[str, Any]:
        return {
            "baseUrl": self.base_url,
            "startedAt": self.started_at,
            "lastUpdatedAt": self.last_updated_at,
            "explored": [page.to_dict() for page in self.explored],
            "queue": list(self.queue),
            "ignored": list(self.ignored),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExplorationMap":
        """
        Build a map from its JSON form.

        Raises:
            KeyError, TypeError, ValueError: If the structure is invalid
        """
        if not isinstance(data, dict):
            raise TypeError(f"Exploration map must be an object, got {type(data).__name__}")

        now = utc_now_iso()
        explored = data.get("explored", [])
        if not isinstance(explored, list):
            raise TypeError("'explored' must be a list")

        return cls(
            base_url=str(data.get("baseUrl") or ""),
            started_at=str(data.get("startedAt") or now),
            last_updated_at=str(data.get("lastUpdatedAt") or now),
            explored=[ExploredPage.from_dict(item) for item in explored],
            queue=[str(item) for item in data.get("queue", [])],
            ignored=[str(item) for item in data.get("ignored", [])],
        )
