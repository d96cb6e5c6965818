"""
Reduce raw link candidates to real inter-page navigation.

Small link sets pass straight through. Larger sets go to a low-cost
model for classification; any failure there falls back to passing every
raw link through, since filtering only improves precision.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Protocol

from site_explorer.config.settings import Settings
from site_explorer.core.exceptions import ClassificationError, ResponseParseError
from site_explorer.explorer.models import NO_TEXT, DiscoveredLink, LinkType, RawLink
from site_explorer.explorer.urls import is_absolute_url
from site_explorer.llm.json_extraction import extract_json_array
from site_explorer.llm.prompt_templates import ExplorerPrompts
from site_explorer.utils.logging import get_logger
from site_explorer.utils.metrics import (
    CLASSIFICATION_CALLS,
    CLASSIFICATION_FALLBACKS,
    Metrics,
)

logger = get_logger(__name__)


class TextModel(Protocol):
    """The subset of APILLM the classifier needs."""

    async def ask(self, prompt: str, *, profile: str, max_tokens: int) -> str: ...


class LinkFilterStrategy(ABC):
    """Turns raw candidates from one page into discovered links."""

    @abstractmethod
    async def filter(self, raw_links: list[RawLink], page_url: str) -> list[DiscoveredLink]:
        ...


class PassThroughFilter(LinkFilterStrategy):
    """Keeps every raw link, preserving kind, text and selector."""

    async def filter(self, raw_links: list[RawLink], page_url: str) -> list[DiscoveredLink]:
        return [DiscoveredLink.from_raw(raw) for raw in raw_links]


class ClassifierFilter(LinkFilterStrategy):
    """
    Asks a model which candidates are significant navigation.

    Only the first max_links candidates are sent. The answer must contain
    a JSON array of objects carrying the destination under "url" or the
    older "href" key.
    """

    def __init__(
        self,
        llm: TextModel,
        profile: str = "haiku",
        max_tokens: int = 2048,
        max_links: int = 30,
    ) -> None:
        self.llm = llm
        self.profile = profile
        self.max_tokens = max_tokens
        self.max_links = max_links

    def build_prompt(self, raw_links: list[RawLink], page_url: str) -> str:
        elements = [raw.to_dict() for raw in raw_links[: self.max_links]]
        return ExplorerPrompts.FILTER_NAVIGATION.format_user(
            page_url=page_url,
            elements_json=json.dumps(elements, indent=2, ensure_ascii=False),
        )

    async def filter(self, raw_links: list[RawLink], page_url: str) -> list[DiscoveredLink]:
        """
        Raises:
            ClassificationError: If the model call fails or its answer is unusable
        """
        prompt = self.build_prompt(raw_links, page_url)
        Metrics.get().increment(CLASSIFICATION_CALLS)

        try:
            response = await self.llm.ask(
                prompt,
                profile=self.profile,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            raise ClassificationError(f"Classification call failed: {e}") from e

        try:
            records = extract_json_array(response)
        except ResponseParseError as e:
            raise ClassificationError(
                f"Classifier returned unexpected format: {e.message}",
                details={"response": response[:500]},
            ) from e

        return parse_classified_links(records)


def parse_classified_links(records: list[Any]) -> list[DiscoveredLink]:
    """
    Normalize classifier records into discovered links.

    Records that are not objects or lack an absolute destination are
    dropped. Repeated destinations keep their first occurrence.
    """
    links: list[DiscoveredLink] = []
    seen: set[str] = set()

    for record in records:
        if not isinstance(record, dict):
            continue

        url = str(record.get("url") or record.get("href") or "").strip()
        if not is_absolute_url(url):
            logger.debug(f"Dropping classified link without absolute URL: {url!r}")
            continue
        if url in seen:
            continue
        seen.add(url)

        links.append(DiscoveredLink(
            url=url,
            type=LinkType.parse(record.get("type")),
            text=str(record.get("text") or "").strip() or NO_TEXT,
            selector=str(record.get("selector") or ""),
        ))

    return links


class NavigationFilter:
    """
    Chooses a strategy by input size.

    Example:
        >>> nav_filter = NavigationFilter(ClassifierFilter(llm))
        >>> links = await nav_filter.filter(raw_links, "https://app.local/")
    """

    def __init__(
        self,
        classifier: LinkFilterStrategy | None = None,
        passthrough_threshold: int = 5,
    ) -> None:
        self.classifier = classifier
        self.passthrough = PassThroughFilter()
        self.passthrough_threshold = passthrough_threshold

    @classmethod
    def from_settings(cls, settings: Settings, llm: TextModel) -> "NavigationFilter":
        classifier = ClassifierFilter(
            llm,
            profile=settings.api_llm.classification_profile,
            max_tokens=settings.api_llm.classification_max_tokens,
            max_links=settings.explorer.max_links_for_classification,
        )
        return cls(classifier, settings.explorer.passthrough_threshold)

    async def filter(self, raw_links: list[RawLink], page_url: str) -> list[DiscoveredLink]:
        if not raw_links:
            return []

        if len(raw_links) <= self.passthrough_threshold or self.classifier is None:
            return await self.passthrough.filter(raw_links, page_url)

        try:
            links = await self.classifier.filter(raw_links, page_url)
            logger.info(f"Filtered {len(raw_links)} raw links to {len(links)} navigation links")
            return links
        except Exception as e:
            Metrics.get().increment(CLASSIFICATION_FALLBACKS)
            logger.warning(f"AI filtering failed, showing all links: {e}")
            return await self.passthrough.filter(raw_links, page_url)
