"""
In-page discovery of navigation candidates.

One script runs inside the loaded page and applies four rules in order,
suppressing repeated destinations as it goes:

1. Buttons with navigation intent: inside a form with an action, or an
   onclick handler that touches location.
2. Anchors with an href, except fragments and javascript:, mailto: and
   tel: pseudo-links.
3. Forms with a non-fragment action attribute.
4. Anchors inside <nav> landmarks. Mostly already caught by rule 2,
   in which case the earlier entry wins.
"""

from typing import Any, Iterable, Protocol

from site_explorer.core.exceptions import LinkExtractionError
from site_explorer.explorer.models import RawLink
from site_explorer.explorer.urls import is_absolute_url
from site_explorer.utils.logging import get_logger

logger = get_logger(__name__)


EXTRACT_LINKS_SCRIPT = """
() => {
    const links = [];
    const seenUrls = new Set();

    const addLink = (type, text, href, selector) => {
        if (href && !seenUrls.has(href)) {
            seenUrls.add(href);
            links.push({ type, text, href, selector });
        }
    };

    document.querySelectorAll('button').forEach((el, index) => {
        const text = (el.textContent || '').trim();
        const onClick = el.getAttribute('onclick');
        const form = el.closest('form');
        const formAction = form ? form.action : '';

        if (formAction || (onClick && onClick.includes('location'))) {
            const href = formAction || window.location.href;
            addLink('button', text, href, `button:nth-of-type(${index + 1})`);
        }
    });

    document.querySelectorAll('a[href]').forEach((el) => {
        const text = (el.textContent || '').trim();
        const hrefAttr = el.getAttribute('href') || '';

        if (!hrefAttr.startsWith('#') &&
            !hrefAttr.startsWith('javascript:') &&
            !hrefAttr.startsWith('mailto:') &&
            !hrefAttr.startsWith('tel:')) {
            addLink('link', text, el.href, `a[href="${hrefAttr}"]`);
        }
    });

    document.querySelectorAll('form[action]').forEach((el) => {
        const actionAttr = el.getAttribute('action') || '';
        if (actionAttr && !actionAttr.startsWith('#')) {
            addLink('form-action', 'Form submission', el.action, `form[action="${actionAttr}"]`);
        }
    });

    document.querySelectorAll('nav a[href]').forEach((el) => {
        const text = (el.textContent || '').trim();
        const hrefAttr = el.getAttribute('href') || '';

        if (!hrefAttr.startsWith('#') && !hrefAttr.startsWith('javascript:')) {
            addLink('nav', text, el.href, `nav a[href="${hrefAttr}"]`);
        }
    });

    return links;
}
"""


class ScriptRunner(Protocol):
    """Anything that can evaluate a script in a loaded page."""

    async def evaluate(self, script: str) -> Any: ...


def build_raw_links(records: Iterable[Any]) -> list[RawLink]:
    """
    Coerce script output into RawLink objects.

    Records without an absolute destination URL are dropped and repeated
    destinations keep their first occurrence.
    """
    links: list[RawLink] = []
    seen: set[str] = set()

    for record in records:
        if not isinstance(record, dict):
            continue

        href = str(record.get("href") or "").strip()
        if not is_absolute_url(href):
            logger.debug(f"Dropping link with non-absolute destination: {href!r}")
            continue
        if href in seen:
            continue
        seen.add(href)

        links.append(RawLink(
            type=str(record.get("type") or "link"),
            text=str(record.get("text") or "").strip(),
            href=href,
            selector=str(record.get("selector") or ""),
        ))

    return links


class LinkExtractor:
    """
    Runs the extraction script against a loaded page.

    Example:
        >>> extractor = LinkExtractor()
        >>> raw_links = await extractor.extract(page_context)
    """

    def __init__(self, script: str = EXTRACT_LINKS_SCRIPT) -> None:
        self.script = script

    async def extract(self, page: ScriptRunner) -> list[RawLink]:
        """
        Extract raw navigation candidates in rule order.

        Raises:
            LinkExtractionError: If the script fails or returns a non-list
        """
        try:
            records = await page.evaluate(self.script)
        except Exception as e:
            raise LinkExtractionError(f"Link extraction script failed: {e}") from e

        if records is None:
            records = []
        if not isinstance(records, list):
            raise LinkExtractionError(
                "Link extraction returned unexpected data",
                details={"type": type(records).__name__},
            )

        links = build_raw_links(records)
        logger.debug(f"Extracted {len(links)} raw links")
        return links
