"""
Tests for the exploration map data model.
"""

import pytest

from site_explorer.explorer.models import (
    NO_TEXT,
    DiscoveredLink,
    ExplorationMap,
    ExploredPage,
    LinkType,
    PageAnalysisResult,
    RawLink,
)


class TestLinkType:
    """Tests for LinkType parsing."""

    def test_known_kinds(self):
        assert LinkType.parse("button") is LinkType.BUTTON
        assert LinkType.parse("NAV") is LinkType.NAV
        assert LinkType.parse("form-action") is LinkType.FORM_ACTION

    def test_unknown_kind_falls_back_to_link(self):
        """Unexpected kinds from the classifier should not be rejected."""
        assert LinkType.parse("menu-item") is LinkType.LINK
        assert LinkType.parse(None) is LinkType.LINK


class TestDiscoveredLink:
    """Tests for DiscoveredLink."""

    def test_from_raw_defaults(self):
        """Raw links become pending links with empty text normalized."""
        raw = RawLink(type="nav", text="", href="http://x/a", selector="nav a")
        link = DiscoveredLink.from_raw(raw)

        assert link.url == "http://x/a"
        assert link.type is LinkType.NAV
        assert link.text == NO_TEXT
        assert link.selector == "nav a"
        assert link.explored is False
        assert link.ignored is False
        assert link.is_pending

    def test_is_pending(self):
        assert not DiscoveredLink(url="http://x/a", explored=True).is_pending
        assert not DiscoveredLink(url="http://x/a", ignored=True).is_pending

    def test_dict_uses_persisted_keys(self):
        link = DiscoveredLink(url="http://x/a", type=LinkType.BUTTON, text="Go", selector="button")
        data = link.to_dict()

        assert data == {
            "url": "http://x/a",
            "type": "button",
            "text": "Go",
            "selector": "button",
            "explored": False,
            "ignored": False,
        }
        assert DiscoveredLink.from_dict(data) == link

    def test_from_dict_requires_url(self):
        with pytest.raises(KeyError):
            DiscoveredLink.from_dict({"type": "link"})


class TestExploredPage:
    """Tests for ExploredPage."""

    def test_from_result_stamps_time(self):
        result = PageAnalysisResult(
            url="http://x/login",
            test_cases_doc="docs/LOGIN-TEST-CASES.md",
            page_title="Login",
            discovered_links=[DiscoveredLink(url="http://x/")],
        )
        page = ExploredPage.from_result(result)

        assert page.url == "http://x/login"
        assert page.explored_at.endswith("Z")
        assert page.discovered_links == result.discovered_links
        assert page.discovered_links is not result.discovered_links

    def test_camel_case_keys(self):
        page = ExploredPage(
            url="http://x/a",
            explored_at="2024-01-01T00:00:00.000Z",
            test_cases_doc="docs/A-TEST-CASES.md",
            page_title="A",
        )
        data = page.to_dict()

        assert set(data) == {"url", "exploredAt", "testCasesDoc", "pageTitle", "discoveredLinks"}


class TestExplorationMap:
    """Tests for ExplorationMap serialization."""

    def test_empty_document_gives_empty_map(self):
        """Missing fields deserialize to an empty map."""
        exploration_map = ExplorationMap.from_dict({})

        assert exploration_map.base_url == ""
        assert exploration_map.explored == []
        assert exploration_map.queue == []
        assert exploration_map.ignored == []
        assert exploration_map.started_at

    def test_rejects_non_object(self):
        with pytest.raises(TypeError):
            ExplorationMap.from_dict([])

    def test_rejects_non_list_explored(self):
        with pytest.raises(TypeError):
            ExplorationMap.from_dict({"explored": {"url": "http://x/"}})

    def test_total_links(self):
        exploration_map = ExplorationMap(explored=[
            ExploredPage("http://x/", "t", "d", "Home", [DiscoveredLink("http://x/a"), DiscoveredLink("http://x/b")]),
            ExploredPage("http://x/a", "t", "d", "A", [DiscoveredLink("http://x/")]),
        ])

        assert exploration_map.total_links == 3

    def test_top_level_keys(self):
        data = ExplorationMap(base_url="http://x").to_dict()

        assert list(data) == ["baseUrl", "startedAt", "lastUpdatedAt", "explored", "queue", "ignored"]
