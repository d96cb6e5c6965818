"""
Shared pytest fixtures for Site Explorer tests.

Provides reusable fixtures for:
- Configuration and settings
- Exploration map stores and sample pages
- Fake browser and model collaborators
- Temporary resources
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from site_explorer.config import Settings, reset_settings
from site_explorer.explorer.map_store import ExplorationMapStore
from site_explorer.explorer.models import DiscoveredLink, LinkType, PageAnalysisResult
from site_explorer.utils.logging import reset_logging
from site_explorer.utils.metrics import Metrics
from tests.fakes import FakeBrowser, FakeLLM, FakePage


@pytest.fixture(autouse=True)
def reset_global_state():
    """
    Reset process-wide settings, logging and metrics around each test.
    """
    reset_settings()
    reset_logging()
    Metrics.reset()
    yield
    reset_settings()
    reset_logging()
    Metrics.reset()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that's cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """Settings pointing all file output into a temporary directory."""
    return Settings(
        explorer={"map_file_path": str(temp_dir / "map.json")},
        planning={"docs_dir": str(temp_dir / "docs")},
        api_llm={"max_retries": 0, "retry_delay_seconds": 0.0},
    )


@pytest.fixture
def map_path(temp_dir: Path) -> Path:
    return temp_dir / ".exploration-map.json"


@pytest.fixture
def store(map_path: Path) -> ExplorationMapStore:
    """An empty store backed by a temporary file."""
    store = ExplorationMapStore(map_path)
    store.load()
    return store


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def fake_page() -> FakePage:
    return FakePage()


@pytest.fixture
def fake_browser(fake_page: FakePage) -> FakeBrowser:
    return FakeBrowser(fake_page)


def make_link(url: str, **kwargs) -> DiscoveredLink:
    """Build a pending link with sensible defaults."""
    kwargs.setdefault("type", LinkType.LINK)
    kwargs.setdefault("text", url.rsplit("/", 1)[-1] or "Home")
    kwargs.setdefault("selector", f'a[href="{url}"]')
    return DiscoveredLink(url=url, **kwargs)


def make_result(url: str, links: list[str] | None = None, title: str = "") -> PageAnalysisResult:
    """Build an analysis result for url with pending links to each of links."""
    return PageAnalysisResult(
        url=url,
        test_cases_doc=f"docs/{url.rsplit('/', 1)[-1].upper() or 'HOME'}-TEST-CASES.md",
        page_title=title or url,
        discovered_links=[make_link(link) for link in links or []],
    )


@pytest.fixture
def link_factory():
    return make_link


@pytest.fixture
def result_factory():
    return make_result
