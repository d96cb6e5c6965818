"""
Test doubles for the browser, the model API and page analysis.
"""

from contextlib import asynccontextmanager
from typing import Any

from site_explorer.explorer.link_extractor import EXTRACT_LINKS_SCRIPT
from site_explorer.explorer.models import PageAnalysisResult
from site_explorer.planning.test_case_planner import INTERACTIVE_ELEMENTS_SCRIPT


class FakePage:
    """Stands in for PageContext."""

    def __init__(
        self,
        title: str = "Fake Page",
        link_records: Any = None,
        elements: list[dict] | None = None,
        text: str = "Welcome to the fake page",
        load_error: Exception | None = None,
        evaluate_error: Exception | None = None,
    ) -> None:
        self.title_text = title
        self.link_records = [] if link_records is None else link_records
        self.elements = elements or []
        self.text = text
        self.load_error = load_error
        self.evaluate_error = evaluate_error
        self.loaded: list[str] = []

    async def load(self, url: str) -> None:
        if self.load_error is not None:
            raise self.load_error
        self.loaded.append(url)

    async def title(self) -> str:
        return self.title_text

    async def visible_text(self, max_chars: int | None = None) -> str:
        return self.text[:max_chars] if max_chars else self.text

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if self.evaluate_error is not None:
            raise self.evaluate_error
        if script == EXTRACT_LINKS_SCRIPT:
            return self.link_records
        if script == INTERACTIVE_ELEMENTS_SCRIPT:
            return self.elements[:arg] if arg else self.elements
        return None


class FakeBrowser:
    """Stands in for BrowserManager.open_page()."""

    def __init__(self, page: FakePage | None = None) -> None:
        self.page = page or FakePage()
        self.opened = 0
        self.closed = 0

    @asynccontextmanager
    async def open_page(self):
        self.opened += 1
        try:
            yield self.page
        finally:
            self.closed += 1


class FakeLLM:
    """
    Stands in for APILLM.ask().

    Returns queued responses in order, then repeats the last one. If error
    is set every call raises it.
    """

    def __init__(self, *responses: str, error: Exception | None = None) -> None:
        self.responses = list(responses) or ["[]"]
        self.error = error
        self.calls: list[dict] = []

    async def ask(
        self,
        prompt: str,
        *,
        profile: str,
        max_tokens: int,
        system: str | None = None,
    ) -> str:
        self.calls.append({
            "prompt": prompt,
            "profile": profile,
            "max_tokens": max_tokens,
            "system": system,
        })
        if self.error is not None:
            raise self.error
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


class FakeAnalyzer:
    """
    Stands in for PageAnalyzer.

    outcomes maps a URL to the PageAnalysisResult to return or the
    exception to raise. Unknown URLs raise KeyError.
    """

    def __init__(self, outcomes: dict[str, PageAnalysisResult | Exception]) -> None:
        self.outcomes = outcomes
        self.calls: list[str] = []

    async def analyze(self, url: str) -> PageAnalysisResult:
        self.calls.append(url)
        outcome = self.outcomes[url]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeDocumentation:
    """Stands in for TestCasePlanner.generate()."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def generate(self, url: str, screen_name: str) -> str:
        self.calls.append((url, screen_name))
        if self.error is not None:
            raise self.error
        return f"docs/{screen_name.upper()}-TEST-CASES.md"
