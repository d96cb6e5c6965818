"""
Tests for the exploration engine state machine.
"""

import json
from pathlib import Path

import pytest

from site_explorer.core.exceptions import NavigationError, StorageError
from site_explorer.explorer.engine import EndReason, ExplorationEngine, ExplorerState
from site_explorer.explorer.map_store import ExplorationMapStore
from site_explorer.explorer.prompt import Choice, ScriptedOperatorPrompt
from tests.conftest import make_result
from tests.fakes import FakeAnalyzer


def seeded_store(map_path: Path) -> ExplorationMapStore:
    """A saved map where http://x/login is explored with one pending link."""
    store = ExplorationMapStore(map_path)
    store.load()
    store.ensure_base_url("http://x/login")
    store.add_explored_page(make_result("http://x/login", ["http://x/dashboard"], title="Login"))
    store.save()
    return store


class TestQuit:
    """Tests for ending a session from the prompt."""

    @pytest.mark.asyncio
    async def test_quit_on_explored_start_page(self, map_path: Path):
        """Quitting at the first prompt explores nothing and leaves the map as it was."""
        seeded_store(map_path)
        store = ExplorationMapStore(map_path)
        store.load()
        analyzer = FakeAnalyzer({})
        prompt = ScriptedOperatorPrompt(["quit"])

        report = await ExplorationEngine(store, analyzer, prompt).run("http://x/login")

        assert report.end_reason == EndReason.OPERATOR_QUIT
        assert report.transitions[-1] == ExplorerState.DONE
        assert analyzer.calls == []
        assert report.pages_added == []
        assert report.pages_explored == 1
        assert [link.url for link in prompt.presented[0]] == ["http://x/dashboard"]

        reloaded = ExplorationMapStore(map_path)
        assert len(reloaded.load().explored) == 1

    @pytest.mark.asyncio
    async def test_invalid_choice_behaves_like_quit(self, map_path: Path):
        """Unparseable input with three links shown ends the session exactly like quit."""
        reports = []
        for answer in ["quit", "abc"]:
            path = map_path.with_name(f"{answer}.json")
            store = ExplorationMapStore(path)
            store.load()
            store.add_explored_page(make_result(
                "http://x/login",
                ["http://x/a", "http://x/b", "http://x/c"],
            ))
            store.save()

            analyzer = FakeAnalyzer({})
            prompt = ScriptedOperatorPrompt([answer])
            report = await ExplorationEngine(store, analyzer, prompt).run("http://x/login")

            assert len(prompt.presented[0]) == 3
            assert analyzer.calls == []
            reports.append(report)

        quit_report, abc_report = reports
        assert abc_report.end_reason == quit_report.end_reason == EndReason.OPERATOR_QUIT
        assert abc_report.transitions == quit_report.transitions
        assert abc_report.pages_explored == quit_report.pages_explored

    @pytest.mark.asyncio
    async def test_out_of_range_choice_quits(self, store: ExplorationMapStore):
        analyzer = FakeAnalyzer({"http://x/": make_result("http://x/", ["http://x/a"])})
        prompt = ScriptedOperatorPrompt(["5"])

        report = await ExplorationEngine(store, analyzer, prompt).run("http://x/")

        assert report.end_reason == EndReason.OPERATOR_QUIT
        assert analyzer.calls == ["http://x/"]


class TestNavigation:
    """Tests for the analyze / present / navigate loop."""

    @pytest.mark.asyncio
    async def test_follows_operator_choices_until_exhausted(self, store: ExplorationMapStore, map_path: Path):
        analyzer = FakeAnalyzer({
            "http://x/": make_result("http://x/", ["http://x/a", "http://x/b"]),
            "http://x/a": make_result("http://x/a", ["http://x/", "http://x/b"]),
            "http://x/b": make_result("http://x/b", ["http://x/a?tab=1"]),
        })
        prompt = ScriptedOperatorPrompt(["1", "1"])

        report = await ExplorationEngine(store, analyzer, prompt).run("http://x/")

        assert analyzer.calls == ["http://x/", "http://x/a", "http://x/b"]
        assert report.end_reason == EndReason.NO_PENDING_LINKS
        assert report.pages_added == ["http://x/", "http://x/a", "http://x/b"]
        assert report.pages_explored == 3
        assert report.links_pending == 0

        # Already visited destinations are never offered
        assert [link.url for link in prompt.presented[0]] == ["http://x/a", "http://x/b"]
        assert [link.url for link in prompt.presented[1]] == ["http://x/b"]

        data = json.loads(map_path.read_text(encoding="utf-8"))
        assert [page["url"] for page in data["explored"]] == ["http://x/", "http://x/a", "http://x/b"]
        assert data["baseUrl"] == "http://x"

    @pytest.mark.asyncio
    async def test_falls_back_to_map_wide_pending(self, store: ExplorationMapStore):
        """A page without new links offers pending links from earlier pages."""
        analyzer = FakeAnalyzer({
            "http://x/": make_result("http://x/", ["http://x/a", "http://x/b"]),
            "http://x/a": make_result("http://x/a"),
            "http://x/b": make_result("http://x/b"),
        })
        prompt = ScriptedOperatorPrompt(["1", "1"])

        report = await ExplorationEngine(store, analyzer, prompt).run("http://x/")

        assert [link.url for link in prompt.presented[1]] == ["http://x/b"]
        assert analyzer.calls == ["http://x/", "http://x/a", "http://x/b"]
        assert report.end_reason == EndReason.NO_PENDING_LINKS

    @pytest.mark.asyncio
    async def test_page_saved_before_prompt(self, store: ExplorationMapStore, map_path: Path):
        """The analyzed page is on disk by the time the operator is asked."""
        seen_on_disk = []

        class CheckingPrompt:
            async def choose(self, links):
                data = json.loads(map_path.read_text(encoding="utf-8"))
                seen_on_disk.append(len(data["explored"]))
                return Choice.quit()

        analyzer = FakeAnalyzer({"http://x/": make_result("http://x/", ["http://x/a"])})

        await ExplorationEngine(store, analyzer, CheckingPrompt()).run("http://x/")

        assert seen_on_disk == [1]

    @pytest.mark.asyncio
    async def test_resumed_session_skips_explored_pages(self, map_path: Path):
        """Choosing a link from an explored start page analyzes only the new page."""
        seeded_store(map_path)
        store = ExplorationMapStore(map_path)
        store.load()
        analyzer = FakeAnalyzer({"http://x/dashboard": make_result("http://x/dashboard")})
        prompt = ScriptedOperatorPrompt(["1"])

        report = await ExplorationEngine(store, analyzer, prompt).run("http://x/login?next=/")

        assert analyzer.calls == ["http://x/dashboard"]
        assert report.pages_explored == 2
        assert report.end_reason == EndReason.NO_PENDING_LINKS

    @pytest.mark.asyncio
    async def test_session_leaves_ignored_list_alone(self, store: ExplorationMapStore):
        """Ignored destinations are read by the loop, never rewritten."""
        store.map.ignored.append("http://x/logout")
        analyzer = FakeAnalyzer({
            "http://x/": make_result("http://x/", ["http://x/logout", "http://x/a"]),
            "http://x/a": make_result("http://x/a"),
        })
        prompt = ScriptedOperatorPrompt(["1"])

        await ExplorationEngine(store, analyzer, prompt).run("http://x/")

        assert [link.url for link in prompt.presented[0]] == ["http://x/a"]
        assert store.map.ignored == ["http://x/logout"]

    @pytest.mark.asyncio
    async def test_explored_start_page_without_pending_links(self, store: ExplorationMapStore):
        store.add_explored_page(make_result("http://x/"))
        prompt = ScriptedOperatorPrompt([])

        report = await ExplorationEngine(store, FakeAnalyzer({}), prompt).run("http://x/")

        assert report.end_reason == EndReason.NO_PENDING_LINKS
        assert prompt.presented == []

    @pytest.mark.asyncio
    async def test_report_lists_docs(self, store: ExplorationMapStore):
        analyzer = FakeAnalyzer({"http://x/users": make_result("http://x/users", title="")})
        analyzer.outcomes["http://x/users"].page_title = ""

        report = await ExplorationEngine(store, analyzer, ScriptedOperatorPrompt([])).run("http://x/users")

        assert len(report.docs) == 1
        assert report.docs[0].label == "users"
        assert report.docs[0].path == "docs/USERS-TEST-CASES.md"


class TestRecovery:
    """Tests for analysis failures."""

    @pytest.mark.asyncio
    async def test_failed_page_not_persisted_and_pending_offered(self, store: ExplorationMapStore):
        analyzer = FakeAnalyzer({
            "http://x/": make_result("http://x/", ["http://x/a", "http://x/b"]),
            "http://x/a": NavigationError("Navigation timeout", url="http://x/a"),
            "http://x/b": make_result("http://x/b"),
        })
        prompt = ScriptedOperatorPrompt(["1", "2"])

        report = await ExplorationEngine(store, analyzer, prompt).run("http://x/")

        assert ExplorerState.RECOVERING in report.transitions
        assert report.failed_urls == ["http://x/a"]
        assert not store.is_explored("http://x/a")
        assert store.is_explored("http://x/b")

        # After the failure the map-wide pending links are offered
        assert [link.url for link in prompt.presented[1]] == ["http://x/a", "http://x/b"]
        # After b, only the failed page remains; the exhausted script quits
        assert [link.url for link in prompt.presented[2]] == ["http://x/a"]
        assert report.end_reason == EndReason.OPERATOR_QUIT

    @pytest.mark.asyncio
    async def test_failure_with_nothing_pending_ends(self, store: ExplorationMapStore):
        analyzer = FakeAnalyzer({"http://x/": RuntimeError("browser crashed")})
        prompt = ScriptedOperatorPrompt([])

        report = await ExplorationEngine(store, analyzer, prompt).run("http://x/")

        assert report.end_reason == EndReason.NO_PENDING_LINKS
        assert report.transitions == [
            ExplorerState.IDLE,
            ExplorerState.ANALYZING,
            ExplorerState.RECOVERING,
            ExplorerState.DONE,
        ]
        assert report.pages_explored == 0
        assert prompt.presented == []

    @pytest.mark.asyncio
    async def test_save_failure_ends_session(self, map_path: Path):
        """A map that cannot be written stops exploration; the unsaved page never reaches disk."""

        class FailingSaveStore(ExplorationMapStore):
            def __init__(self, path: Path) -> None:
                super().__init__(path)
                self.fail_next_save = False

            def save(self) -> None:
                if self.fail_next_save:
                    self.fail_next_save = False
                    raise StorageError("disk full")
                super().save()

        store = FailingSaveStore(map_path)
        store.load()
        analyzer = FakeAnalyzer({
            "http://x/a": make_result("http://x/a", ["http://x/b", "http://x/c"]),
            "http://x/b": make_result("http://x/b"),
            "http://x/c": make_result("http://x/c"),
        })

        class FailOnSecondPrompt(ScriptedOperatorPrompt):
            async def choose(self, links):
                store.fail_next_save = True
                return await super().choose(links)

        prompt = FailOnSecondPrompt(["1", "1"])

        with pytest.raises(StorageError):
            await ExplorationEngine(store, analyzer, prompt).run("http://x/a")

        assert analyzer.calls == ["http://x/a", "http://x/b"]
        persisted = ExplorationMapStore(map_path).load()
        assert [page.url for page in persisted.explored] == ["http://x/a"]


class TestTransitions:
    """Tests for recorded state transitions."""

    @pytest.mark.asyncio
    async def test_transition_sequence(self, store: ExplorationMapStore):
        analyzer = FakeAnalyzer({
            "http://x/": make_result("http://x/", ["http://x/a"]),
            "http://x/a": make_result("http://x/a"),
        })

        report = await ExplorationEngine(store, analyzer, ScriptedOperatorPrompt(["1"])).run("http://x/")

        assert report.transitions == [
            ExplorerState.IDLE,
            ExplorerState.ANALYZING,
            ExplorerState.PRESENTING,
            ExplorerState.NAVIGATING,
            ExplorerState.ANALYZING,
            ExplorerState.DONE,
        ]
