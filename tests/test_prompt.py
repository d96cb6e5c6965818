"""
Tests for operator prompts.
"""

import io

import pytest
from rich.console import Console

from site_explorer.explorer.models import DiscoveredLink, LinkType
from site_explorer.explorer.prompt import (
    Choice,
    ConsoleOperatorPrompt,
    ScriptedOperatorPrompt,
    parse_choice,
)


def links(count: int) -> list[DiscoveredLink]:
    return [DiscoveredLink(url=f"http://x/{i}", text=f"Link {i}") for i in range(count)]


class TestParseChoice:
    """Tests for parse_choice()."""

    @pytest.mark.parametrize("answer", ["quit", "q", "exit", "QUIT", "  Exit  ", "Q"])
    def test_quit_words(self, answer):
        assert parse_choice(answer, 3).is_quit

    @pytest.mark.parametrize("answer,index", [("1", 0), ("3", 2), (" 2 ", 1), ("2abc", 1)])
    def test_valid_numbers(self, answer, index):
        assert parse_choice(answer, 3) == Choice.select(index)

    @pytest.mark.parametrize("answer", ["abc", "", "0", "4", "-1", "99"])
    def test_invalid_input_is_quit(self, answer):
        """Anything that is not an in-range number ends the session."""
        assert parse_choice(answer, 3) == parse_choice("quit", 3)

    def test_no_links(self):
        assert parse_choice("1", 0).is_quit


class TestChoice:
    def test_constructors(self):
        assert Choice.quit().is_quit
        assert Choice.select(0).index == 0
        assert not Choice.select(0).is_quit


class TestScriptedOperatorPrompt:
    """Tests for ScriptedOperatorPrompt."""

    @pytest.mark.asyncio
    async def test_replays_answers_then_quits(self):
        prompt = ScriptedOperatorPrompt(["2", "1"])

        assert (await prompt.choose(links(3))).index == 1
        assert (await prompt.choose(links(1))).index == 0
        assert (await prompt.choose(links(2))).is_quit
        assert [len(shown) for shown in prompt.presented] == [3, 1, 2]


class TestConsoleOperatorPrompt:
    """Tests for the terminal prompt with input stubbed out."""

    @pytest.fixture
    def output(self) -> io.StringIO:
        return io.StringIO()

    @pytest.fixture
    def prompt(self, output) -> ConsoleOperatorPrompt:
        console = Console(file=output, width=200, color_system=None)
        return ConsoleOperatorPrompt(console=console, text_width=10)

    @pytest.mark.asyncio
    async def test_displays_numbered_links(self, prompt, output, monkeypatch):
        monkeypatch.setattr(prompt, "_ask", lambda: "1")
        shown = [
            DiscoveredLink(url="http://x/users", type=LinkType.NAV, text="Users and permissions"),
            DiscoveredLink(url="http://x/login", text="Login"),
        ]

        choice = await prompt.choose(shown)

        text = output.getvalue()
        assert choice == Choice.select(0)
        assert "[1] http://x/users" in text
        assert "[2] http://x/login" in text
        assert 'nav: "Users and "' in text

    @pytest.mark.asyncio
    async def test_invalid_answer_reported(self, prompt, output, monkeypatch):
        monkeypatch.setattr(prompt, "_ask", lambda: "abc")

        choice = await prompt.choose(links(3))

        assert choice.is_quit
        assert "Invalid choice" in output.getvalue()

    @pytest.mark.asyncio
    async def test_end_of_input_quits(self, prompt, monkeypatch):
        def closed():
            raise EOFError

        monkeypatch.setattr(prompt, "_ask", closed)

        assert (await prompt.choose(links(2))).is_quit
