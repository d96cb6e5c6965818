"""
Operator interaction for choosing the next page.

The engine only sees the OperatorPrompt protocol: given the candidate
links it awaits a Choice, which is either an index into that list or
quit.
"""

import asyncio
import re
from dataclasses import dataclass
from typing import Iterable, Protocol

from rich.console import Console
from rich.prompt import Prompt

from site_explorer.explorer.models import DiscoveredLink
from site_explorer.utils.logging import get_logger

logger = get_logger(__name__)

QUIT_WORDS = frozenset({"quit", "q", "exit"})

_LEADING_INT = re.compile(r"[+-]?\d+")


@dataclass(frozen=True)
class Choice:
    """Either a zero-based index into the displayed links, or quit."""

    index: int | None = None

    @classmethod
    def quit(cls) -> "Choice":
        return cls(None)

    @classmethod
    def select(cls, index: int) -> "Choice":
        return cls(index)

    @property
    def is_quit(self) -> bool:
        return self.index is None


def parse_choice(answer: str, link_count: int) -> Choice:
    """
    Interpret an operator answer against a list of link_count entries.

    "quit", "q" and "exit" (any case) quit. A leading 1-based number in
    range selects that entry. Anything else is treated as quit rather
    than asking again.

    Example:
        >>> parse_choice("2", 3)
        Choice(index=1)
        >>> parse_choice("abc", 3).is_quit
        True
    """
    trimmed = (answer or "").strip().lower()
    if trimmed in QUIT_WORDS:
        return Choice.quit()

    match = _LEADING_INT.match(trimmed)
    if match:
        index = int(match.group(0)) - 1
        if 0 <= index < link_count:
            return Choice.select(index)

    logger.warning(f"Invalid choice {answer!r}, ending exploration")
    return Choice.quit()


class OperatorPrompt(Protocol):
    async def choose(self, links: list[DiscoveredLink]) -> Choice: ...


class ConsoleOperatorPrompt:
    """
    Numbered link list on the terminal with a blocking input prompt.

    The prompt runs in a worker thread so the event loop stays free.
    End of input (Ctrl-D, closed stdin) counts as quit.
    """

    def __init__(self, console: Console | None = None, text_width: int = 50) -> None:
        self.console = console or Console()
        self.text_width = text_width

    def display(self, links: list[DiscoveredLink]) -> None:
        self.console.print("\n[bold]Available navigation links:[/bold]")
        for number, link in enumerate(links, start=1):
            self.console.print(f"  [cyan][{number}][/cyan] {link.url}", markup=True, highlight=False)
            self.console.print(
                f"      {link.type.value}: \"{link.text[: self.text_width]}\"",
                markup=False,
                highlight=False,
            )

    def _ask(self) -> str:
        return Prompt.ask(
            '\n? Which page to explore next? (Enter number or "quit")',
            console=self.console,
        )

    async def choose(self, links: list[DiscoveredLink]) -> Choice:
        self.display(links)
        try:
            answer = await asyncio.to_thread(self._ask)
        except (EOFError, KeyboardInterrupt):
            logger.info("Input closed, ending exploration")
            return Choice.quit()

        choice = parse_choice(answer, len(links))
        if choice.is_quit and answer.strip().lower() not in QUIT_WORDS:
            self.console.print('[red]Invalid choice. Please enter a valid number or "quit".[/red]')
        return choice


class ScriptedOperatorPrompt:
    """
    Replays a fixed sequence of answers.

    Used for tests and non-interactive runs. Once the script is exhausted
    every further prompt quits. The links offered at each prompt are
    recorded in `presented`.
    """

    def __init__(self, answers: Iterable[str]) -> None:
        self._answers = list(answers)
        self.presented: list[list[DiscoveredLink]] = []

    async def choose(self, links: list[DiscoveredLink]) -> Choice:
        self.presented.append(list(links))
        if not self._answers:
            return Choice.quit()
        return parse_choice(self._answers.pop(0), len(links))
