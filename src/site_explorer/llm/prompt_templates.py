"""
Prompt templates for model calls.

Provides structured prompts for:
- Navigation link classification
- Test case documentation
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class PromptTemplate:
    """
    A reusable prompt template with variable substitution.

    Literal braces in the template text must be doubled ("{{" / "}}").

    Example:
        >>> template = PromptTemplate(
        ...     name="greet",
        ...     system="You are terse.",
        ...     user="Say hello to {name}.",
        ... )
        >>> template.format_user(name="Ada")
        'Say hello to Ada.'
    """

    name: str
    system: str
    user: str

    def format(self, **kwargs: Any) -> dict[str, str]:
        """Format both parts; returns {"system": ..., "user": ...}."""
        return {
            "system": self.system.format(**kwargs) if kwargs else self.system,
            "user": self.user.format(**kwargs) if kwargs else self.user,
        }

    def format_user(self, **kwargs: Any) -> str:
        """Format just the user prompt."""
        return self.user.format(**kwargs) if kwargs else self.user


class ExplorerPrompts:
    """Prompts used while exploring a site."""

    FILTER_NAVIGATION = PromptTemplate(
        name="filter_navigation",
        system="",
        user=(
            "Given this list of interactive elements from a web page at {page_url}, "
            "identify which ones represent SIGNIFICANT NAVIGATION (pages/screens user can navigate to).\n"
            "\n"
            "Elements found:\n"
            "{elements_json}\n"
            "\n"
            "Filter OUT:\n"
            "- Tooltips, popovers, modals\n"
            "- Anchor links (same page, #sections)\n"
            "- External links to other domains (keep same-origin only)\n"
            "- Duplicate links to same destination\n"
            "- Non-navigation actions (delete, save, download, etc.)\n"
            "- Footer links (terms, privacy, contact)\n"
            "- Social media links\n"
            "\n"
            "Filter IN:\n"
            "- Main navigation menu items\n"
            "- Primary action buttons that navigate to new pages\n"
            "- Form submissions that go to different pages\n"
            "- Section/module navigation within the application\n"
            "- Authentication links (login, register, logout)\n"
            "\n"
            "Return ONLY a JSON array of filtered links with this structure:\n"
            "[\n"
            "  {{\n"
            '    "url": "full URL",\n'
            '    "type": "button|link|nav|form-action",\n'
            '    "text": "display text",\n'
            '    "selector": "playwright selector"\n'
            "  }}\n"
            "]\n"
            "\n"
            "Return ONLY the JSON array, no explanation. "
            "If no significant navigation links found, return empty array []."
        ),
    )


class PlanningPrompts:
    """Prompts used to document a page as manual test cases."""

    TEST_CASES = PromptTemplate(
        name="test_cases",
        system=(
            "You are a senior QA engineer. You write clear, prioritized manual "
            "test cases for web application screens. You only describe behaviour "
            "that can be inferred from the page content you are given."
        ),
        user=(
            "Write test case documentation for the \"{screen_name}\" screen at {url}.\n"
            "\n"
            "Page title: {title}\n"
            "\n"
            "Interactive elements (JSON):\n"
            "{elements_json}\n"
            "\n"
            "Visible text (truncated):\n"
            "---\n{page_text}\n---\n"
            "\n"
            "Format the answer as Markdown:\n"
            "- Start with a level-1 heading \"{screen_title} Test Cases\".\n"
            "- A short \"Screen overview\" section.\n"
            "- Test cases grouped by priority (P1 critical paths, P2 important, "
            "P3 edge cases), each with an ID, title, preconditions, steps and "
            "expected result.\n"
            "Return only the Markdown document."
        ),
    )
