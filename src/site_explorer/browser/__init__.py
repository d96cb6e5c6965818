"""
Browser module for the Site Explorer.

Provides Playwright-based browser automation with:
- Browser lifecycle management
- Page wrapper for navigation and content reads
"""

from site_explorer.browser.manager import BrowserManager, create_browser
from site_explorer.browser.page_context import PageContext

__all__ = [
    "BrowserManager",
    "PageContext",
    "create_browser",
]
