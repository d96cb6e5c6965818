"""
Site Explorer - interactive, resumable exploration of web applications.

Walks a site one operator-chosen page at a time, generating test case
documentation for each screen and keeping a persistent map of explored
pages and pending navigation links.
"""

from site_explorer.config import Settings, load_config
from site_explorer.utils.logging import setup_logging, get_logger
from site_explorer.core.exceptions import SiteExplorerError

__version__ = "0.1.0"
__author__ = "Site Explorer Team"

__all__ = [
    "Settings",
    "load_config",
    "setup_logging",
    "get_logger",
    "SiteExplorerError",
]
