"""
Planning module for the Site Explorer.

Generates manual test case documentation for explored screens.
"""

from site_explorer.planning.test_case_planner import (
    TestCasePlanner,
    doc_file_name,
    screen_title,
)

__all__ = [
    "TestCasePlanner",
    "doc_file_name",
    "screen_title",
]
