"""
Test suite for the Site Explorer.

Browser and API collaborators are replaced by small fakes (tests/fakes.py),
so no browser install or network access is needed.
"""
