"""
Tests for URL identity helpers.
"""

import pytest

from site_explorer.explorer.urls import (
    canonicalize,
    is_absolute_url,
    is_valid_start_url,
    origin_of,
    url_to_screen_name,
)


class TestCanonicalize:
    """Tests for canonicalize()."""

    def test_drops_query_and_fragment(self):
        """Query string and fragment should not be part of page identity."""
        assert canonicalize("https://app.test/users?tab=active#top") == "https://app.test/users"

    def test_query_variants_are_equal(self):
        """URLs differing only by query should canonicalize identically."""
        assert canonicalize("http://x/a?page=1") == canonicalize("http://x/a?page=2")
        assert canonicalize("http://x/a#one") == canonicalize("http://x/a")

    def test_path_is_kept(self):
        """Different paths are different pages."""
        assert canonicalize("http://x/a") != canonicalize("http://x/b")
        assert canonicalize("http://x/a/") != canonicalize("http://x/a")

    def test_empty_path_becomes_root(self):
        """An origin without path is the root page."""
        assert canonicalize("http://x") == "http://x/"
        assert canonicalize("http://x") == canonicalize("http://x/?q=1")

    def test_host_is_lowercased_and_default_port_dropped(self):
        """Origin should be normalized like a browser origin."""
        assert canonicalize("HTTP://Example.COM:80/Path") == "http://example.com/Path"
        assert canonicalize("https://example.com:443/") == "https://example.com/"

    def test_non_default_port_kept(self):
        """Explicit non-default ports are part of the origin."""
        assert canonicalize("http://localhost:3000/login?next=/") == "http://localhost:3000/login"

    @pytest.mark.parametrize("value", ["not a url", "/relative/path", "", "http://x:99999/"])
    def test_unparseable_returned_unchanged(self, value):
        """Input that is not an absolute URL should pass through untouched."""
        assert canonicalize(value) == value


class TestScreenName:
    """Tests for url_to_screen_name()."""

    @pytest.mark.parametrize("url,expected", [
        ("http://x/", "home"),
        ("http://x", "home"),
        ("http://x/login", "login"),
        ("http://localhost:3000/Admin/Users/", "admin-users"),
        ("http://x/a/b/c?tab=1", "a-b-c"),
        ("http://x//", "index"),
    ])
    def test_screen_names(self, url, expected):
        assert url_to_screen_name(url) == expected

    def test_unparseable_is_page(self):
        """Input without scheme and host yields 'page'."""
        assert url_to_screen_name("definitely not a url") == "page"


class TestValidation:
    """Tests for start URL and absolute URL checks."""

    @pytest.mark.parametrize("url", [
        "http://localhost:3000",
        "https://app.example.com/dashboard",
    ])
    def test_valid_start_urls(self, url):
        assert is_valid_start_url(url) is True

    @pytest.mark.parametrize("url", [
        "ftp://example.com",
        "localhost:3000",
        "example.com",
        "",
        "http://",
    ])
    def test_invalid_start_urls(self, url):
        assert is_valid_start_url(url) is False

    def test_is_absolute_url(self):
        assert is_absolute_url("http://x/a") is True
        assert is_absolute_url("/a") is False
        assert is_absolute_url("") is False

    def test_origin_of(self):
        assert origin_of("http://localhost:3000/login?x=1") == "http://localhost:3000"
        assert origin_of("https://App.Test/") == "https://app.test"
        assert origin_of("nope") == ""
