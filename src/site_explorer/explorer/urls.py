"""
URL identity helpers.

A page's identity is its canonical URL: origin plus path, with query
string and fragment discarded. Two URLs that differ only by query or
fragment are the same page for deduplication purposes.
"""

from urllib.parse import urlsplit


def _parse_origin(url: str) -> tuple[str, str] | None:
    """Return (origin, path) for an absolute URL, or None if it has no origin."""
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return None

    # Accessing .port validates it; a bad port raises ValueError
    parts.port

    host = (parts.hostname or "").lower()
    if not host:
        return None
    if ":" in host:
        host = f"[{host}]"

    origin = f"{parts.scheme.lower()}://{host}"
    default_port = {"http": 80, "https": 443}.get(parts.scheme.lower())
    if parts.port is not None and parts.port != default_port:
        origin = f"{origin}:{parts.port}"

    return origin, parts.path


def canonicalize(url: str) -> str:
    """
    Canonicalize a URL for page identity.

    Returns origin + path; query parameters and fragments are dropped.
    An empty path on an http(s) URL becomes "/". If the URL cannot be
    parsed as an absolute URL it is returned unchanged. Never raises.

    Example:
        >>> canonicalize("https://app.test/users?tab=active#top")
        'https://app.test/users'
    """
    try:
        parsed = _parse_origin(url)
    except (ValueError, TypeError, AttributeError):
        return url

    if parsed is None:
        return url

    origin, path = parsed
    if not path and origin.startswith(("http://", "https://")):
        path = "/"
    return f"{origin}{path}"


def origin_of(url: str) -> str:
    """Return scheme://host[:port] for url, or "" if it has no origin."""
    try:
        parsed = _parse_origin(url)
    except (ValueError, TypeError, AttributeError):
        return ""
    return parsed[0] if parsed else ""


def is_valid_start_url(url: str) -> bool:
    """True for an http or https URL with a host."""
    try:
        parts = urlsplit(url)
        parts.port
    except (ValueError, TypeError, AttributeError):
        return False
    return parts.scheme in ("http", "https") and bool(parts.hostname)


def is_absolute_url(url: str) -> bool:
    """True if url carries both a scheme and a network location."""
    if not isinstance(url, str) or not url:
        return False
    try:
        parts = urlsplit(url)
        parts.port
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc)


def url_to_screen_name(url: str) -> str:
    """
    Derive a screen identifier from a URL's path.

    "/" becomes "home"; otherwise leading and trailing slashes are
    stripped, inner slashes become hyphens and the result is lowercased.
    Unparseable input yields "page".

    Example:
        >>> url_to_screen_name("http://localhost:3000/Admin/Users/")
        'admin-users'
    """
    try:
        parts = urlsplit(url)
    except (ValueError, TypeError, AttributeError):
        return "page"

    if not parts.scheme or not parts.netloc:
        return "page"

    path = parts.path
    if path in ("", "/"):
        return "home"

    name = path.strip("/").replace("/", "-").lower()
    return name or "index"
