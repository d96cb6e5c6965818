"""
Custom exceptions for the Site Explorer.

Provides a hierarchy of exceptions for precise error handling across
all subsystems. All exceptions inherit from SiteExplorerError.

Exception Hierarchy:
    SiteExplorerError (base)
    ├── ConfigurationError
    ├── BrowserError
    │   ├── NavigationError
    │   └── PageLoadError
    ├── StorageError
    │   └── MapCorruptedError
    ├── ExplorationError
    │   ├── PageAnalysisError
    │   └── LinkExtractionError
    └── LLMError
        ├── APILLMError
        │   ├── APIConnectionError
        │   ├── APIServerError
        │   ├── APIRateLimitError
        │   └── APIAuthenticationError
        ├── ResponseParseError
        └── ClassificationError
"""

from typing import Any


class SiteExplorerError(Exception):
    """
    Base exception for all Site Explorer errors.

    Attributes:
        message: Human-readable error description
        details: Optional dictionary with additional context
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(
                f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, details={self.details!r})"


class RetryableError(SiteExplorerError):
    """
    Marker class for errors that may succeed if attempted again.

    Attributes:
        retry_after: Suggested delay in seconds before retry (optional)
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, details)
        self.retry_after = retry_after


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(SiteExplorerError):
    """
    Error in configuration or startup preconditions.

    Raised when:
    - Configuration file is malformed
    - The start URL is not an http(s) URL
    - Required credentials (API key) are missing

    Always fatal: reported before any exploration work begins.
    """

    pass


# =============================================================================
# Browser Errors
# =============================================================================


class BrowserError(SiteExplorerError):
    """Base error for browser/Playwright operations."""

    pass


class NavigationError(BrowserError, RetryableError):
    """
    Error during page navigation.

    Raised when the URL is unreachable, navigation times out or the
    server answers with an HTTP error status.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
        retry_after: float | None = None,
    ) -> None:
        details = details or {}
        if url:
            details["url"] = url
        if status_code:
            details["status_code"] = status_code
        super().__init__(message, details, retry_after)
        self.url = url
        self.status_code = status_code


class PageLoadError(BrowserError, RetryableError):
    """Error reading content from a page after navigation."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        details: dict[str, Any] | None = None,
        retry_after: float | None = None,
    ) -> None:
        details = details or {}
        if url:
            details["url"] = url
        super().__init__(message, details, retry_after)
        self.url = url


# =============================================================================
# Storage Errors
# =============================================================================


class StorageError(SiteExplorerError):
    """Base error for exploration map persistence."""

    pass


class MapCorruptedError(StorageError):
    """
    The persisted exploration map could not be parsed.

    The map store recovers from this by starting a fresh map, so it
    only escapes when strict loading is requested.
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if path:
            details["path"] = path
        super().__init__(message, details)
        self.path = path


# =============================================================================
# Exploration Errors
# =============================================================================


class ExplorationError(SiteExplorerError):
    """Base error for the exploration loop."""

    pass


class PageAnalysisError(ExplorationError):
    """
    Analysis of a single page failed.

    The engine treats this as a per-page failure: the page is skipped and
    exploration continues from the map-wide pending links.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if url:
            details["url"] = url
        super().__init__(message, details)
        self.url = url


class LinkExtractionError(ExplorationError):
    """The in-page link extraction script failed."""

    pass


# =============================================================================
# LLM Errors
# =============================================================================


class LLMError(SiteExplorerError):
    """Base error for model calls and model-output handling."""

    pass


class APILLMError(LLMError):
    """Base error for Anthropic API operations."""

    pass


class APIConnectionError(APILLMError, RetryableError):
    """Network failure or timeout talking to the API."""

    pass


class APIServerError(APILLMError, RetryableError):
    """The API answered with a 5xx status, including 529 overloaded."""

    pass


class APIRateLimitError(APILLMError, RetryableError):
    """
    Error when API rate limit is exceeded.

    The retry_after attribute indicates when to resume.
    """

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details, retry_after)


class APIAuthenticationError(APILLMError):
    """
    API key is missing or rejected.

    This is NOT retryable without fixing credentials.
    """

    pass


class ResponseParseError(LLMError):
    """Model output did not contain the expected JSON structure."""

    def __init__(
        self,
        message: str,
        response_text: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if response_text is not None:
            details["response"] = response_text[:100] + \
                "..." if len(response_text) > 100 else response_text
        super().__init__(message, details)
        self.response_text = response_text


class ClassificationError(LLMError):
    """The navigation classification call failed or returned unusable data."""

    pass


# =============================================================================
# Utility Functions
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error indicates a retryable condition."""
    return isinstance(error, RetryableError)


def get_retry_delay(error: Exception, default: float = 5.0) -> float:
    """
    Get the recommended retry delay for an error.

    Args:
        error: The exception to check
        default: Default delay if not specified by error

    Returns:
        Recommended delay in seconds before retry
    """
    if isinstance(error, RetryableError) and error.retry_after is not None:
        return error.retry_after
    return default
