"""
Core module for the Site Explorer.

Contains the exception hierarchy used throughout the application.
"""

from site_explorer.core.exceptions import (
    SiteExplorerError,
    RetryableError,
    ConfigurationError,
    BrowserError,
    NavigationError,
    PageLoadError,
    StorageError,
    MapCorruptedError,
    ExplorationError,
    PageAnalysisError,
    LinkExtractionError,
    LLMError,
    APILLMError,
    APIConnectionError,
    APIServerError,
    APIRateLimitError,
    APIAuthenticationError,
    ResponseParseError,
    ClassificationError,
    is_retryable,
    get_retry_delay,
)

__all__ = [
    # Base
    "SiteExplorerError",
    "RetryableError",
    "ConfigurationError",
    # Browser
    "BrowserError",
    "NavigationError",
    "PageLoadError",
    # Storage
    "StorageError",
    "MapCorruptedError",
    # Exploration
    "ExplorationError",
    "PageAnalysisError",
    "LinkExtractionError",
    # LLM
    "LLMError",
    "APILLMError",
    "APIConnectionError",
    "APIServerError",
    "APIRateLimitError",
    "APIAuthenticationError",
    "ResponseParseError",
    "ClassificationError",
    # Helpers
    "is_retryable",
    "get_retry_delay",
]
