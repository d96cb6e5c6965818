"""
Utilities module for the Site Explorer.

Provides logging setup and in-memory session metrics.
"""

from site_explorer.utils.logging import (
    setup_logging,
    get_logger,
    get_logger_with_context,
    reset_logging,
)
from site_explorer.utils.metrics import (
    Metrics,
    TimingStats,
    time_llm_call,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "get_logger_with_context",
    "reset_logging",
    # Metrics
    "Metrics",
    "TimingStats",
    "time_llm_call",
]
