"""
Configuration module for the Site Explorer.

Provides Pydantic-based settings management with YAML file support
and environment variable overrides.
"""

from site_explorer.config.settings import (
    Settings,
    BrowserSettings,
    ExplorerSettings,
    APILLMSettings,
    PlanningSettings,
    LoggingSettings,
)
from site_explorer.config.loader import (
    load_config,
    get_settings,
    reset_settings,
    get_default_config_path,
)

__all__ = [
    "Settings",
    "BrowserSettings",
    "ExplorerSettings",
    "APILLMSettings",
    "PlanningSettings",
    "LoggingSettings",
    "load_config",
    "get_settings",
    "reset_settings",
    "get_default_config_path",
]
