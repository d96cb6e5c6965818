"""
Pydantic settings models for the Site Explorer.

All configuration is defined here with defaults that match an interactive
exploration session against a locally running application.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


ModelProfile = Literal["haiku", "sonnet", "opus"]


class BrowserSettings(BaseModel):
    """Playwright browser configuration."""

    headless: bool = Field(
        default=True,
        description="Run browser in headless mode",
    )
    browser_type: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium",
        description="Browser engine to use",
    )
    navigation_timeout_ms: int = Field(
        default=30000,
        ge=1000,
        le=180000,
        description="Timeout for the initial DOM-ready navigation in milliseconds",
    )
    network_idle_timeout_ms: int = Field(
        default=10000,
        ge=0,
        le=120000,
        description="Best-effort wait for network idle after navigation. 0 disables it.",
    )
    viewport_width: int = Field(
        default=1280,
        ge=320,
        le=3840,
        description="Browser viewport width in pixels",
    )
    viewport_height: int = Field(
        default=720,
        ge=240,
        le=2160,
        description="Browser viewport height in pixels",
    )
    ignore_https_errors: bool = Field(
        default=False,
        description="Whether to ignore HTTPS certificate errors",
    )
    user_agent: str | None = Field(
        default=None,
        description="Custom user agent string. None uses browser default.",
    )


class ExplorerSettings(BaseModel):
    """Exploration loop and link filtering configuration."""

    map_file_path: Path = Field(
        default=Path(".exploration-map.json"),
        description="Where the exploration map is persisted",
    )
    passthrough_threshold: int = Field(
        default=5,
        ge=0,
        le=100,
        description="Link lists this size or smaller skip AI classification",
    )
    max_links_for_classification: int = Field(
        default=30,
        ge=1,
        le=200,
        description="Maximum raw links sent to the classifier per page",
    )
    display_text_width: int = Field(
        default=50,
        ge=10,
        le=200,
        description="Link text is truncated to this many characters when listed",
    )

    @field_validator("map_file_path", mode="before")
    @classmethod
    def convert_to_path(cls, v: str | Path) -> Path:
        """Convert string paths to Path objects."""
        return Path(v) if isinstance(v, str) else v


class APILLMSettings(BaseModel):
    """API LLM (Anthropic Claude) configuration."""

    provider: Literal["anthropic"] = Field(
        default="anthropic",
        description="API provider to use",
    )
    api_key_env_var: str = Field(
        default="ANTHROPIC_API_KEY",
        description="Environment variable name containing API key",
    )
    classification_profile: ModelProfile = Field(
        default="haiku",
        description="Low-cost model profile used for link filtering",
    )
    documentation_profile: ModelProfile = Field(
        default="sonnet",
        description="Model profile used for test case documentation",
    )
    classification_max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="Maximum tokens in a link classification response",
    )
    documentation_max_tokens: int = Field(
        default=4096,
        ge=256,
        le=16384,
        description="Maximum tokens in a test case documentation response",
    )
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Sampling temperature for API calls",
    )
    timeout_seconds: int = Field(
        default=60,
        ge=5,
        le=600,
        description="Timeout for API requests in seconds",
    )
    max_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Maximum retry attempts for rate-limit and server errors",
    )
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=30.0,
        description="Initial delay before retrying API calls",
    )


class PlanningSettings(BaseModel):
    """Test case documentation output."""

    docs_dir: Path = Field(
        default=Path("docs"),
        description="Directory where generated test case documents are written",
    )
    max_page_text_chars: int = Field(
        default=6000,
        ge=500,
        le=50000,
        description="Visible page text sent to the documentation model is capped here",
    )
    max_elements: int = Field(
        default=60,
        ge=5,
        le=500,
        description="Maximum interactive elements described to the documentation model",
    )

    @field_validator("docs_dir", mode="before")
    @classmethod
    def convert_to_path(cls, v: str | Path) -> Path:
        """Convert string paths to Path objects."""
        return Path(v) if isinstance(v, str) else v


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum logging level",
    )
    format: str = Field(
        default="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        description="Log message format string",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Date format for log timestamps",
    )
    file_path: Path | None = Field(
        default=None,
        description="Path to log file. None means console only.",
    )
    max_file_size_mb: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum log file size before rotation",
    )
    backup_count: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Number of backup log files to keep",
    )
    log_to_console: bool = Field(
        default=True,
        description="Whether to output logs to console",
    )

    @field_validator("file_path", mode="before")
    @classmethod
    def convert_file_path(cls, v: str | Path | None) -> Path | None:
        """Convert string paths to Path objects."""
        if v is None:
            return None
        return Path(v) if isinstance(v, str) else v


class Settings(BaseModel):
    """
    Root configuration model containing all subsystem settings.

    Settings are loaded from YAML with environment variable overrides.
    """

    browser: BrowserSettings = Field(
        default_factory=BrowserSettings,
        description="Browser/Playwright settings",
    )
    explorer: ExplorerSettings = Field(
        default_factory=ExplorerSettings,
        description="Exploration loop settings",
    )
    api_llm: APILLMSettings = Field(
        default_factory=APILLMSettings,
        description="API LLM settings",
    )
    planning: PlanningSettings = Field(
        default_factory=PlanningSettings,
        description="Test case documentation settings",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    model_config = {
        "extra": "forbid",
        "validate_default": True,
    }
