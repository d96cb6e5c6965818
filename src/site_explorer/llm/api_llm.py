"""
Anthropic Claude API client.

Thin async wrapper around the official SDK that resolves model profiles,
retries transient failures with exponential backoff and translates SDK
exceptions into the package's exception hierarchy.
"""

import asyncio
import os
import time
from dataclasses import dataclass

import anthropic

from site_explorer.config.settings import APILLMSettings, Settings
from site_explorer.core.exceptions import (
    APIAuthenticationError,
    APIConnectionError,
    APILLMError,
    APIRateLimitError,
    APIServerError,
    ConfigurationError,
    get_retry_delay,
    is_retryable,
)
from site_explorer.llm.models import MODEL_PROFILES, get_profile
from site_explorer.utils.logging import get_logger
from site_explorer.utils.metrics import time_llm_call

logger = get_logger(__name__)

# Anthropic answers 529 when overloaded; the model itself is valid
OVERLOADED_STATUS = 529


def resolve_api_key(settings: APILLMSettings) -> str | None:
    """Read the API key from the configured environment variable."""
    key = os.environ.get(settings.api_key_env_var, "").strip()
    return key or None


@dataclass
class ModelCheckResult:
    """Outcome of probing one model profile."""

    profile: str
    family: str
    model_id: str
    available: bool
    latency_ms: float
    response: str = ""
    error: str | None = None


class APILLM:
    """
    Async client for free-form prompts against Claude.

    Example:
        >>> llm = APILLM.from_settings(settings)
        >>> text = await llm.ask("List three colours", profile="haiku", max_tokens=50)
    """

    def __init__(
        self,
        settings: APILLMSettings,
        client: anthropic.AsyncAnthropic | None = None,
        api_key: str | None = None,
    ) -> None:
        """
        Args:
            settings: API LLM configuration
            client: Pre-built SDK client (mainly for tests)
            api_key: Explicit key; falls back to the configured env var

        Raises:
            ConfigurationError: If no client is given and no API key is available
        """
        self.settings = settings

        if client is None:
            key = api_key or resolve_api_key(settings)
            if not key:
                raise ConfigurationError(
                    f"{settings.api_key_env_var} not found in environment variables",
                    details={"env_var": settings.api_key_env_var},
                )
            client = anthropic.AsyncAnthropic(
                api_key=key,
                timeout=float(settings.timeout_seconds),
                max_retries=0,
            )

        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "APILLM":
        return cls(settings.api_llm)

    async def ask(
        self,
        prompt: str,
        *,
        profile: str,
        max_tokens: int,
        system: str | None = None,
        max_retries: int | None = None,
    ) -> str:
        """
        Send a single-turn prompt and return the response text.

        Args:
            prompt: User message
            profile: Model profile name (haiku, sonnet, opus)
            max_tokens: Response token limit
            system: Optional system prompt
            max_retries: Overrides the configured retry count

        Returns:
            Concatenated text blocks of the response

        Raises:
            APIAuthenticationError: Key missing or rejected
            APIRateLimitError: Still rate limited after retries
            APIConnectionError: Network failure or timeout after retries
            APILLMError: Any other API failure
        """
        model_id = get_profile(profile).model_id
        retries_allowed = self.settings.max_retries if max_retries is None else max_retries

        kwargs: dict = {
            "model": model_id,
            "max_tokens": max_tokens,
            "temperature": self.settings.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        attempt = 0
        while True:
            try:
                with time_llm_call():
                    response = await self._client.messages.create(**kwargs)
                break
            except anthropic.APIError as e:
                error = _translate_error(e, model_id)
                attempt += 1
                if not is_retryable(error) or attempt > retries_allowed:
                    raise error from e

                wait = max(
                    self.settings.retry_delay_seconds * (2 ** (attempt - 1)),
                    get_retry_delay(error, default=0.0),
                )
                logger.warning(
                    f"{error.message}; retrying in {wait:.1f}s "
                    f"(attempt {attempt}/{retries_allowed})"
                )
                await asyncio.sleep(wait)

        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.debug(
                f"{profile} call: {usage.input_tokens} input / "
                f"{usage.output_tokens} output tokens"
            )

        return "".join(
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        )

    async def check_models(self) -> list[ModelCheckResult]:
        """
        Probe every configured model profile with a minimal request.

        An overloaded server (HTTP 529) still counts as available, since
        it proves the model ID exists.
        """
        results: list[ModelCheckResult] = []

        for profile in MODEL_PROFILES.values():
            start = time.perf_counter()
            try:
                text = await self.ask(
                    'Respond with only the word "OK"',
                    profile=profile.name,
                    max_tokens=10,
                    max_retries=0,
                )
                latency = (time.perf_counter() - start) * 1000
                available = bool(text.strip())
                results.append(ModelCheckResult(
                    profile=profile.name,
                    family=profile.family,
                    model_id=profile.model_id,
                    available=available,
                    latency_ms=latency,
                    response=text.strip(),
                    error=None if available else "Empty response from API",
                ))
            except APILLMError as e:
                latency = (time.perf_counter() - start) * 1000
                status = e.details.get("status_code")
                results.append(ModelCheckResult(
                    profile=profile.name,
                    family=profile.family,
                    model_id=profile.model_id,
                    available=status == OVERLOADED_STATUS,
                    latency_ms=latency,
                    error=_describe_check_failure(e, status),
                ))

        return results


def _translate_error(error: anthropic.APIError, model_id: str) -> APILLMError:
    """Map an SDK exception onto the package hierarchy."""
    details = {"model": model_id}

    if isinstance(error, anthropic.AuthenticationError):
        return APIAuthenticationError("Anthropic API rejected the API key", details=details)
    if isinstance(error, anthropic.RateLimitError):
        return APIRateLimitError(
            "Anthropic API rate limit exceeded",
            retry_after=_retry_after(error),
            details=details,
        )
    if isinstance(error, anthropic.APIConnectionError):
        return APIConnectionError(f"Could not reach Anthropic API: {error}", details=details)
    if isinstance(error, anthropic.APIStatusError):
        details["status_code"] = error.status_code
        if error.status_code >= 500:
            return APIServerError(f"Anthropic API server error: {error.message}", details=details)
        return APILLMError(f"Anthropic API error: {error.message}", details=details)

    return APILLMError(f"Anthropic API error: {error}", details=details)


def _retry_after(error: anthropic.RateLimitError) -> float | None:
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None)
    if not headers:
        return None
    try:
        return float(headers.get("retry-after"))
    except (TypeError, ValueError):
        return None


def _describe_check_failure(error: APILLMError, status: int | None) -> str:
    if isinstance(error, APIAuthenticationError):
        return "Invalid or missing API key"
    if status == 404:
        return "Model version is deprecated or invalid"
    if status == OVERLOADED_STATUS:
        return "Servers temporarily overloaded (model is valid)"
    if status is not None and status >= 500:
        return "Anthropic API error, try again later"
    return error.message
