"""
Claude model profiles.

The rest of the package refers to models by profile name (haiku,
sonnet, opus). This table is the single place that maps a profile to a
concrete model ID; update it when models are released or retired.
"""

from dataclasses import dataclass
from typing import Literal

ModelName = Literal["haiku", "sonnet", "opus"]


@dataclass(frozen=True)
class ModelProfile:
    """A named model choice with its concrete API identifier."""

    name: str
    model_id: str
    family: str
    best_for: str


MODEL_PROFILES: dict[str, ModelProfile] = {
    "haiku": ModelProfile(
        name="haiku",
        model_id="claude-3-haiku-20240307",
        family="Claude 3 Haiku",
        best_for="cheap high-volume classification (link filtering)",
    ),
    "sonnet": ModelProfile(
        name="sonnet",
        model_id="claude-sonnet-4-5-20250929",
        family="Claude Sonnet 4.5",
        best_for="test case documentation, balanced tasks",
    ),
    "opus": ModelProfile(
        name="opus",
        model_id="claude-opus-4-5-20251101",
        family="Claude Opus 4.5",
        best_for="complex reasoning, fallback for difficult pages",
    ),
}


def get_profile(name: str) -> ModelProfile:
    """
    Look up a model profile by name.

    Raises:
        KeyError: If the profile is unknown
    """
    try:
        return MODEL_PROFILES[name]
    except KeyError:
        known = ", ".join(sorted(MODEL_PROFILES))
        raise KeyError(f"Unknown model profile {name!r} (known: {known})") from None


def get_model_version(name: str) -> str:
    """Model ID to send to the API for a profile name."""
    return get_profile(name).model_id


def get_model_family(name: str) -> str:
    """Human-readable family name for a profile name."""
    return get_profile(name).family
