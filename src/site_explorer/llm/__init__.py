"""
LLM module for the Site Explorer.

Provides the Anthropic API client, model profiles, prompt templates and
helpers for reading JSON out of model output.
"""

from site_explorer.llm.api_llm import APILLM, ModelCheckResult, resolve_api_key
from site_explorer.llm.json_extraction import extract_json_array
from site_explorer.llm.models import (
    MODEL_PROFILES,
    ModelProfile,
    get_model_family,
    get_model_version,
    get_profile,
)
from site_explorer.llm.prompt_templates import (
    ExplorerPrompts,
    PlanningPrompts,
    PromptTemplate,
)

__all__ = [
    # Client
    "APILLM",
    "ModelCheckResult",
    "resolve_api_key",
    # Models
    "MODEL_PROFILES",
    "ModelProfile",
    "get_profile",
    "get_model_version",
    "get_model_family",
    # Prompts
    "PromptTemplate",
    "ExplorerPrompts",
    "PlanningPrompts",
    # JSON
    "extract_json_array",
]
