"""
Explorer module for the Site Explorer.

Provides the interactive exploration loop and its parts:
- URL identity (canonical URLs, screen names)
- Link extraction and navigation filtering
- The persistent exploration map
- Operator prompts
"""

from site_explorer.explorer.analyzer import DocumentationGenerator, PageAnalyzer
from site_explorer.explorer.engine import (
    EndReason,
    ExplorationEngine,
    ExplorationReport,
    ExplorerState,
    GeneratedDoc,
)
from site_explorer.explorer.link_extractor import LinkExtractor, build_raw_links
from site_explorer.explorer.map_store import ExplorationMapStore, MapStats
from site_explorer.explorer.models import (
    DiscoveredLink,
    ExplorationMap,
    ExploredPage,
    LinkType,
    PageAnalysisResult,
    RawLink,
)
from site_explorer.explorer.navigation_filter import (
    ClassifierFilter,
    LinkFilterStrategy,
    NavigationFilter,
    PassThroughFilter,
)
from site_explorer.explorer.prompt import (
    Choice,
    ConsoleOperatorPrompt,
    OperatorPrompt,
    ScriptedOperatorPrompt,
    parse_choice,
)
from site_explorer.explorer.urls import (
    canonicalize,
    is_valid_start_url,
    origin_of,
    url_to_screen_name,
)

__all__ = [
    # Engine
    "ExplorationEngine",
    "ExplorationReport",
    "ExplorerState",
    "EndReason",
    "GeneratedDoc",
    # Analysis
    "PageAnalyzer",
    "DocumentationGenerator",
    "LinkExtractor",
    "build_raw_links",
    "LinkFilterStrategy",
    "PassThroughFilter",
    "ClassifierFilter",
    "NavigationFilter",
    # Map
    "ExplorationMapStore",
    "MapStats",
    "ExplorationMap",
    "ExploredPage",
    "DiscoveredLink",
    "RawLink",
    "LinkType",
    "PageAnalysisResult",
    # Operator
    "Choice",
    "OperatorPrompt",
    "ConsoleOperatorPrompt",
    "ScriptedOperatorPrompt",
    "parse_choice",
    # URLs
    "canonicalize",
    "url_to_screen_name",
    "is_valid_start_url",
    "origin_of",
]
