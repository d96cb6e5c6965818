"""
CLI module for the Site Explorer.

Provides command-line interface using Typer:
- explore: Interactive exploration from a start URL
- status / pending / ignore: Inspect and edit the exploration map
- models: Model profiles and live availability check
- config: Configuration management
"""

from site_explorer.cli.main import app

__all__ = ["app"]
