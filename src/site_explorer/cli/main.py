"""
Main CLI application for the Site Explorer.

Provides the primary command-line interface for:
- Exploring a site interactively
- Inspecting and editing the exploration map
- Checking model availability
- Managing configuration
"""

import asyncio
from pathlib import Path
from typing import Optional

import typer
import yaml
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from site_explorer import __version__
from site_explorer.config import Settings, get_default_config_path, load_config
from site_explorer.core.exceptions import ConfigurationError, SiteExplorerError
from site_explorer.explorer.engine import EndReason, ExplorationReport
from site_explorer.explorer.map_store import ExplorationMapStore
from site_explorer.explorer.urls import is_valid_start_url
from site_explorer.llm.api_llm import resolve_api_key
from site_explorer.llm.models import MODEL_PROFILES
from site_explorer.utils.logging import get_logger, setup_logging
from site_explorer.utils.metrics import Metrics

app = typer.Typer(
    name="site-explorer",
    help="Site Explorer - Interactively map a web app and document its screens",
    add_completion=False,
    no_args_is_help=True,
)

config_app = typer.Typer(
    help="Configuration management",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

console = Console()
logger = get_logger(__name__)

_state = {"verbose": False}


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]Site Explorer[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging and print session metrics",
    ),
) -> None:
    """
    Site Explorer - explore a web application one page at a time.

    Use 'site-explorer --help' for command list.
    """
    _state["verbose"] = verbose


def _load_env() -> None:
    """Load a .env file from the working directory, if present."""
    local_env = Path.cwd() / ".env"
    if local_env.is_file():
        load_dotenv(local_env)


def _init(config_file: Optional[Path]) -> Settings:
    """Load settings and configure logging for a command."""
    try:
        settings = load_config(config_file or get_default_config_path())
    except (ConfigurationError, FileNotFoundError, ValidationError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)

    setup_logging(settings.logging, level="DEBUG" if _state["verbose"] else None)
    return settings


def _open_store(settings: Settings, map_file: Optional[Path]) -> ExplorationMapStore:
    return ExplorationMapStore(map_file or settings.explorer.map_file_path)


ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to configuration file",
    exists=True,
    dir_okay=False,
)

MapFileOption = typer.Option(
    None,
    "--map-file",
    "-m",
    help="Exploration map file (default: .exploration-map.json)",
)


@app.command()
def explore(
    url: str = typer.Argument(
        ...,
        help="URL to start exploring from",
    ),
    map_file: Optional[Path] = MapFileOption,
    config_file: Optional[Path] = ConfigOption,
    headless: Optional[bool] = typer.Option(
        None,
        "--headless/--no-headless",
        help="Run browser in headless mode",
    ),
    docs_dir: Optional[Path] = typer.Option(
        None,
        "--docs-dir",
        help="Directory for generated test case documents",
    ),
) -> None:
    """
    Explore a site interactively, starting at URL.

    Each visited page gets a test case document; the exploration map is
    saved after every page so a later run resumes where this one stopped.

    Example:
        site-explorer explore http://localhost:3000
    """
    _load_env()
    settings = _init(config_file)

    if not is_valid_start_url(url):
        console.print(f"[red]Error:[/red] Invalid URL: {url}")
        console.print("[dim]URL must start with http:// or https://[/dim]")
        raise typer.Exit(1)

    if not resolve_api_key(settings.api_llm):
        env_var = settings.api_llm.api_key_env_var
        console.print(f"[red]Error:[/red] {env_var} not found in environment variables")
        console.print(f"[dim]Set it in your shell or in a .env file: {env_var}=your_key_here[/dim]")
        raise typer.Exit(1)

    if map_file is not None:
        settings.explorer.map_file_path = map_file
    if headless is not None:
        settings.browser.headless = headless
    if docs_dir is not None:
        settings.planning.docs_dir = docs_dir

    console.print(Panel(
        f"[bold]Starting from:[/bold] {url}\n"
        f"[dim]Map: {settings.explorer.map_file_path} | "
        f"Docs: {settings.planning.docs_dir}/[/dim]\n"
        'Type "quit" at any prompt to end exploration',
        title="Interactive Site Explorer",
        border_style="blue",
    ))

    try:
        report = asyncio.run(_explore_async(url, settings))
    except KeyboardInterrupt:
        console.print("\n[yellow]Exploration cancelled by user[/yellow]")
        console.print(f"[dim]Progress is saved in {settings.explorer.map_file_path}[/dim]")
        raise typer.Exit(1)
    except SiteExplorerError as e:
        console.print(f"[red]Error:[/red] {e}")
        logger.exception("Exploration failed")
        raise typer.Exit(1)

    _print_report(report)

    if _state["verbose"]:
        console.print(Metrics.get().summary())


async def _explore_async(url: str, settings: Settings) -> ExplorationReport:
    """Wire up the collaborators and run one exploration session."""
    from site_explorer.browser import create_browser
    from site_explorer.explorer import (
        ConsoleOperatorPrompt,
        ExplorationEngine,
        NavigationFilter,
        PageAnalyzer,
    )
    from site_explorer.llm import APILLM
    from site_explorer.planning import TestCasePlanner

    llm = APILLM.from_settings(settings)
    store = ExplorationMapStore(settings.explorer.map_file_path)
    store.load()

    async with create_browser(settings.browser) as browser:
        analyzer = PageAnalyzer(
            browser,
            TestCasePlanner.from_settings(settings, browser, llm),
            NavigationFilter.from_settings(settings, llm),
        )
        prompt = ConsoleOperatorPrompt(console, settings.explorer.display_text_width)
        engine = ExplorationEngine(store, analyzer, prompt)
        return await engine.run(url)


def _print_report(report: ExplorationReport) -> None:
    """Render the end-of-session summary."""
    if report.end_reason == EndReason.OPERATOR_QUIT:
        console.print("\n[yellow]Exploration ended by user.[/yellow]")
    else:
        console.print("\n[green]No more pages to explore.[/green]")

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Pages explored", str(report.pages_explored))
    table.add_row("Total links discovered", str(report.links_discovered))
    table.add_row("Test case docs generated", str(report.pages_explored))
    table.add_row("Unexplored links remaining", str(report.links_pending))
    table.add_row("Pages added this session", str(len(report.pages_added)))
    if report.failed_urls:
        table.add_row("Pages that failed", str(len(report.failed_urls)))
    table.add_row("Exploration map", str(report.map_path.resolve()))

    console.print(Panel(table, title="Exploration Summary", border_style="blue"))

    if report.docs:
        console.print("\n[bold]Generated test case documentation:[/bold]")
        for number, doc in enumerate(report.docs, start=1):
            console.print(f"  {number}. {doc.label}", highlight=False)
            console.print(f"     [dim]{doc.path}[/dim]", highlight=False)

    console.print("\n[bold]Next steps:[/bold]")
    console.print("  1. Review generated test case documents")
    console.print("  2. Run 'site-explorer pending' to see links still to visit")
    console.print("  3. Run 'site-explorer explore <url>' again to explore more pages")


@app.command()
def status(
    map_file: Optional[Path] = MapFileOption,
    config_file: Optional[Path] = ConfigOption,
) -> None:
    """
    Show a summary of the exploration map.
    """
    settings = _init(config_file)
    store = _open_store(settings, map_file)

    if not store.path.exists():
        console.print(f"[yellow]No exploration map found:[/yellow] {store.path}")
        console.print("[dim]Run 'site-explorer explore <url>' to create it[/dim]")
        return

    exploration_map = store.load()
    stats = store.stats()

    console.print(Panel(
        f"[bold]Site Explorer[/bold] v{__version__}",
        border_style="blue",
    ))

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Map file", str(store.path))
    table.add_row("Base URL", exploration_map.base_url or "N/A")
    table.add_row("Started", exploration_map.started_at)
    table.add_row("Last updated", exploration_map.last_updated_at)
    table.add_row("Pages explored", str(stats.pages_explored))
    table.add_row("Links discovered", str(stats.links_discovered))
    table.add_row("Links pending", str(stats.links_pending))
    table.add_row("Ignored destinations", str(len(exploration_map.ignored)))

    console.print(table)

    if exploration_map.explored:
        console.print("\n[bold]Explored Pages:[/bold]")
        pages_table = Table(show_header=True)
        pages_table.add_column("#", style="dim", width=4)
        pages_table.add_column("URL", style="cyan")
        pages_table.add_column("Title")
        pages_table.add_column("Links", justify="right")
        pages_table.add_column("Explored at", style="dim")

        for number, page in enumerate(exploration_map.explored, start=1):
            pages_table.add_row(
                str(number),
                page.url,
                page.page_title or "-",
                str(len(page.discovered_links)),
                page.explored_at,
            )

        console.print(pages_table)


@app.command()
def pending(
    map_file: Optional[Path] = MapFileOption,
    config_file: Optional[Path] = ConfigOption,
) -> None:
    """
    List links that have been discovered but not explored or ignored.
    """
    settings = _init(config_file)
    store = _open_store(settings, map_file)
    store.load()

    links = store.unexplored_links()
    if not links:
        console.print("[green]No pending links.[/green]")
        return

    table = Table(title=f"Pending Links ({len(links)})", show_header=True)
    table.add_column("#", style="dim", width=4)
    table.add_column("URL", style="cyan")
    table.add_column("Type")
    table.add_column("Text")

    width = settings.explorer.display_text_width
    for number, link in enumerate(links, start=1):
        table.add_row(str(number), link.url, link.type.value, link.text[:width])

    console.print(table)


@app.command()
def ignore(
    url: str = typer.Argument(
        ...,
        help="Destination URL to exclude from exploration",
    ),
    map_file: Optional[Path] = MapFileOption,
    config_file: Optional[Path] = ConfigOption,
) -> None:
    """
    Permanently exclude a destination from the pending links.

    Query strings and fragments are ignored when matching.
    """
    settings = _init(config_file)
    store = _open_store(settings, map_file)

    if not store.path.exists():
        console.print(f"[red]Error:[/red] No exploration map found: {store.path}")
        raise typer.Exit(1)

    store.load()
    changed = store.ignore_link(url)

    try:
        store.save()
    except SiteExplorerError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if changed:
        console.print(f"[green]✓[/green] Ignored {changed} link(s) to {url}")
    else:
        console.print(f"[yellow]No pending links to {url}; recorded as ignored[/yellow]")


@app.command()
def models(
    check: bool = typer.Option(
        False,
        "--check",
        help="Send a minimal request to each model to verify it is available",
    ),
    config_file: Optional[Path] = ConfigOption,
) -> None:
    """
    Show model profiles, optionally checking that each is still available.
    """
    settings = _init(config_file)

    if not check:
        table = Table(title="Model Profiles", show_header=True)
        table.add_column("Profile", style="cyan")
        table.add_column("Model ID")
        table.add_column("Family")
        table.add_column("Best for", style="dim")

        for profile in MODEL_PROFILES.values():
            table.add_row(profile.name, profile.model_id, profile.family, profile.best_for)

        console.print(table)
        return

    _load_env()
    if not resolve_api_key(settings.api_llm):
        console.print(
            f"[red]Error:[/red] {settings.api_llm.api_key_env_var} "
            "not found in environment variables"
        )
        raise typer.Exit(1)

    from site_explorer.llm import APILLM

    results = asyncio.run(APILLM.from_settings(settings).check_models())

    table = Table(title="Model Availability", show_header=True)
    table.add_column("Profile", style="cyan")
    table.add_column("Family")
    table.add_column("Model ID")
    table.add_column("Status")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    for result in results:
        status_text = "[green]available[/green]" if result.available else "[red]failed[/red]"
        table.add_row(
            result.profile,
            result.family,
            result.model_id,
            status_text,
            f"{result.latency_ms:.0f}ms",
            result.error or result.response,
        )

    console.print(table)

    failed = [result for result in results if not result.available]
    if failed:
        console.print(
            f"\n[red]{len(failed)} model(s) unavailable.[/red] "
            "Update the model IDs in site_explorer/llm/models.py"
        )
        raise typer.Exit(1)

    console.print("\n[green]✓ All model versions are valid[/green]")


@config_app.command("show")
def config_show(
    config_file: Optional[Path] = ConfigOption,
) -> None:
    """Show the effective configuration as YAML."""
    settings = _init(config_file)
    console.print(Panel("[bold]Current Configuration[/bold]", border_style="blue"))
    console.print(
        yaml.safe_dump(settings.model_dump(mode="json"), default_flow_style=False, sort_keys=False),
        highlight=False,
        markup=False,
    )


@config_app.command("init")
def config_init(
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output path for config file",
    ),
) -> None:
    """Write the default configuration to a YAML file."""
    output_path = output or Path("site-explorer.yaml")

    if output_path.exists():
        if not typer.confirm(f"File {output_path} exists. Overwrite?"):
            raise typer.Exit(0)

    with open(output_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(Settings().model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)

    console.print(f"[green]✓[/green] Configuration saved to: {output_path}")
