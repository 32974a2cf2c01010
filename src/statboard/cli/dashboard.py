"""
Statboard CLI - Dashboard commands.

Load a dashboard for one reporting month and print its view model,
list the selectable periods, or show the recently-played feed.
"""

import asyncio
import logging
import sys
import traceback
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from statboard.core.config import load_config
from statboard.core.snapshots.exceptions import StatboardError
from statboard.core.snapshots.freshness import format_time_ago
from statboard.core.snapshots.loader import DashboardDataLoader
from statboard.core.snapshots.locator import ResourceLocator
from statboard.core.snapshots.models import (
    DashboardViewModel,
    FreshnessIndicator,
    Period,
    RankedEntity,
    ResourceKind,
)
from statboard.core.snapshots.period import (
    MONTH_NAMES,
    current_period,
    selectable_periods,
)
from statboard.core.snapshots.recent import RecentlyPlayedFeed

console = Console()

# Global debug flag
_debug_mode = False

_INDICATOR_STYLES = {
    FreshnessIndicator.FRESH: ("green", "Data is fresh"),
    FreshnessIndicator.STALE: ("yellow", "Data may be stale"),
    FreshnessIndicator.UNKNOWN: ("dim", "Freshness unknown"),
}

_LIST_TITLES = {
    ResourceKind.RANKED_TRACKS: "Top Tracks",
    ResourceKind.RANKED_ARTISTS: "Top Artists",
}


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for dashboard commands.

    Args:
        debug: If True, enable DEBUG level logging and full tracebacks
    """
    global _debug_mode
    _debug_mode = debug

    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def handle_error(error: Exception, command_name: str) -> None:
    """
    Display an error panel with a user-friendly message.

    Args:
        error: The exception that was raised
        command_name: Name of the command that failed
    """
    error_text = Text()
    if isinstance(error, StatboardError):
        error_text.append("Error: ", style="bold red")
        error_text.append(str(error))
        if error.context:
            error_text.append("\n\nContext:\n", style="dim")
            for key, value in error.context.items():
                error_text.append(f"  {key}: ", style="cyan")
                error_text.append(f"{value}\n", style="white")
        title = "[bold red]Error[/bold red]"
    else:
        error_text.append("Unexpected error in ", style="bold red")
        error_text.append(command_name, style="bold yellow")
        error_text.append(": ", style="bold red")
        error_text.append(str(error))
        title = "[bold red]Unexpected Error[/bold red]"

    console.print()
    console.print(Panel(error_text, title=title, border_style="red", expand=False))

    if _debug_mode:
        console.print("\n[dim]Full traceback:[/dim]")
        console.print(traceback.format_exc())
    else:
        console.print("[dim]Run with --debug for full traceback[/dim]")
    console.print()


def _resolve_period(year: int | None, month: int | None) -> Period:
    now = current_period()
    return Period(
        year=now.year if year is None else year,
        month=now.month if month is None else month,
    )


def _ranked_table(kind: ResourceKind, entries: tuple[RankedEntity, ...]) -> Table:
    table = Table(title=_LIST_TITLES.get(kind, kind.value), show_lines=False)
    table.add_column("#", justify="right", style="bold")
    table.add_column("Name", style="cyan")
    table.add_column("Details")
    table.add_column("Popularity", justify="right")

    for entity in entries:
        if entity.artist_names:
            details = ", ".join(entity.artist_names)
        else:
            details = ", ".join(entity.genres)
        table.add_row(
            str(entity.rank), entity.display_name, details, f"{entity.popularity_score}%"
        )
    return table


def _print_view_model(view_model: DashboardViewModel) -> None:
    source = "archive" if view_model.is_historical else "live"
    console.print(
        f"[bold]Period:[/bold] {view_model.period.label} ({source})  "
        f"[bold]State:[/bold] {view_model.loading_state.value}"
    )

    if view_model.is_failed:
        console.print(f"[red]{escape(view_model.failure_reason or '')}[/red]")
        return

    profile = view_model.profile
    if profile is not None:
        console.print(
            f"[bold]{escape(profile.display_name)}[/bold] "
            f"[dim]{profile.follower_count:,} followers[/dim]"
        )
    else:
        console.print("[dim]Profile unavailable[/dim]")

    freshness = view_model.freshness
    style, label = _INDICATOR_STYLES[freshness.indicator]
    if freshness.most_recent_timestamp is not None:
        age = format_time_ago(freshness.most_recent_timestamp)
        stamp = freshness.most_recent_timestamp.strftime("%b %d, %I:%M %p")
        console.print(f"[{style}]{label}[/{style}] [dim]last updated {stamp} ({age})[/dim]")
    else:
        console.print(f"[{style}]{label}[/{style}]")

    for kind, entries in view_model.ranked_lists.items():
        if entries:
            console.print(_ranked_table(kind, entries))
        else:
            title = _LIST_TITLES.get(kind, kind.value)
            reason = view_model.unavailable.get(kind, "no entries")
            console.print(f"[dim]{title}: {escape(reason)}[/dim]")


def show(
    year: Annotated[
        int | None, typer.Option("--year", "-y", help="Year to show (default: current)")
    ] = None,
    month: Annotated[
        int | None, typer.Option("--month", "-m", help="Month 1-12 (default: current)")
    ] = None,
    domain: Annotated[
        str | None, typer.Option("--domain", "-d", help="Data domain (default: from config)")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    debug: Annotated[
        bool, typer.Option("--debug", help="Enable debug logging and full tracebacks")
    ] = False,
) -> None:
    """
    Load and show the dashboard for one month.

    The current month is read from the live snapshots; earlier months come
    from the monthly archive.

    Examples:
        statboard show                     # Current month
        statboard show -y 2024 -m 3        # March 2024 from the archive
        statboard show --json              # Machine-readable view model
    """
    setup_logging(debug)
    try:
        config = load_config()
        if domain:
            config = config.model_copy(
                update={"source": config.source.model_copy(update={"domain": domain})}
            )
        period = _resolve_period(year, month)
        loader = DashboardDataLoader.from_config(config)
        view_model = asyncio.run(loader.load(period))
    except Exception as e:
        handle_error(e, "show")
        raise typer.Exit(1)

    if json_output:
        console.print_json(view_model.model_dump_json())
    else:
        _print_view_model(view_model)

    if view_model.is_failed:
        raise typer.Exit(1)


def periods(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """List the years and months a period selector may offer."""
    now = current_period()
    available = selectable_periods(now)

    if json_output:
        console.print_json(data=[p.model_dump() for p in available])
        return

    table = Table(title="Selectable Periods")
    table.add_column("Year", justify="right", style="bold")
    table.add_column("Months")
    by_year: dict[int, list[str]] = {}
    for p in available:
        by_year.setdefault(p.year, []).append(MONTH_NAMES[p.month - 1][:3])
    for year_value, months in by_year.items():
        table.add_row(str(year_value), ", ".join(reversed(months)))
    console.print(table)


def recent(
    limit: Annotated[
        int, typer.Option("--limit", "-n", min=1, max=50, help="Maximum entries to show")
    ] = 20,
    debug: Annotated[
        bool, typer.Option("--debug", help="Enable debug logging and full tracebacks")
    ] = False,
) -> None:
    """Show the recently-played feed."""
    setup_logging(debug)
    try:
        config = load_config()
        locator = ResourceLocator(config.source.base_url, config.source.domain)
        feed = RecentlyPlayedFeed(
            locator, timeout=config.source.timeout_seconds, limit=limit
        )
        plays = asyncio.run(feed.fetch())
    except Exception as e:
        handle_error(e, "recent")
        raise typer.Exit(1)

    if not plays:
        console.print("[dim]No recently played tracks[/dim]")
        return

    table = Table(title="Recently Played")
    table.add_column("Track", style="cyan")
    table.add_column("Artists")
    table.add_column("Album", style="dim")
    table.add_column("Played", justify="right")
    for play in plays:
        played = format_time_ago(play.played_at) if play.played_at else ""
        table.add_row(play.track_name, ", ".join(play.artist_names), play.album_name, played)
    console.print(table)
