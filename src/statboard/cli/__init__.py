"""
Statboard CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import typer
from rich.console import Console

from statboard import __version__
from statboard.cli import dashboard
from statboard.core.config.env import load_layered_env

# Create the main Typer app
app = typer.Typer(
    name="statboard",
    help="Personal analytics dashboard data layer",
    no_args_is_help=True,
    add_completion=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


@app.callback()
def main() -> None:
    """
    Statboard - personal analytics dashboard.

    Reads pre-aggregated JSON snapshots from a static object store: live
    rolling-window snapshots for the current month, monthly archives for
    earlier ones.

    Quick Start:
        statboard show                   # Current month
        statboard show -y 2024 -m 3      # An archived month
        statboard periods                # What can be selected
        statboard recent                 # Recently played tracks
    """
    # Precedence: OS env > project .env > user .env
    load_layered_env()


app.command(name="show")(dashboard.show)
app.command(name="periods")(dashboard.periods)
app.command(name="recent")(dashboard.recent)


@app.command()
def version() -> None:
    """Show statboard version."""
    console.print(f"statboard version: {__version__}")


def cli_main() -> None:
    """Console script entry point."""
    app()


__all__ = ["app", "cli_main"]
