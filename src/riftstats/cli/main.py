"""
riftstats CLI - Main entry point.

League of Legends statistics from the Riot API on the terminal,
fetched through a rate-limited batch fetcher.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.traceback import install as install_rich_traceback

from riftstats import __app_name__, __version__

# Load environment variables from .env (if present)
load_dotenv()

# Install rich traceback for better error display
install_rich_traceback(show_locals=False, width=120)

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name=__app_name__,
    help="League of Legends statistics from the Riot API",
    rich_markup_mode="rich",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """riftstats - League of Legends statistics."""
    pass


# =============================================================================
# Import and register subcommand modules
# =============================================================================

from .commands import matches, summoner  # noqa: E402

app.add_typer(summoner.app, name="summoner", help="Look up summoners")
app.add_typer(matches.app, name="matches", help="Match history and champion statistics")


# =============================================================================
# Init Command
# =============================================================================


@app.command()
def init(
    path: Path = typer.Option(
        Path("configs/app.yaml"),
        "--path",
        "-p",
        help="Where to write the configuration",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration",
    ),
) -> None:
    """Write a default configuration file."""
    from riftstats.core.config.loader import write_default_app_config

    if not write_default_app_config(path, force=force):
        err_console.print(f"[yellow]{path} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)

    console.print()
    console.print(Panel.fit(
        "[bold green]OK - configuration written![/bold green]\n\n"
        f"  - [cyan]{path}[/cyan]\n\n"
        "Next steps:\n"
        "  1. Put your key in [yellow].env[/yellow]: RIOT_API_KEY=RGAPI-...\n"
        '  2. Look someone up: [yellow]riftstats summoner lookup "Name#TAG"[/yellow]',
        title="[bold]Initialization Complete[/bold]",
        border_style="green",
    ))


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
