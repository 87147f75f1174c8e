"""
Shared helpers for CLI commands: config, logging and service setup.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, TypeVar

import typer
from rich.console import Console

from riftstats.core.config import AppConfig, ConfigError, load_app_config, resolve_api_key
from riftstats.core.fetch import RateLimitedFetcher
from riftstats.core.logging import json_dumps, setup_logging
from riftstats.riot import RiotClient, known_regions
from riftstats.riot.service import RiotService

console = Console()
err_console = Console(stderr=True)

T = TypeVar("T")

ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to app.yaml (default: configs/app.yaml)",
)
RegionOption = typer.Option(
    None,
    "--region",
    "-r",
    help=f"Region ({', '.join(known_regions())}). Defaults to riot.default_region",
)
JsonOption = typer.Option(
    False,
    "--json",
    help="Print raw JSON instead of tables",
)
VerboseOption = typer.Option(
    False,
    "--verbose",
    help="Log at DEBUG level (per-batch progress and retries)",
)


def load_settings(config_path: Path | None = None, verbose: bool = False) -> AppConfig:
    """Load configuration and set up logging, exiting on invalid config."""
    try:
        config = load_app_config(
            config_path,
            overrides={"logging": {"level": "DEBUG"}} if verbose else None,
        )
    except ConfigError as e:
        err_console.print(f"[red]Error loading config:[/red] {e}")
        if e.details:
            err_console.print(f"[dim]{e.details}[/dim]")
        raise typer.Exit(1)

    config.ensure_directories()
    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        json_format=config.logging.json_format,
        rich_console=config.logging.rich_console,
    )
    return config


@asynccontextmanager
async def open_service(config: AppConfig) -> AsyncIterator[RiotService]:
    """Build a RiotService with a client and fetcher from config."""
    api_key = resolve_api_key(config)
    if not api_key:
        err_console.print("[red]Riot API key not configured.[/red]")
        err_console.print("[dim]Set RIOT_API_KEY in .env or riot.api_key in configs/app.yaml[/dim]")
        raise typer.Exit(1)

    fetcher = RateLimitedFetcher(config.fetcher)
    async with RiotClient(api_key, timeout=config.riot.timeout_seconds) as client:
        yield RiotService(client, fetcher, config.riot)


def run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine from a synchronous typer command."""
    return asyncio.run(coro)


def print_json(data: Any) -> None:
    console.print_json(json_dumps(data))
