"""
Summoner commands: Riot ID lookup, ranked entries, live game.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.panel import Panel
from rich.table import Table

from riftstats.analysis import parse_riot_id
from riftstats.core.fetch import FetchError, NotFoundError
from riftstats.riot.models import LeagueEntry

from ..common import (
    ConfigOption,
    JsonOption,
    RegionOption,
    VerboseOption,
    console,
    err_console,
    load_settings,
    open_service,
    print_json,
    run,
)

app = typer.Typer(
    help="Look up summoners",
    no_args_is_help=True,
)


def _ranked_table(entries: list[LeagueEntry]) -> Table:
    table = Table(title="Ranked", show_header=True, header_style="bold magenta")
    table.add_column("Queue", style="cyan")
    table.add_column("Rank")
    table.add_column("LP", justify="right")
    table.add_column("W/L", justify="right")
    table.add_column("Winrate", justify="right")

    for entry in entries:
        table.add_row(
            entry.queue_type,
            f"{entry.tier} {entry.rank}",
            str(entry.league_points),
            f"{entry.wins}/{entry.losses}",
            f"{entry.winrate:.1f}%",
        )
    return table


@app.command("lookup")
def lookup(
    riot_id: str = typer.Argument(..., help='Riot ID, e.g. "Hide on bush#KR1"'),
    region: Optional[str] = RegionOption,
    as_json: bool = JsonOption,
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Look up a player by Riot ID.

    Examples:
        riftstats summoner lookup "Hide on bush#KR1" --region KR
    """
    parsed = parse_riot_id(riot_id)
    if parsed is None:
        err_console.print(f"[red]Invalid Riot ID:[/red] {riot_id} [dim](expected Name#TAG)[/dim]")
        raise typer.Exit(1)

    config = load_settings(config_path, verbose)

    async def _lookup():
        async with open_service(config) as service:
            return await service.lookup_summoner(parsed.game_name, parsed.tag_line, region)

    try:
        profile = run(_lookup())
    except NotFoundError:
        err_console.print(f"[red]Summoner not found:[/red] {parsed}")
        raise typer.Exit(1)
    except FetchError as e:
        err_console.print(f"[red]Riot API error:[/red] {e}")
        raise typer.Exit(1)

    if as_json:
        print_json(profile.model_dump())
        return

    console.print(Panel.fit(
        f"[bold cyan]{profile.riot_id}[/bold cyan]\n"
        f"Level [green]{profile.summoner_level}[/green] - {profile.region} ({profile.platform})\n"
        f"[dim]PUUID {profile.puuid}[/dim]",
        title="[bold]Summoner[/bold]",
        border_style="cyan",
    ))
    if profile.ranked:
        console.print(_ranked_table(profile.ranked))
    else:
        console.print("[dim]Unranked[/dim]")


@app.command("ranked")
def ranked(
    puuid: str = typer.Argument(..., help="Player PUUID"),
    region: Optional[str] = RegionOption,
    as_json: bool = JsonOption,
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show ranked entries for a PUUID."""
    config = load_settings(config_path, verbose)

    async def _ranked():
        async with open_service(config) as service:
            return await service.get_ranked(puuid, region)

    try:
        entries = run(_ranked())
    except FetchError as e:
        err_console.print(f"[red]Could not load ranked data:[/red] {e}")
        raise typer.Exit(1)

    if as_json:
        print_json([e.model_dump() for e in entries])
    elif entries:
        console.print(_ranked_table(entries))
    else:
        console.print("[dim]Unranked[/dim]")


@app.command("live")
def live(
    puuid: str = typer.Argument(..., help="Player PUUID"),
    region: Optional[str] = RegionOption,
    as_json: bool = JsonOption,
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Check whether a player is in a game right now."""
    config = load_settings(config_path, verbose)

    async def _live():
        async with open_service(config) as service:
            return await service.get_live_game(puuid, region)

    status = run(_live())

    if as_json:
        print_json(status.model_dump())
        return

    if status.error:
        err_console.print(f"[yellow]Live game lookup failed:[/yellow] {status.error}")
        raise typer.Exit(1)
    if not status.in_game or status.game is None:
        console.print("[dim]Not in game[/dim]")
        return

    game = status.game
    console.print(
        f"[bold green]In game[/bold green] - {game.game_mode or 'unknown mode'} "
        f"(queue {game.game_queue_config_id}, {len(game.participants)} players)"
    )
