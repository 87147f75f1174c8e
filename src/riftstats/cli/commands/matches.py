"""
Match commands: history and aggregations over recent games.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from riftstats.analysis import champion_lp_gains, champion_performance, summarize_matches
from riftstats.riot.models import Match

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
    help="Match history and champion statistics",
    no_args_is_help=True,
)

CountOption = typer.Option(
    20,
    "--count",
    "-n",
    min=1,
    max=100,
    help="Number of recent matches to load",
)


def _load_history(
    puuid: str,
    region: str | None,
    count: int,
    config_path: Path | None,
    verbose: bool = False,
) -> list[Match]:
    config = load_settings(config_path, verbose)

    async def _history():
        async with open_service(config) as service:
            return await service.get_match_history(puuid, region, count=count)

    matches = run(_history())
    if not matches:
        err_console.print("[yellow]No matches could be loaded[/yellow]")
    return matches


@app.command("history")
def history(
    puuid: str = typer.Argument(..., help="Player PUUID"),
    region: Optional[str] = RegionOption,
    count: int = CountOption,
    as_json: bool = JsonOption,
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """List recent matches.

    Examples:
        riftstats matches history <puuid> --region EUW -n 10
    """
    matches = _load_history(puuid, region, count, config_path, verbose)

    if as_json:
        print_json([m.model_dump() for m in matches])
        return

    table = Table(title="Match History", show_header=True, header_style="bold magenta")
    table.add_column("Match", style="cyan")
    table.add_column("Queue", justify="right")
    table.add_column("Champion")
    table.add_column("Result", justify="center")
    table.add_column("K/D/A", justify="right")
    table.add_column("CS", justify="right")
    table.add_column("Duration", justify="right")

    for match in matches:
        p = match.participant_for(puuid)
        if p is None:
            continue
        result = "[green]Win[/green]" if p.win else "[red]Loss[/red]"
        minutes, seconds = divmod(match.info.game_duration, 60)
        table.add_row(
            match.match_id,
            str(match.info.queue_id),
            p.champion_name,
            result,
            f"{p.kills}/{p.deaths}/{p.assists}",
            str(p.cs),
            f"{minutes}:{seconds:02d}",
        )

    console.print(table)


@app.command("champions")
def champions(
    puuid: str = typer.Argument(..., help="Player PUUID"),
    region: Optional[str] = RegionOption,
    count: int = CountOption,
    lp: bool = typer.Option(
        False,
        "--lp",
        help="Ranked games only, with estimated LP and per-minute stats",
    ),
    as_json: bool = JsonOption,
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Per-champion performance over recent matches."""
    matches = _load_history(puuid, region, count, config_path, verbose)

    if lp:
        lp_stats = champion_lp_gains(matches, puuid)
        if as_json:
            print_json([s.to_dict() for s in lp_stats])
            return

        table = Table(title="Ranked LP by Champion", show_header=True, header_style="bold magenta")
        for column in ("Champion", "Role", "Games", "Winrate", "LP", "KDA", "CS/min", "DPM", "KP"):
            table.add_column(column, justify="left" if column in ("Champion", "Role") else "right")
        for s in lp_stats:
            lp_style = "green" if s.lp_change >= 0 else "red"
            table.add_row(
                s.champion_name,
                s.role,
                str(s.games),
                f"{s.winrate:.0f}%",
                f"[{lp_style}]{s.lp_change:+d}[/{lp_style}]",
                f"{s.kda:.2f}",
                f"{s.cs_per_min:.1f}",
                f"{s.damage_per_min:.0f}",
                f"{s.kill_participation:.0f}%",
            )
        console.print(table)
        return

    perf = champion_performance(matches, puuid)
    if as_json:
        print_json([s.to_dict() for s in perf])
        return

    table = Table(title="Champion Performance", show_header=True, header_style="bold magenta")
    table.add_column("Champion", style="cyan")
    table.add_column("Games", justify="right")
    table.add_column("Winrate", justify="right")
    table.add_column("Avg K/D/A", justify="right")
    table.add_column("KDA", justify="right")
    for s in perf:
        table.add_row(
            s.champion_name,
            str(s.games),
            f"{s.winrate:.0f}%",
            f"{s.avg_kills:.1f}/{s.avg_deaths:.1f}/{s.avg_assists:.1f}",
            f"{s.kda:.2f}",
        )
    console.print(table)


@app.command("top")
def top(
    puuid: str = typer.Argument(..., help="Player PUUID"),
    region: Optional[str] = RegionOption,
    as_json: bool = JsonOption,
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Most played champions in recent ranked solo games."""
    config = load_settings(config_path, verbose)

    async def _top():
        async with open_service(config) as service:
            return await service.get_top_champions(puuid, region)

    champion_ids = run(_top())

    if as_json:
        print_json({"champions": champion_ids})
        return
    if not champion_ids:
        err_console.print("[yellow]Could not fetch champions[/yellow]")
        raise typer.Exit(1)
    console.print("Top champions: " + ", ".join(f"[cyan]{c}[/cyan]" for c in champion_ids))


@app.command("summary")
def summary(
    puuid: str = typer.Argument(..., help="Player PUUID"),
    region: Optional[str] = RegionOption,
    count: int = CountOption,
    as_json: bool = JsonOption,
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Summary of recent games: averages, late game, champion pool and roles."""
    matches = _load_history(puuid, region, count, config_path, verbose)
    result = summarize_matches(matches, puuid)

    if result is None:
        err_console.print("[yellow]Player not found in any loaded match[/yellow]")
        raise typer.Exit(1)

    if as_json:
        print_json(result.to_dict())
        return

    table = Table(title=f"Last {result.total_games} games", show_header=False)
    table.add_column("Stat", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Record", f"{result.wins}W {result.losses}L ({result.winrate:.1f}%)")
    table.add_row("Avg K/D/A", f"{result.avg_kills:.1f}/{result.avg_deaths:.1f}/{result.avg_assists:.1f}")
    table.add_row("KDA", f"{result.kda:.2f}")
    table.add_row("Avg CS", f"{result.avg_cs:.0f}")
    table.add_row("Avg vision", f"{result.avg_vision_score:.1f}")
    table.add_row("Avg duration", f"{result.avg_game_duration:.1f} min")
    table.add_row("Gold/min", f"{result.avg_gold_per_min:.0f}")
    table.add_row("Damage/min", f"{result.avg_damage_per_min:.0f}")
    if result.late_game.games:
        table.add_row("Late game winrate", f"{result.late_game.winrate:.1f}%")
    console.print(table)
