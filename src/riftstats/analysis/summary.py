"""Whole-history summary of a player's recent matches."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from statistics import fmean
from typing import Any

from ..riot.models import Match

LATE_GAME_MINUTES = 30


@dataclass
class WinLoss:
    games: int = 0
    wins: int = 0

    @property
    def winrate(self) -> float:
        return (self.wins / self.games) * 100 if self.games else 0.0

    def add(self, win: bool) -> None:
        self.games += 1
        self.wins += int(win)


@dataclass
class MatchSummary:
    total_games: int
    wins: int
    losses: int
    avg_kills: float
    avg_deaths: float
    avg_assists: float
    kda: float
    avg_cs: float
    avg_vision_score: float
    avg_game_duration: float  # minutes
    avg_gold_per_min: float
    avg_damage_per_min: float
    late_game: WinLoss = field(default_factory=WinLoss)
    champion_pool: dict[str, WinLoss] = field(default_factory=dict)
    role_performance: dict[str, WinLoss] = field(default_factory=dict)

    @property
    def winrate(self) -> float:
        return (self.wins / self.total_games) * 100 if self.total_games else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {**asdict(self), "winrate": self.winrate}


def summarize_matches(matches: Iterable[Match], puuid: str) -> MatchSummary | None:
    """Summarize the player's games. None if the player appears in none of them."""
    kills: list[int] = []
    deaths: list[int] = []
    assists: list[int] = []
    cs: list[int] = []
    vision: list[int] = []
    durations: list[float] = []
    gold_per_min: list[float] = []
    damage_per_min: list[float] = []
    late_game = WinLoss()
    champion_pool: dict[str, WinLoss] = {}
    role_performance: dict[str, WinLoss] = {}
    wins = 0

    for match in matches:
        p = match.participant_for(puuid)
        if p is None:
            continue

        wins += int(p.win)
        kills.append(p.kills)
        deaths.append(p.deaths)
        assists.append(p.assists)
        cs.append(p.cs)
        vision.append(p.vision_score)

        minutes = match.info.game_duration / 60
        durations.append(minutes)
        if minutes > 0:
            gold_per_min.append(p.gold_earned / minutes)
            damage_per_min.append(p.total_damage_dealt_to_champions / minutes)

        champion_pool.setdefault(p.champion_name, WinLoss()).add(p.win)
        role_performance.setdefault(p.team_position or "UNKNOWN", WinLoss()).add(p.win)
        if minutes > LATE_GAME_MINUTES:
            late_game.add(p.win)

    if not kills:
        return None

    def avg(values: list[float] | list[int]) -> float:
        return fmean(values) if values else 0.0

    return MatchSummary(
        total_games=len(kills),
        wins=wins,
        losses=len(kills) - wins,
        avg_kills=avg(kills),
        avg_deaths=avg(deaths),
        avg_assists=avg(assists),
        kda=(avg(kills) + avg(assists)) / max(avg(deaths), 1.0),
        avg_cs=avg(cs),
        avg_vision_score=avg(vision),
        avg_game_duration=avg(durations),
        avg_gold_per_min=avg(gold_per_min),
        avg_damage_per_min=avg(damage_per_min),
        late_game=late_game,
        champion_pool=champion_pool,
        role_performance=role_performance,
    )
