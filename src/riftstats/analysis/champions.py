"""
Per-champion aggregations over a player's matches.

Matches the player does not appear in are skipped, so partially
fetched histories aggregate cleanly.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import Any

from ..riot.models import Match, Participant

_RIOT_ID = re.compile(r"^(.+?)\s*#\s*(.+)$")

# Estimated LP swing per ranked game
LP_WIN = 20
LP_LOSS = -18


@dataclass(frozen=True)
class RiotId:
    game_name: str
    tag_line: str

    def __str__(self) -> str:
        return f"{self.game_name}#{self.tag_line}"


def parse_riot_id(text: str) -> RiotId | None:
    """Parse "Hide on bush #KR1" into name and tag. None if there is no tag."""
    match = _RIOT_ID.match(text.strip())
    if not match:
        return None
    game_name, tag_line = match.group(1).strip(), match.group(2).strip()
    if not game_name or not tag_line:
        return None
    return RiotId(game_name=game_name, tag_line=tag_line)


def kda_ratio(kills: int, deaths: int, assists: int) -> float:
    if deaths == 0:
        return float(kills + assists)
    return (kills + assists) / deaths


def _player_games(matches: Iterable[Match], puuid: str) -> Iterable[tuple[Match, Participant]]:
    for match in matches:
        participant = match.participant_for(puuid)
        if participant is not None:
            yield match, participant


# =============================================================================
# Champion performance
# =============================================================================


@dataclass
class ChampionPerformance:
    champion_name: str
    champion_id: int
    games: int = 0
    wins: int = 0
    kills: int = 0
    deaths: int = 0
    assists: int = 0

    @property
    def winrate(self) -> float:
        return (self.wins / self.games) * 100 if self.games else 0.0

    @property
    def avg_kills(self) -> float:
        return self.kills / self.games if self.games else 0.0

    @property
    def avg_deaths(self) -> float:
        return self.deaths / self.games if self.games else 0.0

    @property
    def avg_assists(self) -> float:
        return self.assists / self.games if self.games else 0.0

    @property
    def kda(self) -> float:
        return kda_ratio(self.kills, self.deaths, self.assists)

    def to_dict(self) -> dict[str, Any]:
        return {
            **asdict(self),
            "winrate": self.winrate,
            "avg_kills": self.avg_kills,
            "avg_deaths": self.avg_deaths,
            "avg_assists": self.avg_assists,
            "kda": self.kda,
        }


def champion_performance(matches: Iterable[Match], puuid: str) -> list[ChampionPerformance]:
    """Aggregate games, wins and K/D/A per champion, most played first."""
    stats: dict[str, ChampionPerformance] = {}

    for _, p in _player_games(matches, puuid):
        entry = stats.setdefault(
            p.champion_name,
            ChampionPerformance(champion_name=p.champion_name, champion_id=p.champion_id),
        )
        entry.games += 1
        entry.wins += int(p.win)
        entry.kills += p.kills
        entry.deaths += p.deaths
        entry.assists += p.assists

    return sorted(stats.values(), key=lambda s: s.games, reverse=True)


# =============================================================================
# LP gains (ranked only)
# =============================================================================


def estimate_lp_change(participant: Participant) -> int:
    """Estimate LP for one ranked game from result and performance."""
    kda = participant.kda
    if participant.win:
        lp = LP_WIN
        if kda > 5:
            lp += 2
        if participant.kills > 15:
            lp += 1
    else:
        lp = LP_LOSS
        if kda > 3:
            lp += 2
    return lp


@dataclass
class ChampionLPStats:
    champion_name: str
    champion_id: int
    role: str
    games: int = 0
    wins: int = 0
    lp_change: int = 0
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    total_cs: int = 0
    total_damage: int = 0
    total_damage_taken: int = 0
    total_gold: int = 0
    team_kills: int = 0
    total_game_duration: int = 0  # seconds
    gold_diff_at_15: float = 0.0
    games_with_gold_diff: int = 0

    @property
    def minutes(self) -> float:
        return self.total_game_duration / 60

    @property
    def winrate(self) -> float:
        return (self.wins / self.games) * 100 if self.games else 0.0

    @property
    def kda(self) -> float:
        return kda_ratio(self.kills, self.deaths, self.assists)

    @property
    def cs_per_min(self) -> float:
        return self.total_cs / self.minutes if self.minutes else 0.0

    @property
    def damage_per_min(self) -> float:
        return self.total_damage / self.minutes if self.minutes else 0.0

    @property
    def gold_per_min(self) -> float:
        return self.total_gold / self.minutes if self.minutes else 0.0

    @property
    def kill_participation(self) -> float:
        if not self.team_kills:
            return 0.0
        return ((self.kills + self.assists) / self.team_kills) * 100

    @property
    def avg_gold_diff_at_15(self) -> float:
        if not self.games_with_gold_diff:
            return 0.0
        return self.gold_diff_at_15 / self.games_with_gold_diff

    def to_dict(self) -> dict[str, Any]:
        return {
            **asdict(self),
            "winrate": self.winrate,
            "kda": self.kda,
            "cs_per_min": self.cs_per_min,
            "damage_per_min": self.damage_per_min,
            "gold_per_min": self.gold_per_min,
            "kill_participation": self.kill_participation,
            "avg_gold_diff_at_15": self.avg_gold_diff_at_15,
        }


def champion_lp_gains(matches: Iterable[Match], puuid: str) -> list[ChampionLPStats]:
    """Estimated LP and per-minute stats per champion for ranked games, best LP first."""
    stats: dict[str, ChampionLPStats] = {}

    for match, p in _player_games(matches, puuid):
        if not match.is_ranked:
            continue

        entry = stats.setdefault(
            p.champion_name,
            ChampionLPStats(
                champion_name=p.champion_name,
                champion_id=p.champion_id,
                role=p.team_position or "UNKNOWN",
            ),
        )
        entry.games += 1
        entry.wins += int(p.win)
        entry.lp_change += estimate_lp_change(p)
        entry.kills += p.kills
        entry.deaths += p.deaths
        entry.assists += p.assists
        entry.total_cs += p.cs
        entry.total_damage += p.total_damage_dealt_to_champions
        entry.total_damage_taken += p.total_damage_taken
        entry.total_gold += p.gold_earned
        entry.total_game_duration += match.info.game_duration
        entry.team_kills += match.team_kills(p.team_id)

        if p.challenges and p.challenges.gold_per_minute:
            # Rough estimate: no timeline data
            entry.gold_diff_at_15 += p.challenges.gold_per_minute * 15 - 3000
            entry.games_with_gold_diff += 1

    return sorted(stats.values(), key=lambda s: s.lp_change, reverse=True)


# =============================================================================
# Top champions
# =============================================================================


def top_champion_ids(matches: Iterable[Match], puuid: str, limit: int = 5) -> list[int]:
    """Champion ids the player picked most, most frequent first."""
    counts = Counter(p.champion_id for _, p in _player_games(matches, puuid))
    return [champion_id for champion_id, _ in counts.most_common(limit)]
