"""
Typed result models for Riot API endpoint families.

Responses are validated at the boundary: a payload missing a required
field raises pydantic.ValidationError, which the fetcher records as a
failed outcome instead of letting partial data reach aggregation.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

RANKED_SOLO_QUEUE = 420
RANKED_FLEX_QUEUE = 440
RANKED_QUEUES = frozenset({RANKED_SOLO_QUEUE, RANKED_FLEX_QUEUE})


class RiotModel(BaseModel):
    """Base model reading Riot's camelCase payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# =============================================================================
# Account / Summoner / League
# =============================================================================


class Account(RiotModel):
    """account-v1 by-riot-id response."""

    puuid: str
    game_name: str | None = None
    tag_line: str | None = None


class Summoner(RiotModel):
    """summoner-v4 by-puuid response."""

    puuid: str
    id: str | None = None  # encrypted summoner id, no longer always returned
    account_id: str | None = None
    profile_icon_id: int
    summoner_level: int


class LeagueEntry(RiotModel):
    """league-v4 entry for one queue."""

    queue_type: str
    tier: str
    rank: str
    league_points: int
    wins: int
    losses: int
    hot_streak: bool = False
    veteran: bool = False
    fresh_blood: bool = False
    inactive: bool = False

    @property
    def games(self) -> int:
        return self.wins + self.losses

    @property
    def winrate(self) -> float:
        return (self.wins / self.games) * 100 if self.games else 0.0


class SummonerProfile(BaseModel):
    """Account, summoner and ranked data combined for one player."""

    puuid: str
    name: str | None
    tag: str | None
    summoner_id: str | None
    profile_icon_id: int
    summoner_level: int
    ranked: list[LeagueEntry] = Field(default_factory=list)
    region: str
    platform: str

    @property
    def riot_id(self) -> str:
        return f"{self.name}#{self.tag}"

    def entry_for(self, queue_type: str) -> LeagueEntry | None:
        return next((e for e in self.ranked if e.queue_type == queue_type), None)


# =============================================================================
# Matches
# =============================================================================


class ParticipantChallenges(RiotModel):
    """Subset of the challenges block used by the aggregations."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    gold_per_minute: float | None = None
    kill_participation: float | None = None


class Participant(RiotModel):
    puuid: str
    champion_name: str
    champion_id: int
    team_id: int
    team_position: str = ""
    win: bool
    kills: int
    deaths: int
    assists: int
    total_minions_killed: int = 0
    neutral_minions_killed: int = 0
    vision_score: int = 0
    gold_earned: int = 0
    total_damage_dealt_to_champions: int = 0
    total_damage_taken: int = 0
    challenges: ParticipantChallenges | None = None

    @property
    def cs(self) -> int:
        return self.total_minions_killed + self.neutral_minions_killed

    @property
    def kda(self) -> float:
        if self.deaths == 0:
            return float(self.kills + self.assists)
        return (self.kills + self.assists) / self.deaths


class MatchMetadata(RiotModel):
    match_id: str
    participants: list[str] = Field(default_factory=list)


class MatchInfo(RiotModel):
    game_duration: int  # seconds
    queue_id: int
    participants: list[Participant]
    game_creation: int | None = None
    game_mode: str | None = None


class Match(RiotModel):
    """match-v5 match detail."""

    metadata: MatchMetadata
    info: MatchInfo

    @property
    def match_id(self) -> str:
        return self.metadata.match_id

    @property
    def is_ranked(self) -> bool:
        return self.info.queue_id in RANKED_QUEUES

    def participant_for(self, puuid: str) -> Participant | None:
        return next((p for p in self.info.participants if p.puuid == puuid), None)

    def team_kills(self, team_id: int) -> int:
        return sum(p.kills for p in self.info.participants if p.team_id == team_id)


# =============================================================================
# Spectator
# =============================================================================


class LiveGame(RiotModel):
    """spectator-v5 active game."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    game_id: int
    game_type: str | None = None
    game_mode: str | None = None
    game_queue_config_id: int | None = None
    game_length: int | None = None
    participants: list[dict[str, Any]] = Field(default_factory=list)


class LiveGameStatus(BaseModel):
    in_game: bool
    game: LiveGame | None = None
    error: str | None = None
