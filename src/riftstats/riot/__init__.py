"""Riot Games API access."""

from .client import RiotClient
from .models import (
    Account,
    LeagueEntry,
    LiveGame,
    LiveGameStatus,
    Match,
    Participant,
    Summoner,
    SummonerProfile,
)
from .regions import RegionRoute, known_regions, resolve_region

__all__ = [
    "Account",
    "LeagueEntry",
    "LiveGame",
    "LiveGameStatus",
    "Match",
    "Participant",
    "RegionRoute",
    "RiotClient",
    "Summoner",
    "SummonerProfile",
    "known_regions",
    "resolve_region",
]
