"""Aggregations over fetched match data."""

from .champions import (
    ChampionLPStats,
    ChampionPerformance,
    RiotId,
    champion_lp_gains,
    champion_performance,
    estimate_lp_change,
    parse_riot_id,
    top_champion_ids,
)
from .summary import MatchSummary, WinLoss, summarize_matches

__all__ = [
    "ChampionLPStats",
    "ChampionPerformance",
    "MatchSummary",
    "RiotId",
    "WinLoss",
    "champion_lp_gains",
    "champion_performance",
    "estimate_lp_change",
    "parse_riot_id",
    "summarize_matches",
    "top_champion_ids",
]
