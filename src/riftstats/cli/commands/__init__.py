"""CLI command modules."""

from . import matches, summoner

__all__ = [
    "matches",
    "summoner",
]
