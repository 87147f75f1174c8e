"""
riftstats - League of Legends statistics toolkit.

Fetches account, ranked and match data from the Riot API through a
rate-limited batch fetcher and aggregates it into per-champion stats.
"""

__version__ = "0.1.0"
__app_name__ = "riftstats"
