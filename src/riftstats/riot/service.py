"""
Riot data service.

Composes RiotClient calls into player-level operations. Every remote
call goes through the shared RateLimitedFetcher, so batching, throttle
retries, timeouts and caching apply uniformly.
"""

from __future__ import annotations

import logging
from functools import partial

from ..analysis.champions import top_champion_ids
from ..core.config.models import FetcherConfig, RiotConfig
from ..core.fetch.base import FetchRequest, NotFoundError
from ..core.fetch.caching import ResponseCache
from ..core.fetch.fetcher import RateLimitedFetcher
from ..core.logging import get_contextual_logger
from .client import RiotClient
from .models import RANKED_SOLO_QUEUE, LeagueEntry, LiveGameStatus, Match, SummonerProfile
from .regions import resolve_region

logger = logging.getLogger(__name__)

# Sequential, gently paced detail fetches for the top-champion lookup
TOP_CHAMPIONS_FETCH = {"batch_size": 1, "inter_batch_delay_ms": 150}
TOP_CHAMPIONS_HISTORY = 20
TOP_CHAMPIONS_LIMIT = 5


class RiotService:
    """Player-level Riot operations over a rate-limited fetcher."""

    def __init__(
        self,
        client: RiotClient,
        fetcher: RateLimitedFetcher | None = None,
        config: RiotConfig | None = None,
        result_cache: ResponseCache | None = None,
    ):
        """Initialize the service.

        Args:
            client: Riot API client
            fetcher: Shared fetcher (default: one with default FetcherConfig)
            config: Riot settings
            result_cache: Cache for derived results such as top champions
        """
        self.client = client
        self.fetcher = fetcher or RateLimitedFetcher(FetcherConfig())
        self.config = config or RiotConfig()
        self.result_cache = result_cache if result_cache is not None else ResponseCache()

    def _region(self, region: str | None) -> str:
        return region or self.config.default_region

    # =========================================================================
    # Summoner
    # =========================================================================

    async def lookup_summoner(
        self,
        game_name: str,
        tag_line: str,
        region: str | None = None,
    ) -> SummonerProfile:
        """Resolve a Riot ID to account, summoner and ranked data.

        Raises:
            NotFoundError: No account with this Riot ID
            FetchError: The account or summoner could not be loaded
        """
        region = self._region(region)
        route = resolve_region(region)
        log = get_contextual_logger("riot", region=route.region)

        account_outcome = await self.fetcher.fetch_one(FetchRequest(
            key=f"{game_name}#{tag_line}",
            execute=partial(self.client.get_account_by_riot_id, game_name, tag_line, region),
        ))
        account_outcome.raise_for_failure()
        account = account_outcome.value

        summoner_outcome, ranked_outcome = await self.fetcher.fetch_all([
            FetchRequest(
                key=f"summoner:{account.puuid}",
                execute=partial(self.client.get_summoner_by_puuid, account.puuid, region),
            ),
            FetchRequest(
                key=f"league:{account.puuid}",
                execute=partial(self.client.get_league_entries, account.puuid, region),
            ),
        ])
        summoner_outcome.raise_for_failure()
        summoner = summoner_outcome.value

        ranked: list[LeagueEntry] = ranked_outcome.value if ranked_outcome.ok else []
        if not ranked_outcome.ok:
            log.warning("Ranked data unavailable for %s#%s: %s", game_name, tag_line, ranked_outcome.error)

        return SummonerProfile(
            puuid=account.puuid,
            name=account.game_name or game_name,
            tag=account.tag_line or tag_line,
            summoner_id=summoner.id,
            profile_icon_id=summoner.profile_icon_id,
            summoner_level=summoner.summoner_level,
            ranked=ranked,
            region=route.region,
            platform=route.platform,
        )

    async def get_ranked(self, puuid: str, region: str | None = None) -> list[LeagueEntry]:
        """League entries for a player (empty when unranked).

        Raises:
            FetchError: The entries could not be loaded
        """
        outcome = await self.fetcher.fetch_one(FetchRequest(
            key=f"league:{puuid}",
            execute=partial(self.client.get_league_entries, puuid, self._region(region)),
        ))
        outcome.raise_for_failure()
        return outcome.value

    async def get_live_game(self, puuid: str, region: str | None = None) -> LiveGameStatus:
        """Whether the player is in a game right now, with the game if so."""
        outcome = await self.fetcher.fetch_one(FetchRequest(
            key=f"live:{puuid}",
            execute=partial(self.client.get_live_game, puuid, self._region(region)),
        ))
        if outcome.ok:
            return LiveGameStatus(in_game=True, game=outcome.value)
        if isinstance(outcome.exception, NotFoundError):
            return LiveGameStatus(in_game=False)
        return LiveGameStatus(in_game=False, error=outcome.error)

    # =========================================================================
    # Matches
    # =========================================================================

    async def get_match_ids(
        self,
        puuid: str,
        region: str | None = None,
        count: int | None = None,
        queue: int | None = None,
    ) -> list[str]:
        """Recent match ids, empty if the list could not be loaded."""
        outcome = await self.fetcher.fetch_one(FetchRequest(
            key=f"match-ids:{puuid}",
            execute=partial(
                self.client.get_match_ids,
                puuid,
                self._region(region),
                count=count or self.config.match_count,
                queue=queue,
            ),
        ))
        if not outcome.ok:
            logger.warning("Match id list unavailable for %s: %s", puuid, outcome.error)
            return []
        return outcome.value

    async def get_matches(
        self,
        match_ids: list[str],
        region: str | None = None,
        fetch_config: dict[str, int] | None = None,
    ) -> list[Match]:
        """Match details for the given ids. Matches that fail to load are skipped."""
        region = self._region(region)
        overrides = {"cache_ttl_ms": self.config.match_cache_ttl_ms, **(fetch_config or {})}
        return await self.fetcher.fetch_values(
            [
                FetchRequest(key=match_id, execute=partial(self.client.get_match, match_id, region))
                for match_id in match_ids
            ],
            overrides,
        )

    async def get_match_history(
        self,
        puuid: str,
        region: str | None = None,
        count: int | None = None,
    ) -> list[Match]:
        """Recent matches for a player, skipping any that failed to load."""
        match_ids = await self.get_match_ids(puuid, region, count=count)
        if not match_ids:
            return []

        matches = await self.get_matches(match_ids, region)
        logger.info("Successfully loaded %d/%d matches", len(matches), len(match_ids))
        return matches

    async def get_top_champions(self, puuid: str, region: str | None = None) -> list[int] | None:
        """Top champion ids from recent ranked solo games.

        Results are cached per player and region. None if no games
        could be inspected.
        """
        region = self._region(region)
        cache_key = f"{puuid}-{region.lower()}"
        ttl_seconds = self.config.top_champions_ttl_ms / 1000.0

        cached = self.result_cache.get(cache_key, ttl_seconds)
        if cached is not None:
            logger.debug("Returning cached champions for %s", puuid[:10])
            return cached

        match_ids = await self.get_match_ids(
            puuid,
            region,
            count=TOP_CHAMPIONS_HISTORY,
            queue=RANKED_SOLO_QUEUE,
        )
        if not match_ids:
            return None

        matches = await self.get_matches(
            match_ids[:self.config.top_champions_match_limit],
            region,
            fetch_config=TOP_CHAMPIONS_FETCH,
        )
        champions = top_champion_ids(matches, puuid, limit=TOP_CHAMPIONS_LIMIT)
        if not champions:
            return None

        if ttl_seconds > 0:
            self.result_cache.set(cache_key, champions)
        return champions


