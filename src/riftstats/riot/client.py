"""
Riot Games API client using httpx.

Each method performs exactly one HTTP call and maps the response to:
- a validated model on 2xx
- RateLimitError on 429 (with Retry-After)
- NotFoundError on 404
- FetchError on any other status or transport failure

Retries, pacing and caching are left to the RateLimitedFetcher.
Docs: https://developer.riotgames.com/apis
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter

from ..core.fetch.base import FetchError, NotFoundError, RateLimitError
from .models import Account, LeagueEntry, LiveGame, Match, Summoner
from .regions import resolve_region

logger = logging.getLogger(__name__)

USER_AGENT = "riftstats/0.1"

_league_entries = TypeAdapter(list[LeagueEntry])
_match_ids = TypeAdapter(list[str])


class RiotClient:
    """Async Riot API client.

    Features:
    - Persistent connection pooling
    - X-Riot-Token authentication
    - Rate limit detection
    """

    def __init__(
        self,
        api_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: Riot API key
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        if not api_key:
            raise ValueError("A Riot API key is required")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={
                    "X-Riot-Token": self.api_key,
                    "User-Agent": USER_AGENT,
                    "Accept": "application/json",
                },
                limits=httpx.Limits(
                    max_connections=20,
                    max_keepalive_connections=10,
                ),
                transport=self._transport,
            )
        return self._client

    def _check_rate_limit(self, response: httpx.Response, key: str) -> None:
        """Raise RateLimitError on 429."""
        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            retry_seconds = None

            if retry_after:
                try:
                    retry_seconds = float(retry_after)
                except ValueError:
                    pass

            raise RateLimitError(
                f"Rate limit exceeded for {key}",
                key=key,
                retry_after=retry_seconds,
            )

    async def _get_json(self, url: str, key: str, params: dict[str, Any] | None = None) -> Any:
        """GET a URL and return its decoded JSON body.

        Args:
            url: Absolute URL
            key: Request identity for errors and logs
            params: Query parameters

        Raises:
            RateLimitError: On 429
            NotFoundError: On 404
            FetchError: On other errors
        """
        client = await self._ensure_client()

        try:
            response = await client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise FetchError(f"Timeout fetching {key}: {e}", key=key, cause=e) from e
        except httpx.TransportError as e:
            raise FetchError(f"Transport error fetching {key}: {e}", key=key, cause=e) from e

        self._check_rate_limit(response, key)

        if response.status_code == 404:
            raise NotFoundError(f"Not found: {key}", key=key)

        if not response.is_success:
            logger.debug("Riot API error %s for %s: %s", response.status_code, key, response.text[:200])
            raise FetchError(
                f"Riot API error {response.status_code} for {key}",
                key=key,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON for {key}", key=key, cause=e) from e

    # =========================================================================
    # Endpoints
    # =========================================================================

    async def get_account_by_riot_id(self, game_name: str, tag_line: str, region: str) -> Account:
        route = resolve_region(region)
        url = (
            f"{route.routing_host()}/riot/account/v1/accounts/by-riot-id/"
            f"{quote(game_name, safe='')}/{quote(tag_line, safe='')}"
        )
        data = await self._get_json(url, key=f"{game_name}#{tag_line}")
        return Account.model_validate(data)

    async def get_summoner_by_puuid(self, puuid: str, region: str) -> Summoner:
        route = resolve_region(region)
        url = f"{route.platform_host()}/lol/summoner/v4/summoners/by-puuid/{puuid}"
        data = await self._get_json(url, key=f"summoner:{puuid}")
        return Summoner.model_validate(data)

    async def get_league_entries(self, puuid: str, region: str) -> list[LeagueEntry]:
        route = resolve_region(region)
        url = f"{route.platform_host()}/lol/league/v4/entries/by-puuid/{puuid}"
        data = await self._get_json(url, key=f"league:{puuid}")
        return _league_entries.validate_python(data)

    async def get_match_ids(
        self,
        puuid: str,
        region: str,
        start: int = 0,
        count: int = 20,
        queue: int | None = None,
    ) -> list[str]:
        route = resolve_region(region)
        url = f"{route.routing_host()}/lol/match/v5/matches/by-puuid/{puuid}/ids"
        params: dict[str, Any] = {"start": start, "count": count}
        if queue is not None:
            params["queue"] = queue
        data = await self._get_json(url, key=f"match-ids:{puuid}", params=params)
        return _match_ids.validate_python(data)

    async def get_match(self, match_id: str, region: str) -> Match:
        route = resolve_region(region)
        url = f"{route.routing_host()}/lol/match/v5/matches/{match_id}"
        data = await self._get_json(url, key=match_id)
        return Match.model_validate(data)

    async def get_live_game(self, puuid: str, region: str) -> LiveGame:
        """Active game for a player.

        Raises:
            NotFoundError: The player is not in a game
        """
        route = resolve_region(region)
        url = f"{route.platform_host()}/lol/spectator/v5/active-games/by-summoner/{puuid}"
        data = await self._get_json(url, key=f"live:{puuid}")
        return LiveGame.model_validate(data)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RiotClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
