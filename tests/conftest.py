"""Shared test fixtures, payload builders and dummy classes."""

from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx
import pytest

from riftstats.core.fetch import FetchRequest, RateLimitError


class FakeClock:
    """Manually advanced clock for cache tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class DummyCall:
    """Instrumented execute function.

    Each call pops the next scripted result: an exception is raised,
    anything else is returned. Once the script runs out the last entry
    repeats. Tracks invocation times and peak concurrency.
    """

    def __init__(self, *script: Any, duration: float = 0.0, tracker: "ConcurrencyTracker | None" = None) -> None:
        self.script = list(script) or ["ok"]
        self.duration = duration
        self.tracker = tracker
        self.calls = 0
        self.started: list[float] = []
        self.finished: list[float] = []
        self.cancelled = False

    async def __call__(self) -> Any:
        index = min(self.calls, len(self.script) - 1)
        self.calls += 1
        self.started.append(time.monotonic())
        if self.tracker:
            self.tracker.enter()
        try:
            if self.duration:
                await asyncio.sleep(self.duration)
            result = self.script[index]
            if isinstance(result, BaseException):
                raise result
            return result
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        finally:
            if self.tracker:
                self.tracker.leave()
            self.finished.append(time.monotonic())


class ConcurrencyTracker:
    def __init__(self) -> None:
        self.current = 0
        self.peak = 0

    def enter(self) -> None:
        self.current += 1
        self.peak = max(self.peak, self.current)

    def leave(self) -> None:
        self.current -= 1


def request(key: str, call: DummyCall | None = None, **params: Any) -> FetchRequest:
    return FetchRequest(key=key, execute=call or DummyCall(key), params=params)


def throttled(retry_after: float | None = None) -> RateLimitError:
    return RateLimitError("Rate limit exceeded", retry_after=retry_after)


# =============================================================================
# Riot payloads
# =============================================================================


def make_participant(
    puuid: str = "me",
    champion_name: str = "Ahri",
    champion_id: int = 103,
    team_id: int = 100,
    win: bool = True,
    kills: int = 5,
    deaths: int = 2,
    assists: int = 7,
    **overrides: Any,
) -> dict[str, Any]:
    data = {
        "puuid": puuid,
        "championName": champion_name,
        "championId": champion_id,
        "teamId": team_id,
        "teamPosition": "MIDDLE",
        "win": win,
        "kills": kills,
        "deaths": deaths,
        "assists": assists,
        "totalMinionsKilled": 180,
        "neutralMinionsKilled": 20,
        "visionScore": 25,
        "goldEarned": 12000,
        "totalDamageDealtToChampions": 24000,
        "totalDamageTaken": 15000,
    }
    data.update(overrides)
    return data


def make_match(
    match_id: str,
    participants: list[dict[str, Any]] | None = None,
    queue_id: int = 420,
    game_duration: int = 1800,
) -> dict[str, Any]:
    participants = participants if participants is not None else [make_participant()]
    return {
        "metadata": {
            "matchId": match_id,
            "participants": [p["puuid"] for p in participants],
        },
        "info": {
            "gameDuration": game_duration,
            "queueId": queue_id,
            "gameMode": "CLASSIC",
            "participants": participants,
        },
    }


class RiotRoutes:
    """Scripted responses for httpx.MockTransport keyed by URL path.

    A route value is either a (status, json) tuple, or a list of them
    consumed in order (the last one repeats). Paths in ``delays`` answer
    only after sleeping that many seconds.
    """

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.routes: dict[str, Any] = dict(routes or {})
        self.requests: list[httpx.Request] = []
        self.delays: dict[str, float] = {}

    def add(self, path: str, status: int, body: Any = None, headers: dict[str, str] | None = None) -> None:
        self.routes[path] = (status, body, headers or {})

    def add_sequence(self, path: str, *responses: tuple[int, Any]) -> None:
        self.routes[path] = [(status, body, {}) for status, body in responses]

    def hits(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.path == path)

    def delay(self, path: str, seconds: float) -> None:
        self.delays[path] = seconds

    async def handler(self, req: httpx.Request) -> httpx.Response:
        self.requests.append(req)
        if req.url.path in self.delays:
            await asyncio.sleep(self.delays[req.url.path])
        route = self.routes.get(req.url.path)
        if route is None:
            return httpx.Response(404, json={"status": {"status_code": 404}})
        if isinstance(route, list):
            current = route.pop(0) if len(route) > 1 else route[0]
        else:
            current = route
        status, body, headers = current
        return httpx.Response(status, json=body, headers=headers)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def routes() -> RiotRoutes:
    return RiotRoutes()
