"""CLI tests using typer's CliRunner with a mocked Riot API."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from conftest import RiotRoutes, make_match, make_participant
from riftstats import __version__
from riftstats.cli import common
from riftstats.cli.main import app
from riftstats.riot import RiotClient

runner = CliRunner()


@pytest.fixture
def missing_config(tmp_path: Path) -> str:
    return str(tmp_path / "missing.yaml")


@pytest.fixture
def mocked_api(routes: RiotRoutes, monkeypatch: pytest.MonkeyPatch) -> RiotRoutes:
    monkeypatch.setenv("RIOT_API_KEY", "RGAPI-test")
    monkeypatch.setattr(
        common,
        "RiotClient",
        lambda api_key, timeout: RiotClient(api_key, timeout=timeout, transport=routes.transport()),
    )
    return routes


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_writes_config_once(tmp_path: Path) -> None:
    path = tmp_path / "configs" / "app.yaml"

    first = runner.invoke(app, ["init", "--path", str(path)])
    second = runner.invoke(app, ["init", "--path", str(path)])
    forced = runner.invoke(app, ["init", "--path", str(path), "--force"])

    assert first.exit_code == 0
    assert path.exists()
    assert second.exit_code == 1
    assert forced.exit_code == 0


def test_lookup_rejects_invalid_riot_id(missing_config: str) -> None:
    result = runner.invoke(app, ["summoner", "lookup", "Faker", "-c", missing_config])
    assert result.exit_code == 1


def test_lookup_requires_api_key(monkeypatch: pytest.MonkeyPatch, missing_config: str) -> None:
    monkeypatch.delenv("RIOT_API_KEY", raising=False)
    monkeypatch.delenv("VITE_RIOT_API_KEY", raising=False)

    result = runner.invoke(app, ["summoner", "lookup", "Faker#KR1", "-c", missing_config])

    assert result.exit_code == 1


def test_lookup_json(mocked_api: RiotRoutes, missing_config: str) -> None:
    mocked_api.add(
        "/riot/account/v1/accounts/by-riot-id/Faker/KR1",
        200,
        {"puuid": "me", "gameName": "Faker", "tagLine": "KR1"},
    )
    mocked_api.add("/lol/summoner/v4/summoners/by-puuid/me", 200, {"puuid": "me", "profileIconId": 6, "summonerLevel": 700})
    mocked_api.add("/lol/league/v4/entries/by-puuid/me", 200, [])

    result = runner.invoke(app, ["summoner", "lookup", "Faker#KR1", "-r", "KR", "--json", "-c", missing_config])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["puuid"] == "me"
    assert data["summoner_level"] == 700
    assert data["region"] == "KR"


def test_lookup_not_found(mocked_api: RiotRoutes, missing_config: str) -> None:
    result = runner.invoke(app, ["summoner", "lookup", "Nobody#000", "-c", missing_config])
    assert result.exit_code == 1


def test_lookup_malformed_summoner_exits_cleanly(mocked_api: RiotRoutes, missing_config: str) -> None:
    mocked_api.add(
        "/riot/account/v1/accounts/by-riot-id/Faker/KR1",
        200,
        {"puuid": "me", "gameName": "Faker", "tagLine": "KR1"},
    )
    mocked_api.add("/lol/summoner/v4/summoners/by-puuid/me", 200, {"puuid": "me", "summonerLevel": 700})
    mocked_api.add("/lol/league/v4/entries/by-puuid/me", 200, [])

    result = runner.invoke(app, ["summoner", "lookup", "Faker#KR1", "-r", "KR", "-c", missing_config])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Riot API error" in result.output


def test_champions_json(mocked_api: RiotRoutes, missing_config: str) -> None:
    mocked_api.add("/lol/match/v5/matches/by-puuid/me/ids", 200, ["EUW1_1", "EUW1_2"])
    mocked_api.add("/lol/match/v5/matches/EUW1_1", 200, make_match("EUW1_1", [make_participant(win=True)]))
    mocked_api.add("/lol/match/v5/matches/EUW1_2", 200, make_match("EUW1_2", [make_participant(win=False)]))

    result = runner.invoke(app, ["matches", "champions", "me", "-n", "2", "--json", "-c", missing_config])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data[0]["champion_name"] == "Ahri"
    assert data[0]["games"] == 2
    assert data[0]["winrate"] == 50.0


def test_top_without_games_fails(mocked_api: RiotRoutes, missing_config: str) -> None:
    mocked_api.add("/lol/match/v5/matches/by-puuid/me/ids", 200, [])

    result = runner.invoke(app, ["matches", "top", "me", "-c", missing_config])

    assert result.exit_code == 1
