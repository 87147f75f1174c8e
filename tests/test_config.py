"""Tests for configuration models and the YAML loader."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from riftstats.core.config import (
    AppConfig,
    BackoffStrategy,
    ConfigError,
    FetcherConfig,
    LoggingConfig,
    RiotConfig,
    load_app_config,
    resolve_api_key,
)
from riftstats.core.config.loader import write_default_app_config


@pytest.fixture(autouse=True)
def no_api_key_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("RIOT_API_KEY", raising=False)
    monkeypatch.delenv("VITE_RIOT_API_KEY", raising=False)


class TestFetcherConfig:
    def test_defaults(self) -> None:
        config = FetcherConfig()

        assert config.batch_size == 10
        assert config.inter_batch_delay_ms == 200
        assert config.max_retries_per_request == 1
        assert config.retry_delay_ms == 3000
        assert config.cache_ttl_ms == 0
        assert config.backoff is BackoffStrategy.FIXED
        assert not config.cache_enabled

    @pytest.mark.parametrize(
        "field, value",
        [
            ("batch_size", 0),
            ("inter_batch_delay_ms", -1),
            ("max_retries_per_request", -1),
            ("retry_delay_ms", -5),
            ("cache_ttl_ms", -1),
            ("request_timeout_ms", 0),
        ],
    )
    def test_rejects_out_of_range(self, field: str, value: int) -> None:
        with pytest.raises(ValidationError):
            FetcherConfig(**{field: value})

    def test_rejects_unknown_option(self) -> None:
        with pytest.raises(ValidationError):
            FetcherConfig(batchsize=3)

    def test_max_delay_below_retry_delay(self) -> None:
        with pytest.raises(ValidationError):
            FetcherConfig(retry_delay_ms=5000, max_retry_delay_ms=1000)

    def test_is_frozen(self) -> None:
        config = FetcherConfig()
        with pytest.raises(ValidationError):
            config.batch_size = 3


class TestRiotConfig:
    @pytest.mark.parametrize("value", ["", "   ", "your_riot_api_key_here"])
    def test_placeholder_key_is_none(self, value: str) -> None:
        assert RiotConfig(api_key=value).api_key is None

    def test_key_is_stripped(self) -> None:
        assert RiotConfig(api_key=" RGAPI-abc ").api_key == "RGAPI-abc"


def test_logging_level_normalized() -> None:
    assert LoggingConfig(level="debug").level == "DEBUG"
    with pytest.raises(ValidationError):
        LoggingConfig(level="chatty")


class TestLoadAppConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        config = load_app_config(tmp_path / "nope.yaml")
        assert config == AppConfig()

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "app.yaml"
        path.write_text("")
        assert load_app_config(path) == AppConfig()

    def test_loads_sections(self, tmp_path: Path) -> None:
        path = tmp_path / "app.yaml"
        path.write_text(
            "fetcher:\n"
            "  batch_size: 4\n"
            "  backoff: exponential\n"
            "riot:\n"
            "  default_region: KR\n"
        )

        config = load_app_config(path)

        assert config.fetcher.batch_size == 4
        assert config.fetcher.backoff is BackoffStrategy.EXPONENTIAL
        assert config.riot.default_region == "KR"
        assert config.fetcher.inter_batch_delay_ms == 200

    def test_expands_env_vars(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RIOT_API_KEY", "RGAPI-from-env")
        path = tmp_path / "app.yaml"
        path.write_text(
            "riot:\n"
            "  api_key: ${RIOT_API_KEY}\n"
            "  default_region: ${RIFT_REGION:-NA}\n"
        )

        config = load_app_config(path)

        assert config.riot.api_key == "RGAPI-from-env"
        assert config.riot.default_region == "NA"

    def test_expansion_can_be_disabled(self, tmp_path: Path) -> None:
        path = tmp_path / "app.yaml"
        path.write_text("riot:\n  default_region: ${RIFT_REGION:-NA}\n")

        config = load_app_config(path, expand_env=False)

        assert config.riot.default_region == "${RIFT_REGION:-NA}"

    def test_invalid_values_raise_config_error(self, tmp_path: Path) -> None:
        path = tmp_path / "app.yaml"
        path.write_text("fetcher:\n  batch_size: 0\n")

        with pytest.raises(ConfigError) as exc_info:
            load_app_config(path)

        assert exc_info.value.path == path
        assert "batch_size" in exc_info.value.details

    def test_invalid_yaml_raises_config_error(self, tmp_path: Path) -> None:
        path = tmp_path / "app.yaml"
        path.write_text("fetcher: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_app_config(path)

    def test_non_mapping_raises_config_error(self, tmp_path: Path) -> None:
        path = tmp_path / "app.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigError, match="Expected a mapping"):
            load_app_config(path)


class TestResolveApiKey:
    def test_prefers_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RIOT_API_KEY", "RGAPI-env")
        config = AppConfig(riot=RiotConfig(api_key="RGAPI-config"))
        assert resolve_api_key(config) == "RGAPI-config"

    def test_falls_back_to_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VITE_RIOT_API_KEY", "RGAPI-vite")
        assert resolve_api_key(AppConfig()) == "RGAPI-vite"

    def test_none_when_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RIOT_API_KEY", "your_riot_api_key_here")
        assert resolve_api_key(AppConfig()) is None


def test_default_config_round_trips(tmp_path: Path) -> None:
    path = tmp_path / "configs" / "app.yaml"

    assert write_default_app_config(path)
    assert not write_default_app_config(path)

    config = load_app_config(path)
    assert config.fetcher == FetcherConfig()
    assert config.riot.api_key is None
    assert config.logging.file == Path("logs/riftstats.log")


def test_overrides_apply_on_top_of_file(tmp_path: Path) -> None:
    path = tmp_path / "app.yaml"
    path.write_text("logging:\n  level: WARNING\n  rich_console: false\nfetcher:\n  batch_size: 4\n")

    config = load_app_config(path, overrides={"logging": {"level": "DEBUG"}, "fetcher": {"cache_ttl_ms": 1000}})

    assert config.logging.level == "DEBUG"
    assert config.logging.rich_console is False
    assert config.fetcher.batch_size == 4
    assert config.fetcher.cache_enabled
