"""Tests for application configuration."""

import pytest
from pydantic import ValidationError

from ladderwatch.config import DEFAULT_API_BASE_URL, Settings


class TestDefaults:
    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("LADDER_API_BASE_URL", raising=False)
        settings = Settings(_env_file=None)
        assert settings.ladder_api_base_url == DEFAULT_API_BASE_URL
        assert settings.ladder_refresh_interval == 300
        assert settings.ladder_request_timeout == 30.0
        assert settings.ladder_auto_refresh is True

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("LADDER_REFRESH_INTERVAL", "60")
        monkeypatch.setenv("LADDER_AUTO_REFRESH", "false")
        settings = Settings(_env_file=None)
        assert settings.ladder_refresh_interval == 60
        assert settings.ladder_auto_refresh is False

    def test_trailing_slash_stripped(self) -> None:
        settings = Settings(
            ladder_api_base_url="https://api.test/",
            ladder_search_base_url="https://search.test//",
        )
        assert settings.ladder_api_base_url == "https://api.test"
        assert settings.ladder_search_base_url == "https://search.test"


class TestValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"ladder_refresh_interval": 0},
            {"ladder_refresh_interval": -1},
            {"ladder_request_timeout": 0},
            {"ladder_search_debounce": -0.1},
        ],
    )
    def test_rejects_bad_timers(self, overrides: dict) -> None:
        with pytest.raises(ValidationError):
            Settings(**overrides)

    def test_zero_debounce_allowed(self) -> None:
        assert Settings(ladder_search_debounce=0).ladder_search_debounce == 0
