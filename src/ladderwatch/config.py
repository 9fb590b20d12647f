"""Application settings via pydantic-settings. Loads from environment and .env file."""

from __future__ import annotations

from pydantic import model_validator
from pydantic_settings import BaseSettings

DEFAULT_API_BASE_URL = "https://grassrootsapiproxy.cricket.com.au"
DEFAULT_SEARCH_BASE_URL = "https://api.playcommunity.pulselive.com"


class Settings(BaseSettings):
    """Ladderwatch configuration.

    All values can be overridden via environment variables or .env file.
    """

    # Remote API
    ladder_api_base_url: str = DEFAULT_API_BASE_URL
    ladder_search_base_url: str = DEFAULT_SEARCH_BASE_URL
    ladder_request_timeout: float = 30.0

    # Refresh & search pacing
    ladder_refresh_interval: int = 300  # seconds between refresh cycles
    ladder_auto_refresh: bool = True
    ladder_search_debounce: float = 0.3  # quiet period before a search fires

    # Database
    database_url: str = "sqlite+aiosqlite:///ladderwatch.db"

    # Logging
    ladder_log_level: str = "INFO"

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _check_positive_intervals(self) -> Settings:
        """Reject timers that would never fire or fire continuously."""
        if self.ladder_refresh_interval <= 0:
            msg = "LADDER_REFRESH_INTERVAL must be a positive number of seconds"
            raise ValueError(msg)
        if self.ladder_request_timeout <= 0:
            msg = "LADDER_REQUEST_TIMEOUT must be a positive number of seconds"
            raise ValueError(msg)
        if self.ladder_search_debounce < 0:
            msg = "LADDER_SEARCH_DEBOUNCE cannot be negative"
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def _strip_trailing_slashes(self) -> Settings:
        self.ladder_api_base_url = self.ladder_api_base_url.rstrip("/")
        self.ladder_search_base_url = self.ladder_search_base_url.rstrip("/")
        return self
