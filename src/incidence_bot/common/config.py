"""
Bot Configuration using pydantic-settings.

Provides the immutable configuration for the bot, loaded from
environment variables (or a .env file) and overridden by CLI flags.
"""

from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TIMER = "0 18 * * *"
DEFAULT_DISTRICT_KEY = "09676"
DEFAULT_API_ENDPOINT = "https://api.corona-zahlen.org/districts/{key}"
DEFAULT_INCIDENCE_THRESHOLD = 165


class BotSettings(BaseSettings):
    """Bot configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Startup parameters
    timer: str = Field(default=DEFAULT_TIMER, description="Cron notation for the notification schedule")
    discord_token: str = Field(default="", description="Discord bot token")
    channel_id: str = Field(default="", description="Discord channel to post to")

    # District data
    district_key: str = Field(default=DEFAULT_DISTRICT_KEY, description="District key (AGS) to monitor")
    api_endpoint: str = Field(default=DEFAULT_API_ENDPOINT, description="District endpoint template")
    incidence_threshold: int = Field(
        default=DEFAULT_INCIDENCE_THRESHOLD,
        description="Weekly incidence at or above which the alert is sent",
    )

    # Runtime
    log_level: str = Field(default="INFO", description="Logging level")
    run_on_start: bool = Field(default=False, description="Run one check right after startup")
    district_mock: bool = Field(default=False, description="Use the mock district fetcher")
    notification_mock: bool = Field(default=False, description="Use the mock notification sender")

    # Status server
    host: str = Field(default="0.0.0.0", description="Status server host")
    port: int = Field(default=8080, description="Status server port")

    @field_validator("timer")
    @classmethod
    def _check_timer_fields(cls, value: str) -> str:
        if len(value.split()) != 5:
            raise ValueError(
                f"timer must have 5 fields (minute hour day month weekday), got {value!r}"
            )
        return value

    @field_validator("incidence_threshold")
    @classmethod
    def _check_threshold(cls, value: int) -> int:
        if value < 0:
            raise ValueError("incidence_threshold must not be negative")
        return value

    @property
    def district_url(self) -> str:
        """District endpoint URL with the district key filled in."""
        return self.api_endpoint.format(key=self.district_key)


@lru_cache
def get_settings() -> BotSettings:
    """Get cached bot settings instance."""
    return BotSettings()


def load_settings(**overrides: Any) -> BotSettings:
    """Build settings with explicit overrides taking precedence.

    Overrides set to None are ignored so unset CLI flags fall back to
    the environment.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    return BotSettings(**values)
