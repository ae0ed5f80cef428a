"""Tests for bot configuration module."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from incidence_bot.common.config import BotSettings, get_settings, load_settings


class TestBotSettings:
    """Tests for BotSettings class."""

    def test_default_values(self):
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = BotSettings(_env_file=None)

            assert settings.timer == "0 18 * * *"
            assert settings.discord_token == ""
            assert settings.channel_id == ""
            assert settings.district_key == "09676"
            assert settings.incidence_threshold == 165
            assert settings.district_mock is False
            assert settings.notification_mock is False

    def test_environment_variables(self):
        """Test loading from environment variables."""
        env_vars = {
            "TIMER": "*/5 * * * *",
            "DISCORD_TOKEN": "secret",
            "CHANNEL_ID": "1234",
            "INCIDENCE_THRESHOLD": "100",
            "DISTRICT_MOCK": "true",
        }

        with patch.dict(os.environ, env_vars, clear=True):
            settings = BotSettings(_env_file=None)

            assert settings.timer == "*/5 * * * *"
            assert settings.discord_token == "secret"
            assert settings.channel_id == "1234"
            assert settings.incidence_threshold == 100
            assert settings.district_mock is True

    def test_district_url(self):
        """Test district URL substitution."""
        settings = BotSettings(_env_file=None)

        assert settings.district_url == "https://api.corona-zahlen.org/districts/09676"

    def test_timer_requires_five_fields(self):
        """Test that a timer without five fields is rejected."""
        with pytest.raises(ValidationError):
            BotSettings(timer="0 18 * *", _env_file=None)

    def test_negative_threshold_rejected(self):
        """Test that a negative threshold is rejected."""
        with pytest.raises(ValidationError):
            BotSettings(incidence_threshold=-1, _env_file=None)

    def test_settings_are_frozen(self):
        """Test that settings cannot change after creation."""
        settings = BotSettings(_env_file=None)

        with pytest.raises(ValidationError):
            settings.channel_id = "other"


class TestLoadSettings:
    """Tests for load_settings and get_settings."""

    def test_overrides_take_precedence(self):
        """Test that explicit overrides beat the environment."""
        with patch.dict(os.environ, {"CHANNEL_ID": "from-env"}, clear=True):
            settings = load_settings(channel_id="from-flag")

            assert settings.channel_id == "from-flag"

    def test_none_overrides_ignored(self):
        """Test that None overrides fall back to the environment."""
        with patch.dict(os.environ, {"CHANNEL_ID": "from-env"}, clear=True):
            settings = load_settings(channel_id=None, timer=None)

            assert settings.channel_id == "from-env"
            assert settings.timer == "0 18 * * *"

    def test_get_settings_cached(self):
        """Test that get_settings returns a cached instance."""
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
