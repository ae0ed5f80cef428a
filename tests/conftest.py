"""
Pytest Configuration and Fixtures.

Shared fixtures for the Incidence Bot test suite.
"""

import os
from datetime import datetime

import pytest

# Set test environment
os.environ["DISTRICT_MOCK"] = "true"
os.environ["NOTIFICATION_MOCK"] = "true"
os.environ.setdefault("LOG_LEVEL", "DEBUG")

DISTRICT_KEY = "09676"


@pytest.fixture
def district_payload():
    """Build a district endpoint response body."""

    def _create_payload(week_incidence: float = 123.4, key: str = DISTRICT_KEY) -> dict:
        return {
            "data": {
                key: {
                    "ags": key,
                    "name": "Miltenberg",
                    "county": "LK Miltenberg",
                    "population": 128756,
                    "cases": 4211,
                    "deaths": 98,
                    "casesPerWeek": 120,
                    "deathsPerWeek": 1,
                    "recovered": 3890,
                    "weekIncidence": week_incidence,
                    "casesPer100k": 3270.5,
                    "delta": {"cases": 18, "deaths": 0, "recovered": 21},
                },
            },
            "meta": {
                "source": "Robert Koch-Institut",
                "contact": "Marlon Lueckert (m.lueckert@me.com)",
                "info": "https://github.com/marlon360/rki-covid-api",
                "lastUpdate": "2021-05-01T00:00:00.000Z",
                "lastCheckedForUpdate": "2021-05-01T02:00:00.000Z",
            },
        }

    return _create_payload


@pytest.fixture
def settings():
    """Create bot settings in mock mode."""
    from incidence_bot.common.config import BotSettings

    return BotSettings(
        discord_token="test-token",
        channel_id="42",
        district_mock=True,
        notification_mock=True,
    )


@pytest.fixture
def mock_fetcher():
    """Create a mock district fetcher."""
    from incidence_bot.services.district_fetcher import DistrictFetcher

    return DistrictFetcher(district_key=DISTRICT_KEY, use_mock=True)


@pytest.fixture
def mock_sender():
    """Create a mock notification sender."""
    from incidence_bot.services.notification_router import MockNotificationSender

    return MockNotificationSender(mention="<@&777>")


@pytest.fixture
def notification_router(mock_sender):
    """Create a notification router backed by the mock sender."""
    from incidence_bot.services.notification_router import NotificationRouter

    return NotificationRouter(channel_id="42", sender=mock_sender)


@pytest.fixture
def incidence_handler(settings, mock_fetcher, notification_router):
    """Create an incidence handler wired to mock services."""
    from incidence_bot.handler import IncidenceHandler

    return IncidenceHandler(
        settings,
        fetcher=mock_fetcher,
        router=notification_router,
    )


@pytest.fixture
def today() -> str:
    """Today's date in message format."""
    return datetime.now().strftime("%d.%m.%Y")
