"""
District Data Fetcher.

Fetches district statistics from the corona-zahlen.org API.
See https://api.corona-zahlen.org/docs/endpoints/districts.html

A non-2xx status is a fetch error even when the error body is JSON, so
an API outage ends the tick instead of posting an incidence of 0.
JSON nulls in a 2xx body decode as zero values (see models.ApiModel).
"""

import logging
import os
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError

from incidence_bot.common.config import DEFAULT_API_ENDPOINT, DEFAULT_DISTRICT_KEY
from incidence_bot.common.exceptions import FetchError
from incidence_bot.services.models import DistrictResponse

logger = logging.getLogger(__name__)


class BaseDistrictFetcher(ABC):
    """Abstract base class for district fetchers."""

    district_key: str

    @abstractmethod
    def fetch(self) -> DistrictResponse:
        """Fetch the district response.

        Returns:
            Decoded DistrictResponse

        Raises:
            FetchError: If the request or decoding fails
        """
        pass


class RealDistrictFetcher(BaseDistrictFetcher):
    """Real corona-zahlen.org API fetcher."""

    def __init__(
        self,
        district_key: str = DEFAULT_DISTRICT_KEY,
        endpoint: str = DEFAULT_API_ENDPOINT,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize real district fetcher.

        Args:
            district_key: District key (AGS) substituted into the endpoint
            endpoint: URL template with a {key} placeholder
            timeout: Request timeout in seconds (None waits indefinitely)
            session: Optional requests session shared by all threads
        """
        self.district_key = district_key
        self.endpoint = endpoint
        self.timeout = timeout
        self._session = session
        self._local = threading.local()

    @property
    def url(self) -> str:
        """Request URL for the configured district."""
        return self.endpoint.format(key=self.district_key)

    def _get_session(self) -> requests.Session:
        """Get the injected session or this thread's own session.

        Overlapping ticks fetch from different worker threads.
        """
        if self._session is not None:
            return self._session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
        return session

    def fetch(self) -> DistrictResponse:
        """Send one GET request for the district and decode it.

        Returns:
            Decoded DistrictResponse
        """
        session = self._get_session()

        try:
            response = session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"request to {self.url} failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError(f"response from {self.url} is not valid JSON: {e}") from e

        try:
            result = DistrictResponse.model_validate(payload)
        except ValidationError as e:
            raise FetchError(f"unexpected response shape from {self.url}: {e}") from e

        logger.info(f"Fetched {len(result.data)} district(s) from {self.url}")
        return result


class MockDistrictFetcher(BaseDistrictFetcher):
    """Mock district fetcher for testing."""

    def __init__(
        self,
        district_key: str = DEFAULT_DISTRICT_KEY,
        week_incidence: float = 123.4,
    ):
        """Initialize mock district fetcher.

        Args:
            district_key: District key used in the canned payload
            week_incidence: Weekly incidence returned by the canned payload
        """
        self.district_key = district_key
        self.fetch_count = 0
        self._payload: Dict[str, Any] = {}
        self._error: Optional[Exception] = None
        self.set_incidence(week_incidence)

    def set_incidence(self, week_incidence: float) -> None:
        """Replace the canned payload with one for the given incidence."""
        self._payload = {
            "data": {
                self.district_key: {
                    "ags": self.district_key,
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
                "contact": "mock",
                "info": "mock payload",
            },
        }
        self._error = None
        logger.info(f"[MOCK] District {self.district_key} incidence set to {week_incidence}")

    def set_payload(self, payload: Dict[str, Any]) -> None:
        """Replace the canned payload with a raw response body."""
        self._payload = payload
        self._error = None

    def fail_with(self, error: Exception) -> None:
        """Make subsequent fetches raise FetchError wrapping error."""
        self._error = error

    def fetch(self) -> DistrictResponse:
        """Return the canned district response."""
        self.fetch_count += 1
        if self._error is not None:
            raise FetchError(f"[MOCK] fetch failed: {self._error}") from self._error

        try:
            return DistrictResponse.model_validate(self._payload)
        except ValidationError as e:
            raise FetchError(f"[MOCK] unexpected response shape: {e}") from e


class DistrictFetcher:
    """District fetcher with automatic provider selection."""

    def __init__(
        self,
        district_key: str = DEFAULT_DISTRICT_KEY,
        endpoint: str = DEFAULT_API_ENDPOINT,
        use_mock: Optional[bool] = None,
    ):
        """Initialize district fetcher.

        Args:
            district_key: District key (AGS) to fetch
            endpoint: URL template (for real provider)
            use_mock: Force mock mode (auto-detect if None)
        """
        if use_mock is None:
            use_mock = os.environ.get("DISTRICT_MOCK", "").lower() == "true"

        if use_mock:
            self._provider: BaseDistrictFetcher = MockDistrictFetcher(district_key=district_key)
            logger.info("Using Mock District Fetcher")
        else:
            self._provider = RealDistrictFetcher(district_key=district_key, endpoint=endpoint)
            logger.info(f"Using Real District Fetcher: {endpoint.format(key=district_key)}")

        self._is_mock = use_mock

    @property
    def is_mock(self) -> bool:
        """Check if using mock provider."""
        return self._is_mock

    @property
    def provider(self) -> BaseDistrictFetcher:
        """Get underlying provider."""
        return self._provider

    @property
    def district_key(self) -> str:
        """District key the provider fetches."""
        return self._provider.district_key

    def fetch(self) -> DistrictResponse:
        """Fetch the district response.

        Returns:
            Decoded DistrictResponse
        """
        return self._provider.fetch()


def create_district_fetcher(
    district_key: str = DEFAULT_DISTRICT_KEY,
    endpoint: str = DEFAULT_API_ENDPOINT,
    use_mock: Optional[bool] = None,
) -> DistrictFetcher:
    """Factory function to create district fetcher.

    Args:
        district_key: District key (AGS)
        endpoint: URL template
        use_mock: Force mock mode

    Returns:
        DistrictFetcher instance
    """
    return DistrictFetcher(
        district_key=district_key,
        endpoint=endpoint,
        use_mock=use_mock,
    )
