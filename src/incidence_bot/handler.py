"""
Incidence Handler.

Tick handler run by the scheduler: fetches the district data, evaluates
the weekly incidence and posts the Discord messages.
"""

import threading
from datetime import datetime
from typing import Any, Dict, Optional

from incidence_bot.common.config import BotSettings, get_settings
from incidence_bot.common.discord.client import DiscordClient
from incidence_bot.common.exceptions import FetchError
from incidence_bot.common.handlers.base_handler import BaseHandler
from incidence_bot.services.district_fetcher import DistrictFetcher, create_district_fetcher
from incidence_bot.services.incidence_evaluator import IncidenceEvaluator
from incidence_bot.services.models import IncidenceReport
from incidence_bot.services.notification_router import NotificationRouter


class IncidenceHandler(BaseHandler):
    """
    Incidence Handler.

    One call to handle() is one tick:
    1. Fetch district data (failure ends the tick, nothing is sent)
    2. Truncate the weekly incidence of the configured district
    3. Send the status message
    4. Send the alert message if the incidence reaches the threshold

    Errors never propagate out of handle(), so a failed tick does not
    affect later ticks.
    """

    def __init__(
        self,
        settings: Optional[BotSettings] = None,
        client: Optional[DiscordClient] = None,
        fetcher: Optional[DistrictFetcher] = None,
        router: Optional[NotificationRouter] = None,
    ):
        self.settings = settings or get_settings()
        super().__init__("IncidenceHandler", log_level=self.settings.log_level)
        self._init_services(client, fetcher, router)

        self._lock = threading.Lock()
        self.last_report: Optional[IncidenceReport] = None
        self.last_run: Optional[datetime] = None
        self.stats = {"runs": 0, "fetch_failures": 0, "alerts": 0}

    def _init_services(
        self,
        client: Optional[DiscordClient],
        fetcher: Optional[DistrictFetcher],
        router: Optional[NotificationRouter],
    ) -> None:
        """Initialize service components."""
        settings = self.settings

        self.fetcher = fetcher or create_district_fetcher(
            district_key=settings.district_key,
            endpoint=settings.api_endpoint,
            use_mock=True if settings.district_mock else None,
        )

        self.evaluator = IncidenceEvaluator(
            district_key=settings.district_key,
            threshold=settings.incidence_threshold,
        )

        self.router = router or NotificationRouter(
            channel_id=settings.channel_id,
            client=client,
            use_mock=True if settings.notification_mock else None,
        )

        self.logger.info(
            f"IncidenceHandler initialized: "
            f"district={settings.district_key}, channel={settings.channel_id}, "
            f"threshold={settings.incidence_threshold}, mock_fetch={self.fetcher.is_mock}"
        )

    def tick(self) -> None:
        """Zero-argument entry point for the scheduler."""
        self.handle()

    def process(self, event: Dict[str, Any], context: Any) -> Dict[str, Any]:
        """Run one tick.

        Args:
            event: Optional run parameters ("publish_notifications")
            context: Unused

        Returns:
            Tick result
        """
        body = self._parse_body(event)
        publish_notifications = body.get(
            "publish_notifications",
            event.get("publish_notifications", True),
        )

        with self._lock:
            self.stats["runs"] += 1
            self.last_run = datetime.now()

        # 1. Fetch district data
        try:
            response = self.fetcher.fetch()
        except FetchError as e:
            self.logger.error(f"could not fetch COVID data: {e}")
            with self._lock:
                self.stats["fetch_failures"] += 1
            return {
                "fetched": False,
                "error": str(e),
                "report": None,
                "notification_results": [],
            }

        # 2. Evaluate incidence
        report = self.evaluator.evaluate(response)
        with self._lock:
            self.last_report = report
            if report.alert:
                self.stats["alerts"] += 1

        self.logger.info(
            f"Incidence for {report.district_key} on {report.date}: "
            f"{report.incidence} (alert={report.alert})"
        )

        # 3. Send messages
        notification_results = []
        if publish_notifications:
            notification_results = self.router.route_report(report)

        return {
            "fetched": True,
            "report": report.to_dict(),
            "notification_results": [r.to_dict() for r in notification_results],
        }

    def get_stats(self) -> Dict[str, Any]:
        """Get processing statistics."""
        with self._lock:
            return {
                **self.stats,
                "last_run": self.last_run.isoformat() if self.last_run else None,
                "last_report": self.last_report.to_dict() if self.last_report else None,
            }
