"""
Incidence Evaluator.

Derives the displayed weekly incidence for a district and decides
whether it reaches the alert threshold.
"""

import logging
from datetime import datetime
from typing import Optional

from incidence_bot.common.config import DEFAULT_INCIDENCE_THRESHOLD
from incidence_bot.services.models import DistrictResponse, IncidenceReport

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d.%m.%Y"


class IncidenceEvaluator:
    """
    Evaluates a district response against the alert threshold.

    The incidence is truncated towards zero, never rounded, and the
    threshold is inclusive: 164.9 shows as 164 (no alert), 165.0 as 165
    (alert).
    """

    def __init__(
        self,
        district_key: str,
        threshold: int = DEFAULT_INCIDENCE_THRESHOLD,
    ):
        """Initialize incidence evaluator.

        Args:
            district_key: District key to read from responses
            threshold: Inclusive alert threshold
        """
        self.district_key = district_key
        self.threshold = threshold

    @staticmethod
    def truncate(week_incidence: float) -> int:
        """Truncate a weekly incidence to its integer part."""
        return int(week_incidence)

    def is_alert(self, incidence: int) -> bool:
        """Check if an incidence value reaches the threshold."""
        return incidence >= self.threshold

    def evaluate(
        self,
        response: DistrictResponse,
        now: Optional[datetime] = None,
    ) -> IncidenceReport:
        """Evaluate a response for the configured district.

        A missing district yields incidence 0 rather than an error.

        Args:
            response: Decoded district response
            now: Evaluation time (defaults to local now)

        Returns:
            IncidenceReport
        """
        now = now or datetime.now()
        record = response.get_district(self.district_key)

        if record is None:
            logger.warning(
                f"District {self.district_key} missing from response, defaulting incidence to 0"
            )
            raw_incidence = 0.0
            district_name = ""
        else:
            raw_incidence = record.week_incidence
            district_name = record.display_name

        incidence = self.truncate(raw_incidence)

        return IncidenceReport(
            district_key=self.district_key,
            district_name=district_name,
            date=now.strftime(DATE_FORMAT),
            incidence=incidence,
            raw_incidence=raw_incidence,
            threshold=self.threshold,
            alert=self.is_alert(incidence),
            key_found=record is not None,
        )
