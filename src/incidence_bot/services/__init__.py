"""Incidence Bot Services."""

from incidence_bot.services.models import (
    DistrictRecord,
    DistrictResponse,
    IncidenceReport,
    MessageKind,
    NotificationResult,
)
from incidence_bot.services.district_fetcher import (
    DistrictFetcher,
    create_district_fetcher,
)
from incidence_bot.services.incidence_evaluator import IncidenceEvaluator
from incidence_bot.services.message_builder import MessageBuilder
from incidence_bot.services.mention_resolver import MentionResolver
from incidence_bot.services.notification_router import NotificationRouter

__all__ = [
    "DistrictRecord",
    "DistrictResponse",
    "IncidenceReport",
    "MessageKind",
    "NotificationResult",
    "DistrictFetcher",
    "create_district_fetcher",
    "IncidenceEvaluator",
    "MessageBuilder",
    "MentionResolver",
    "NotificationRouter",
]
