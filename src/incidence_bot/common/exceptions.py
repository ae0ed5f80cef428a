"""
Incidence Bot exceptions.

Raised at the seam where a failure is detected; the tick handler and the
CLI decide whether a failure is fatal or only logged.
"""


class IncidenceBotError(Exception):
    """Base class for all Incidence Bot errors."""
    pass


class FetchError(IncidenceBotError):
    """Raised when district data cannot be fetched or decoded."""
    pass


class MentionResolutionError(IncidenceBotError):
    """Raised when the everyone role mention cannot be resolved."""
    pass


class DeliveryError(IncidenceBotError):
    """Raised when a chat message cannot be delivered."""
    pass


class SessionError(IncidenceBotError):
    """Raised when the chat session cannot be opened."""
    pass


class ScheduleError(IncidenceBotError):
    """Raised when a cron expression cannot be registered."""
    pass
