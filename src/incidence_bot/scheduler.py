"""
Tick Scheduler.

Runs a zero-argument callback on a five-field cron schedule
(minute hour day-of-month month day-of-week) in a background thread.
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Set

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from incidence_bot.common.exceptions import ScheduleError

logger = logging.getLogger(__name__)

JOB_ID = "incidence-tick"

# Crontab weekday numbering: 0 (and 7) is Sunday.
CRONTAB_WEEKDAYS = ["sun", "mon", "tue", "wed", "thu", "fri", "sat"]


def _weekday_number(value: str) -> int:
    value = value.lower()
    if value in CRONTAB_WEEKDAYS:
        return CRONTAB_WEEKDAYS.index(value)
    if not value.isdigit() or int(value) > 7:
        raise ScheduleError(f"invalid day of week {value!r}")
    return int(value)


def _expand_weekday_item(item: str) -> Set[int]:
    """Expand one list item (N, N-M, */S, N-M/S or N/S) into crontab weekdays."""
    span, _, step = item.partition("/")
    if step and (not step.isdigit() or int(step) == 0):
        raise ScheduleError(f"invalid day of week step in {item!r}")

    if span in ("*", "?"):
        first, last = 0, 6
    elif "-" in span:
        start, _, end = span.partition("-")
        first, last = _weekday_number(start), _weekday_number(end)
    else:
        first = _weekday_number(span)
        last = 6 if step else first

    if first > last:
        raise ScheduleError(f"invalid day of week range {item!r}")
    return {day % 7 for day in range(first, last + 1, int(step or 1))}


def to_weekday_names(field: str) -> str:
    """Rewrite a crontab day-of-week field as weekday names.

    APScheduler 3.x counts weekdays from Monday (0 = mon), crontab from
    Sunday (0 = sun), so numbers are never passed through.

    Example:
        to_weekday_names("1-5") -> "mon,tue,wed,thu,fri"

    Raises:
        ScheduleError: If the field is malformed
    """
    if field in ("*", "?"):
        return "*"

    days: Set[int] = set()
    for item in field.split(","):
        days |= _expand_weekday_item(item)
    return ",".join(CRONTAB_WEEKDAYS[day] for day in sorted(days))


class TickScheduler:
    """
    Cron-driven background scheduler for the tick callback.

    Ticks run on the scheduler's worker threads, never on the caller's
    thread. Overlapping ticks are allowed so a stalled tick does not hold
    back the next one.
    """

    def __init__(
        self,
        expression: str,
        callback: Callable[[], None],
        max_instances: int = 3,
    ):
        """Initialize tick scheduler.

        Args:
            expression: Cron expression with five fields
            callback: Zero-argument function run on every tick
            max_instances: Maximum concurrently running ticks

        Raises:
            ScheduleError: If the expression is malformed
        """
        self.expression = expression
        self.callback = callback
        self.trigger = self.parse(expression)

        self._scheduler = BackgroundScheduler()
        try:
            self._scheduler.add_job(
                callback,
                self.trigger,
                id=JOB_ID,
                max_instances=max_instances,
                coalesce=True,
            )
        except Exception as e:
            raise ScheduleError(f"could not register job for {expression!r}: {e}") from e

    @staticmethod
    def parse(expression: str) -> CronTrigger:
        """Parse a five-field cron expression.

        Day-of-week uses crontab numbering (0 or 7 is Sunday).

        Raises:
            ScheduleError: If the expression is malformed
        """
        fields = expression.split()
        if len(fields) != 5:
            raise ScheduleError(f"expected 5 cron fields, got {expression!r}")

        minute, hour, day, month, day_of_week = fields
        try:
            return CronTrigger(
                minute=minute,
                hour=hour,
                day=day,
                month=month,
                day_of_week=to_weekday_names(day_of_week),
            )
        except ValueError as e:
            raise ScheduleError(f"invalid cron expression {expression!r}: {e}") from e

    @property
    def running(self) -> bool:
        """Check if the scheduler is running."""
        return self._scheduler.running

    @property
    def next_run_time(self) -> Optional[datetime]:
        """Next time the tick fires."""
        if self.running:
            job = self._scheduler.get_job(JOB_ID)
            return job.next_run_time if job else None
        return self.trigger.get_next_fire_time(None, datetime.now(self.trigger.timezone))

    def start(self) -> None:
        """Start the background scheduler."""
        self._scheduler.start()
        logger.info(f"Scheduler started: {self.expression!r}, next run at {self.next_run_time}")

    def shutdown(self, wait: bool = False) -> None:
        """Stop the scheduler without waiting for running ticks by default."""
        if self.running:
            self._scheduler.shutdown(wait=wait)
            logger.info("Scheduler stopped")
