"""End-condition evaluation for recurring series."""

from datetime import datetime

from recurrence_engine.core.models import (AfterOccurrences, EndCondition,
                                           Never, UntilDate)
from recurrence_engine.core.utc_calendar import UTC_CALENDAR, UtcCalendar


def should_terminate(
    candidate: datetime,
    new_occurrence_count: int,
    end_condition: EndCondition,
    calendar: UtcCalendar = UTC_CALENDAR,
) -> bool:
    """Return True when ``candidate`` must not be scheduled.

    ``UntilDate`` compares calendar dates only; a candidate that falls on
    the end date itself still runs. ``None`` behaves like ``Never``.
    """
    if end_condition is None or isinstance(end_condition, Never):
        return False
    if isinstance(end_condition, AfterOccurrences):
        return new_occurrence_count >= end_condition.count
    if isinstance(end_condition, UntilDate):
        return calendar.calendar_date(candidate) > calendar.calendar_date(
            end_condition.until
        )
    raise TypeError(f"unsupported end condition: {end_condition!r}")
