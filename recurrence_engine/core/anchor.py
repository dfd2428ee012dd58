"""Anchor-date resolution for the next occurrence."""

from datetime import datetime
from typing import Optional

from recurrence_engine.core.models import RepeatFromMode
from recurrence_engine.core.utc_calendar import UTC_CALENDAR, UtcCalendar


def resolve_anchor(
    current_due_date: Optional[datetime],
    completion_date: datetime,
    repeat_from: RepeatFromMode,
    calendar: UtcCalendar = UTC_CALENDAR,
) -> datetime:
    """Return the date the next occurrence is advanced from.

    With a current due date the anchor takes its calendar day from the due
    date (``DUE_DATE``) or the completion date (``COMPLETION_DATE``) and its
    time of day from the due date, so a task keeps its scheduled time even
    when it repeats from completion. Without a due date the completion
    timestamp is used as-is.
    """
    if current_due_date is None:
        return calendar.to_utc(completion_date)
    if RepeatFromMode(repeat_from) is RepeatFromMode.DUE_DATE:
        base_date = current_due_date
    else:
        base_date = completion_date
    return calendar.setting_time(base_date, current_due_date)
