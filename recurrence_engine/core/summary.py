"""Human-readable summaries of custom rules."""

import calendar

from recurrence_engine.core.models import (AfterOccurrences, CustomUnit,
                                           MonthMode, RepeatFromMode,
                                           UntilDate)
from recurrence_engine.core.utc_calendar import UTC_CALENDAR
from recurrence_engine.utils.weekdays import Weekdays, ordinal


def _weekday_label(name: str) -> str:
    day = Weekdays.lookup(name)
    return day.label if day else str(name).capitalize()


def describe_custom_rule(rule, end_condition=None, repeat_from=None) -> str:
    """Summarize a rule the way the pattern editor shows it.

    Example: ``Every 2 weeks on Monday, Wednesday (5 times), from due date``.
    Weekdays are listed Sunday first.
    """
    interval = rule.interval or 1
    unit = rule.unit or CustomUnit.DAYS.value
    summary = f"Every {interval} {unit}"

    if unit == CustomUnit.WEEKS.value and rule.weekdays:
        names = sorted(
            rule.weekdays,
            key=lambda d: Weekdays.lookup(d).index if Weekdays.lookup(d) else 7,
        )
        summary += " on " + ", ".join(_weekday_label(d) for d in names)
    elif unit == CustomUnit.MONTHS.value:
        month_weekday = rule.month_weekday
        if rule.month_mode is not MonthMode.SAME_WEEKDAY and rule.month_day:
            summary += f" on the {ordinal(rule.month_day)}"
        elif rule.month_mode is MonthMode.SAME_WEEKDAY and month_weekday:
            summary += (
                f" on the {ordinal(month_weekday.week_of_month)}"
                f" {_weekday_label(month_weekday.weekday)}"
            )
    elif unit == CustomUnit.YEARS.value and rule.month and rule.day:
        month_name = (
            calendar.month_name[rule.month] if 1 <= rule.month <= 12 else "January"
        )
        summary += f" on {month_name} {ordinal(rule.day)}"

    if isinstance(end_condition, AfterOccurrences):
        summary += f" ({end_condition.count} times)"
    elif isinstance(end_condition, UntilDate):
        until = UTC_CALENDAR.calendar_date(end_condition.until)
        summary += f" until {until.strftime('%b')} {until.day}, {until.year}"

    if repeat_from is not None:
        if RepeatFromMode(repeat_from) is RepeatFromMode.DUE_DATE:
            summary += ", from due date"
        else:
            summary += ", from completion"
    return summary
