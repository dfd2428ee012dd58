"""Date advancement for simple and custom repeating patterns.

Both engines take an anchor produced by ``resolve_anchor`` and return the
candidate date of the next occurrence. Neither looks at end conditions.
"""

import logging
from datetime import datetime

from recurrence_engine.core.models import (CustomRule, CustomUnit, MonthMode,
                                           RuleConfigurationError, SimpleUnit)
from recurrence_engine.core.utc_calendar import UTC_CALENDAR, UtcCalendar
from recurrence_engine.utils.weekdays import Weekdays

logger = logging.getLogger(__name__)

# Upper bound on whole weeks scanned by the weekday search. Any valid weekday
# set matches within the first week; the bound only matters for sets that
# name no real weekday.
MAX_WEEKDAY_SEARCH_WEEKS = 53


def advance_simple(
    unit: SimpleUnit, anchor: datetime, calendar: UtcCalendar = UTC_CALENDAR
) -> datetime:
    """Advance ``anchor`` by one day, week, month or year."""
    unit = SimpleUnit(unit)
    if unit is SimpleUnit.DAILY:
        return calendar.add_days(anchor, 1)
    if unit is SimpleUnit.WEEKLY:
        return calendar.add_days(anchor, 7)
    if unit is SimpleUnit.MONTHLY:
        return calendar.add_months(anchor, 1)
    return calendar.add_years(anchor, 1)


def next_weekday_occurrence(
    anchor: datetime, weekdays, calendar: UtcCalendar = UTC_CALENDAR
) -> datetime:
    """Return the first day after ``anchor`` whose weekday name is in ``weekdays``.

    The anchor day itself never matches. Raises RuleConfigurationError when
    no day matches within ``MAX_WEEKDAY_SEARCH_WEEKS`` weeks.
    """
    wanted = {str(name).lower() for name in weekdays}
    current = anchor
    for _ in range(MAX_WEEKDAY_SEARCH_WEEKS):
        for offset in range(1, 8):
            candidate = calendar.add_days(current, offset)
            if calendar.day_name(candidate) in wanted:
                return candidate
        current = calendar.add_days(current, 7)
    raise RuleConfigurationError(
        f"weekday set {sorted(wanted)} does not name any day of the week"
    )


def nth_weekday_of_month(
    month_source: datetime,
    weekday_name: str,
    week_of_month: int,
    calendar: UtcCalendar = UTC_CALENDAR,
) -> datetime:
    """Return the ``week_of_month``-th ``weekday_name`` of ``month_source``'s month.

    The offset is counted from the first of the month. A 5th occurrence that
    does not exist is not clamped: the result falls into the next month.
    The result is at midnight UTC.
    """
    target = Weekdays.lookup(weekday_name)
    if target is None:
        raise RuleConfigurationError(f"unknown weekday {weekday_name!r}")
    first_of_month = calendar.first_of_month(month_source)
    first_weekday = calendar.weekday_index(first_of_month)
    days_to_add = (target.index - first_weekday + 7) % 7 + (week_of_month - 1) * 7
    return calendar.add_days(first_of_month, days_to_add)


def _advance_days(rule, anchor, calendar):
    return calendar.add_days(anchor, rule.interval)


def _advance_weeks(rule, anchor, calendar):
    # Only the weekday set drives the search; ``interval`` is not applied.
    if not rule.weekdays:
        raise RuleConfigurationError("weekly rule has no weekdays")
    return next_weekday_occurrence(anchor, rule.weekdays, calendar)


def _advance_months(rule, anchor, calendar):
    mode = rule.month_mode or MonthMode.SAME_DATE
    target_month = calendar.add_months(anchor, rule.interval)
    if mode is MonthMode.SAME_DATE:
        return target_month
    month_weekday = rule.month_weekday
    if month_weekday is None:
        raise RuleConfigurationError("same_weekday rule has no month weekday")
    if not 1 <= month_weekday.week_of_month <= 5:
        raise RuleConfigurationError(
            f"week of month must be 1-5, got {month_weekday.week_of_month}"
        )
    return nth_weekday_of_month(
        target_month, month_weekday.weekday, month_weekday.week_of_month, calendar
    )


def _advance_years(rule, anchor, calendar):
    if rule.month is not None and not 1 <= rule.month <= 12:
        raise RuleConfigurationError(f"month must be 1-12, got {rule.month}")
    if rule.day is not None and not 1 <= rule.day <= 31:
        raise RuleConfigurationError(f"day must be 1-31, got {rule.day}")
    anchor = calendar.to_utc(anchor)
    return calendar.replace_fields(
        anchor, year=anchor.year + rule.interval, month=rule.month, day=rule.day
    )


_CUSTOM_HANDLERS = {
    CustomUnit.DAYS: _advance_days,
    CustomUnit.WEEKS: _advance_weeks,
    CustomUnit.MONTHS: _advance_months,
    CustomUnit.YEARS: _advance_years,
}


def advance_custom(
    rule: CustomRule, anchor: datetime, calendar: UtcCalendar = UTC_CALENDAR
) -> datetime:
    """Advance ``anchor`` according to a custom rule.

    Raises RuleConfigurationError when the rule lacks a unit or interval,
    names an unknown unit, or is missing the qualifier its unit needs,
    or when the result would fall outside the supported date range.
    """
    if rule.unit is None or rule.interval is None:
        raise RuleConfigurationError("custom rule is missing unit or interval")
    try:
        unit = CustomUnit(rule.unit)
    except ValueError:
        raise RuleConfigurationError(f"unrecognized unit {rule.unit!r}") from None
    if rule.interval < 1:
        raise RuleConfigurationError(
            f"interval must be positive, got {rule.interval}"
        )
    logger.debug(
        "Advancing %s from %s (interval %d)", unit.value, anchor, rule.interval
    )
    try:
        return _CUSTOM_HANDLERS[unit](rule, anchor, calendar)
    except RuleConfigurationError:
        raise
    except (OverflowError, ValueError) as exc:
        # datetime raises these once a date leaves years 1-9999.
        raise RuleConfigurationError(
            f"{rule.interval} {unit.value} from {anchor} is out of range: {exc}"
        ) from exc
