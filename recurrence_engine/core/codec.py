"""Translate task-record JSON into engine value types.

Task records use the camelCase shape of the task API (``repeating``,
``repeatingData``, ``repeatFrom``, ``occurrenceCount``, ``dueDateTime``).
Structural problems in ``repeatingData`` surface as
``RuleConfigurationError`` so the caller can end the series; problems with
the rest of the payload raise ``PayloadError``.
"""

import logging
from datetime import date, datetime
from typing import Optional

from dateutil.parser import isoparse

from recurrence_engine.core.models import (AfterOccurrences, CustomRule,
                                           EndCondition, MonthMode,
                                           MonthWeekday, Never,
                                           RecurrenceRule, RepeatFromMode,
                                           RuleConfigurationError, SimpleRule,
                                           SimpleUnit, UntilDate)
from recurrence_engine.core.utc_calendar import UTC_CALENDAR

logger = logging.getLogger(__name__)

REPEATING_NEVER = "never"
REPEATING_CUSTOM = "custom"

# Tasks created before repeatFrom existed behave as "repeat from completion".
DEFAULT_REPEAT_FROM = RepeatFromMode.COMPLETION_DATE


class PayloadError(ValueError):
    """A task payload cannot be turned into engine inputs."""


def parse_timestamp(value, field_name: str = "timestamp") -> Optional[datetime]:
    """Parse an ISO 8601 string (or pass a datetime through) as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, (datetime, date)):
        return UTC_CALENDAR.to_utc(value)
    if not isinstance(value, str):
        raise PayloadError(f"{field_name} must be an ISO 8601 string")
    try:
        return UTC_CALENDAR.to_utc(isoparse(value))
    except (ValueError, OverflowError) as exc:
        raise PayloadError(f"invalid {field_name} {value!r}: {exc}") from exc


def parse_repeat_from(value) -> RepeatFromMode:
    if value is None:
        return DEFAULT_REPEAT_FROM
    try:
        return RepeatFromMode(str(value).upper())
    except ValueError as exc:
        raise PayloadError(f"unknown repeatFrom {value!r}") from exc


def parse_occurrence_count(value) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise PayloadError(f"occurrenceCount must be an integer, got {value!r}")
    if value < 0:
        raise PayloadError(f"occurrenceCount cannot be negative, got {value}")
    return value


def _optional_int(data: dict, key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise RuleConfigurationError(f"{key} must be an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise RuleConfigurationError(
                f"{key} must be a whole number, got {value!r}"
            )
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise RuleConfigurationError(
            f"{key} must be an integer, got {value!r}"
        ) from exc


def parse_end_condition(data: Optional[dict]) -> EndCondition:
    """Read ``endCondition`` and its companion field from ``repeatingData``.

    An end condition whose companion value is missing never fires, so it is
    read as ``Never``.
    """
    if not data:
        return Never()
    kind = data.get("endCondition") or "never"
    if kind == "never":
        return Never()
    if kind == "after_occurrences":
        count = data.get("endAfterOccurrences")
        if isinstance(count, int) and not isinstance(count, bool) and count >= 1:
            return AfterOccurrences(count)
        logger.warning("Ignoring after_occurrences end condition with count %r", count)
        return Never()
    if kind == "until_date":
        until = data.get("endUntilDate")
        try:
            until_dt = parse_timestamp(until, "endUntilDate")
        except PayloadError as exc:
            logger.warning("Ignoring until_date end condition: %s", exc)
            return Never()
        if until_dt is None:
            logger.warning("Ignoring until_date end condition without endUntilDate")
            return Never()
        return UntilDate(until_dt)
    logger.warning("Unknown endCondition %r treated as never", kind)
    return Never()


def parse_custom_rule(data: Optional[dict]) -> CustomRule:
    """Build a CustomRule from a ``repeatingData`` dictionary.

    Missing ``unit`` or ``interval`` are kept as None; the calculator ends
    the series for such rules. Malformed qualifiers raise
    RuleConfigurationError.
    """
    data = data or {}
    weekdays = data.get("weekdays")
    if weekdays is not None and not isinstance(weekdays, (list, tuple, set)):
        raise RuleConfigurationError("weekdays must be a list of day names")

    month_mode = None
    raw_mode = data.get("monthRepeatType")
    if raw_mode is not None:
        try:
            month_mode = MonthMode(raw_mode)
        except ValueError as exc:
            raise RuleConfigurationError(
                f"unknown monthRepeatType {raw_mode!r}"
            ) from exc

    month_weekday = None
    raw_month_weekday = data.get("monthWeekday")
    if raw_month_weekday is not None:
        if not isinstance(raw_month_weekday, dict):
            raise RuleConfigurationError("monthWeekday must be an object")
        weekday = raw_month_weekday.get("weekday")
        week_of_month = _optional_int(raw_month_weekday, "weekOfMonth")
        if not weekday or week_of_month is None:
            raise RuleConfigurationError("monthWeekday needs weekday and weekOfMonth")
        month_weekday = MonthWeekday(
            weekday=str(weekday).lower(), week_of_month=week_of_month
        )

    unit = data.get("unit")
    return CustomRule(
        unit=str(unit).lower() if unit is not None else None,
        interval=_optional_int(data, "interval"),
        weekdays=frozenset(weekdays) if weekdays is not None else None,
        month_mode=month_mode,
        month_weekday=month_weekday,
        month=_optional_int(data, "month"),
        day=_optional_int(data, "day"),
        month_day=_optional_int(data, "monthDay"),
    )


def parse_rule(task: dict) -> Optional[RecurrenceRule]:
    """Return the task's recurrence rule, or None for non-repeating tasks."""
    repeating = task.get("repeating") or REPEATING_NEVER
    repeating = str(repeating).lower()
    if repeating == REPEATING_NEVER:
        return None
    if repeating == REPEATING_CUSTOM:
        return parse_custom_rule(task.get("repeatingData"))
    try:
        return SimpleRule(SimpleUnit(repeating))
    except ValueError as exc:
        raise PayloadError(f"unknown repeating value {repeating!r}") from exc
