"""
Unit tests for recurrence_engine/core/codec.py.
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from recurrence_engine.core.codec import (PayloadError, parse_custom_rule,
                                          parse_end_condition,
                                          parse_occurrence_count,
                                          parse_repeat_from, parse_rule,
                                          parse_timestamp)
from recurrence_engine.core.models import (AfterOccurrences, CustomRule,
                                           MonthMode, MonthWeekday, Never,
                                           RepeatFromMode,
                                           RuleConfigurationError, SimpleRule,
                                           SimpleUnit, UntilDate)
from tests.test_util import utc


def test_parse_timestamp_variants():
    """ISO strings with Z or offsets, datetimes and empty values."""
    assert parse_timestamp("2026-01-06T00:00:00.000Z") == utc(2026, 1, 6)
    assert parse_timestamp("2026-01-05T16:00:00-08:00") == utc(2026, 1, 6)
    assert parse_timestamp(datetime(2026, 1, 6, 12)) == utc(2026, 1, 6, 12)
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None


def test_parse_timestamp_invalid():
    """Unparseable values raise PayloadError naming the field."""
    with pytest.raises(PayloadError, match="dueDateTime"):
        parse_timestamp("not-a-date", "dueDateTime")
    with pytest.raises(PayloadError):
        parse_timestamp(12345)


def test_parse_repeat_from():
    """Missing mode defaults to completion date; values are case-insensitive."""
    assert parse_repeat_from(None) is RepeatFromMode.COMPLETION_DATE
    assert parse_repeat_from("due_date") is RepeatFromMode.DUE_DATE
    with pytest.raises(PayloadError):
        parse_repeat_from("WHENEVER")


def test_parse_occurrence_count():
    """Counts default to zero and must be non-negative integers."""
    assert parse_occurrence_count(None) == 0
    assert parse_occurrence_count(4) == 4
    for bad in (-1, "3", True, 1.5):
        with pytest.raises(PayloadError):
            parse_occurrence_count(bad)


def test_parse_end_condition_variants():
    """All three end conditions round out of repeatingData."""
    assert parse_end_condition(None) == Never()
    assert parse_end_condition({"endCondition": "never"}) == Never()
    assert parse_end_condition(
        {"endCondition": "after_occurrences", "endAfterOccurrences": 5}
    ) == AfterOccurrences(5)
    assert parse_end_condition(
        {"endCondition": "until_date", "endUntilDate": "2024-12-15T00:00:00Z"}
    ) == UntilDate(utc(2024, 12, 15))


def test_parse_end_condition_incomplete_is_never(caplog):
    """An end condition without its value never fires."""
    caplog.set_level(logging.WARNING)
    assert parse_end_condition({"endCondition": "after_occurrences"}) == Never()
    assert parse_end_condition({"endCondition": "until_date"}) == Never()
    bad_date = {"endCondition": "until_date", "endUntilDate": "soon"}
    assert parse_end_condition(bad_date) == Never()
    assert parse_end_condition({"endCondition": "sometimes"}) == Never()
    assert len(caplog.records) == 4


def test_parse_custom_rule_full():
    """All repeatingData fields map onto CustomRule."""
    rule = parse_custom_rule(
        {
            "type": "custom",
            "unit": "months",
            "interval": 1,
            "monthRepeatType": "same_weekday",
            "monthWeekday": {"weekday": "Tuesday", "weekOfMonth": 3},
        }
    )
    assert rule == CustomRule(
        unit="months",
        interval=1,
        month_mode=MonthMode.SAME_WEEKDAY,
        month_weekday=MonthWeekday("tuesday", 3),
    )


def test_parse_custom_rule_weekdays_and_year_fields():
    """Weekday lists become lowercase sets; month/day are integers."""
    weekly = parse_custom_rule(
        {"unit": "weeks", "interval": 1, "weekdays": ["Monday", "friday"]}
    )
    assert weekly.weekdays == frozenset({"monday", "friday"})
    yearly = parse_custom_rule(
        {"unit": "years", "interval": "1", "month": 12, "day": 25}
    )
    assert (yearly.interval, yearly.month, yearly.day) == (1, 12, 25)


def test_parse_custom_rule_month_day_and_whole_floats():
    """monthDay is read for same_date rules; 3.0 is accepted as 3."""
    rule = parse_custom_rule(
        {
            "unit": "months",
            "interval": 3.0,
            "monthRepeatType": "same_date",
            "monthDay": 15,
        }
    )
    assert (rule.interval, rule.month_mode, rule.month_day) == (
        3,
        MonthMode.SAME_DATE,
        15,
    )


def test_parse_custom_rule_keeps_missing_fields():
    """Missing unit and interval stay None for the calculator to handle."""
    assert parse_custom_rule({"type": "custom"}) == CustomRule()
    assert parse_custom_rule(None) == CustomRule()


@pytest.mark.parametrize(
    "data",
    [
        {"unit": "months", "interval": 1, "monthRepeatType": "same_moon"},
        {"unit": "months", "interval": 1, "monthWeekday": {"weekday": "monday"}},
        {"unit": "months", "interval": 1, "monthWeekday": "monday"},
        {"unit": "weeks", "interval": 1, "weekdays": "monday"},
        {"unit": "days", "interval": "often"},
        {"unit": "days", "interval": True},
        {"unit": "days", "interval": 2.7},
        {
            "unit": "months",
            "interval": 1,
            "monthWeekday": {"weekday": "monday", "weekOfMonth": 1.5},
        },
    ],
)
def test_parse_custom_rule_malformed(data):
    """Malformed qualifiers raise RuleConfigurationError."""
    with pytest.raises(RuleConfigurationError):
        parse_custom_rule(data)


def test_parse_rule_dispatch():
    """repeating selects none, a simple rule or a custom rule."""
    assert parse_rule({}) is None
    assert parse_rule({"repeating": "never"}) is None
    assert parse_rule({"repeating": "Monthly"}) == SimpleRule(SimpleUnit.MONTHLY)
    custom = parse_rule(
        {"repeating": "custom", "repeatingData": {"unit": "days", "interval": 2}}
    )
    assert custom == CustomRule(unit="days", interval=2)
    with pytest.raises(PayloadError):
        parse_rule({"repeating": "hourly"})


def test_parse_timestamp_keeps_instant():
    """Converting to UTC never changes the instant."""
    ist = timezone(timedelta(hours=5, minutes=30))
    value = datetime(2024, 1, 1, 5, 30, tzinfo=ist)
    assert parse_timestamp(value) == value
