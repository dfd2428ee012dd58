"""Structural validation of custom recurrence rules.

The calculator ends a series whose rule cannot be evaluated, and its result
looks exactly like a series that finished normally. Callers that need to
tell the two apart check the rule here before calculating.
"""

from typing import List, Tuple

from recurrence_engine.core.models import CustomRule, CustomUnit, MonthMode
from recurrence_engine.utils.weekdays import Weekdays


def _unit_problems(rule: CustomRule, unit: CustomUnit) -> List[str]:
    problems = []
    if unit is CustomUnit.WEEKS:
        if not rule.weekdays:
            problems.append("weekly rule needs at least one weekday")
        else:
            unknown = sorted(d for d in rule.weekdays if Weekdays.lookup(d) is None)
            if unknown:
                problems.append(f"unknown weekdays: {', '.join(unknown)}")
    elif unit is CustomUnit.MONTHS:
        if rule.month_mode is MonthMode.SAME_WEEKDAY:
            month_weekday = rule.month_weekday
            if month_weekday is None:
                problems.append("same_weekday rule needs a month weekday")
            else:
                if Weekdays.lookup(month_weekday.weekday) is None:
                    problems.append(f"unknown weekday: {month_weekday.weekday}")
                if not 1 <= month_weekday.week_of_month <= 5:
                    problems.append("week of month must be between 1 and 5")
    elif unit is CustomUnit.YEARS:
        if rule.month is not None and not 1 <= rule.month <= 12:
            problems.append("month must be between 1 and 12")
        if rule.day is not None and not 1 <= rule.day <= 31:
            problems.append("day must be between 1 and 31")
    return problems


def validate_custom_rule(rule: CustomRule) -> Tuple[bool, List[str]]:
    """Return ``(ok, problems)`` for a custom rule.

    ``problems`` lists human-readable reasons the calculator would stop the
    series; it is empty when ``ok`` is True.
    """
    problems = []
    if rule.unit is None:
        problems.append("unit is missing")
    if rule.interval is None:
        problems.append("interval is missing")
    elif rule.interval < 1:
        problems.append("interval must be positive")

    unit = None
    if rule.unit is not None:
        try:
            unit = CustomUnit(rule.unit)
        except ValueError:
            problems.append(f"unrecognized unit: {rule.unit}")
    if unit is not None:
        problems.extend(_unit_problems(rule, unit))
    return not problems, problems
