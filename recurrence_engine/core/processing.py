"""Occurrence calculation for completed recurring tasks.

This module wires anchor resolution, pattern advancement and end-condition
evaluation into the public entry points. Every function is pure: results
depend only on the arguments, so callers may invoke them from any thread.
Writing the result back to task storage is the caller's job.
"""

import logging
from datetime import datetime
from typing import Optional

from recurrence_engine.core.anchor import resolve_anchor
from recurrence_engine.core.codec import (REPEATING_NEVER, PayloadError,
                                          parse_end_condition,
                                          parse_occurrence_count,
                                          parse_repeat_from, parse_rule,
                                          parse_timestamp)
from recurrence_engine.core.end_conditions import should_terminate
from recurrence_engine.core.models import (CalculationResult, CustomRule,
                                           EndCondition, RepeatFromMode,
                                           RuleConfigurationError, SimpleRule,
                                           SimpleUnit)
from recurrence_engine.core.patterns import advance_custom, advance_simple
from recurrence_engine.core.utc_calendar import (UTC_CALENDAR, UtcCalendar,
                                                 format_timestamp)

logger = logging.getLogger(__name__)


def _new_occurrence_count(occurrence_count: int) -> int:
    if occurrence_count < 0:
        raise ValueError(
            f"occurrence_count cannot be negative, got {occurrence_count}"
        )
    return occurrence_count + 1


def _finish(candidate, new_count, end_condition, calendar) -> CalculationResult:
    if should_terminate(candidate, new_count, end_condition, calendar):
        logger.info(
            "Series ends at occurrence %d (candidate %s)",
            new_count,
            format_timestamp(candidate),
        )
        return CalculationResult.terminate(new_count)
    return CalculationResult.proceed(candidate, new_count)


def calculate_simple_next_occurrence(
    unit,
    current_due_date: Optional[datetime],
    completion_date: datetime,
    repeat_from: RepeatFromMode,
    occurrence_count: int = 0,
    end_condition: Optional[EndCondition] = None,
    calendar: UtcCalendar = UTC_CALENDAR,
) -> CalculationResult:
    """Calculate the next occurrence of a daily/weekly/monthly/yearly task.

    ``unit`` may be a SimpleUnit, its string value or a SimpleRule. A next
    date beyond year 9999 ends the series.
    """
    if isinstance(unit, SimpleRule):
        unit = unit.unit
    unit = SimpleUnit(unit)
    new_count = _new_occurrence_count(occurrence_count)
    anchor = resolve_anchor(current_due_date, completion_date, repeat_from, calendar)
    try:
        candidate = advance_simple(unit, anchor, calendar)
    except (OverflowError, ValueError) as exc:
        logger.warning(
            "Stopping recurrence, next %s date is out of range: %s", unit.value, exc
        )
        return CalculationResult.terminate(new_count)
    return _finish(candidate, new_count, end_condition, calendar)


def calculate_custom_next_occurrence(
    rule: CustomRule,
    current_due_date: Optional[datetime],
    completion_date: datetime,
    repeat_from: RepeatFromMode,
    occurrence_count: int = 0,
    end_condition: Optional[EndCondition] = None,
    calendar: UtcCalendar = UTC_CALENDAR,
) -> CalculationResult:
    """Calculate the next occurrence of a task with a custom rule.

    A rule that cannot be evaluated (no unit or interval, unknown unit,
    missing weekday qualifiers) ends the series rather than raising.
    """
    new_count = _new_occurrence_count(occurrence_count)
    anchor = resolve_anchor(current_due_date, completion_date, repeat_from, calendar)
    try:
        candidate = advance_custom(rule, anchor, calendar)
    except RuleConfigurationError as exc:
        logger.warning("Stopping recurrence, custom rule is unusable: %s", exc)
        return CalculationResult.terminate(new_count)
    return _finish(candidate, new_count, end_condition, calendar)


def calculate_next_occurrence(
    rule,
    current_due_date: Optional[datetime],
    completion_date: datetime,
    repeat_from: RepeatFromMode,
    occurrence_count: int = 0,
    end_condition: Optional[EndCondition] = None,
    calendar: UtcCalendar = UTC_CALENDAR,
) -> CalculationResult:
    """Dispatch to the simple or custom entry point based on the rule type."""
    if isinstance(rule, SimpleRule):
        calculate = calculate_simple_next_occurrence
    elif isinstance(rule, CustomRule):
        calculate = calculate_custom_next_occurrence
    else:
        raise TypeError(f"unsupported recurrence rule: {rule!r}")
    return calculate(
        rule,
        current_due_date,
        completion_date,
        repeat_from,
        occurrence_count,
        end_condition,
        calendar,
    )


def handle_task_completion(task: dict, completion_date=None) -> dict:
    """Compute the roll-forward of a task record that was just completed.

    ``completion_date`` defaults to the record's ``completionDate`` field.
    Returns the fields the caller should write back: a continuing series
    stays open with a new ``dueDateTime``; an ended series is completed and
    stops repeating. Raises PayloadError for unusable records.
    """
    if completion_date is None:
        completion_date = task.get("completionDate")
    completed_at = parse_timestamp(completion_date, "completionDate")
    if completed_at is None:
        raise PayloadError("completionDate is required")
    task_id = task.get("id")
    occurrence_count = parse_occurrence_count(task.get("occurrenceCount"))
    repeat_from = parse_repeat_from(task.get("repeatFrom"))
    due_date = parse_timestamp(task.get("dueDateTime"), "dueDateTime")
    repeating_data = task.get("repeatingData")

    try:
        rule = parse_rule(task)
    except RuleConfigurationError as exc:
        logger.warning(
            "Task %s has malformed repeatingData: %s", task_id or "?", exc
        )
        result = CalculationResult.terminate(_new_occurrence_count(occurrence_count))
        return _build_update(task, result, due_date)

    if rule is None:
        logger.info("Task %s does not repeat; completing it", task_id or "?")
        return {
            "id": task_id,
            "completed": True,
            "dueDateTime": format_timestamp(due_date),
            "occurrenceCount": occurrence_count,
            "repeating": REPEATING_NEVER,
            "repeatingData": repeating_data,
            "result": None,
        }

    end_condition = parse_end_condition(repeating_data)
    result = calculate_next_occurrence(
        rule, due_date, completed_at, repeat_from, occurrence_count, end_condition
    )
    logger.info(
        "Task %s rolled forward: next=%s terminate=%s count=%d",
        task_id or "?",
        format_timestamp(result.next_due_date),
        result.should_terminate,
        result.new_occurrence_count,
    )
    return _build_update(task, result, due_date)


def _build_update(task: dict, result: CalculationResult, due_date) -> dict:
    if result.should_terminate:
        return {
            "id": task.get("id"),
            "completed": True,
            "dueDateTime": format_timestamp(due_date),
            "occurrenceCount": result.new_occurrence_count,
            "repeating": REPEATING_NEVER,
            "repeatingData": None,
            "result": result.to_dict(),
        }
    return {
        "id": task.get("id"),
        "completed": False,
        "dueDateTime": format_timestamp(result.next_due_date),
        "occurrenceCount": result.new_occurrence_count,
        "repeating": task.get("repeating"),
        "repeatingData": task.get("repeatingData"),
        "result": result.to_dict(),
    }
