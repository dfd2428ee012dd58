"""Public re-exports for the occurrence engine.

Callers import the entry points and value types from here rather than from
the individual modules.
"""

from .anchor import resolve_anchor
from .codec import (PayloadError, parse_custom_rule, parse_end_condition,
                    parse_rule, parse_timestamp)
from .end_conditions import should_terminate
from .models import (AfterOccurrences, CalculationResult, CustomRule,
                     CustomUnit, MonthMode, MonthWeekday, Never,
                     RepeatFromMode, RuleConfigurationError, SimpleRule,
                     SimpleUnit, UntilDate)
from .patterns import advance_custom, advance_simple
from .processing import (calculate_custom_next_occurrence,
                         calculate_next_occurrence,
                         calculate_simple_next_occurrence,
                         handle_task_completion)
from .summary import describe_custom_rule
from .utc_calendar import UTC_CALENDAR, UtcCalendar, format_timestamp
from .validators import validate_custom_rule

__all__ = [
    "calculate_simple_next_occurrence",
    "calculate_custom_next_occurrence",
    "calculate_next_occurrence",
    "handle_task_completion",
    "resolve_anchor",
    "advance_simple",
    "advance_custom",
    "should_terminate",
    "validate_custom_rule",
    "describe_custom_rule",
    "parse_rule",
    "parse_custom_rule",
    "parse_end_condition",
    "parse_timestamp",
    "format_timestamp",
    "PayloadError",
    "RuleConfigurationError",
    "SimpleRule",
    "SimpleUnit",
    "CustomRule",
    "CustomUnit",
    "MonthMode",
    "MonthWeekday",
    "Never",
    "AfterOccurrences",
    "UntilDate",
    "RepeatFromMode",
    "CalculationResult",
    "UtcCalendar",
    "UTC_CALENDAR",
]
