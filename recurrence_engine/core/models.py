"""Value types shared by the occurrence engine.

Every type here is immutable. Rules are created once when a task becomes
recurring; edits build a new value instead of mutating the old one.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import FrozenSet, Optional, Union

from recurrence_engine.core.utc_calendar import format_timestamp


class RuleConfigurationError(ValueError):
    """A custom rule is structurally incomplete or names an unknown unit."""


class SimpleUnit(str, Enum):
    """Fixed advancement units for simple repeating tasks."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class CustomUnit(str, Enum):
    """Interval units accepted by custom rules."""

    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"
    YEARS = "years"


class MonthMode(str, Enum):
    """How a monthly custom rule picks its day."""

    SAME_DATE = "same_date"
    SAME_WEEKDAY = "same_weekday"


class RepeatFromMode(str, Enum):
    """Which timestamp seeds the anchor of the next occurrence."""

    DUE_DATE = "DUE_DATE"
    COMPLETION_DATE = "COMPLETION_DATE"


@dataclass(frozen=True)
class MonthWeekday:
    """The n-th weekday of a month, e.g. the 3rd tuesday."""

    weekday: str
    week_of_month: int


@dataclass(frozen=True)
class SimpleRule:
    """Repeat once per day, week, month or year."""

    unit: SimpleUnit

    def __post_init__(self):
        # Accept plain strings ("daily") and normalize to the enum.
        object.__setattr__(self, "unit", SimpleUnit(self.unit))


@dataclass(frozen=True)
class CustomRule:
    """User-defined rule: every ``interval`` units with optional qualifiers.

    ``unit`` and ``interval`` are optional so that incomplete rules coming
    from storage can still be represented; the calculator terminates the
    series for those instead of raising.

    ``month_day`` records the day a same_date monthly rule was created for.
    It is descriptive only: same_date rules advance from the anchor date.
    """

    unit: Optional[str] = None
    interval: Optional[int] = None
    weekdays: Optional[FrozenSet[str]] = None
    month_mode: Optional[MonthMode] = None
    month_weekday: Optional[MonthWeekday] = None
    month: Optional[int] = None
    day: Optional[int] = None
    month_day: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.unit, CustomUnit):
            object.__setattr__(self, "unit", self.unit.value)
        if self.weekdays is not None:
            object.__setattr__(
                self, "weekdays", frozenset(str(d).lower() for d in self.weekdays)
            )
        if self.month_mode is not None:
            object.__setattr__(self, "month_mode", MonthMode(self.month_mode))


RecurrenceRule = Union[SimpleRule, CustomRule]


@dataclass(frozen=True)
class Never:
    """The series never ends."""


@dataclass(frozen=True)
class AfterOccurrences:
    """The series ends once ``count`` occurrences have been produced."""

    count: int

    def __post_init__(self):
        if self.count < 1:
            raise ValueError(
                f"AfterOccurrences needs a positive count, got {self.count}"
            )


@dataclass(frozen=True)
class UntilDate:
    """The series runs up to and including the calendar date ``until``."""

    until: Union[date, datetime]


EndCondition = Union[Never, AfterOccurrences, UntilDate]


@dataclass(frozen=True)
class CalculationResult:
    """Outcome of one completion event."""

    next_due_date: Optional[datetime]
    should_terminate: bool
    new_occurrence_count: int

    def __post_init__(self):
        if self.should_terminate and self.next_due_date is not None:
            raise ValueError("a terminating result cannot carry a next due date")

    @classmethod
    def terminate(cls, new_occurrence_count: int) -> "CalculationResult":
        """Build a result that ends the series."""
        return cls(None, True, new_occurrence_count)

    @classmethod
    def proceed(
        cls, next_due_date: datetime, new_occurrence_count: int
    ) -> "CalculationResult":
        """Build a result that schedules ``next_due_date``."""
        return cls(next_due_date, False, new_occurrence_count)

    def to_dict(self) -> dict:
        """Render the result with camelCase keys and ISO UTC timestamps."""
        return {
            "nextDueDate": format_timestamp(self.next_due_date),
            "shouldTerminate": self.should_terminate,
            "newOccurrenceCount": self.new_occurrence_count,
        }
