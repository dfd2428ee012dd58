"""Weekday name and index helpers.

Weekday indices follow the task application's convention: 0 is Sunday and
6 is Saturday. Names are the seven lowercase English day names.
"""

from dataclasses import dataclass
from typing import ClassVar, Dict, Optional, Tuple


@dataclass(frozen=True)
class Weekday:
    """A named day of the week with its Sunday-based index."""

    name: str
    index: int

    @property
    def label(self) -> str:
        """Capitalized name used in human-readable summaries."""
        return self.name.capitalize()


class Weekdays:
    """Weekday objects keyed by lowercase English name."""

    SUNDAY: ClassVar[Weekday] = Weekday(name="sunday", index=0)
    MONDAY: ClassVar[Weekday] = Weekday(name="monday", index=1)
    TUESDAY: ClassVar[Weekday] = Weekday(name="tuesday", index=2)
    WEDNESDAY: ClassVar[Weekday] = Weekday(name="wednesday", index=3)
    THURSDAY: ClassVar[Weekday] = Weekday(name="thursday", index=4)
    FRIDAY: ClassVar[Weekday] = Weekday(name="friday", index=5)
    SATURDAY: ClassVar[Weekday] = Weekday(name="saturday", index=6)

    ORDERED: ClassVar[Tuple[Weekday, ...]] = (
        SUNDAY,
        MONDAY,
        TUESDAY,
        WEDNESDAY,
        THURSDAY,
        FRIDAY,
        SATURDAY,
    )

    _NAME_MAP: ClassVar[Dict[str, Weekday]] = {day.name: day for day in ORDERED}

    @classmethod
    def from_name(cls, name: str) -> Weekday:
        """Get the Weekday for a (case-insensitive) day name.

        Raises KeyError for anything that is not one of the seven names.
        """
        if not isinstance(name, str):
            raise KeyError(name)
        return cls._NAME_MAP[name.strip().lower()]

    @classmethod
    def from_index(cls, index: int) -> Weekday:
        """Get the Weekday for a Sunday-based index (0-6)."""
        if not 0 <= index <= 6:
            raise KeyError(index)
        return cls.ORDERED[index]

    @classmethod
    def lookup(cls, name) -> Optional[Weekday]:
        """Return the Weekday for ``name`` or None when it is not a day name."""
        try:
            return cls.from_name(name)
        except KeyError:
            return None

    @classmethod
    def all_names(cls) -> list:
        """Return all weekday names, Sunday first."""
        return [day.name for day in cls.ORDERED]


def ordinal(num: int) -> str:
    """Return ``num`` with its English ordinal suffix (1st, 2nd, 11th...)."""
    if 11 <= num % 100 <= 13:
        return f"{num}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(num % 10, "th")
    return f"{num}{suffix}"
