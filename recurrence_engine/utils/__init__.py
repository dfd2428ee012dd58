"""Utility helpers re-exported for convenience.

This module exposes the weekday helpers used by the engine and its tests.
"""

from .weekdays import Weekday, Weekdays, ordinal

__all__ = ["Weekday", "Weekdays", "ordinal"]
