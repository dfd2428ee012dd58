"""Next-occurrence engine for recurring tasks."""

from recurrence_engine.core import (calculate_custom_next_occurrence,
                                    calculate_next_occurrence,
                                    calculate_simple_next_occurrence,
                                    handle_task_completion)

__version__ = "1.0.0"

__all__ = [
    "calculate_simple_next_occurrence",
    "calculate_custom_next_occurrence",
    "calculate_next_occurrence",
    "handle_task_completion",
]
