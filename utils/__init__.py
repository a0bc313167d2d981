"""Shared utility helpers for the deadline engine."""

from .logging import configure_logger
from .recurrence import (
    RecurrencePattern,
    lookup_pattern,
    normalize_recurrence_value,
    parse_recurrence,
    recurrence_label,
    recurrence_options,
    supported_recurrence_values,
)

__all__ = [
    "RecurrencePattern",
    "configure_logger",
    "lookup_pattern",
    "normalize_recurrence_value",
    "parse_recurrence",
    "recurrence_label",
    "recurrence_options",
    "supported_recurrence_values",
]
