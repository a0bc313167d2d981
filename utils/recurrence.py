"""Catalog of recurrence patterns and their display labels."""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Iterable, List, Optional


class RecurrencePattern(str, Enum):
    """Named rules describing how often a deadline recurs."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    BI_ANNUALLY = "bi-annually"
    TRI_ANNUALLY = "tri-annually"
    YEARLY = "yearly"
    BIRTHDAY_MONTH = "birthday-month"
    ODD_YEARS = "odd-years"
    EVEN_YEARS = "even-years"


RECURRENCE_LABELS: Dict[RecurrencePattern, str] = {
    RecurrencePattern.DAILY: "Daily",
    RecurrencePattern.WEEKLY: "Weekly",
    RecurrencePattern.MONTHLY: "Monthly",
    RecurrencePattern.QUARTERLY: "Quarterly",
    RecurrencePattern.BI_ANNUALLY: "Bi-annually",
    RecurrencePattern.TRI_ANNUALLY: "Tri-Annually",
    RecurrencePattern.YEARLY: "Yearly",
    RecurrencePattern.BIRTHDAY_MONTH: "Birthday Month",
    RecurrencePattern.ODD_YEARS: "Odd Years",
    RecurrencePattern.EVEN_YEARS: "Even Years",
}

# Spellings seen in hand-edited data files.
_ALIASES: Dict[str, RecurrencePattern] = {
    "bi-annual": RecurrencePattern.BI_ANNUALLY,
    "biannual": RecurrencePattern.BI_ANNUALLY,
    "biannually": RecurrencePattern.BI_ANNUALLY,
    "semi-annual": RecurrencePattern.BI_ANNUALLY,
    "semi-annually": RecurrencePattern.BI_ANNUALLY,
    "semiannually": RecurrencePattern.BI_ANNUALLY,
    "tri-annual": RecurrencePattern.TRI_ANNUALLY,
    "triannual": RecurrencePattern.TRI_ANNUALLY,
    "triannually": RecurrencePattern.TRI_ANNUALLY,
    "annual": RecurrencePattern.YEARLY,
    "annually": RecurrencePattern.YEARLY,
    "birthday": RecurrencePattern.BIRTHDAY_MONTH,
    "odd-year": RecurrencePattern.ODD_YEARS,
    "even-year": RecurrencePattern.EVEN_YEARS,
}

_SEPARATORS = re.compile(r"[\s_]+")


def lookup_pattern(value: object) -> Optional[RecurrencePattern]:
    """Return the member whose identifier is exactly ``value``, else ``None``."""
    if isinstance(value, RecurrencePattern):
        return value
    try:
        return RecurrencePattern(value)
    except ValueError:
        return None


def recurrence_label(pattern: RecurrencePattern | str | None) -> str:
    """Return the display label for ``pattern``.

    Unknown identifiers are returned unchanged so rows saved under a newer
    pattern set still render; ``None`` and empty values yield ``""``.
    """

    if not pattern:
        return ""
    known = lookup_pattern(pattern)
    if known is None:
        return str(pattern)
    return RECURRENCE_LABELS[known]


def recurrence_options() -> List[Dict[str, str]]:
    """Return ``value``/``label`` pairs in catalog order for selection controls."""

    return [
        {"value": pattern.value, "label": RECURRENCE_LABELS[pattern]}
        for pattern in RecurrencePattern
    ]


def supported_recurrence_values() -> Iterable[str]:
    """Return the supported recurrence identifiers in catalog order."""

    return tuple(pattern.value for pattern in RecurrencePattern)


def normalize_recurrence_value(value: str | None) -> str | None:
    """Return a canonical recurrence identifier or ``None`` if unsupported."""

    if value is None:
        return None
    candidate = str(value).strip()
    if not candidate:
        return None

    normalized = _SEPARATORS.sub("-", candidate.casefold())
    known = lookup_pattern(normalized)
    if known is not None:
        return known.value
    alias = _ALIASES.get(normalized)
    if alias is not None:
        return alias.value
    return None


def parse_recurrence(value: str | None) -> Optional[RecurrencePattern]:
    """Return the catalog member matching ``value`` after normalization."""

    normalized = normalize_recurrence_value(value)
    if normalized is None:
        return None
    return RecurrencePattern(normalized)
