"""Compute the next occurrence of a recurring deadline.

Month and year steps clamp to the last valid day of the target month, so
Jan 31 plus one month is Feb 28 (or Feb 29 in a leap year) and a Feb 29
anchor advanced into a common year lands on Feb 28.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Dict

from dateutil.relativedelta import relativedelta

from config import config
from utils.logging import configure_logger
from utils.recurrence import RecurrencePattern, lookup_pattern

LOG_FILE = Path(config.LOG_DIR) / "recurring_dates.log"
logger = configure_logger(__name__, LOG_FILE)

RECURRENCE_DAYS: Dict[RecurrencePattern, int] = {
    RecurrencePattern.DAILY: 1,
    RecurrencePattern.WEEKLY: 7,
}

RECURRENCE_MONTHS: Dict[RecurrencePattern, int] = {
    RecurrencePattern.MONTHLY: 1,
    RecurrencePattern.QUARTERLY: 3,
    RecurrencePattern.TRI_ANNUALLY: 4,
    RecurrencePattern.BI_ANNUALLY: 6,
    RecurrencePattern.YEARLY: 12,
    RecurrencePattern.BIRTHDAY_MONTH: 12,
}

FALLBACK_DAYS = 1


def add_calendar_months(anchor: date, months: int) -> date:
    """Return ``anchor`` moved by ``months``, clamping the day to the month end."""

    return anchor + relativedelta(months=months)


def _years_to_parity(year: int, odd: bool) -> int:
    # Same parity as the target: skip a full cycle; otherwise step into it.
    return 2 if (year % 2 == 1) == odd else 1


def next_recurring_date(anchor: date, pattern: RecurrencePattern | str | None) -> date:
    """Return the occurrence following ``anchor`` for ``pattern``.

    Unrecognized patterns advance by one day. The fallback is logged but never
    raised so stored rows with unexpected values keep moving forward. The only
    bound is the calendar itself: stepping past ``date.max`` (9999-12-31)
    raises ``OverflowError``, and a non-date anchor raises ``TypeError``.
    """

    if isinstance(anchor, datetime):
        anchor = anchor.date()
    elif not isinstance(anchor, date):
        raise TypeError(f"anchor must be a date, got {type(anchor).__name__}")

    known = lookup_pattern(pattern)
    if known is None:
        logger.warning(
            "Unrecognized recurrence pattern %r; advancing %s by %d day",
            pattern,
            anchor,
            FALLBACK_DAYS,
        )
        return anchor + timedelta(days=FALLBACK_DAYS)

    days = RECURRENCE_DAYS.get(known)
    if days:
        return anchor + timedelta(days=days)

    months = RECURRENCE_MONTHS.get(known)
    if months:
        return add_calendar_months(anchor, months)

    odd = known is RecurrencePattern.ODD_YEARS
    years = _years_to_parity(anchor.year, odd)
    return add_calendar_months(anchor, 12 * years)
