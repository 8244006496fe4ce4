"""Cycle period arithmetic and labels."""

from __future__ import annotations

from calendar import monthrange
from datetime import date, timedelta

from ..errors import ValidationError
from ..models.ledger import CYCLE_TYPES, MONTHLY, WEEKLY, YEARLY


def _require_cycle_type(cycle_type: str) -> None:
    if cycle_type not in CYCLE_TYPES:
        raise ValidationError(
            f"Unknown cycle type {cycle_type!r}; expected one of {', '.join(CYCLE_TYPES)}."
        )


def _rolled_date(year: int, month: int, day: int) -> date:
    """Build a date, spilling a day past month end into the next month.

    Feb 31 becomes Mar 2 or Mar 3, the same way calendar setters on most
    date libraries roll over instead of clamping.
    """

    last_day = monthrange(year, month)[1]
    if day <= last_day:
        return date(year, month, day)
    return date(year, month, last_day) + timedelta(days=day - last_day)


def add_months(value: date, months: int) -> date:
    """Advance ``value`` by whole calendar months, keeping the day-of-month."""

    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    return _rolled_date(year, month, value.day)


def next_cycle_start(cycle_start: date, cycle_type: str) -> date:
    """Return the first day of the cycle following the one starting at ``cycle_start``.

    Weekly adds 7 days, monthly one calendar month and yearly one year.
    Month-length overflow rolls forward (Jan 31 -> Mar 2/3, Feb 29 -> Mar 1
    of the next year), so the result is always later than the input.
    """

    _require_cycle_type(cycle_type)
    if cycle_type == WEEKLY:
        return cycle_start + timedelta(days=7)
    if cycle_type == MONTHLY:
        return add_months(cycle_start, 1)
    return _rolled_date(cycle_start.year + 1, cycle_start.month, cycle_start.day)


def cycle_end(cycle_start: date, cycle_type: str) -> date:
    """Last day that still belongs to the cycle."""
    return next_cycle_start(cycle_start, cycle_type) - timedelta(days=1)


def _short_day(value: date) -> str:
    return f"{value:%b} {value.day}"


def cycle_label(cycle_start: date, cycle_type: str) -> str:
    """Human readable name for a cycle.

    >>> cycle_label(date(2024, 1, 15), "weekly")
    'Week of Jan 15 - Jan 21'
    >>> cycle_label(date(2024, 1, 15), "monthly")
    'January 2024'
    >>> cycle_label(date(2024, 1, 15), "yearly")
    'Year 2024'
    """

    _require_cycle_type(cycle_type)
    if cycle_type == WEEKLY:
        week_end = cycle_start + timedelta(days=6)
        return f"Week of {_short_day(cycle_start)} - {_short_day(week_end)}"
    if cycle_type == YEARLY:
        return f"Year {cycle_start.year}"
    return f"{cycle_start:%B} {cycle_start.year}"
