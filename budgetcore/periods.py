"""Calendar arithmetic for the four period kinds.

All bounds are half-open ``[start, end)``.  Instants are naive local
wall-clock times; aware inputs are converted on the way in.
"""

import calendar
from datetime import datetime, timedelta
from typing import Optional, Tuple

from budgetcore.domain import (
    DAILY,
    InvalidArgument,
    MONTHLY,
    WEEKLY,
    YEARLY,
    normalize_kind,
    to_instant,
)

Bounds = Tuple[datetime, datetime]


def _midnight(instant: datetime) -> datetime:
    return instant.replace(hour=0, minute=0, second=0, microsecond=0)


def _add_months(instant: datetime, months: int) -> datetime:
    index = instant.month - 1 + months
    year, month = instant.year + index // 12, index % 12 + 1
    day = min(instant.day, calendar.monthrange(year, month)[1])
    return instant.replace(year=year, month=month, day=day)


def shift(instant: datetime, kind: str, steps: int = 1) -> datetime:
    """Move ``instant`` by ``steps`` whole periods, clamping month ends.

    shift(Jan 31, "monthly") == Feb 29 in a leap year.
    """
    kind = normalize_kind(kind)
    if kind == DAILY:
        return instant + timedelta(days=steps)
    if kind == WEEKLY:
        return instant + timedelta(weeks=steps)
    if kind == MONTHLY:
        return _add_months(instant, steps)
    return _add_months(instant, 12 * steps)


def period_start(reference: datetime, kind: str) -> datetime:
    kind = normalize_kind(kind)
    day = _midnight(to_instant(reference))
    if kind == DAILY:
        return day
    if kind == WEEKLY:
        return day - timedelta(days=day.weekday())
    if kind == MONTHLY:
        return day.replace(day=1)
    return day.replace(month=1, day=1)


def period_bounds(reference: Optional[datetime] = None, kind: str = MONTHLY) -> Bounds:
    start = period_start(reference or datetime.now(), kind)
    return start, shift(start, kind)


def previous_period_bounds(reference: Optional[datetime] = None, kind: str = MONTHLY) -> Bounds:
    start, _ = period_bounds(reference, kind)
    return shift(start, kind, -1), start


def period_key(start: datetime, kind: str) -> str:
    kind = normalize_kind(kind)
    if kind == DAILY:
        return start.strftime("%Y-%m-%d")
    if kind == WEEKLY:
        year, week, _ = start.isocalendar()
        return f"{year}-W{week:02d}"
    if kind == MONTHLY:
        return start.strftime("%Y-%m")
    return str(start.year)


def period_label(start: datetime, kind: str) -> str:
    kind = normalize_kind(kind)
    if kind == DAILY:
        return f"{start:%B} {start.day}, {start.year}"
    if kind == WEEKLY:
        return f"Week of {start:%B} {start.day}, {start.year}"
    if kind == MONTHLY:
        return f"{start:%B %Y}"
    return str(start.year)


def period_days(kind: str, reference: Optional[datetime] = None) -> int:
    start, end = period_bounds(reference, kind)
    return (end - start).days


def parse_range(start, end) -> Bounds:
    """Turn a pair of ISO strings or dates into instants, refusing inverted ranges."""
    start, end = to_instant(start), to_instant(end)
    if end < start:
        raise InvalidArgument(f"Range ends ({end:%Y-%m-%d}) before it starts ({start:%Y-%m-%d})")
    return start, end


__all__ = [
    "DAILY",
    "WEEKLY",
    "MONTHLY",
    "YEARLY",
    "Bounds",
    "shift",
    "period_start",
    "period_bounds",
    "previous_period_bounds",
    "period_key",
    "period_label",
    "period_days",
    "parse_range",
]
