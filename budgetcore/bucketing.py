import logging
from bisect import bisect_right
from collections import defaultdict
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from budgetcore.categories import category_of
from budgetcore.domain import ZERO, PeriodBucket, Transaction, normalize_kind, to_instant
from budgetcore.periods import parse_range, period_key, period_start, shift

logger = logging.getLogger(__name__)

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def bucket_edges(kind: str, range_start: datetime, range_end: datetime) -> List[Tuple[datetime, datetime]]:
    """Half-open intervals of one period each, anchored at range_start.

    Steps are taken from the anchor rather than from the previous edge so
    month-end clamping never drifts (Jan 31, Feb 29, Mar 31, ...).  The last
    interval is clipped at range_end.
    """
    edges = []
    step = 0
    start = range_start
    while start < range_end:
        end = min(shift(range_start, kind, step + 1), range_end)
        edges.append((start, end))
        step += 1
        start = end
    return edges


def bucketize(
    trans: Iterable[Transaction],
    kind: str,
    range_start: datetime,
    range_end: datetime,
) -> Tuple[PeriodBucket, ...]:
    """Partition transactions into consecutive period buckets.

    Every period step between ``range_start`` and ``range_end`` gets a
    bucket, including empty ones.  A transaction dated exactly on an edge
    lands in the bucket starting there; anything outside the range is
    dropped.
    """
    kind = normalize_kind(kind)
    range_start, range_end = parse_range(range_start, range_end)
    edges = bucket_edges(kind, range_start, range_end)
    starts = [start for start, _ in edges]

    totals: List[Decimal] = [ZERO] * len(edges)
    counts: List[int] = [0] * len(edges)
    by_category: List[Dict[str, Decimal]] = [defaultdict(lambda: ZERO) for _ in edges]

    dropped = 0
    for t in trans:
        if not (range_start <= t.date < range_end):
            dropped += 1
            continue
        i = bisect_right(starts, t.date) - 1
        totals[i] += t.amount
        counts[i] += 1
        by_category[i][category_of(t)] += t.amount

    if dropped:
        logger.debug("bucketize(%s): %d transaction(s) outside %s..%s", kind, dropped, range_start, range_end)

    return tuple(
        PeriodBucket(
            key=period_key(start, kind),
            start=start,
            end=end,
            total=totals[i],
            count=counts[i],
            by_category=dict(by_category[i]),
        )
        for i, (start, end) in enumerate(edges)
    )


def trend_range(kind: str, reference: Optional[datetime] = None, months: int = 6) -> Tuple[datetime, datetime]:
    """Calendar-aligned range covering the last ``months`` months up to the reference period."""
    reference = to_instant(reference or datetime.now())
    start = period_start(shift(reference, "monthly", -months), kind)
    end = shift(period_start(reference, kind), kind)
    return start, end


def total_in(trans: Iterable[Transaction], start: datetime, end: datetime) -> Decimal:
    return sum((t.amount for t in trans if start <= t.date < end), ZERO)


def spending_by_weekday(trans: Iterable[Transaction]) -> Dict[str, Decimal]:
    totals = {day: ZERO for day in WEEKDAYS}
    for t in trans:
        totals[WEEKDAYS[t.date.weekday()]] += t.amount
    return totals


def daily_trend(
    trans: Iterable[Transaction], reference: Optional[datetime] = None, days: int = 7
) -> Tuple[PeriodBucket, ...]:
    """One daily bucket for each of the last ``days`` days, today included."""
    end = period_start(reference or datetime.now(), "daily") + timedelta(days=1)
    return bucketize(trans, "daily", end - timedelta(days=days), end)
