from collections import defaultdict
from decimal import Decimal, ROUND_FLOOR
from itertools import islice
from typing import Dict, Iterable, Iterator, Tuple

from budgetcore.domain import CENT, ZERO, CategoryShare, Transaction

UNCATEGORIZED = "Uncategorized"

HUNDRED = Decimal(100)


def category_of(t: Transaction) -> str:
    name = str(t.category_name).strip() if t.category_name is not None else ""
    return name or UNCATEGORIZED


def _percentages(totals: Tuple[Decimal, ...]) -> Tuple[Decimal, ...]:
    """Round shares to cents with the largest-remainder method.

    The rounded values always add up to exactly 100.00 when the grand
    total is positive; leftover cents go to the largest remainders, ties
    to the earlier entry.
    """
    grand = sum(totals, ZERO)
    if grand <= 0:
        return tuple(ZERO for _ in totals)

    raw = [total * HUNDRED / grand for total in totals]
    floored = [value.quantize(CENT, rounding=ROUND_FLOOR) for value in raw]
    leftover = int((HUNDRED - sum(floored, ZERO)) / CENT)

    by_remainder = sorted(range(len(raw)), key=lambda i: raw[i] - floored[i], reverse=True)
    for i in by_remainder[:leftover]:
        floored[i] += CENT
    return tuple(floored)


def aggregate(trans: Iterable[Transaction]) -> Tuple[CategoryShare, ...]:
    totals: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    counts: Dict[str, int] = defaultdict(int)

    for t in trans:
        name = category_of(t)
        totals[name] += t.amount
        counts[name] += 1

    # sorted() is stable, so equal totals keep first-seen order
    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    percentages = _percentages(tuple(total for _, total in ordered))

    return tuple(
        CategoryShare(category_name=name, total=total, count=counts[name], percentage=pct)
        for (name, total), pct in zip(ordered, percentages)
    )


def top_categories(shares: Iterable[CategoryShare], k: int) -> Iterator[CategoryShare]:
    yield from islice(shares, max(0, k))


def breakdown(shares: Iterable[CategoryShare]) -> Dict[str, dict]:
    return {
        s.category_name: {
            "total": float(s.total),
            "count": s.count,
            "percentage": float(s.percentage),
        }
        for s in shares
    }
