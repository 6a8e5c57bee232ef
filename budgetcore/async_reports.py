import asyncio
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from budgetcore.bucketing import total_in
from budgetcore.domain import PERIOD_KINDS, Transaction
from budgetcore.periods import period_bounds, previous_period_bounds


async def gather_labeled(**jobs: Callable[[], Any]) -> Dict[str, Any]:
    """Run independent zero-argument jobs as one gather and join them by label.

    Each job runs to completion inside its own task and then yields to the
    loop, so jobs are interleaved with other coroutines, not run in threads.
    Results are matched back to their keyword, never to their position, so
    adding or reordering jobs cannot mix up fields.
    """
    async def run(label: str, job: Callable[[], Any]) -> Tuple[str, Any]:
        result = job()
        await asyncio.sleep(0)  # cooperate
        return label, result

    results = await asyncio.gather(*(run(label, job) for label, job in jobs.items()))
    return {label: value for label, value in results}


async def spending_by_kind(
    expenses: Iterable[Transaction],
    reference: Optional[datetime] = None,
    kinds: Iterable[str] = PERIOD_KINDS,
) -> Dict[str, Tuple[Decimal, Decimal]]:
    """Current and previous period spend for every kind, computed in parallel."""
    expenses = tuple(expenses)
    reference = reference or datetime.now()

    def totals(kind: str) -> Callable[[], Tuple[Decimal, Decimal]]:
        return lambda: (
            total_in(expenses, *period_bounds(reference, kind)),
            total_in(expenses, *previous_period_bounds(reference, kind)),
        )

    return await gather_labeled(**{kind: totals(kind) for kind in kinds})


async def dashboard_snapshot(service, period: str = "monthly",
                             reference: Optional[datetime] = None) -> Dict[str, Any]:
    """Everything the home screen shows, fetched as one fan-out."""
    reference = reference or service.clock()
    return await gather_labeled(
        overview=lambda: service.overview(period, reference),
        trends=lambda: service.spending_trends(period, reference=reference),
        breakdown=lambda: service.category_breakdown("expenses"),
        budget_progress=lambda: service.budget_progress(period, reference),
    )
