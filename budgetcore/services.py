import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from budgetcore import config
from budgetcore.bucketing import bucketize, spending_by_weekday, total_in, trend_range
from budgetcore.budgets import CRITICAL, WARNING, evaluate, evaluate_all
from budgetcore.cache import SpendingCache
from budgetcore.categories import aggregate, breakdown, top_categories
from budgetcore.domain import ZERO, BudgetStatus, InvalidArgument, Thresholds, normalize_kind
from budgetcore.events import BUDGET_CRITICAL, BUDGET_WARNING, REPORT_READY, EventBus
from budgetcore.periods import parse_range, period_bounds, period_days, previous_period_bounds
from budgetcore.reports import Report, format_report
from budgetcore.transforms import in_range

logger = logging.getLogger(__name__)

TRANSACTION_TYPES = ("expenses", "income")


def parse_months(value) -> int:
    try:
        months = int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"months must be a whole number, got {value!r}") from None
    if months < 1:
        raise InvalidArgument(f"months must be at least 1, got {months}")
    return months


class AnalyticsService:
    """Query-parameter level facade over a caller-owned SpendingCache.

    Each method mirrors one analytics/dashboard route: it takes the raw
    query values, runs the pure core functions against the cached
    snapshot, and returns the JSON-ready dict the route would send.

    cache: a SpendingCache the caller has already refreshed for one owner
    thresholds: budget status thresholds, config defaults when omitted
    bus: optional EventBus that receives budget alerts and finished reports
    clock: returns "now", injectable for tests
    """

    def __init__(
        self,
        cache: SpendingCache,
        thresholds: Optional[Thresholds] = None,
        bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.cache = cache
        self.thresholds = thresholds or Thresholds()
        self.bus = bus
        self.clock = clock

    def _reference(self, reference: Optional[datetime]) -> datetime:
        return reference or self.clock()

    def spending_trends(self, period: str = "monthly", months=config.DEFAULT_TREND_MONTHS,
                        reference: Optional[datetime] = None) -> Dict[str, Any]:
        kind = normalize_kind(period)
        months = parse_months(months)
        start, end = trend_range(kind, self._reference(reference), months)
        buckets = bucketize(self.cache.expenses, kind, start, end)
        return {
            "success": True,
            "period": kind,
            "months": months,
            "trends": {
                b.key: {
                    "total": float(b.total),
                    "count": b.count,
                    "categories": {name: float(v) for name, v in b.by_category.items()},
                }
                for b in buckets
            },
        }

    def category_breakdown(self, type: str = "expenses", start_date=None, end_date=None) -> Dict[str, Any]:
        if type not in TRANSACTION_TYPES:
            raise InvalidArgument("Type must be 'expenses' or 'income'")
        trans = self.cache.expenses if type == "expenses" else self.cache.income
        if start_date and end_date:
            start, end = parse_range(start_date, end_date)
            # endDate is a calendar day, so the whole day counts
            trans = in_range(trans, start, period_bounds(end, "daily")[1])

        shares = aggregate(trans)
        return {
            "success": True,
            "type": type,
            "total": float(sum((s.total for s in shares), ZERO)),
            "breakdown": breakdown(shares),
        }

    def budget_progress(self, period: str = "monthly", reference: Optional[datetime] = None) -> Dict[str, Any]:
        kind = normalize_kind(period)
        reference = self._reference(reference)
        start, end = period_bounds(reference, kind)
        budgets = [b for b in self.cache.budgets if b.period == kind]
        statuses = evaluate_all(budgets, self.cache.expenses, reference, self.thresholds)

        progress = []
        for b, s in zip(budgets, statuses):
            row = {
                "id": b.id,
                "period": s.period,
                "budget": float(s.budget_amount),
                "spent": float(s.spent),
                "remaining": float(s.remaining),
                "percentageUsed": float(s.percentage_used),
                "status": s.status,
            }
            progress.append(row)
            self._alert(s.status, row)

        return {
            "success": True,
            "period": kind,
            "dateRange": {"startDate": start.isoformat(), "endDate": end.isoformat()},
            "totalSpent": float(total_in(self.cache.expenses, start, end)),
            "budgetProgress": progress,
        }

    def _alert(self, status: str, payload: Dict[str, Any]) -> None:
        if self.bus is None:
            return
        if status == CRITICAL:
            self.bus.publish(BUDGET_CRITICAL, payload)
        elif status == WARNING:
            self.bus.publish(BUDGET_WARNING, payload)

    def overview(self, period: str = "monthly", reference: Optional[datetime] = None) -> Dict[str, Any]:
        kind = normalize_kind(period)
        reference = self._reference(reference)
        start, end = period_bounds(reference, kind)
        expenses = in_range(self.cache.expenses, start, end)
        income = in_range(self.cache.income, start, end)

        total_expenses = sum((t.amount for t in expenses), ZERO)
        total_income = sum((t.amount for t in income), ZERO)
        days = period_days(kind, reference)
        top = next(top_categories(aggregate(expenses), 1), None)
        budget = self.cache.budget_for(kind)

        return {
            "success": True,
            "period": kind,
            "dateRange": {"start": start.isoformat(), "end": end.isoformat()},
            "overview": {
                "totalExpenses": float(total_expenses),
                "totalIncome": float(total_income),
                "netAmount": float(total_income - total_expenses),
                "budgetAmount": budget.map(lambda b: float(b.amount)).get_or_else(0.0),
                "remainingBudget": budget.map(lambda b: float(b.amount - total_expenses)).get_or_else(0.0),
            },
            "insights": {
                "topCategory": top.category_name if top else None,
                "averagePerDay": float(total_expenses / days) if days else 0.0,
                "transactionCount": len(expenses),
                "dayOfWeekSpending": {
                    day: float(v) for day, v in spending_by_weekday(expenses).items()
                },
            },
            "periodDays": days,
        }

    def report(self, kind: str = "monthly", reference: Optional[datetime] = None) -> Report:
        kind = normalize_kind(kind)
        reference = self._reference(reference)
        start, end = period_bounds(reference, kind)
        bucket = bucketize(self.cache.expenses, kind, start, end)[0]

        budgets = [b for b in self.cache.budgets if b.period == kind]
        statuses = evaluate_all(budgets, self.cache.expenses, reference, self.thresholds)
        expenses = in_range(self.cache.expenses, start, end)
        income = in_range(self.cache.income, start, end)

        rep = format_report(
            bucket, statuses, aggregate(expenses), kind=kind,
            income_shares=aggregate(income),
            recent_expenses=expenses,
            recent_income=income,
        )
        logger.info("Built %s report %r (empty=%s)", kind, rep.subject, rep.is_empty)
        if self.bus is not None:
            self.bus.publish(REPORT_READY, {"subject": rep.subject, "empty": rep.is_empty})
        return rep

    def evaluate_kind(self, kind: str, reference: Optional[datetime] = None) -> Optional[BudgetStatus]:
        """BudgetStatus for the budget of one kind, or None when none is declared."""
        reference = self._reference(reference)
        return self.cache.budget_for(kind).map(
            lambda b: evaluate(
                b,
                self.cache.current_spending(b.period, reference),
                total_in(self.cache.expenses, *previous_period_bounds(reference, b.period)),
                self.thresholds,
            )
        ).get_or_else(None)
