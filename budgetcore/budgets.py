import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple

from budgetcore import config
from budgetcore.bucketing import total_in
from budgetcore.domain import (
    CENT,
    ZERO,
    Budget,
    BudgetStatus,
    InvalidArgument,
    Thresholds,
    Transaction,
    Trend,
    to_amount,
)
from budgetcore.functional import Maybe, Nothing, Some
from budgetcore.periods import period_bounds, previous_period_bounds

logger = logging.getLogger(__name__)

NORMAL = "normal"
WARNING = "warning"
CRITICAL = "critical"

HUNDRED = Decimal(100)


def _spend(value, label: str) -> Decimal:
    amount = to_amount(value)
    if amount < 0:
        raise InvalidArgument(f"{label} cannot be negative: {amount}")
    return amount


def _ratio(part: Decimal, whole: Decimal) -> Decimal:
    if whole <= 0:
        return ZERO
    return part / whole * HUNDRED


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    return _ratio(part, whole).quantize(CENT, rounding=ROUND_HALF_UP)


def classify(percentage_used: Decimal, thresholds: Optional[Thresholds] = None) -> str:
    thresholds = thresholds or Thresholds()
    if percentage_used >= thresholds.critical:
        return CRITICAL
    if percentage_used >= thresholds.warning:
        return WARNING
    return NORMAL


def compare(current, previous) -> Trend:
    current, previous = to_amount(current), to_amount(previous)
    delta = current - previous
    direction = "up" if delta > 0 else "down" if delta < 0 else "flat"
    return Trend(
        current=current,
        previous=previous,
        delta=delta,
        delta_percent=_percent(delta, previous),
        direction=direction,
    )


def evaluate(
    b: Budget,
    current_spend,
    previous_spend=ZERO,
    thresholds: Optional[Thresholds] = None,
) -> BudgetStatus:
    spent = _spend(current_spend, "current spend")
    previous = _spend(previous_spend, "previous spend")
    ratio = _ratio(spent, b.amount)

    return BudgetStatus(
        period=b.period,
        budget_amount=b.amount,
        spent=spent,
        remaining=max(ZERO, b.amount - spent),
        percentage_used=ratio.quantize(CENT, rounding=ROUND_HALF_UP),
        # classified before rounding: 99.995% with money left is not critical
        status=classify(ratio, thresholds),
        trend=compare(spent, previous),
    )


def evaluate_all(
    budgets: Iterable[Budget],
    expenses: Iterable[Transaction],
    reference: Optional[datetime] = None,
    thresholds: Optional[Thresholds] = None,
) -> Tuple[BudgetStatus, ...]:
    """Evaluate every budget against the spend of its own current and previous period."""
    reference = reference or datetime.now()
    expenses = tuple(expenses)
    statuses = []
    for b in budgets:
        current = total_in(expenses, *period_bounds(reference, b.period))
        previous = total_in(expenses, *previous_period_bounds(reference, b.period))
        status = evaluate(b, current, previous, thresholds)
        if status.status != NORMAL:
            logger.info("%s budget %s at %s%% (%s)", b.period, b.id, status.percentage_used, status.status)
        statuses.append(status)
    return tuple(statuses)


@dataclass(frozen=True)
class Insight:
    period: str
    status: str
    message: str
    recommendation: str


_PREVIOUS = {
    "daily": "yesterday",
    "weekly": "last week",
    "monthly": "last month",
    "yearly": "last year",
}

_NEXT = {
    "daily": "tomorrow",
    "weekly": "next week",
    "monthly": "next month",
    "yearly": "next year",
}


def budget_insight(s: BudgetStatus) -> Maybe[Insight]:
    """Plain-language summary of a budget status, Nothing for a zero budget."""
    if s.budget_amount <= 0:
        return Nothing()

    previous = _PREVIOUS[s.period]
    spending_more = s.trend is not None and s.trend.direction == "up"

    if s.status == CRITICAL:
        over = s.spent - s.budget_amount
        if over > 0:
            message = f"You've exceeded your {s.period} budget by {config.CURRENCY_SYMBOL}{over:.2f}"
        else:
            message = f"You're at {s.percentage_used:.0f}% of your {s.period} budget"
        recommendation = (
            f"You're spending more than {previous}. Review your expenses."
            if spending_more
            else f"Try to stay within budget {_NEXT[s.period]}."
        )
    elif s.status == WARNING:
        message = f"You're at {s.percentage_used:.0f}% of your {s.period} budget"
        recommendation = (
            f"You're spending more than {previous}. Slow down on expenses."
            if spending_more
            else f"You're doing better than {previous}. Keep it up!"
        )
    else:
        message = f"You're at {s.percentage_used:.0f}% of your {s.period} budget"
        recommendation = (
            f"You're spending more than {previous} but still within budget."
            if spending_more
            else "Great job staying under budget!"
        )

    return Some(Insight(period=s.period, status=s.status, message=message, recommendation=recommendation))
