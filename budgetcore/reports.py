"""Expense report rendering.

Turns the outputs of the bucketing, budget and category modules into the
digest that is returned from the API or mailed on a schedule.  This module
only formats; every number it prints was computed elsewhere.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

import pandas as pd

from budgetcore import config
from budgetcore.budgets import budget_insight
from budgetcore.categories import category_of
from budgetcore.domain import ZERO, BudgetStatus, CategoryShare, PeriodBucket, Transaction, normalize_kind
from budgetcore.periods import period_label

REPORT_COLUMNS = ["period", "start", "end", "total", "count"]

# the mailed digest lists fewer rows than the structured payload carries
RECENT_LIMIT = 10
RECENT_TEXT_LIMIT = 5


@dataclass(frozen=True)
class Report:
    subject: str
    text: str
    structured: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return bool(self.structured.get("empty"))


def money(amount: Decimal) -> str:
    return f"{config.CURRENCY_SYMBOL}{amount:,.2f}"


def _label(period: Optional[PeriodBucket], kind: Optional[str]) -> str:
    if period is None:
        return "this period"
    if kind:
        return period_label(period.start, kind)
    return period.key


def _budget_line(s: BudgetStatus) -> str:
    line = (
        f"{s.period.capitalize()}: {s.status} ({s.percentage_used:.1f}% used, "
        f"{money(s.spent)} of {money(s.budget_amount)}, {money(s.remaining)} left)"
    )
    return budget_insight(s).map(lambda i: f"{line}\n  {i.recommendation}").get_or_else(line)


def _structured_budget(s: BudgetStatus) -> Dict[str, Any]:
    out = {
        "period": s.period,
        "budget": float(s.budget_amount),
        "spent": float(s.spent),
        "remaining": float(s.remaining),
        "percentageUsed": float(s.percentage_used),
        "status": s.status,
    }
    if s.trend is not None:
        out["trend"] = {
            "previous": float(s.trend.previous),
            "delta": float(s.trend.delta),
            "deltaPercent": float(s.trend.delta_percent),
            "direction": s.trend.direction,
        }
    return out


def _structured_share(s: CategoryShare) -> Dict[str, Any]:
    return {
        "category": s.category_name,
        "total": float(s.total),
        "count": s.count,
        "percentage": float(s.percentage),
    }


def recent_first(trans: Iterable[Transaction], limit: int = RECENT_LIMIT) -> Tuple[Transaction, ...]:
    """Newest first, at most ``limit`` of them; equal dates keep input order."""
    return tuple(sorted(trans, key=lambda t: t.date, reverse=True)[:max(0, limit)])


def _structured_transaction(t: Transaction) -> Dict[str, Any]:
    return {
        "id": t.id,
        "date": t.date.isoformat(),
        "amount": float(t.amount),
        "category": category_of(t),
        "description": t.description,
    }


def _transaction_line(t: Transaction) -> str:
    return f"{t.date:%Y-%m-%d} {t.description or category_of(t)}: {money(t.amount)}"


def format_report(
    period: Optional[PeriodBucket],
    budget_statuses: Sequence[BudgetStatus] = (),
    category_shares: Sequence[CategoryShare] = (),
    kind: Optional[str] = None,
    income_shares: Sequence[CategoryShare] = (),
    recent_expenses: Iterable[Transaction] = (),
    recent_income: Iterable[Transaction] = (),
) -> Report:
    kind = normalize_kind(kind) if kind else None
    label = _label(period, kind)
    heading = f"{kind.capitalize()} Expense Report" if kind else "Expense Report"
    subject = f"{label} - {heading}"

    total_expenses = period.total if period is not None else ZERO
    total_income = sum((s.total for s in income_shares), ZERO)
    net = total_income - total_expenses
    recent_expenses = recent_first(recent_expenses)
    recent_income = recent_first(recent_income)
    empty = (
        (period is None or period.count == 0)
        and not income_shares
        and not budget_statuses
        and not recent_expenses
        and not recent_income
    )

    structured = {
        "period": {
            "label": label,
            "key": period.key if period is not None else None,
            "start": period.start.isoformat() if period is not None else None,
            "end": period.end.isoformat() if period is not None else None,
        },
        "totals": {
            "expenses": float(total_expenses),
            "income": float(total_income),
            "net": float(net),
            "transactions": period.count if period is not None else 0,
        },
        "budgets": [_structured_budget(s) for s in budget_statuses],
        "categories": [_structured_share(s) for s in category_shares],
        "income": [_structured_share(s) for s in income_shares],
        "recentExpenses": [_structured_transaction(t) for t in recent_expenses],
        "recentIncome": [_structured_transaction(t) for t in recent_income],
        "empty": empty,
    }

    lines = [f"{label} - {heading}", ""]
    if empty:
        lines.append(f"No transactions recorded for {label}.")
        return Report(subject=subject, text="\n".join(lines), structured=structured)

    lines += [
        "SUMMARY:",
        f"Total Income: {money(total_income)}",
        f"Total Expenses: {money(total_expenses)}",
        f"Net Income: {money(net)}",
        "",
    ]
    if income_shares:
        lines.append("INCOME BREAKDOWN:")
        lines += [f"{s.category_name}: {money(s.total)}" for s in income_shares]
        lines.append("")
    if category_shares:
        lines.append("EXPENSE BREAKDOWN:")
        lines += [
            f"{s.category_name}: {money(s.total)} ({s.percentage:.1f}%)"
            for s in category_shares
        ]
        lines.append("")
    if budget_statuses:
        lines.append("BUDGET PERFORMANCE:")
        lines += [_budget_line(s) for s in budget_statuses]
        lines.append("")
    if recent_expenses:
        lines.append("RECENT EXPENSES:")
        lines += [_transaction_line(t) for t in recent_expenses[:RECENT_TEXT_LIMIT]]
        lines.append("")
    if recent_income:
        lines.append("RECENT INCOME:")
        lines += [_transaction_line(t) for t in recent_income[:RECENT_TEXT_LIMIT]]

    return Report(subject=subject, text="\n".join(lines).rstrip() + "\n", structured=structured)


def report_frame(buckets: Iterable[PeriodBucket]) -> pd.DataFrame:
    """One row per bucket plus one column per category seen in any bucket."""
    rows = []
    for b in buckets:
        row = {
            "period": b.key,
            "start": b.start,
            "end": b.end,
            "total": float(b.total),
            "count": b.count,
        }
        row.update({name: float(amount) for name, amount in b.by_category.items()})
        rows.append(row)

    df = pd.DataFrame(rows)
    if df.empty:
        return pd.DataFrame(columns=REPORT_COLUMNS)
    category_columns = [c for c in df.columns if c not in REPORT_COLUMNS]
    if category_columns:
        df[category_columns] = df[category_columns].fillna(0.0)
    return df[REPORT_COLUMNS + category_columns]


def export_csv(buckets: Iterable[PeriodBucket], path: Optional[str] = None) -> str:
    """CSV text of ``report_frame``; also written to ``path`` when given."""
    csv = report_frame(buckets).to_csv(index=False)
    if path:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(csv)
    return csv
