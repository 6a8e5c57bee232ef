from datetime import datetime
from decimal import Decimal

import pytest

from budgetcore.budgets import budget_insight, classify, compare, evaluate, evaluate_all
from budgetcore.domain import Budget, InvalidArgument, Thresholds, Transaction


def make_budget(amount, period="monthly"):
    return Budget(id="b1", period=period, amount=amount)


def make_tx(id, amount, ts):
    return Transaction(id=id, amount=amount, date=ts)


def test_spending_the_whole_budget_is_critical():
    s = evaluate(make_budget(500), 500, 0)
    assert s.status == "critical"
    assert s.remaining == 0
    assert s.percentage_used == Decimal("100.00")


def test_eighty_four_percent_is_warning():
    s = evaluate(make_budget(500), 420, 0)
    assert s.status == "warning"
    assert s.percentage_used == Decimal("84.00")
    assert s.remaining == Decimal("80.00")


def test_under_warning_is_normal():
    s = evaluate(make_budget(500), "100.50")
    assert s.status == "normal"
    assert s.percentage_used == Decimal("20.10")
    assert s.remaining == Decimal("399.50")


def test_overspending_keeps_remaining_at_zero():
    s = evaluate(make_budget(100), 150)
    assert s.remaining == 0
    assert s.percentage_used == Decimal("150.00")
    assert s.status == "critical"


def test_zero_budget_never_divides():
    s = evaluate(make_budget(0), 75)
    assert s.percentage_used == 0
    assert s.status == "normal"
    assert s.remaining == 0


def test_percentage_is_rounded_to_cents():
    s = evaluate(make_budget(3), 1)
    assert s.percentage_used == Decimal("33.33")


def test_status_uses_unrounded_percentage():
    # 99.995% shows as 100.00 but money is still left
    s = evaluate(make_budget("33333.33"), "33331.67")
    assert s.percentage_used == Decimal("100.00")
    assert s.remaining == Decimal("1.66")
    assert s.status == "warning"


def test_monotonic_in_current_spend():
    b = make_budget(500)
    statuses = [evaluate(b, spend) for spend in range(0, 800, 35)]
    for a, c in zip(statuses, statuses[1:]):
        assert a.percentage_used <= c.percentage_used
        assert a.remaining >= c.remaining
        assert c.remaining >= 0


def test_custom_critical_threshold():
    thresholds = Thresholds(warning=80, critical=95)
    assert evaluate(make_budget(100), 96, thresholds=thresholds).status == "critical"
    assert evaluate(make_budget(100), 94, thresholds=thresholds).status == "warning"
    assert classify(Decimal("79.99")) == "normal"
    assert classify(Decimal("80")) == "warning"


def test_thresholds_must_be_ordered():
    with pytest.raises(InvalidArgument):
        Thresholds(warning=90, critical=80)


def test_negative_spend_is_rejected():
    with pytest.raises(InvalidArgument):
        evaluate(make_budget(100), -1)
    with pytest.raises(InvalidArgument):
        evaluate(make_budget(100), 10, -5)


def test_negative_budget_is_rejected():
    with pytest.raises(InvalidArgument):
        make_budget(-10)


def test_trend_against_previous_period():
    t = compare(150, 100)
    assert t.delta == Decimal("50.00")
    assert t.delta_percent == Decimal("50.00")
    assert t.direction == "up"

    t = compare(80, 100)
    assert t.delta == Decimal("-20.00")
    assert t.delta_percent == Decimal("-20.00")
    assert t.direction == "down"


def test_trend_without_previous_spend():
    t = compare(10, 0)
    assert t.delta == Decimal("10.00")
    assert t.delta_percent == 0
    assert compare(0, 0).direction == "flat"


def test_evaluate_all_uses_each_budget_period():
    expenses = (
        make_tx("t1", 40, "2024-03-15 09:00"),
        make_tx("t2", 60, "2024-03-14"),
        make_tx("t3", 200, "2024-02-20"),
    )
    budgets = (make_budget(100, "daily"), Budget(id="b2", period="monthly", amount=1000))
    daily, monthly = evaluate_all(budgets, expenses, datetime(2024, 3, 15, 18))

    assert daily.spent == Decimal("40.00")
    assert daily.trend.previous == Decimal("60.00")
    assert daily.trend.direction == "down"
    assert monthly.spent == Decimal("100.00")
    assert monthly.trend.previous == Decimal("200.00")
    assert monthly.status == "normal"


def test_insight_for_exceeded_budget():
    s = evaluate(make_budget(100, "daily"), 120, 100)
    insight = budget_insight(s)
    assert insight.is_some()
    value = insight.get_or_else(None)
    assert value.status == "critical"
    assert "exceeded your daily budget by" in value.message
    assert "20.00" in value.message
    assert "yesterday" in value.recommendation


def test_insight_for_warning_doing_better():
    s = evaluate(make_budget(500, "weekly"), 420, 450)
    value = budget_insight(s).get_or_else(None)
    assert value.message == "You're at 84% of your weekly budget"
    assert value.recommendation == "You're doing better than last week. Keep it up!"


def test_no_insight_for_zero_budget():
    assert budget_insight(evaluate(make_budget(0), 10)).is_none()
