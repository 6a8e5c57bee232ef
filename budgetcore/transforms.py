import json
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from functools import reduce
from typing import Callable, Iterable, List, Tuple

from budgetcore.domain import ZERO, Budget, InvalidArgument, Transaction
from budgetcore.functional import Either, parse_budget, parse_transaction

logger = logging.getLogger(__name__)

SECTIONS = ("expenses", "income", "budgets")


class MalformedSnapshot(InvalidArgument):
    """The data does not have the expenses/income/budgets object shape."""


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time copy of one owner's records."""
    expenses: Tuple[Transaction, ...] = ()
    income: Tuple[Transaction, ...] = ()
    budgets: Tuple[Budget, ...] = ()


def _collect(rows: Iterable[dict], parse: Callable[[dict], Either], label: str) -> tuple:
    accepted: List = []
    for row in rows:
        result = parse(row)
        if result.is_right():
            accepted.append(result.get_or_else(None))
        else:
            logger.warning("Skipping %s row: %s", label, result.get_error()["message"])
    return tuple(accepted)


def snapshot_from_dict(data: dict) -> Snapshot:
    if not isinstance(data, dict):
        raise MalformedSnapshot(f"Expected a JSON object with {', '.join(SECTIONS)}, got {type(data).__name__}")
    for section in SECTIONS:
        if not isinstance(data.get(section, []), list):
            raise MalformedSnapshot(f"'{section}' must be a list")

    return Snapshot(
        expenses=_collect(data.get("expenses", ()), parse_transaction, "expense"),
        income=_collect(data.get("income", ()), parse_transaction, "income"),
        budgets=_collect(data.get("budgets", ()), parse_budget, "budget"),
    )


def load_snapshot(path: str) -> Snapshot:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    snap = snapshot_from_dict(data)
    logger.info(
        "Loaded %d expenses, %d income records, %d budgets from %s",
        len(snap.expenses), len(snap.income), len(snap.budgets), path,
    )
    return snap


def add_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    return trans + (t,)


def update_budget(
    budgets: Tuple[Budget, ...], bid: str, new_amount
) -> Tuple[Budget, ...]:
    return tuple(
        replace(b, amount=new_amount) if b.id == bid else b
        for b in budgets
    )


def in_range(
    trans: Iterable[Transaction], start: datetime, end: datetime
) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: start <= t.date < end, trans))


def total_amount(trans: Iterable[Transaction]) -> Decimal:
    return reduce(lambda acc, t: acc + t.amount, trans, ZERO)
