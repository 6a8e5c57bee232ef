import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional, Tuple

from budgetcore.bucketing import total_in
from budgetcore.domain import Budget, Transaction
from budgetcore.functional import Maybe, safe_budget
from budgetcore.periods import period_bounds
from budgetcore.transforms import Snapshot, add_transaction, update_budget

logger = logging.getLogger(__name__)


class SpendingCache:
    """Caller-owned copy of one owner's expenses, income and budgets.

    Nothing is loaded until ``refresh()`` is called, and nothing is reloaded
    behind the caller's back.  ``loader`` is any zero-argument callable
    returning a ``Snapshot``: a database query, an API call, or
    ``functools.partial(load_snapshot, path)``.
    """

    def __init__(self, loader: Callable[[], Snapshot]):
        self._loader = loader
        self._snapshot = Snapshot()
        self.loaded_at: Optional[datetime] = None

    def refresh(self) -> Snapshot:
        self._snapshot = self._loader()
        self.loaded_at = datetime.now()
        logger.debug("Cache refreshed at %s", self.loaded_at)
        return self._snapshot

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def expenses(self) -> Tuple[Transaction, ...]:
        return self._snapshot.expenses

    @property
    def income(self) -> Tuple[Transaction, ...]:
        return self._snapshot.income

    @property
    def budgets(self) -> Tuple[Budget, ...]:
        return self._snapshot.budgets

    def add_expense(self, t: Transaction) -> None:
        """Local optimistic update; the next refresh() replaces it with stored data."""
        self._snapshot = Snapshot(
            expenses=add_transaction(self.expenses, t),
            income=self.income,
            budgets=self.budgets,
        )

    def add_income(self, t: Transaction) -> None:
        self._snapshot = Snapshot(
            expenses=self.expenses,
            income=add_transaction(self.income, t),
            budgets=self.budgets,
        )

    def set_budget_amount(self, bid: str, amount) -> None:
        self._snapshot = Snapshot(
            expenses=self.expenses,
            income=self.income,
            budgets=update_budget(self.budgets, bid, amount),
        )

    def budget_for(self, kind: str) -> Maybe[Budget]:
        return safe_budget(self.budgets, kind)

    def current_spending(self, kind: str, reference: Optional[datetime] = None) -> Decimal:
        return total_in(self.expenses, *period_bounds(reference, kind))
