from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Optional

from budgetcore import config

DAILY = "daily"
WEEKLY = "weekly"
MONTHLY = "monthly"
YEARLY = "yearly"

PERIOD_KINDS = (DAILY, WEEKLY, MONTHLY, YEARLY)

# spellings the HTTP routes accepted for ?period=
_KIND_ALIASES = {
    "day": DAILY,
    "today": DAILY,
    "week": WEEKLY,
    "month": MONTHLY,
    "year": YEARLY,
}

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


class InvalidArgument(ValueError):
    """Raised when a caller hands the core something it cannot compute with."""


def normalize_kind(kind: str) -> str:
    if not isinstance(kind, str):
        raise InvalidArgument(f"Unknown period kind: {kind!r}")
    key = kind.strip().lower()
    key = _KIND_ALIASES.get(key, key)
    if key not in PERIOD_KINDS:
        raise InvalidArgument(f"Unknown period kind: {kind!r}")
    return key


def to_amount(value) -> Decimal:
    """Coerce a number or numeric string to a two-digit Decimal."""
    if isinstance(value, bool) or value is None:
        raise InvalidArgument(f"Not an amount: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        if amount.is_finite():
            return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        pass
    raise InvalidArgument(f"Not an amount: {value!r}")


def to_instant(value) -> datetime:
    """Coerce to a naive local datetime.

    Aware values (``...+02:00``, ``...Z``) are converted to local wall-clock
    time first, so they compare against period bounds like any other date.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidArgument(f"Not a date: {value!r}") from None
        return to_instant(parsed)
    raise InvalidArgument(f"Not a date: {value!r}")


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: Decimal                      # always >= 0, expense or income
    date: datetime
    category_name: Optional[str] = None  # None means uncategorized
    description: str = ""

    def __post_init__(self):
        amount = to_amount(self.amount)
        if amount < 0:
            raise InvalidArgument(f"Transaction {self.id} has a negative amount")
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "date", to_instant(self.date))


# One spending ceiling per period kind
@dataclass(frozen=True)
class Budget:
    id: str
    period: str
    amount: Decimal

    def __post_init__(self):
        amount = to_amount(self.amount)
        if amount < 0:
            raise InvalidArgument(f"Budget {self.id} has a negative amount")
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "period", normalize_kind(self.period))


@dataclass(frozen=True)
class PeriodBucket:
    key: str
    start: datetime
    end: datetime       # exclusive
    total: Decimal = ZERO
    count: int = 0
    by_category: Dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class CategoryShare:
    category_name: str
    total: Decimal
    count: int
    percentage: Decimal  # 0..100


@dataclass(frozen=True)
class Trend:
    current: Decimal
    previous: Decimal
    delta: Decimal
    delta_percent: Decimal
    direction: str  # "up", "down" or "flat"


@dataclass(frozen=True)
class BudgetStatus:
    period: str
    budget_amount: Decimal
    spent: Decimal
    remaining: Decimal
    percentage_used: Decimal
    status: str  # "normal", "warning" or "critical"
    trend: Optional[Trend] = None


@dataclass(frozen=True)
class Thresholds:
    warning: Decimal = config.WARNING_THRESHOLD
    critical: Decimal = config.CRITICAL_THRESHOLD

    def __post_init__(self):
        warning, critical = Decimal(str(self.warning)), Decimal(str(self.critical))
        if warning < 0 or critical < warning:
            raise InvalidArgument(
                f"Thresholds must satisfy 0 <= warning <= critical, got {warning}/{critical}"
            )
        object.__setattr__(self, "warning", warning)
        object.__setattr__(self, "critical", critical)
