from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Generic, Iterable, TypeVar

from budgetcore.domain import Budget, InvalidArgument, Transaction, normalize_kind

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Right carries no error")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def _missing(row: Dict[str, Any], *names: str) -> Either[dict, Dict[str, Any]]:
    if not isinstance(row, dict):
        return Left({
            "error": "invalid_row",
            "message": f"Expected an object, got {type(row).__name__}",
            "fields": list(names),
        })
    absent = [n for n in names if row.get(n) in (None, "")]
    if absent:
        return Left({
            "error": "missing_fields",
            "message": f"Missing required fields: {', '.join(absent)}",
            "fields": absent,
        })
    return Right(row)


def parse_transaction(row: Dict[str, Any]) -> Either[dict, Transaction]:
    """Build a Transaction from a raw record as the API or a JSON export delivers it.

    Accepts either a flat ``categoryName`` or the nested ``category: {name}``
    object the relational store returns.
    """
    def build(r: Dict[str, Any]) -> Either[dict, Transaction]:
        category = r.get("categoryName", r.get("category_name"))
        if category is None and isinstance(r.get("category"), dict):
            category = r["category"].get("name")
        elif category is None:
            category = r.get("category")
        try:
            return Right(Transaction(
                id=str(r["id"]),
                amount=r["amount"],
                date=r["date"],
                category_name=category,
                description=r.get("description") or "",
            ))
        except InvalidArgument as e:
            return Left({"error": "invalid_transaction", "message": str(e), "id": r.get("id")})

    return _missing(row, "id", "amount", "date").bind(build)


def parse_budget(row: Dict[str, Any]) -> Either[dict, Budget]:
    def build(r: Dict[str, Any]) -> Either[dict, Budget]:
        try:
            return Right(Budget(id=str(r["id"]), period=r["period"], amount=r["amount"]))
        except InvalidArgument as e:
            return Left({"error": "invalid_budget", "message": str(e), "id": r.get("id")})

    return _missing(row, "id", "period", "amount").bind(build)


def safe_budget(budgets: Iterable[Budget], kind: str) -> Maybe[Budget]:
    kind = normalize_kind(kind)
    for b in budgets:
        if b.period == kind:
            return Some(b)
    return Nothing()


def pipe(x, *funcs):
    """Pipe a value through a series of functions.

    pipe(x, f, g, h) == h(g(f(x)))
    """
    res = x
    for f in funcs:
        res = f(res)
    return res
