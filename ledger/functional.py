import logging
import math
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Callable, Generic, Optional, TypeVar

from ledger.domain import Account, Category, Transaction, TRANSACTION_TYPES

logger = logging.getLogger(__name__)

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
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

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return f(self._value)

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
        return Nothing()

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return Nothing()

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
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Left(self._error)

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

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


# --- Parse-with-default helpers for raw store values


def safe_amount(value: Any) -> Maybe[float]:
    """Parse a balance/amount field into a finite float.

    None, booleans, non-numeric strings, NaN and infinities are Nothing().
    """
    if value is None or isinstance(value, bool):
        return Nothing()
    try:
        number = float(value)
    except (TypeError, ValueError):
        return Nothing()
    if not math.isfinite(number):
        return Nothing()
    return Some(number)


def amount_or_zero(value: Any) -> float:
    parsed = safe_amount(value)
    if parsed.is_none() and value is not None:
        logger.debug("malformed amount %r treated as 0", value)
    return parsed.get_or_else(0.0)


def to_local_naive(ts: datetime) -> datetime:
    if ts.tzinfo is not None:
        return ts.astimezone().replace(tzinfo=None)
    return ts


def local_now(now: Optional[datetime] = None) -> datetime:
    """The given instant (or the current one) as a naive local datetime."""
    return to_local_naive(now) if now is not None else datetime.now()


def safe_timestamp(value: Any) -> Maybe[datetime]:
    """Parse a record timestamp into a naive local datetime.

    Aware values are converted to local time so that day and month
    boundaries follow the local calendar.
    """
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, date):
        ts = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            ts = datetime.fromisoformat(raw)
        except ValueError:
            logger.debug("unparseable timestamp %r", value)
            return Nothing()
    else:
        return Nothing()

    return Some(to_local_naive(ts))


def safe_category(cats: tuple[Category, ...], cat_id: str) -> Maybe[Category]:
    for cat in cats:
        if cat.id == cat_id:
            return Some(cat)
    return Nothing()


def safe_account(accs: tuple[Account, ...], acc_id: str) -> Maybe[Account]:
    for acc in accs:
        if acc.id == acc_id:
            return Some(acc)
    return Nothing()


def validate_transaction(
    t: Transaction,
    accs: tuple[Account, ...],
    cats: tuple[Category, ...]
) -> Either[dict, Transaction]:

    amount = safe_amount(t.amount)
    if amount.is_none():
        return Left({
            "error": "invalid_amount",
            "message": f"Amount {t.amount!r} is not a number",
            "amount": t.amount
        })

    if t.type not in TRANSACTION_TYPES:
        return Left({
            "error": "invalid_type",
            "message": f"Transaction type must be income or expense, got {t.type!r}",
            "type": t.type
        })

    if safe_account(accs, t.account_id).is_none():
        return Left({
            "error": "account_not_found",
            "message": f"Account with ID {t.account_id} does not exist",
            "account_id": t.account_id
        })

    category = safe_category(cats, t.category).get_or_else(None)
    if category is None:
        return Left({
            "error": "category_not_found",
            "message": f"Category with ID {t.category} does not exist",
            "category_id": t.category
        })

    value = amount.get_or_else(0.0)
    if (t.type == "income" and value < 0) or (t.type == "expense" and value > 0):
        return Left({
            "error": "type_sign_mismatch",
            "message": f"{t.type.capitalize()} transaction cannot have amount {value:g}",
            "type": t.type,
            "amount": value
        })

    if category.type != t.type:
        return Left({
            "error": "category_type_mismatch",
            "message": f"{category.type.capitalize()} category {category.name} cannot hold a {t.type} transaction",
            "category_type": category.type,
            "type": t.type
        })

    return Right(t)


def pipe(x, *funcs):
    """Pipe a value through a series of functions.

    pipe(x, f, g, h) == h(g(f(x)))
    """
    res = x
    for f in funcs:
        res = f(res)
    return res
