"""Read-side projections over a ledger snapshot.

Every function here is pure: it takes the record collections explicitly,
reads the clock at most once (or uses the ``now`` it is given) and never
mutates its inputs. Malformed numbers count as zero and unresolvable
categories fall back to display defaults, so none of these raise on
empty or dirty data.
"""
from datetime import datetime, timedelta
from typing import Iterable, Optional

from ledger.domain import (
    Account,
    Category,
    CategoryTotal,
    ChartBucket,
    Transaction,
    NEUTRAL_COLOR,
    UNKNOWN_NAME,
)
from ledger.filters import all_of, by_date_window, by_type, period_window, start_of_day
from ledger.functional import amount_or_zero, local_now, safe_category, safe_timestamp

CHART_PERIOD_DAYS = {"7d": 7, "30d": 30, "1y": 365}
DEFAULT_CHART_DAYS = 7


def total_balance(accounts: Iterable[Account]) -> float:
    return sum((amount_or_zero(a.balance) for a in accounts), 0.0)


def _period_total(
    transactions: Iterable[Transaction],
    kind: str,
    period: str,
    now: Optional[datetime],
    legacy_month: bool,
) -> float:
    now = local_now(now)
    start, end = period_window(period, now, legacy_month)
    matches = all_of(by_type(kind), by_date_window(start, end))
    return sum((amount_or_zero(t.amount) for t in transactions if matches(t)), 0.0)


def total_income(
    transactions: Iterable[Transaction],
    period: str = "month",
    now: Optional[datetime] = None,
    legacy_month: bool = False,
) -> float:
    return abs(_period_total(transactions, "income", period, now, legacy_month))


def total_expenses(
    transactions: Iterable[Transaction],
    period: str = "month",
    now: Optional[datetime] = None,
    legacy_month: bool = False,
) -> float:
    return abs(_period_total(transactions, "expense", period, now, legacy_month))


def net_income(
    transactions: Iterable[Transaction],
    period: str = "month",
    now: Optional[datetime] = None,
    legacy_month: bool = False,
) -> float:
    now = local_now(now)
    trans = tuple(transactions)
    return (total_income(trans, period, now, legacy_month)
            - total_expenses(trans, period, now, legacy_month))


def recent_transactions(transactions: Iterable[Transaction], limit: int = 10) -> tuple[Transaction, ...]:
    """Most recent first; undated transactions sort after dated ones."""
    def key(t: Transaction):
        ts = safe_timestamp(t.date).get_or_else(None)
        return (ts is not None, ts or datetime.min)

    ordered = sorted(transactions, key=key, reverse=True)
    return tuple(ordered[: max(0, limit)])


def category_breakdown(
    transactions: Iterable[Transaction],
    categories: tuple[Category, ...],
    now: Optional[datetime] = None,
    sort_desc: bool = False,
) -> tuple[CategoryTotal, ...]:
    """Current-month expenses grouped by category name, in first-seen order."""
    now = local_now(now)
    start, end = period_window("month", now)
    matches = all_of(by_type("expense"), by_date_window(start, end))

    totals: dict[str, float] = {}
    colors: dict[str, str] = {}
    for t in transactions:
        if not matches(t):
            continue
        category = safe_category(categories, t.category).get_or_else(None)
        name = category.name if category else UNKNOWN_NAME
        if name not in totals:
            totals[name] = 0.0
            colors[name] = category.color if category else NEUTRAL_COLOR
        totals[name] += abs(amount_or_zero(t.amount))

    result = tuple(CategoryTotal(name, total, colors[name]) for name, total in totals.items())
    if sort_desc:
        result = tuple(sorted(result, key=lambda c: c.total, reverse=True))
    return result


def chart_days(period: str) -> int:
    return CHART_PERIOD_DAYS.get(period, DEFAULT_CHART_DAYS)


def day_label(day: datetime) -> str:
    return f"{day:%b} {day.day}"


def chart_series(
    transactions: Iterable[Transaction],
    period: str = "7d",
    now: Optional[datetime] = None,
) -> tuple[ChartBucket, ...]:
    """Daily income/expense buckets for the trailing window ending today."""
    today = start_of_day(local_now(now))
    days = chart_days(period)
    first_day = today - timedelta(days=days - 1)
    last_day_end = today + timedelta(days=1)

    income: dict[datetime, float] = {}
    expenses: dict[datetime, float] = {}
    for t in transactions:
        ts = safe_timestamp(t.date).get_or_else(None)
        if ts is None or ts < first_day or ts >= last_day_end:
            continue
        day = start_of_day(ts)
        if t.type == "income":
            income[day] = income.get(day, 0.0) + amount_or_zero(t.amount)
        elif t.type == "expense":
            expenses[day] = expenses.get(day, 0.0) + amount_or_zero(t.amount)

    buckets = []
    for offset in range(days):
        day = first_day + timedelta(days=offset)
        inc = income.get(day, 0.0)
        exp = abs(expenses.get(day, 0.0))
        buckets.append(ChartBucket(label=day_label(day), income=inc, expenses=exp, net=inc - exp))
    return tuple(buckets)
