from datetime import datetime, timedelta
from typing import Callable, Optional

from ledger.domain import Transaction
from ledger.functional import amount_or_zero, safe_timestamp, to_local_naive

Predicate = Callable[[Transaction], bool]


def start_of_day(ts: datetime) -> datetime:
    return ts.replace(hour=0, minute=0, second=0, microsecond=0)


def period_window(period: str, now: datetime, legacy_month: bool = False) -> tuple[datetime, datetime]:
    """Return the (start, end) window for "week", "month" or "year".

    Unknown periods use the month window. With legacy_month every period
    collapses to the month window.
    """
    now = to_local_naive(now)
    today = start_of_day(now)
    month_start = today.replace(day=1)
    if legacy_month:
        return month_start, now
    if period == "week":
        return today - timedelta(days=today.weekday()), now
    if period == "year":
        return today.replace(month=1, day=1), now
    return month_start, now


def by_type(kind: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.type == kind

    return _filter


def by_category(cat_id: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.category == cat_id

    return _filter


def by_account(acc_id: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.account_id == acc_id

    return _filter


def by_date_window(start: datetime, end: datetime, end_inclusive: bool = True) -> Predicate:
    """Match transactions dated in [start, end] (or [start, end) ).

    Undated or unparseable transactions never match.
    """
    start, end = to_local_naive(start), to_local_naive(end)

    def _filter(t: Transaction) -> bool:
        ts: Optional[datetime] = safe_timestamp(t.date).get_or_else(None)
        if ts is None or ts < start:
            return False
        return ts <= end if end_inclusive else ts < end

    return _filter


def by_amount_range(min: float, max: float) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return min <= amount_or_zero(t.amount) <= max

    return _filter


def by_text(query: str) -> Predicate:
    """Case-insensitive match on title or description; a blank query matches all."""
    needle = (query or "").strip().casefold()

    def _filter(t: Transaction) -> bool:
        if not needle:
            return True
        return needle in (t.title or "").casefold() or needle in (t.description or "").casefold()

    return _filter


def all_of(*preds: Predicate) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return all(p(t) for p in preds)

    return _filter
