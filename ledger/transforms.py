import json
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional, Tuple, TypeVar
from uuid import uuid4

from ledger.domain import Account, Achievement, Category, Goal, Transaction, DEFAULT_CATEGORIES
from ledger.functional import amount_or_zero

R = TypeVar("R", Account, Transaction, Goal, Achievement)


def load_seed(
    path: str,
) -> Tuple[
    Tuple[Account, ...],
    Tuple[Category, ...],
    Tuple[Transaction, ...],
    Tuple[Goal, ...],
]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    accounts = tuple(Account(**a) for a in data.get("accounts", []))
    categories = tuple(Category(**c) for c in data.get("categories", [])) or DEFAULT_CATEGORIES
    transactions = tuple(Transaction(**t) for t in data.get("transactions", []))
    goals = tuple(Goal(**g) for g in data.get("goals", []))

    return accounts, categories, transactions, goals


def new_id() -> str:
    return str(uuid4())


def demo_records(now: Optional[datetime] = None):
    """Demo data set: three accounts, three recent transactions, two goals."""
    now = now or datetime.now()
    accounts = (
        Account(new_id(), "Main Account", "checking", 25000, "#3b82f6"),
        Account(new_id(), "Savings", "savings", 87500, "#22c55e"),
        Account(new_id(), "Investment", "investment", 154200, "#8b5cf6"),
    )
    main = accounts[0].id
    transactions = (
        Transaction(new_id(), "Grocery Shopping", -1200, "1", main,
                    now.isoformat(), "expense", "Weekly groceries"),
        Transaction(new_id(), "Salary Deposit", 45000, "7", main,
                    (now - timedelta(days=1)).isoformat(), "income", "Monthly salary"),
        Transaction(new_id(), "Uber Ride", -250, "2", main,
                    (now - timedelta(days=2)).isoformat(), "expense", "Trip to office"),
    )
    goals = (
        Goal(new_id(), "Emergency Fund", 100000, 25000, f"{now.year}-12-31",
             "Build emergency fund for 6 months expenses"),
        Goal(new_id(), "Vacation Fund", 50000, 12000, f"{now.year + 1}-08-15",
             "Save for summer vacation"),
    )
    achievements = (
        Achievement(new_id(), "First Step", "Added your first transaction", "🎯"),
        Achievement(new_id(), "Saver", "Saved 10,000 this month", "💰", target=10000, current=0),
    )
    return accounts, DEFAULT_CATEGORIES, transactions, goals, achievements


def add_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    # newest first, like the store returns them
    return (t,) + trans


def remove_transaction(
    trans: Tuple[Transaction, ...], tx_id: str
) -> Tuple[Transaction, ...]:
    return tuple(t for t in trans if t.id != tx_id)


def replace_record(records: Tuple[R, ...], record_id: str, **changes) -> Tuple[R, ...]:
    return tuple(
        replace(r, **changes) if r.id == record_id else r
        for r in records
    )


def apply_balance_delta(
    accounts: Tuple[Account, ...], acc_id: str, delta: float
) -> Tuple[Account, ...]:
    return tuple(
        replace(a, balance=amount_or_zero(a.balance) + delta) if a.id == acc_id else a
        for a in accounts
    )
