from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

NEUTRAL_COLOR = "#64748b"
UNKNOWN_NAME = "Unknown"

ACCOUNT_TYPES = ("checking", "savings", "investment")
TRANSACTION_TYPES = ("income", "expense")


@dataclass(frozen=True)
class Account:
    id: str
    name: str
    type: str        # checking / savings / investment
    balance: Any     # number, but may arrive malformed from the store
    color: str = "#3b82f6"


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    icon: str
    color: str
    type: str        # income / expense


@dataclass(frozen=True)
class Transaction:
    id: str
    title: str
    amount: Any                        # + for income, - for expense
    category: str                      # category id
    account_id: str
    date: Union[str, datetime, None]   # e.g. "2025-09-01T10:00:00"
    type: str                          # income / expense
    description: str = ""


@dataclass(frozen=True)
class Goal:
    id: str
    title: str
    target_amount: float
    current_amount: float = 0.0
    deadline: Optional[str] = None
    description: str = ""

    @property
    def progress(self) -> float:
        from ledger.functional import amount_or_zero

        target = amount_or_zero(self.target_amount)
        if target <= 0:
            return 0.0
        return amount_or_zero(self.current_amount) / target * 100


@dataclass(frozen=True)
class Achievement:
    id: str
    title: str
    description: str
    icon: str
    unlocked: bool = False
    target: Optional[float] = None
    current: Optional[float] = None


# Aggregator outputs

@dataclass(frozen=True)
class CategoryTotal:
    name: str
    total: float
    color: str


@dataclass(frozen=True)
class ChartBucket:
    label: str       # short date, e.g. "Oct 19"
    income: float
    expenses: float  # non-negative magnitude
    net: float


DEFAULT_CATEGORIES = (
    Category("1", "Food & Dining", "🍽️", "#f97316", "expense"),
    Category("2", "Transportation", "🚗", "#3b82f6", "expense"),
    Category("3", "Shopping", "🛍️", "#ec4899", "expense"),
    Category("4", "Entertainment", "🎬", "#8b5cf6", "expense"),
    Category("5", "Bills & Utilities", "💡", "#ef4444", "expense"),
    Category("6", "Healthcare", "🏥", "#10b981", "expense"),
    Category("7", "Salary", "💼", "#22c55e", "income"),
    Category("8", "Investment", "📈", "#06b6d4", "income"),
    Category("9", "Freelance", "💻", "#f59e0b", "income"),
)
