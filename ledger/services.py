import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence

from ledger import aggregator
from ledger.functional import amount_or_zero, local_now, pipe
from ledger.lazy import iter_transactions, lazy_top_categories
from ledger.filters import by_date_window, period_window
from ledger.store import LedgerSnapshot

logger = logging.getLogger(__name__)

Step = Callable[[LedgerSnapshot, datetime], Dict[str, Any]]


def balance_step(snap: LedgerSnapshot, now: datetime) -> Dict[str, Any]:
    return {"total_balance": aggregator.total_balance(snap.accounts)}


def monthly_totals_step(snap: LedgerSnapshot, now: datetime) -> Dict[str, Any]:
    income = aggregator.total_income(snap.transactions, "month", now)
    expenses = aggregator.total_expenses(snap.transactions, "month", now)
    return {"monthly_income": income, "monthly_expenses": expenses, "net_income": income - expenses}


def recent_step(limit: int = 8) -> Step:
    def recent_transactions(snap: LedgerSnapshot, now: datetime) -> Dict[str, Any]:
        return {"recent_transactions": aggregator.recent_transactions(snap.transactions, limit)}
    return recent_transactions


def breakdown_step(snap: LedgerSnapshot, now: datetime) -> Dict[str, Any]:
    return {"category_breakdown": aggregator.category_breakdown(snap.transactions, snap.categories, now)}


def chart_step(period: str = "7d") -> Step:
    def chart_series(snap: LedgerSnapshot, now: datetime) -> Dict[str, Any]:
        return {"chart_series": aggregator.chart_series(snap.transactions, period, now)}
    return chart_series


DEFAULT_STEPS = (balance_step, monthly_totals_step, recent_step(), breakdown_step, chart_step())


class DashboardService:
    """Runs aggregator steps over one snapshot and merges their outputs.

    Every step sees the same ``now``. A failing step is recorded in the
    report and logged; the remaining steps still run.
    """

    def __init__(self, steps: Sequence[Step] = DEFAULT_STEPS):
        self.steps = steps

    def dashboard(self, snap: LedgerSnapshot, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = local_now(now)
        report = {"generated_at": now.isoformat(), "steps": [], "result": {}}

        acc = {}
        for step in self.steps:
            name = getattr(step, "__name__", str(step))
            try:
                out = step(snap, now)
            except Exception as e:
                logger.exception("dashboard step %s failed", name)
                out = {"step_error": f"{name}: {e}"}
            report["steps"].append({"step": name, "output": out})
            if isinstance(out, dict) and "step_error" not in out:
                acc.update(out)

        report["result"] = acc
        return report


def insights(snap: LedgerSnapshot, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Headline figures for the analytics page."""
    now = local_now(now)
    income = aggregator.total_income(snap.transactions, "month", now)
    expenses = aggregator.total_expenses(snap.transactions, "month", now)

    start, end = period_window("month", now)
    top = pipe(
        iter_transactions(snap.transactions, by_date_window(start, end)),
        lambda month_tx: lazy_top_categories(month_tx, snap.categories, 1),
        lambda ranked: next(ranked, None),
    )

    return {
        "top_category": top[0] if top else None,
        "top_category_spend": top[1] if top else 0.0,
        "avg_daily_spend": expenses / 30,
        "savings_rate": (income - expenses) / income * 100 if income > 0 else 0.0,
        "goals": [
            {
                "title": g.title,
                "progress": g.progress,
                "remaining": max(0.0, amount_or_zero(g.target_amount) - amount_or_zero(g.current_amount)),
            }
            for g in snap.goals
        ],
    }
