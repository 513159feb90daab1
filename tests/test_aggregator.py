from datetime import datetime, timedelta, timezone

from ledger.aggregator import (
    category_breakdown,
    chart_series,
    net_income,
    recent_transactions,
    total_balance,
    total_expenses,
    total_income,
)
from ledger.domain import Account, Category, CategoryTotal, Transaction, DEFAULT_CATEGORIES

NOW = datetime(2025, 9, 17, 12, 0)  # a Wednesday


def make_tx(id, amount, ts, cat="1", kind=None, acc="a1"):
    kind = kind or ("income" if amount > 0 else "expense")
    return Transaction(id=id, title=id, amount=amount, category=cat, account_id=acc,
                       date=ts, type=kind, description="")


def make_acc(id, balance):
    return Account(id=id, name=id, type="checking", balance=balance)


def test_total_balance_scenario():
    accounts = (make_acc("a1", 25000), make_acc("a2", 87500), make_acc("a3", 154200))
    assert total_balance(accounts) == 266700


def test_total_balance_empty_is_zero():
    assert total_balance(()) == 0


def test_total_balance_treats_malformed_as_zero():
    accounts = (make_acc("a1", 100), make_acc("a2", None), make_acc("a3", "abc"), make_acc("a4", "50.5"))
    assert total_balance(accounts) == 150.5


def test_monthly_totals_scenario():
    trans = (
        make_tx("t1", 45000, "2025-09-16T09:00:00", cat="7"),
        make_tx("t2", -1200, "2025-09-17T08:00:00"),
        make_tx("t3", -250, "2025-09-15T18:30:00", cat="2"),
    )
    assert total_income(trans, now=NOW) == 45000
    assert total_expenses(trans, now=NOW) == 1450
    assert net_income(trans, now=NOW) == 45000 - 1450


def test_monthly_totals_exclude_previous_month_and_future():
    trans = (
        make_tx("t1", -300, "2025-08-31T23:59:59"),
        make_tx("t2", -100, "2025-09-01T00:00:00"),
        make_tx("t3", -999, "2025-09-20T10:00:00"),
    )
    assert total_expenses(trans, now=NOW) == 100


def test_totals_skip_undated_and_malformed():
    trans = (
        make_tx("t1", -100, None),
        make_tx("t2", -100, "not a date"),
        Transaction("t3", "x", "oops", "1", "a1", "2025-09-10", "expense"),
        make_tx("t4", -40, "2025-09-10"),
    )
    assert total_expenses(trans, now=NOW) == 40
    assert total_income(trans, now=NOW) == 0


def test_totals_are_never_negative():
    trans = (make_tx("t1", -500, "2025-09-10"),)
    assert total_income(trans, now=NOW) >= 0
    assert total_expenses(trans, now=NOW) >= 0


def test_week_and_year_windows():
    trans = (
        make_tx("t1", -10, "2025-09-15T00:00:00"),  # Monday of this week
        make_tx("t2", -20, "2025-09-14T23:00:00"),  # Sunday before
        make_tx("t3", -40, "2025-02-01T10:00:00"),
        make_tx("t4", -80, "2024-12-31T10:00:00"),
    )
    assert total_expenses(trans, "week", now=NOW) == 10
    assert total_expenses(trans, "month", now=NOW) == 30
    assert total_expenses(trans, "year", now=NOW) == 70


def test_legacy_month_periods_ignore_period_argument():
    # older releases filtered every period from the start of the month
    trans = (
        make_tx("t1", -10, "2025-09-15T00:00:00"),
        make_tx("t2", -20, "2025-09-14T23:00:00"),
        make_tx("t3", -40, "2025-02-01T10:00:00"),
    )
    for period in ("week", "month", "year"):
        assert total_expenses(trans, period, now=NOW, legacy_month=True) == 30


def test_unknown_period_uses_month_window():
    trans = (make_tx("t1", 100, "2025-09-02"), make_tx("t2", 100, "2025-08-02"))
    assert total_income(trans, "quarter", now=NOW) == 100


def test_recent_transactions_order_and_limit():
    trans = (
        make_tx("old", -1, "2025-09-01"),
        make_tx("new", -1, "2025-09-17T10:00:00"),
        make_tx("mid", -1, "2025-09-10"),
    )
    result = recent_transactions(trans, 2)
    assert [t.id for t in result] == ["new", "mid"]


def test_recent_transactions_sorted_non_increasing_and_idempotent():
    trans = tuple(make_tx(f"t{i}", -1, (NOW - timedelta(hours=i * 7)).isoformat()) for i in range(20))
    shuffled = trans[::3] + trans[1::3] + trans[2::3]
    first = recent_transactions(shuffled, 8)
    second = recent_transactions(shuffled, 8)
    assert len(first) == 8
    dates = [t.date for t in first]
    assert dates == sorted(dates, reverse=True)
    assert first == second


def test_recent_transactions_does_not_mutate_input():
    trans = [make_tx("a", -1, "2025-09-01"), make_tx("b", -1, "2025-09-02")]
    recent_transactions(trans, 10)
    assert [t.id for t in trans] == ["a", "b"]


def test_recent_transactions_empty_and_undated_last():
    assert recent_transactions((), 8) == ()
    trans = (make_tx("undated", -1, None), make_tx("dated", -1, "2025-01-01"))
    assert [t.id for t in recent_transactions(trans, 5)] == ["dated", "undated"]
    assert recent_transactions(trans, -1) == ()


def test_category_breakdown_first_seen_order_and_colors():
    trans = (
        make_tx("t1", -100, "2025-09-10", cat="2"),
        make_tx("t2", -300, "2025-09-11", cat="1"),
        make_tx("t3", -50, "2025-09-12", cat="2"),
        make_tx("t4", 5000, "2025-09-12", cat="7"),
    )
    result = category_breakdown(trans, DEFAULT_CATEGORIES, now=NOW)
    assert result == (
        CategoryTotal("Transportation", 150, "#3b82f6"),
        CategoryTotal("Food & Dining", 300, "#f97316"),
    )


def test_category_breakdown_sorted_desc():
    trans = (
        make_tx("t1", -100, "2025-09-10", cat="2"),
        make_tx("t2", -300, "2025-09-11", cat="1"),
    )
    result = category_breakdown(trans, DEFAULT_CATEGORIES, now=NOW, sort_desc=True)
    assert [c.name for c in result] == ["Food & Dining", "Transportation"]


def test_category_breakdown_unknown_category_falls_back():
    cats = (Category("1", "Food", "🍽️", "#f97316", "expense"),)
    trans = (make_tx("t1", -70, "2025-09-10", cat="missing"),)
    result = category_breakdown(trans, cats, now=NOW)
    assert result == (CategoryTotal("Unknown", 70, "#64748b"),)


def test_category_breakdown_matches_monthly_expenses():
    trans = (
        make_tx("t1", -120, "2025-09-03", cat="1"),
        make_tx("t2", -80, "2025-09-09", cat="5"),
        make_tx("t3", -15, "2025-09-09", cat="nope"),
        make_tx("t4", -999, "2025-08-30", cat="1"),
        make_tx("t5", 400, "2025-09-09", cat="7"),
    )
    breakdown = category_breakdown(trans, DEFAULT_CATEGORIES, now=NOW)
    assert sum(c.total for c in breakdown) == total_expenses(trans, "month", now=NOW)


def test_category_breakdown_empty():
    assert category_breakdown((), DEFAULT_CATEGORIES, now=NOW) == ()


def test_chart_series_bucket_counts():
    assert len(chart_series((), "7d", now=NOW)) == 7
    assert len(chart_series((), "30d", now=NOW)) == 30
    assert len(chart_series((), "1y", now=NOW)) == 365
    assert len(chart_series((), "weird", now=NOW)) == 7


def test_chart_series_last_bucket_is_today():
    series = chart_series((), "7d", now=NOW)
    assert series[-1].label == "Sep 17"
    assert series[0].label == "Sep 11"


def test_chart_series_daily_sums():
    trans = (
        make_tx("t1", 1000, "2025-09-17T08:00:00", cat="7"),
        make_tx("t2", -200, "2025-09-17T23:59:59"),
        make_tx("t3", -50, "2025-09-16T00:00:00"),
        make_tx("t4", -75, "2025-09-10T12:00:00"),  # outside the 7 day window
        make_tx("t5", -5, "2025-09-18T00:00:00"),   # tomorrow
    )
    series = chart_series(trans, "7d", now=NOW)
    today, yesterday = series[-1], series[-2]
    assert (today.income, today.expenses, today.net) == (1000, 200, 800)
    assert (yesterday.income, yesterday.expenses, yesterday.net) == (0, 50, -50)
    assert all(b.income == 0 and b.expenses == 0 and b.net == 0 for b in series[:-2])


def test_aware_now_is_read_as_local_time():
    aware = datetime(2025, 9, 17, 12, 0, tzinfo=timezone.utc)
    local = aware.astimezone().replace(tzinfo=None)
    trans = (
        make_tx("t1", 40000, (local - timedelta(days=1)).isoformat()),
        make_tx("t2", -1500, (local - timedelta(hours=1)).isoformat()),
        make_tx("t3", -300, "2025-09-16T08:00:00+00:00"),
    )

    assert total_income(trans, "month", aware) == total_income(trans, "month", local)
    assert total_expenses(trans, "month", aware) == total_expenses(trans, "month", local)
    assert net_income(trans, "year", aware) == net_income(trans, "year", local)

    series = chart_series(trans, "7d", aware)
    assert len(series) == 7
    assert series == chart_series(trans, "7d", local)
    assert category_breakdown(trans, DEFAULT_CATEGORIES, aware) == category_breakdown(trans, DEFAULT_CATEGORIES, local)
