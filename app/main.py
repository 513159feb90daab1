import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging
from datetime import datetime

import streamlit as st
import pandas as pd
import plotly.graph_objects as go
import plotly.express as px

from ledger import aggregator
from ledger.domain import Account, Goal, Transaction, ACCOUNT_TYPES
from ledger.filters import by_text
from ledger.functional import amount_or_zero, safe_category, safe_account, safe_timestamp
from ledger.lazy import iter_transactions
from ledger.services import DashboardService, insights, recent_step, chart_step, DEFAULT_STEPS
from ledger.settings import get_settings, setup_logging
from ledger.store import LedgerStore
from ledger.transforms import demo_records, load_seed

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

st.set_page_config(page_title=settings.app_name, layout="wide")


def build_store() -> LedgerStore:
    accounts, categories, transactions, goals, achievements = demo_records()
    if settings.seed_path and os.path.exists(settings.seed_path):
        accounts, categories, transactions, goals = load_seed(settings.seed_path)
        logger.info("loaded seed data from %s", settings.seed_path)
    return LedgerStore(accounts, transactions, categories, goals, achievements)


if "store" not in st.session_state:
    st.session_state.store = build_store()

store: LedgerStore = st.session_state.store


def money(value: float) -> str:
    return f"{value:,.0f} {settings.currency}"


def tx_to_df(tx_list) -> pd.DataFrame:
    cats = store.fetch_categories()
    accs = store.fetch_accounts()
    rows = []
    for t in tx_list:
        rows.append({
            "id": t.id,
            "date": safe_timestamp(t.date).get_or_else(None),
            "title": t.title,
            "amount": amount_or_zero(t.amount),
            "type": t.type,
            "category": safe_category(cats, t.category).map(lambda c: f"{c.icon} {c.name}").get_or_else("Unknown"),
            "account": safe_account(accs, t.account_id).map(lambda a: a.name).get_or_else("Unknown"),
            "description": t.description,
        })
    df = pd.DataFrame(rows, columns=["id", "date", "title", "amount", "type", "category", "account", "description"])
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    return df


def show_errors(result) -> bool:
    if result.is_left():
        st.error(result.get_error()["message"])
        return True
    return False


menu = st.sidebar.radio("Menu", ["🏠 Dashboard", "🧾 Transactions", "💳 Accounts & Goals", "📊 Analytics"])

if menu == "🏠 Dashboard":
    chart_period = st.sidebar.selectbox("Chart period", ["7d", "30d", "1y"],
                                        index=["7d", "30d", "1y"].index(settings.chart_period)
                                        if settings.chart_period in ("7d", "30d", "1y") else 0)
    steps = DEFAULT_STEPS[:2] + (recent_step(settings.recent_limit), DEFAULT_STEPS[3], chart_step(chart_period))
    report = DashboardService(steps).dashboard(store.snapshot())
    result = report["result"]

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Total Balance", money(result.get("total_balance", 0)))
    with k2:
        st.metric("Monthly Income", money(result.get("monthly_income", 0)))
    with k3:
        st.metric("Monthly Expenses", money(result.get("monthly_expenses", 0)))
    with k4:
        st.metric("Net Income", money(result.get("net_income", 0)))

    buckets = result.get("chart_series", ())
    labels = [b.label for b in buckets]
    fig_ts = go.Figure()
    fig_ts.add_trace(go.Scatter(x=labels, y=[b.income for b in buckets], mode="lines+markers", name="Income"))
    fig_ts.add_trace(go.Scatter(x=labels, y=[b.expenses for b in buckets], mode="lines+markers", name="Expenses"))
    fig_ts.add_trace(go.Bar(x=labels, y=[b.net for b in buckets], name="Net", opacity=0.4))
    fig_ts.update_layout(template="plotly_dark", title="Financial Overview", margin=dict(t=40, b=10, l=10, r=10))
    st.plotly_chart(fig_ts, use_container_width=True)

    col_cat, col_recent = st.columns([2, 3])
    with col_cat:
        breakdown = result.get("category_breakdown", ())
        if breakdown:
            fig_cat = px.pie(
                names=[c.name for c in breakdown],
                values=[c.total for c in breakdown],
                color=[c.name for c in breakdown],
                color_discrete_map={c.name: c.color for c in breakdown},
                title="Spending by Category",
                hole=0.5,
            )
            st.plotly_chart(fig_cat, use_container_width=True)
        else:
            st.info("No expenses this month.")
    with col_recent:
        st.subheader("Recent Transactions")
        recent = result.get("recent_transactions", ())
        if recent:
            disp = tx_to_df(recent)[["date", "title", "category", "amount"]]
            disp["date"] = disp["date"].dt.strftime("%Y-%m-%d").fillna("-")
            disp["amount"] = disp["amount"].map(money)
            st.table(disp.reset_index(drop=True))
        else:
            st.info("No transactions yet.")

    failed = [s for s in report["steps"] if "step_error" in s["output"]]
    for s in failed:
        st.warning(s["output"]["step_error"])

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")
    categories = store.fetch_categories()
    accounts = store.fetch_accounts()

    kind = st.radio("Type", ["expense", "income"], horizontal=True)
    with st.form("input_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            title = st.text_input("Title")
            amount = st.number_input("Amount", min_value=0.0, step=100.0, format="%.2f")
        with col2:
            options = [c for c in categories if c.type == kind]
            category = st.selectbox("Category", options, format_func=lambda c: f"{c.icon} {c.name}")
            account = st.selectbox("Account", accounts, format_func=lambda a: a.name)
        description = st.text_input("Description (optional)")
        submitted = st.form_submit_button("Add Transaction")

        if submitted and category and account:
            signed = -abs(amount) if kind == "expense" else abs(amount)
            tx = Transaction(
                id="",
                title=title or category.name,
                amount=signed,
                category=category.id,
                account_id=account.id,
                date=datetime.now().isoformat(),
                type=kind,
                description=description,
            )
            if not show_errors(store.add_transaction(tx)):
                st.success("✅ Transaction added!")

    query = st.text_input("Search", placeholder="Title or description")
    df = tx_to_df(iter_transactions(store.fetch_transactions(), by_text(query)))
    col_f1, col_f2 = st.columns(2)
    with col_f1:
        type_filter = st.selectbox("Filter type", ["all", "income", "expense"])
    with col_f2:
        cat_filter = st.selectbox("Filter category", ["all"] + sorted(df["category"].unique().tolist()))
    if type_filter != "all":
        df = df[df["type"] == type_filter]
    if cat_filter != "all":
        df = df[df["category"] == cat_filter]

    if df.empty:
        st.info("No transactions match the selected filters")
    for _, row in df.sort_values("date", ascending=False).iterrows():
        c1, c2, c3 = st.columns([5, 2, 1])
        when = row["date"].strftime("%Y-%m-%d") if pd.notna(row["date"]) else "-"
        c1.markdown(f"**{row['title']}** · {row['category']} · {row['account']} · {when}")
        c2.markdown(money(row["amount"]))
        if c3.button("🗑", key=f"del_{row['id']}"):
            if not show_errors(store.delete_transaction(row["id"])):
                st.rerun()

elif menu == "💳 Accounts & Goals":
    st.title("💳 Accounts")
    accounts = store.fetch_accounts()
    if accounts:
        account_cols = st.columns(len(accounts))
        for col, acc in zip(account_cols, accounts):
            with col:
                st.metric(f"{acc.name} ({acc.type})", money(amount_or_zero(acc.balance)))
                if st.button("Delete", key=f"del_acc_{acc.id}"):
                    if not show_errors(store.delete_account(acc.id)):
                        st.rerun()
                with st.expander("Edit"):
                    with st.form(f"edit_acc_{acc.id}"):
                        new_name = st.text_input("Name", acc.name, key=f"name_{acc.id}")
                        new_type = st.selectbox("Type", ACCOUNT_TYPES, index=ACCOUNT_TYPES.index(acc.type)
                                                if acc.type in ACCOUNT_TYPES else 0, key=f"type_{acc.id}")
                        new_balance = st.number_input("Balance", value=amount_or_zero(acc.balance), step=1000.0,
                                                      key=f"balance_{acc.id}")
                        new_color = st.color_picker("Color", acc.color, key=f"color_{acc.id}")
                        if st.form_submit_button("Save"):
                            result = store.update_account(acc.id, name=new_name or acc.name, type=new_type,
                                                          balance=new_balance, color=new_color)
                            if not show_errors(result):
                                st.rerun()

    with st.form("account_form", clear_on_submit=True):
        name = st.text_input("Account name")
        acc_type = st.selectbox("Type", ACCOUNT_TYPES)
        balance = st.number_input("Opening balance", step=1000.0)
        color = st.color_picker("Color", "#3b82f6")
        if st.form_submit_button("Add Account") and name:
            if not show_errors(store.add_account(Account("", name, acc_type, balance, color))):
                st.rerun()

    st.header("🎯 Goals")
    for goal in store.fetch_goals():
        st.metric(goal.title, f"{money(goal.current_amount)} / {money(goal.target_amount)}",
                  f"deadline {goal.deadline}" if goal.deadline else None)
        st.progress(min(100.0, max(0.0, goal.progress)) / 100)

    with st.form("goal_form", clear_on_submit=True):
        g_title = st.text_input("Goal title")
        target = st.number_input("Target amount", min_value=0.0, step=1000.0)
        current = st.number_input("Current amount", min_value=0.0, step=1000.0)
        deadline = st.date_input("Deadline", value=None)
        g_desc = st.text_input("Description")
        if st.form_submit_button("Add Goal") and g_title:
            goal = Goal("", g_title, target, current, deadline.isoformat() if deadline else None, g_desc)
            if not show_errors(store.add_goal(goal)):
                st.rerun()

    achievements = store.fetch_achievements()
    if achievements:
        st.header("🏆 Achievements")
        for a in achievements:
            st.markdown(f"{a.icon} **{a.title}** {'✅' if a.unlocked else '🔒'} {a.description}")

elif menu == "📊 Analytics":
    st.title("📊 Analytics")
    snap = store.snapshot()
    period = st.selectbox("Period", ["week", "month", "year"], index=1)
    income = aggregator.total_income(snap.transactions, period, legacy_month=settings.legacy_month_periods)
    expenses = aggregator.total_expenses(snap.transactions, period, legacy_month=settings.legacy_month_periods)
    info = insights(snap)

    k1, k2, k3, k4 = st.columns(4)
    k1.metric(f"Income ({period})", money(income))
    k2.metric(f"Expenses ({period})", money(expenses))
    k3.metric("Avg daily spend", money(info["avg_daily_spend"]))
    k4.metric("Savings rate", f"{info['savings_rate']:.1f}%")

    if info["top_category"]:
        st.info(f"You spend most on {info['top_category']} ({money(info['top_category_spend'])} this month).")

    buckets = aggregator.chart_series(snap.transactions, "30d")
    df_chart = pd.DataFrame([b.__dict__ for b in buckets])
    fig = px.bar(df_chart, x="label", y=["income", "expenses"], barmode="group",
                 title="Last 30 days", template="plotly_dark")
    st.plotly_chart(fig, use_container_width=True)

    breakdown = aggregator.category_breakdown(snap.transactions, snap.categories, sort_desc=True)
    if breakdown:
        st.dataframe(pd.DataFrame([{"Category": c.name, "Total": c.total} for c in breakdown]),
                     use_container_width=True)
