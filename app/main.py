"""
Streamlit Frontend for Finsight

The dashboard a signed-in user interacts with daily.

DESIGN PRINCIPLES:
1. Every page recomputes its figures from stored records
2. "Today" is read once per rerun and passed down explicitly
3. Failures show a short message and leave the page usable
4. AI commentary is requested separately and never blocks a page
"""

from datetime import date

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from finsight.async_runner import AsyncRunner
from finsight.audit import create_correlation_id
from finsight.config import get_settings, validate_all_settings
from finsight.models.finance import (
    AccountType,
    CategoryIndex,
    CategoryType,
    ExpenseType,
    GoalPeriod,
    GoalType,
    TransactionType,
)
from finsight.models.reports import DateRange, PeriodKind, ReportPeriod
from finsight.orchestrator import AppComponents, create_app_components
from finsight.reports import csv_filename, insight_html, transactions_frame
from finsight.services.auth import AuthError, AuthSession
from finsight.services.storage import DuplicateError, PartialClearError, StorageError
from finsight.validation import FormValidator


# Page configuration
st.set_page_config(
    page_title="Finsight",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .insight-box {
        padding: 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
    .warning-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)

AI_OFF_MESSAGE = "AI features are off. Set GEMINI_API_KEY to enable them."
MONTH_NAMES = [date(2000, m, 1).strftime("%B") for m in range(1, 13)]


@st.cache_resource
def get_runner() -> AsyncRunner:
    """One background loop for the whole process; the Firestore client is bound to it."""
    return AsyncRunner()


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    return get_runner().run(coro)


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        return create_app_components(use_storage=False)


@st.cache_resource
def get_validator() -> FormValidator:
    return FormValidator()


def money(amount) -> str:
    return f"{get_settings().app.currency_symbol}{amount:,.2f}"


def label(value: str) -> str:
    return value.replace("_", " ").title()


# =============================================================================
# AUTH GATE
# =============================================================================

def render_login(components: AppComponents) -> None:
    st.title("💰 Finsight")
    st.markdown("Sign in to see your dashboard.")

    if components.auth is None:
        st.markdown(
            '<div class="warning-box">Firebase is not configured. '
            "You can explore in demo mode; data is kept in memory only.</div>",
            unsafe_allow_html=True,
        )
        if st.button("Continue in demo mode"):
            start_session(components, AuthSession(user_id="demo-user", id_token="", is_anonymous=True))
        return

    login_tab, reset_tab = st.tabs(["Sign in", "Forgot password"])

    with login_tab:
        with st.form("login"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign in")
        if submitted:
            try:
                start_session(components, components.auth.sign_in_with_email(email, password))
            except AuthError as e:
                run_async(components.audit_logger.log_sign_in_failed(e.code or "unknown"))
                st.error(e.user_message)

        if st.button("Continue as guest"):
            try:
                start_session(components, components.auth.sign_in_anonymously())
            except AuthError as e:
                st.error(e.user_message)

    with reset_tab:
        with st.form("reset"):
            email = st.text_input("Email", key="reset_email")
            submitted = st.form_submit_button("Send reset link")
        if submitted:
            try:
                components.auth.send_password_reset(email)
                st.success(f"A password reset link has been sent to {email}.")
            except AuthError as e:
                st.error(e.user_message)


def start_session(components: AppComponents, session: AuthSession) -> None:
    st.session_state["auth_session"] = session
    run_async(components.audit_logger.log_signed_in(session.user_id, session.is_anonymous))
    try:
        run_async(components.ledger.ensure_default_categories(session.user_id))
    except StorageError as e:
        st.warning(f"Could not set up default categories: {e}")
    st.rerun()


def sign_out(components: AppComponents) -> None:
    session = st.session_state.pop("auth_session", None)
    if components.auth is not None:
        components.auth.sign_out(session)
    st.session_state.clear()
    st.rerun()


# =============================================================================
# MAIN
# =============================================================================

def main():
    """Main application entry point."""
    components = get_components()
    session: AuthSession = st.session_state.get("auth_session")
    if session is None:
        render_login(components)
        return

    today = date.today()
    uid = session.user_id

    st.sidebar.title("💰 Finsight")
    st.sidebar.caption(f"Signed in as {session.display_name}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["🏠 Dashboard", "🧾 Transactions", "🏦 Accounts", "📋 Budgets",
         "🎯 Goals", "📑 Reports", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    if components.storage_mode != "firestore":
        st.sidebar.warning("Demo mode: data is not saved")
    if st.sidebar.button("Sign out"):
        sign_out(components)

    if page == "🏠 Dashboard":
        render_dashboard_page(components, uid, today)
    elif page == "🧾 Transactions":
        render_transactions_page(components, uid, today)
    elif page == "🏦 Accounts":
        render_accounts_page(components, uid, today)
    elif page == "📋 Budgets":
        render_budgets_page(components, uid, today)
    elif page == "🎯 Goals":
        render_goals_page(components, uid, today)
    elif page == "📑 Reports":
        render_reports_page(components, uid, today)
    elif page == "⚙️ Settings":
        render_settings_page(components, uid, today)


# =============================================================================
# SHARED WIDGETS
# =============================================================================

def render_overview_cards(report) -> None:
    s = report.summary
    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Income", money(s.total_income))
    c2.metric("Expenses", money(s.total_expense))
    c3.metric("Investments", money(s.total_investment))
    c4.metric("Savings", money(s.savings))
    c5.metric("Net worth", money(report.net_worth))


def render_daily_chart(report) -> None:
    if not report.daily:
        st.info("No activity in this period yet.")
        return
    days = [d.day for d in report.daily]
    fig = go.Figure()
    fig.add_trace(go.Bar(x=days, y=[float(d.income) for d in report.daily], name="Income"))
    fig.add_trace(go.Bar(x=days, y=[float(d.expense) for d in report.daily], name="Expense"))
    fig.add_trace(go.Bar(x=days, y=[float(d.investment) for d in report.daily], name="Investment"))
    fig.update_layout(barmode="group", margin=dict(t=30, b=10, l=10, r=10), title="Income vs Expense")
    st.plotly_chart(fig, use_container_width=True)


def render_spending_charts(report) -> None:
    col1, col2 = st.columns(2)
    spending = report.summary.spending_by_category
    with col1:
        if spending:
            df = pd.DataFrame(
                {"Category": list(spending), "Amount": [float(v) for v in spending.values()]}
            )
            fig = px.pie(df, values="Amount", names="Category", title="Spending Breakdown")
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.info("No expenses recorded.")
    with col2:
        nw = report.summary.needs_wants
        df = pd.DataFrame({
            "Type": ["Needs", "Wants"],
            "Amount": [float(nw.get("need", 0)), float(nw.get("want", 0))],
        })
        fig = px.bar(df, x="Type", y="Amount", title="Needs vs Wants", color="Type")
        st.plotly_chart(fig, use_container_width=True)


def render_budget_progress(report) -> None:
    if not report.budgets:
        st.info("No budgets set for this month.")
        return
    summary = report.budget_summary
    c1, c2, c3 = st.columns(3)
    c1.metric("Total budget", money(summary.total_budget))
    c2.metric("Spent", money(summary.total_spent))
    c3.metric("Left", money(summary.total_left))
    for row in report.budgets:
        st.progress(
            min(row.progress_percent / 100, 1.0),
            text=f"{row.category}: {money(row.spent)} of {money(row.limit)} ({row.display_label})",
        )


def render_transactions_table(transactions, categories) -> None:
    if not transactions:
        st.info("No transactions to display.")
        return
    st.dataframe(
        transactions_frame(transactions, categories),
        hide_index=True,
        use_container_width=True,
    )


def month_picker(key: str, today: date) -> date:
    col1, col2 = st.columns(2)
    with col1:
        year = st.selectbox(
            "Year",
            options=list(range(today.year - 5, today.year + 2)),
            index=5,
            key=f"{key}_year",
        )
    with col2:
        month = st.selectbox(
            "Month",
            options=list(range(1, 13)),
            index=today.month - 1,
            format_func=lambda m: MONTH_NAMES[m - 1],
            key=f"{key}_month",
        )
    return date(year, month, 1)


# =============================================================================
# PAGES
# =============================================================================

def render_dashboard_page(components: AppComponents, uid: str, today: date):
    """Render the dashboard for the current month."""
    st.title("🏠 Dashboard")

    try:
        report = run_async(components.reports.load_report(uid, ReportPeriod(), today))
    except StorageError as e:
        st.error(f"Could not load your data: {e}")
        return

    render_overview_cards(report)
    render_daily_chart(report)
    render_spending_charts(report)

    st.markdown("### 📋 Budget Goals")
    render_budget_progress(report)

    st.markdown("### 🧾 Recent Transactions")
    render_transactions_table(report.recent(get_settings().app.recent_transactions_limit), report.categories)

    st.markdown("### ✨ AI Insights")
    if not components.reports.ai_available:
        st.info(AI_OFF_MESSAGE)
    elif st.button("Get personalized insights"):
        with st.spinner("Thinking..."):
            st.session_state["insights"] = run_async(components.reports.get_insights(report)).insights
    if "insights" in st.session_state:
        st.markdown(insight_html(st.session_state["insights"]), unsafe_allow_html=True)


def render_transactions_page(components: AppComponents, uid: str, today: date):
    """Add, transfer, browse and export transactions."""
    st.title("🧾 Transactions")

    try:
        accounts = run_async(components.ledger.list_accounts(uid))
        index = run_async(components.ledger.category_index(uid))
    except StorageError as e:
        st.error(f"Could not load your data: {e}")
        return

    if not accounts:
        st.info("Add an account first on the Accounts page.")
        return
    account_names = {a.id: a.name for a in accounts}

    add_tab, transfer_tab, list_tab = st.tabs(["Add", "Transfer", "History"])

    with add_tab:
        tx_type = st.selectbox(
            "Type",
            options=[TransactionType.EXPENSE, TransactionType.INCOME, TransactionType.INVESTMENT],
            format_func=lambda t: label(t.value),
        )
        category_type = CategoryType(tx_type.value)
        options = index.user_categories(category_type)
        with st.form("add_transaction", clear_on_submit=True):
            account_id = st.selectbox("Account", options=list(account_names), format_func=account_names.get)
            category = st.selectbox("Category", options=options, format_func=lambda c: c.name)
            amount = st.number_input("Amount", min_value=0.0, step=100.0, format="%.2f")
            day = st.date_input("Date", value=today)
            description = st.text_input("Description")
            expense_type = None
            if tx_type == TransactionType.EXPENSE:
                expense_type = st.radio(
                    "Need or want?",
                    options=[None, ExpenseType.NEED, ExpenseType.WANT],
                    format_func=lambda e: "Not set" if e is None else label(e.value),
                    horizontal=True,
                )
            submitted = st.form_submit_button("Save transaction")

        if submitted:
            result = get_validator().validate_transaction(
                {
                    "account_id": account_id,
                    "date": day,
                    "description": description,
                    "amount": amount,
                    "category_id": category.id if category else None,
                    "type": tx_type,
                    "expense_type": expense_type,
                },
                index,
                today,
            )
            if result.issues:
                st.markdown(get_validator().get_user_friendly_summary(result))
            if result.is_valid:
                try:
                    run_async(components.ledger.save_transaction(uid, result.model))
                    st.success("Transaction saved.")
                except StorageError as e:
                    st.error(f"Could not save: {e}")

    with transfer_tab:
        if len(accounts) < 2:
            st.info("You need two accounts to make a transfer.")
        else:
            with st.form("transfer", clear_on_submit=True):
                source = st.selectbox("From", options=list(account_names), format_func=account_names.get)
                destination = st.selectbox(
                    "To", options=list(account_names), index=1, format_func=account_names.get
                )
                amount = st.number_input("Amount", min_value=0.0, step=100.0, format="%.2f", key="transfer_amount")
                day = st.date_input("Date", value=today, key="transfer_date")
                description = st.text_input("Description", key="transfer_description")
                submitted = st.form_submit_button("Record transfer")
            if submitted:
                result = get_validator().validate_transfer(source, destination, amount, day, today)
                if result.issues:
                    st.markdown(get_validator().get_user_friendly_summary(result))
                if result.is_valid:
                    try:
                        run_async(components.ledger.record_transfer(
                            uid, source, destination, amount, day, description
                        ))
                        st.success("Transfer recorded.")
                    except StorageError as e:
                        st.error(f"Could not record transfer: {e}")

    with list_tab:
        period = render_period_selector("history", today)
        filter_account = st.selectbox(
            "Account",
            options=[None] + list(account_names),
            format_func=lambda a: "All accounts" if a is None else account_names[a],
        )
        try:
            transactions = run_async(components.ledger.list_transactions(
                uid, period.date_range(today), filter_account
            ))
        except StorageError as e:
            st.error(f"Could not load transactions: {e}")
            return

        render_transactions_table(transactions, index)
        if transactions:
            st.download_button(
                "⬇ Download CSV",
                transactions_frame(transactions, index).to_csv(index=False),
                file_name=csv_filename(period.title(today)),
                mime="text/csv",
            )

            selected = st.selectbox(
                "Edit or delete a transaction",
                options=[None] + transactions,
                format_func=lambda t: "Choose..." if t is None else (
                    f"{t.date.strftime('%d-%m-%Y')} {t.description or index.name_of(t.category_id)} "
                    f"{money(t.amount)}"
                ),
            )
            if selected is not None:
                render_transaction_editor(components, uid, today, selected, index, account_names)


def render_transaction_editor(components, uid, today, selected, index, account_names) -> None:
    """Edit form and delete control for one listed transaction."""
    if selected.is_transfer_leg:
        st.markdown(
            '<div class="warning-box">This is one side of a transfer. Editing is disabled, and '
            "deleting it leaves the matching entry on the other account in place, so both "
            "balances should be checked afterwards.</div>",
            unsafe_allow_html=True,
        )
    elif selected.type in (TransactionType.INCOME, TransactionType.EXPENSE, TransactionType.INVESTMENT):
        options = index.user_categories(CategoryType(selected.type.value))
        category_ids = [c.id for c in options]
        accounts = list(account_names)
        with st.form(f"edit_{selected.id}"):
            st.subheader("Edit transaction")
            account_id = st.selectbox(
                "Account",
                options=accounts,
                index=accounts.index(selected.account_id) if selected.account_id in accounts else 0,
                format_func=account_names.get,
            )
            category = st.selectbox(
                "Category",
                options=options,
                index=category_ids.index(selected.category_id) if selected.category_id in category_ids else 0,
                format_func=lambda c: c.name,
            )
            amount = st.number_input("Amount", min_value=0.0, value=float(selected.amount), step=100.0, format="%.2f")
            day = st.date_input("Date", value=selected.date)
            description = st.text_input("Description", value=selected.description)
            expense_type = selected.expense_type
            if selected.type == TransactionType.EXPENSE:
                choices = [None, ExpenseType.NEED, ExpenseType.WANT]
                expense_type = st.radio(
                    "Need or want?",
                    options=choices,
                    index=choices.index(selected.expense_type),
                    format_func=lambda e: "Not set" if e is None else label(e.value),
                    horizontal=True,
                )
            submitted = st.form_submit_button("Save changes")

        if submitted:
            result = get_validator().validate_transaction(
                {
                    "id": selected.id,
                    "account_id": account_id,
                    "date": day,
                    "description": description,
                    "amount": amount,
                    "category_id": category.id if category else None,
                    "type": selected.type,
                    "expense_type": expense_type,
                    "created_at": selected.created_at,
                },
                index,
                today,
            )
            if result.issues:
                st.markdown(get_validator().get_user_friendly_summary(result))
            if result.is_valid:
                try:
                    run_async(components.ledger.save_transaction(
                        uid, result.model, previous_account_id=selected.account_id
                    ))
                    st.success("Transaction updated.")
                    st.rerun()
                except StorageError as e:
                    st.error(f"Could not save: {e}")

    if st.button("Delete transaction"):
        try:
            run_async(components.ledger.delete_transaction(uid, selected.account_id, selected.id))
            st.success("Transaction deleted.")
            st.rerun()
        except StorageError as e:
            st.error(f"Could not delete: {e}")


def render_accounts_page(components: AppComponents, uid: str, today: date):
    """Account list with derived balances."""
    st.title("🏦 Accounts")

    try:
        report = run_async(components.reports.load_report(uid, ReportPeriod(kind=PeriodKind.OVERALL), today))
    except StorageError as e:
        st.error(f"Could not load accounts: {e}")
        return

    st.metric("Net worth", money(report.net_worth))

    if report.balances:
        df = pd.DataFrame({
            "Account": [b.account.name for b in report.balances],
            "Balance": [float(b.balance) for b in report.balances],
        })
        fig = px.bar(df, x="Account", y="Balance", title="Account Balances")
        st.plotly_chart(fig, use_container_width=True)

    for item in report.balances:
        account = item.account
        caption = "Amount owed" if item.is_liability else "Balance"
        with st.expander(f"{account.name} ({label(account.type.value)}): {caption} {money(item.balance)}"):
            with st.form(f"edit_{account.id}"):
                name = st.text_input("Name", value=account.name)
                account_type = st.selectbox(
                    "Type",
                    options=list(AccountType),
                    index=list(AccountType).index(account.type),
                    format_func=lambda t: label(t.value),
                )
                saved = st.form_submit_button("Save changes")
            if saved:
                try:
                    run_async(components.ledger.update_account(uid, account.id, name, account_type))
                    st.success("Account updated.")
                    st.rerun()
                except (StorageError, ValueError) as e:
                    st.error(f"Could not update: {e}")

            confirm = st.checkbox("I understand this deletes all of this account's transactions", key=f"confirm_{account.id}")
            if st.button("Delete account", key=f"delete_{account.id}", disabled=not confirm):
                try:
                    count = run_async(components.ledger.delete_account(uid, account.id))
                    st.success(f"Account deleted with {count} transactions.")
                    st.rerun()
                except StorageError as e:
                    st.error(f"Could not delete: {e}")

    st.markdown("### ➕ Add Account")
    with st.form("add_account", clear_on_submit=True):
        name = st.text_input("Account name")
        account_type = st.selectbox("Type", options=list(AccountType), format_func=lambda t: label(t.value))
        opening = st.number_input(
            "Opening balance",
            min_value=0.0,
            step=100.0,
            format="%.2f",
            help="For credit cards, the amount currently owed",
        )
        submitted = st.form_submit_button("Add account")
    if submitted:
        result = get_validator().validate_account({"name": name, "type": account_type, "initial_balance": opening})
        if not result.is_valid:
            st.markdown(get_validator().get_user_friendly_summary(result))
        else:
            try:
                run_async(components.ledger.create_account(
                    uid, name, account_type, opening, reference_date=today,
                    correlation_id=create_correlation_id(),
                ))
                st.success("Account added.")
                st.rerun()
            except StorageError as e:
                st.error(f"Could not add account: {e}")


def render_budgets_page(components: AppComponents, uid: str, today: date):
    """Monthly budget planner and progress."""
    st.title("📋 Budgets")

    month = month_picker("budget", today)
    try:
        index = run_async(components.ledger.category_index(uid))
        existing = {b.category_id: b for b in run_async(components.planning.list_budgets(uid, month))}
        report = run_async(components.reports.load_report(
            uid, ReportPeriod.custom(month.year, month.month), today
        ))
    except StorageError as e:
        st.error(f"Could not load budgets: {e}")
        return

    st.markdown(f"### Progress for {month.strftime('%B %Y')}")
    render_budget_progress(report)

    st.markdown("### ✏️ Plan")
    categories = index.user_categories(CategoryType.EXPENSE, CategoryType.INVESTMENT)
    with st.form("budget_planner"):
        amounts = {}
        for category in categories:
            current = existing.get(category.id)
            amounts[category.id] = st.number_input(
                category.name,
                min_value=0.0,
                step=100.0,
                format="%.2f",
                value=float(current.amount) if current else 0.0,
                key=f"budget_{category.id}",
            )
        carry_forward = st.checkbox("Copy these budgets into next month too")
        submitted = st.form_submit_button("Save budgets")

    if submitted:
        # Leave untouched zero rows out unless they already exist
        to_save = {cid: v for cid, v in amounts.items() if v > 0 or cid in existing}
        result = get_validator().validate_budget_amounts(to_save, index, month)
        if not result.is_valid:
            st.markdown(get_validator().get_user_friendly_summary(result))
        else:
            try:
                run_async(components.planning.save_budgets(uid, month, to_save, carry_forward))
                st.success("Budgets saved.")
                st.rerun()
            except StorageError as e:
                st.error(f"Could not save budgets: {e}")

    if existing:
        to_remove = st.selectbox(
            "Remove a budget",
            options=[None] + list(existing.values()),
            format_func=lambda b: "Choose..." if b is None else (
                f"{index.name_of(b.category_id)} {money(b.amount)}"
            ),
        )
        if to_remove is not None and st.button("Remove budget"):
            try:
                run_async(components.planning.delete_budget(uid, to_remove.id))
                st.success("Budget removed.")
                st.rerun()
            except StorageError as e:
                st.error(f"Could not remove budget: {e}")

    st.markdown("### ✨ Suggested Budget Goals")
    if not components.reports.ai_available:
        st.info(AI_OFF_MESSAGE)
        return
    risk = st.select_slider("Risk tolerance", options=["low", "medium", "high"], value="medium")
    if st.button("Suggest budget goals"):
        with st.spinner("Thinking..."):
            output = run_async(components.reports.suggest_budget_goals(report, risk))
        if output.note:
            st.warning(output.note)
        for s in output.suggestions:
            st.markdown(f"**{s.goal}**: {money(s.amount)}  \n{s.rationale}")


def render_goals_page(components: AppComponents, uid: str, today: date):
    """Savings and spending goals."""
    st.title("🎯 Goals")

    try:
        progress = run_async(components.planning.goal_progress(uid, today))
    except StorageError as e:
        st.error(f"Could not load goals: {e}")
        return

    if not progress:
        st.info("No goals yet. Add one below.")

    for item in progress:
        goal = item.goal
        status = "✅" if item.is_achieved else "⏳"
        st.markdown(f"**{status} {goal.name}** ({label(goal.period.value)}, {label(goal.type.value)})")
        st.progress(
            min(item.progress_percent / 100, 1.0),
            text=f"{money(item.current_amount)} of {money(goal.target_amount)}",
        )
        if item.days_left is not None:
            st.caption(f"{item.days_left} days left")

        col1, col2 = st.columns(2)
        if not goal.is_recurring:
            with col1:
                new_amount = st.number_input(
                    "Update saved amount",
                    min_value=0.0,
                    value=float(goal.current_amount),
                    format="%.2f",
                    key=f"goal_amount_{goal.id}",
                )
                if st.button("Update", key=f"goal_update_{goal.id}"):
                    try:
                        run_async(components.planning.update_goal_progress(uid, goal.id, new_amount))
                        st.rerun()
                    except StorageError as e:
                        st.error(f"Could not update: {e}")
        with col2:
            if st.button("Delete goal", key=f"goal_delete_{goal.id}"):
                try:
                    run_async(components.planning.delete_goal(uid, goal.id))
                    st.rerun()
                except StorageError as e:
                    st.error(f"Could not delete: {e}")
        st.markdown("---")

    st.markdown("### ➕ Add Goal")
    with st.form("add_goal", clear_on_submit=True):
        name = st.text_input("Goal name")
        period = st.selectbox("Period", options=list(GoalPeriod), format_func=lambda p: label(p.value))
        goal_type = st.selectbox("Type", options=list(GoalType), format_func=lambda t: label(t.value))
        target = st.number_input("Target amount", min_value=0.0, step=1000.0, format="%.2f")
        current = st.number_input("Already saved (long-term goals)", min_value=0.0, format="%.2f")
        target_date = st.date_input("Target date (optional)", value=None)
        submitted = st.form_submit_button("Add goal")
    if submitted:
        result = get_validator().validate_goal(
            {
                "name": name,
                "period": period,
                "type": goal_type,
                "target_amount": target,
                "current_amount": current,
                "target_date": target_date,
            },
            today,
        )
        if result.issues:
            st.markdown(get_validator().get_user_friendly_summary(result))
        if result.is_valid:
            try:
                run_async(components.planning.create_goal(uid, result.model))
                st.success("Goal added.")
                st.rerun()
            except StorageError as e:
                st.error(f"Could not add goal: {e}")


def render_period_selector(key: str, today: date) -> ReportPeriod:
    kind = st.radio(
        "Period",
        options=list(PeriodKind),
        format_func=lambda k: {
            PeriodKind.CURRENT_MONTH: "This Month",
            PeriodKind.CURRENT_YEAR: "This Year",
            PeriodKind.CUSTOM: "Choose month",
            PeriodKind.OVERALL: "Overall",
        }[k],
        horizontal=True,
        key=f"{key}_period",
    )
    if kind == PeriodKind.CUSTOM:
        month = month_picker(key, today)
        return ReportPeriod.custom(month.year, month.month)
    return ReportPeriod(kind=kind)


def render_reports_page(components: AppComponents, uid: str, today: date):
    """Period reports with CSV export."""
    st.title("📑 Reports")

    period = render_period_selector("report", today)
    try:
        report = run_async(components.reports.load_report(uid, period, today))
    except StorageError as e:
        st.error(f"Could not load report: {e}")
        return

    st.subheader(report.title)
    render_overview_cards(report)
    render_daily_chart(report)
    render_spending_charts(report)

    st.markdown("### 🧾 Transactions")
    render_transactions_table(report.transactions, report.categories)
    if report.transactions:
        file_name, csv = components.reports.export_csv(report)
        st.download_button("⬇ Download CSV", csv, file_name=file_name, mime="text/csv")

    st.markdown("### ✨ AI Summary")
    if not components.reports.ai_available:
        st.info(AI_OFF_MESSAGE)
    elif st.button("Summarize these transactions"):
        with st.spinner("Thinking..."):
            output = run_async(components.reports.summarize_transactions(report))
        st.markdown(insight_html(output.summary), unsafe_allow_html=True)
        if output.unusual_transactions:
            st.markdown("**Unusual transactions**")
            st.dataframe(
                pd.DataFrame([t.model_dump() for t in output.unusual_transactions]),
                hide_index=True,
                use_container_width=True,
            )
        for rec in output.recommendations:
            st.markdown(f"- {rec}")


def render_settings_page(components: AppComponents, uid: str, today: date):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### 🏷️ Categories")
    try:
        index = run_async(components.ledger.category_index(uid))
    except StorageError as e:
        st.error(f"Could not load categories: {e}")
        return

    for category in index.user_categories():
        with st.expander(f"{category.name} ({label(category.type.value)})"):
            new_name = st.text_input("New name", value=category.name, key=f"rename_{category.id}")
            col1, col2 = st.columns(2)
            with col1:
                if st.button("Rename", key=f"rename_btn_{category.id}"):
                    check = get_validator().validate_category_name(new_name, index, exclude_id=category.id)
                    if not check.is_valid:
                        st.error(get_validator().get_user_friendly_summary(check))
                    else:
                        try:
                            run_async(components.ledger.rename_category(uid, category.id, new_name))
                            st.rerun()
                        except DuplicateError as e:
                            st.error(str(e))
                        except (StorageError, ValueError) as e:
                            st.error(f"Could not rename: {e}")
            with col2:
                if st.button("Delete", key=f"delete_cat_{category.id}"):
                    try:
                        count = run_async(components.ledger.delete_category(uid, category.id))
                        st.success(f"Deleted along with {count} budgets.")
                        st.rerun()
                    except StorageError as e:
                        st.error(f"Could not delete: {e}")

    with st.form("add_category", clear_on_submit=True):
        name = st.text_input("Category name")
        category_type = st.selectbox("Type", options=list(CategoryType), format_func=lambda t: label(t.value))
        submitted = st.form_submit_button("Add category")
    check = get_validator().validate_category_name(name, index) if submitted else None
    if check is not None and not check.is_valid:
        st.error(get_validator().get_user_friendly_summary(check))
    elif submitted:
        try:
            run_async(components.ledger.create_category(uid, name, category_type))
            st.success("Category added.")
            st.rerun()
        except DuplicateError as e:
            st.error(str(e))
        except (StorageError, ValueError) as e:
            st.error(f"Could not add category: {e}")

    st.markdown("---")
    st.markdown("### 🗑️ Clear Records")
    scope = st.radio("What to clear", options=["Selected period", "Everything"], horizontal=True)
    date_range = None
    if scope == "Selected period":
        period = render_period_selector("clear", today)
        date_range = period.date_range(today)
        if date_range is None:
            st.caption("Overall selected: all transactions will be removed, accounts are kept.")
            date_range = DateRange(start=date.min, end=date.max)
    confirm = st.checkbox("I understand this cannot be undone")
    if st.button("Clear records", disabled=not confirm):
        try:
            count = run_async(components.reports.clear_records(uid, date_range))
            st.success(f"Removed {count} records.")
            if date_range is None:
                run_async(components.ledger.ensure_default_categories(uid))
        except PartialClearError as e:
            st.error(
                f"Clearing stopped part way. {len(e.cleared_account_ids)} account(s) were already "
                "removed; please run it again to finish."
            )
        except StorageError as e:
            st.error(f"Could not clear records: {e}")

    st.markdown("---")
    st.markdown("### Connection Status")

    status = validate_all_settings()
    services = [
        ("Firebase (Storage & Auth)", "firebase"),
        ("Gemini (AI)", "gemini"),
        ("App settings", "app"),
    ]
    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")
    st.caption(f"Storage mode: {components.storage_mode}")

    with st.expander("Recent activity"):
        events = components.audit_logger.recent_events[:20]
        if events:
            st.dataframe(
                pd.DataFrame([
                    {"Time": e.timestamp.strftime("%d-%m-%Y %H:%M"), "Event": e.description}
                    for e in events
                ]),
                hide_index=True,
                use_container_width=True,
            )
        else:
            st.caption("Nothing yet.")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your keys. "
        "See `.env.example` for the required variables."
    )


if __name__ == "__main__":
    main()
