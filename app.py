import streamlit as st
import time
from datetime import date

from auth import verify_user
from charts import category_breakdown, income_vs_expense, net_trend
from config import AUTH_ENABLED, CURRENCY_SYMBOL, DAILY_BUCKET_LIMIT, WEEK_START, setup_logging
from crud import (
    create_category, create_transaction, delete_category, delete_transaction,
    load_snapshot, seed_default_categories, update_category, update_transaction,
)
from database import SessionLocal, init_db
from export import build_text_report, export_filename, transactions_to_csv
from models import CategoryCreate, CategoryUpdate, TransactionCreate, TransactionUpdate
from reports import (
    category_choices, filter_transactions, group_by_category, group_by_time, resolve_category,
    resolve_date_range, sort_transactions, summarize,
)
from storage import save_file

# --- Configuration ---
st.set_page_config(page_title="Personal Finance Tracker", layout="wide", page_icon="💰")
setup_logging()

RANGE_LABELS = {
    "all": "All Time",
    "today": "Today",
    "week": "This Week",
    "month": "This Month",
    "year": "This Year",
    "custom": "Custom Range",
}

# --- Database Session ---
init_db()

if "db" not in st.session_state:
    st.session_state.db = SessionLocal()
    seed_default_categories(st.session_state.db)

def get_db():
    return st.session_state.db

def money(value: float) -> str:
    return f"{CURRENCY_SYMBOL}{value:,.2f}"

# --- Authentication ---
def check_login():
    """Optional login gate, only shown when AUTH_ENABLED is set."""
    if not AUTH_ENABLED:
        return True

    if "authenticated" not in st.session_state:
        st.session_state["authenticated"] = False
        st.session_state["user_id"] = None
        st.session_state["failed_attempts"] = []
        st.session_state["lock_until"] = None

    if st.session_state.get("authenticated", False):
        return True

    st.title("Sign In")
    username = st.text_input("Username", key="login_user")
    password = st.text_input("Password", type="password", key="login_pass")

    now = time.time()
    lock_until = st.session_state.get("lock_until")
    if lock_until and now < lock_until:
        st.error(f"Too many failed attempts. Please wait {int(lock_until - now)} seconds before trying again.")
    elif st.button("Sign In", type="primary", use_container_width=True):
        # Prune stale attempts (keep last 5 minutes)
        st.session_state["failed_attempts"] = [t for t in st.session_state["failed_attempts"] if now - t < 300]

        user = verify_user(get_db(), username, password)
        if user:
            st.session_state["authenticated"] = True
            st.session_state["user_id"] = user.id
            st.session_state["failed_attempts"] = []
            st.session_state["lock_until"] = None
            st.rerun()
        else:
            st.session_state["failed_attempts"].append(now)
            st.error("❌ Invalid credentials")
            if len(st.session_state["failed_attempts"]) >= 5:
                st.session_state["lock_until"] = now + 60
                st.warning("Too many failed attempts. Login temporarily locked for 60 seconds.")

    return st.session_state.get("authenticated", False)

if not check_login():
    st.stop()

# --- Data Loading ---
transactions, categories = load_snapshot(get_db())
category_names = {c.id: c.name for c in categories}

# --- Header ---
overall = summarize(transactions)
st.title("💰 Personal Finance Tracker")
col1, col2, col3 = st.columns(3)
col1.metric("Income", money(overall.total_income))
col2.metric("Expenses", money(overall.total_expenses))
col3.metric("Net Balance", money(overall.net_balance))

# --- Sidebar: filters ---
with st.sidebar:
    st.header("Filters")
    range_kind = st.selectbox("Date Range", list(RANGE_LABELS), format_func=RANGE_LABELS.get)
    custom_start = custom_end = None
    if range_kind == "custom":
        custom_start = st.date_input("Start Date", value=None)
        custom_end = st.date_input("End Date", value=None)
        if not (custom_start and custom_end):
            st.caption("Pick both dates to apply the custom range.")

    category_choice = st.selectbox(
        "Category",
        ["all"] + [c.id for c in categories],
        format_func=lambda v: "All Categories" if v == "all" else category_names[v],
    )

    if AUTH_ENABLED:
        st.divider()
        if st.button("🚪 Logout", use_container_width=True):
            st.session_state["authenticated"] = False
            st.session_state["user_id"] = None
            st.rerun()

date_range = resolve_date_range(range_kind, custom_start, custom_end, week_start=WEEK_START)
filtered = filter_transactions(transactions, date_range, category_choice)

tab1, tab2, tab3, tab4 = st.tabs(["💳 Transactions", "📊 Reports", "🏷️ Categories", "📤 Export"])

with tab1:
    with st.expander("➕ Add Transaction"):
        with st.form("add_transaction", clear_on_submit=True):
            c1, c2 = st.columns(2)
            txn_type = c1.radio("Type", ["expense", "income"], horizontal=True)
            amount = c2.number_input(f"Amount ({CURRENCY_SYMBOL})", min_value=0.0, step=1.0)
            c3, c4 = st.columns(2)
            category_id = c3.selectbox("Category", [c.id for c in categories], format_func=category_names.get)
            txn_date = c4.date_input("Date", value=date.today())
            description = st.text_input("Description")

            if st.form_submit_button("Save"):
                if amount <= 0 or category_id is None:
                    st.error("Amount and category are required.")
                else:
                    create_transaction(get_db(), TransactionCreate(
                        amount=amount, type=txn_type, category_id=category_id,
                        description=description, date=txn_date,
                    ))
                    st.success(f"{txn_type.title()} added.")
                    st.rerun()

    st.subheader("Transaction Log")
    st.caption(f"{len(filtered)} transactions in selected period")
    if not filtered:
        st.info("No transactions match the current filters.")

    for t in sort_transactions(filtered):
        category = resolve_category(t.category_id, categories)
        sign = "+" if t.type == "income" else "-"
        row = st.columns([3, 2, 2, 1, 1])
        row[0].markdown(f"**{category.name}** · {t.description or '—'}")
        row[1].write(t.date.strftime("%b %d, %Y"))
        row[2].markdown(f":{'green' if t.type == 'income' else 'red'}[{sign}{money(t.amount)}]")
        if row[3].button("✏️", key=f"edit_{t.id}"):
            st.session_state["editing_transaction"] = t.id
        if row[4].button("🗑️", key=f"del_{t.id}"):
            delete_transaction(get_db(), t.id)
            st.rerun()

        if st.session_state.get("editing_transaction") == t.id:
            with st.form(f"edit_form_{t.id}"):
                ids = category_choices(categories, t.category_id)
                new_amount = st.number_input("Amount", min_value=0.0, value=float(t.amount))
                new_type = st.radio("Type", ["expense", "income"], index=0 if t.type == "expense" else 1, horizontal=True)
                new_category = st.selectbox(
                    "Category", ids, index=ids.index(t.category_id),
                    format_func=lambda v: resolve_category(v, categories).name,
                )
                new_date = st.date_input("Date", value=t.date)
                new_description = st.text_input("Description", value=t.description)
                if st.form_submit_button("Update"):
                    update_transaction(get_db(), t.id, TransactionUpdate(
                        amount=new_amount, type=new_type, category_id=new_category,
                        date=new_date, description=new_description,
                    ))
                    st.session_state["editing_transaction"] = None
                    st.rerun()

with tab2:
    summary = summarize(filtered)
    c1, c2, c3 = st.columns(3)
    c1.metric("Filtered Income", money(summary.total_income))
    c2.metric("Filtered Expenses", money(summary.total_expenses))
    c3.metric("Net Balance", money(summary.net_balance))

    if not filtered:
        st.info("No data available for selected date range. Try adjusting your date filter.")
    else:
        granularity = st.radio("Group by", ["day", "month"], horizontal=True, format_func=str.title)
        limit = DAILY_BUCKET_LIMIT if granularity == "day" else None
        buckets = group_by_time(filtered, granularity, limit)

        col1, col2 = st.columns(2)
        with col1:
            st.plotly_chart(income_vs_expense(buckets), use_container_width=True)
        with col2:
            st.plotly_chart(category_breakdown(group_by_category(filtered, categories)), use_container_width=True)

        st.plotly_chart(net_trend(group_by_time(filtered, granularity)), use_container_width=True)

with tab3:
    st.subheader("🏷️ Categories")
    with st.form("add_category", clear_on_submit=True):
        c1, c2 = st.columns([3, 1])
        name = c1.text_input("Category name")
        color = c2.color_picker("Color", value="#9CA3AF")
        if st.form_submit_button("Add Category"):
            if not name.strip():
                st.error("Category name is required.")
            else:
                create_category(get_db(), CategoryCreate(name=name, color=color))
                st.success(f'Category "{name.strip()}" has been created.')
                st.rerun()

    for c in categories:
        row = st.columns([3, 1, 1, 1])
        new_name = row[0].text_input("Name", value=c.name, key=f"cat_name_{c.id}", label_visibility="collapsed")
        new_color = row[1].color_picker("Color", value=c.color, key=f"cat_color_{c.id}", label_visibility="collapsed")
        if row[2].button("Save", key=f"cat_save_{c.id}"):
            if not new_name.strip():
                st.error("Category name is required.")
            else:
                update_category(get_db(), c.id, CategoryUpdate(name=new_name, color=new_color))
                st.rerun()
        if row[3].button("Delete", key=f"cat_del_{c.id}"):
            delete_category(get_db(), c.id)
            st.rerun()

with tab4:
    st.subheader("📤 Export")
    st.caption(f"Exports cover the {len(filtered)} transactions in the current filter.")
    csv_body = transactions_to_csv(filtered, categories)
    report_body = build_text_report(filtered, categories, currency=CURRENCY_SYMBOL)

    col1, col2 = st.columns(2)
    col1.download_button("Download CSV", csv_body, file_name=export_filename("csv"), mime="text/csv")
    col2.download_button("Download Report", report_body, file_name=export_filename("report"), mime="text/plain")

    if st.button("💾 Save exports to storage"):
        ok_csv = save_file(export_filename("csv"), csv_body)
        ok_report = save_file(export_filename("report"), report_body)
        if ok_csv and ok_report:
            st.success("Exports saved.")
        else:
            st.error("Saving exports failed. Check the logs for details.")
