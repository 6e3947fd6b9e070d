# reports.py — date-range resolution, filtering and the aggregations behind the reports tab

import calendar
import logging
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

from models import (
    UNKNOWN_COLOR,
    UNKNOWN_NAME,
    Category,
    CategoryBucket,
    DateRange,
    Granularity,
    RangeKind,
    Summary,
    TimeBucket,
    Transaction,
)

logger = logging.getLogger(__name__)

SUNDAY = 6  # date.weekday() numbering
FRAME_COLUMNS = [
    "ID", "Date", "Type", "Amount", "CategoryKey", "Category", "Color",
    "Description", "Income", "Expense", "Day", "Month",
]

CategorySelector = Union[str, int]


def _as_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def resolve_date_range(
    kind: RangeKind,
    custom_start=None,
    custom_end=None,
    today: Optional[date] = None,
    week_start: int = SUNDAY,
) -> Optional[DateRange]:
    """
    Turn a range selector into an inclusive calendar-date interval.

    ``None`` means unbounded: it is returned for ``all`` and for a ``custom``
    range whose bounds are missing or unreadable.
    """
    today = _as_date(today) or date.today()

    if kind == "all":
        return None
    if kind == "today":
        return DateRange(start_date=today, end_date=today)
    if kind == "week":
        offset = (today.weekday() - week_start) % 7
        start = date.fromordinal(today.toordinal() - offset)
        end = date.fromordinal(start.toordinal() + 6)
        return DateRange(start_date=start, end_date=end)
    if kind == "month":
        last_day = calendar.monthrange(today.year, today.month)[1]
        return DateRange(start_date=today.replace(day=1), end_date=today.replace(day=last_day))
    if kind == "year":
        return DateRange(start_date=date(today.year, 1, 1), end_date=date(today.year, 12, 31))
    if kind == "custom":
        start, end = _as_date(custom_start), _as_date(custom_end)
        if start is None or end is None:
            logger.warning(
                "Custom range needs both bounds (got start=%r, end=%r); treating as unbounded",
                custom_start, custom_end,
            )
            return None
        return DateRange(start_date=start, end_date=end)

    raise ValueError(f"Unknown date range kind: {kind!r}")


def _category_matches(category_id: Optional[int], selector: CategorySelector) -> bool:
    if selector == "all":
        return True
    if isinstance(selector, str):
        try:
            selector = int(selector)
        except ValueError:
            return False
    return category_id == selector


def filter_transactions(
    transactions: Sequence[Transaction],
    date_range: Optional[DateRange],
    category: CategorySelector = "all",
) -> List[Transaction]:
    """Stable filter by inclusive date interval AND category; order is preserved."""
    return [
        t for t in transactions
        if (date_range is None or date_range.contains(t.date))
        and _category_matches(t.category_id, category)
    ]


def summarize(transactions: Iterable[Transaction]) -> Summary:
    """Income, expense and net totals at full precision."""
    income = 0.0
    expenses = 0.0
    count = 0
    for t in transactions:
        if t.type == "income":
            income += t.amount
        else:
            expenses += t.amount
        count += 1
    return Summary(total_income=income, total_expenses=expenses, net_balance=income - expenses, count=count)


def resolve_category(category_id: Optional[int], categories: Iterable[Category]) -> Category:
    """Look up a category, degrading to the Unknown placeholder for dangling ids."""
    for category in categories:
        if category.id == category_id:
            return category
    return Category(id=0, name=UNKNOWN_NAME, color=UNKNOWN_COLOR)


def sort_transactions(
    transactions: Iterable[Transaction],
    newest_first: bool = True,
    key: str = "date",
) -> List[Transaction]:
    """Order for the transaction log: by ``date`` (ties on created_at) or by ``created_at``."""
    if key == "date":
        sort_key = lambda t: (t.date, t.created_at)
    elif key == "created_at":
        sort_key = lambda t: t.created_at
    else:
        raise ValueError(f"Unsupported sort key: {key!r}")
    return sorted(transactions, key=sort_key, reverse=newest_first)


def to_frame(
    transactions: Sequence[Transaction],
    categories: Optional[Sequence[Category]] = None,
) -> pd.DataFrame:
    """
    Prepares a dataframe for charts and exports.

    Amounts stay unsigned; the helper columns ``Income`` and ``Expense`` split
    them by type so group-bys can sum both sides at once.
    """
    if not transactions:
        return pd.DataFrame(columns=FRAME_COLUMNS)

    lookup: Dict[int, Category] = {c.id: c for c in (categories or [])}
    rows = []
    for t in transactions:
        category = lookup.get(t.category_id)
        rows.append(
            {
                "ID": t.id,
                "Date": t.date,
                "Type": t.type,
                "Amount": t.amount,
                # Dangling references share a single key so they land in one bucket
                "CategoryKey": str(category.id) if category else "unknown",
                "Category": category.name if category else UNKNOWN_NAME,
                "Color": category.color if category else UNKNOWN_COLOR,
                "Description": t.description or "",
            }
        )

    df = pd.DataFrame(rows)
    df["Date"] = pd.to_datetime(df["Date"])
    df["Amount"] = pd.to_numeric(df["Amount"], errors="coerce").fillna(0)

    # Helper columns
    df["Income"] = df["Amount"].where(df["Type"] == "income", 0.0)
    df["Expense"] = df["Amount"].where(df["Type"] == "expense", 0.0)
    df["Day"] = df["Date"].dt.strftime("%Y-%m-%d")
    df["Month"] = df["Date"].dt.to_period("M").astype(str)
    return df[FRAME_COLUMNS]


def group_by_time(
    transactions: Sequence[Transaction],
    granularity: Granularity = "day",
    limit: Optional[int] = None,
) -> List[TimeBucket]:
    """
    Income vs expenses per day or per month, ascending by date.

    ``limit`` keeps only the most recent N buckets (the dashboard shows the
    last 15 days); ``None`` keeps them all.
    """
    if granularity not in ("day", "month"):
        raise ValueError(f"Unsupported granularity: {granularity!r}")

    df = to_frame(transactions)
    if df.empty:
        return []

    bucket_col = "Day" if granularity == "day" else "Month"
    # ISO labels sort chronologically
    grouped = (
        df.groupby(bucket_col, sort=True)[["Income", "Expense"]]
        .sum()
        .reset_index()
    )
    grouped["Net"] = grouped["Income"] - grouped["Expense"]

    if limit is not None and limit > 0:
        grouped = grouped.tail(limit)

    return [
        TimeBucket(
            label=row[bucket_col],
            income=float(row["Income"]),
            expenses=float(row["Expense"]),
            net=float(row["Net"]),
        )
        for _, row in grouped.iterrows()
    ]


def group_by_category(
    transactions: Sequence[Transaction],
    categories: Sequence[Category],
) -> List[CategoryBucket]:
    """Per-category income/expense totals, largest first, empty categories dropped."""
    df = to_frame(transactions, categories)
    if df.empty:
        return []

    grouped = (
        df.groupby("CategoryKey", sort=False)
        .agg(
            Category=("Category", "first"),
            Color=("Color", "first"),
            Income=("Income", "sum"),
            Expense=("Expense", "sum"),
        )
        .reset_index()
    )
    grouped["Net"] = grouped["Income"] - grouped["Expense"]
    grouped["Total"] = grouped["Income"] + grouped["Expense"]
    grouped = grouped[grouped["Total"] != 0]
    grouped = grouped.sort_values("Total", ascending=False, kind="mergesort")

    return [
        CategoryBucket(
            category_id=None if row["CategoryKey"] == "unknown" else int(row["CategoryKey"]),
            name=row["Category"],
            color=row["Color"],
            income=float(row["Income"]),
            expenses=float(row["Expense"]),
            net=float(row["Net"]),
            total=float(row["Total"]),
        )
        for _, row in grouped.iterrows()
    ]


def category_choices(categories: Sequence[Category], current_id: Optional[int] = None) -> List[Optional[int]]:
    """
    Category ids offered when editing a transaction.

    A dangling ``current_id`` is kept as the first option so saving an edit
    does not quietly move the transaction to another category.
    """
    ids: List[Optional[int]] = [c.id for c in categories]
    if current_id not in ids:
        ids.insert(0, current_id)
    return ids
