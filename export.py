"""
export.py
---------
Build downloadable CSV and plain-text reports from a transaction snapshot.
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

import pandas as pd

from models import Category, Transaction
from reports import sort_transactions, summarize, to_frame

CSV_COLUMNS = ["Date", "Type", "Category", "Amount", "Description"]
FILENAME_PATTERNS = {
    "csv": "transactions-{day}.csv",
    "report": "finance-report-{day}.txt",
}


def export_filename(kind: str, on: Optional[date] = None) -> str:
    if kind not in FILENAME_PATTERNS:
        raise ValueError(f"Unknown export kind: {kind!r}")
    day = (on or date.today()).isoformat()
    return FILENAME_PATTERNS[kind].format(day=day)


def transactions_to_csv(transactions: Sequence[Transaction], categories: Sequence[Category]) -> str:
    """CSV of the given transactions, newest first, amounts to 2 decimals."""
    df = to_frame(sort_transactions(transactions), categories)
    if df.empty:
        return pd.DataFrame(columns=CSV_COLUMNS).to_csv(index=False)

    out = df[CSV_COLUMNS].copy()
    out["Date"] = out["Date"].dt.strftime("%Y-%m-%d")
    return out.to_csv(index=False, float_format="%.2f")


def build_text_report(
    transactions: Sequence[Transaction],
    categories: Sequence[Category],
    currency: str = "$",
) -> str:
    summary = summarize(transactions)
    lines = [
        "FINANCE REPORT",
        "",
        f"Total Income: {currency}{summary.total_income:,.2f}",
        f"Total Expenses: {currency}{summary.total_expenses:,.2f}",
        f"Net Balance: {currency}{summary.net_balance:,.2f}",
        f"Number of Transactions: {summary.count}",
        "",
        "DETAILS:",
    ]

    df = to_frame(sort_transactions(transactions), categories)
    for _, row in df.iterrows():
        lines.append(
            f"{row['Date']:%Y-%m-%d} - {row['Category']} - {row['Type']} - "
            f"{currency}{row['Amount']:,.2f} - {row['Description'] or 'No description'}"
        )
    return "\n".join(lines)
