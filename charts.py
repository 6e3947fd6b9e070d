# charts.py — plotly figures built from the report buckets

from collections import Counter
from typing import List

import plotly.express as px
import plotly.graph_objects as go
import pandas as pd

from models import CategoryBucket, TimeBucket

INCOME_COLOR = "#22C55E"
EXPENSE_COLOR = "#EF4444"


def income_vs_expense(buckets: List[TimeBucket], title: str = "Income vs Expenses"):
    """
    Grouped bar chart of income and expenses per bucket.
    """
    fig = go.Figure()
    labels = [b.label for b in buckets]
    fig.add_trace(go.Bar(x=labels, y=[b.income for b in buckets], name="Income", marker_color=INCOME_COLOR))
    fig.add_trace(go.Bar(x=labels, y=[b.expenses for b in buckets], name="Expenses", marker_color=EXPENSE_COLOR))
    fig.update_layout(barmode="group", title=title, height=400)
    return fig


def slice_labels(buckets: List[CategoryBucket]) -> List[str]:
    """One label per bucket; repeated names get their id appended so slices never merge."""
    counts = Counter(b.name for b in buckets)
    return [
        b.name if counts[b.name] == 1 else f"{b.name} #{b.category_id if b.category_id is not None else '?'}"
        for b in buckets
    ]


def category_breakdown(buckets: List[CategoryBucket], title: str = "By Category"):
    """
    Donut chart sized by each category's total activity, in the category's own colour.
    """
    labels = slice_labels(buckets)
    fig = go.Figure(
        go.Pie(
            labels=labels,
            values=[b.total for b in buckets],
            marker=dict(colors=[b.color for b in buckets]),
            hole=0.4,
            sort=False,
        )
    )
    fig.update_traces(textposition="inside", textinfo="percent+label")
    fig.update_layout(title=title)
    return fig


def net_trend(buckets: List[TimeBucket], title: str = "Running Balance"):
    """
    Area chart of the cumulative net across buckets.
    """
    df = pd.DataFrame({"Period": [b.label for b in buckets], "Net": [b.net for b in buckets]})
    df["Balance"] = df["Net"].cumsum()
    fig = px.area(df, x="Period", y="Balance", title=title)
    fig.update_layout(height=350)
    return fig
