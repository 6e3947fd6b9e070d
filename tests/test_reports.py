"""Tests for date-range resolution, filtering and aggregation."""
import copy
import unittest
from datetime import date, datetime

from models import Category, DateRange, Transaction
from reports import (
    category_choices,
    filter_transactions,
    group_by_category,
    group_by_time,
    resolve_category,
    resolve_date_range,
    sort_transactions,
    summarize,
    to_frame,
)

CATEGORIES = [
    Category(id=1, name="Food", color="#FF6B6B"),
    Category(id=2, name="Transport", color="#4ECDC4"),
    Category(id=4, name="Salary", color="#96CEB4"),
]


def txn(id, amount, type, day, category_id=1, description="", created_at=None):
    return Transaction(
        id=id,
        amount=amount,
        type=type,
        date=date.fromisoformat(day),
        category_id=category_id,
        description=description,
        created_at=created_at or datetime(2025, 1, 1, 9, 0),
    )


class TestResolveDateRange(unittest.TestCase):
    """Test symbolic range resolution."""

    WEDNESDAY = date(2025, 5, 28)

    def test_all_is_unbounded(self):
        self.assertIsNone(resolve_date_range("all", today=self.WEDNESDAY))

    def test_today(self):
        rng = resolve_date_range("today", today=self.WEDNESDAY)
        self.assertEqual(rng, DateRange(start_date=self.WEDNESDAY, end_date=self.WEDNESDAY))

    def test_week_on_wednesday_starts_sunday(self):
        rng = resolve_date_range("week", today=self.WEDNESDAY)
        self.assertEqual(rng.start_date, date(2025, 5, 25))
        self.assertEqual(rng.end_date, date(2025, 5, 31))
        self.assertEqual(rng.start_date.weekday(), 6)
        self.assertEqual((rng.end_date - rng.start_date).days, 6)

    def test_week_on_sunday_and_saturday(self):
        on_sunday = resolve_date_range("week", today=date(2025, 5, 25))
        on_saturday = resolve_date_range("week", today=date(2025, 5, 31))
        self.assertEqual(on_sunday, on_saturday)
        self.assertEqual(on_sunday.start_date, date(2025, 5, 25))

    def test_week_start_is_configurable(self):
        rng = resolve_date_range("week", today=self.WEDNESDAY, week_start=0)
        self.assertEqual(rng.start_date, date(2025, 5, 26))
        self.assertEqual(rng.end_date, date(2025, 6, 1))

    def test_month_handles_leap_february(self):
        rng = resolve_date_range("month", today=date(2024, 2, 10))
        self.assertEqual(rng.start_date, date(2024, 2, 1))
        self.assertEqual(rng.end_date, date(2024, 2, 29))

    def test_year(self):
        rng = resolve_date_range("year", today=self.WEDNESDAY)
        self.assertEqual(rng.start_date, date(2025, 1, 1))
        self.assertEqual(rng.end_date, date(2025, 12, 31))

    def test_custom_passes_dates_through(self):
        rng = resolve_date_range("custom", "2025-05-01", date(2025, 5, 15))
        self.assertEqual(rng.start_date, date(2025, 5, 1))
        self.assertEqual(rng.end_date, date(2025, 5, 15))

    def test_custom_with_missing_bound_is_unbounded(self):
        with self.assertLogs("reports", level="WARNING"):
            self.assertIsNone(resolve_date_range("custom", "2025-05-01", None))
        with self.assertLogs("reports", level="WARNING"):
            self.assertIsNone(resolve_date_range("custom", "", "not-a-date"))

    def test_unknown_kind_raises(self):
        with self.assertRaises(ValueError):
            resolve_date_range("fortnight", today=self.WEDNESDAY)


class TestFilterTransactions(unittest.TestCase):
    """Test the stable date/category filter."""

    def setUp(self):
        self.transactions = [
            txn(1, 10, "expense", "2025-05-28", category_id=1),
            txn(2, 20, "expense", "2025-05-27", category_id=2),
            txn(3, 30, "income", "2025-05-28", category_id=4),
            txn(4, 40, "expense", "2025-06-01", category_id=1),
            txn(5, 50, "expense", "2025-05-25", category_id=1),
        ]

    def test_unbounded_all_is_identity(self):
        self.assertEqual(filter_transactions(self.transactions, None, "all"), self.transactions)

    def test_bounded_range_is_inclusive(self):
        rng = DateRange(start_date=date(2025, 5, 25), end_date=date(2025, 5, 28))
        kept = filter_transactions(self.transactions, rng)
        self.assertEqual([t.id for t in kept], [1, 2, 3, 5])
        for t in self.transactions:
            self.assertEqual(t in kept, rng.start_date <= t.date <= rng.end_date)

    def test_today_keeps_only_todays_entries_in_order(self):
        rng = resolve_date_range("today", today=date(2025, 5, 28))
        kept = filter_transactions(self.transactions, rng, "all")
        self.assertEqual([t.id for t in kept], [1, 3])

    def test_category_filter(self):
        kept = filter_transactions(self.transactions, None, 1)
        self.assertEqual([t.id for t in kept], [1, 4, 5])

    def test_category_id_as_string(self):
        kept = filter_transactions(self.transactions, None, "2")
        self.assertEqual([t.id for t in kept], [2])

    def test_both_predicates_are_combined(self):
        rng = DateRange(start_date=date(2025, 5, 26), end_date=date(2025, 5, 31))
        kept = filter_transactions(self.transactions, rng, 1)
        self.assertEqual([t.id for t in kept], [1])

    def test_deleted_category_matches_nothing(self):
        self.assertEqual(filter_transactions(self.transactions, None, 99), [])
        self.assertEqual(filter_transactions(self.transactions, None, "groceries"), [])

    def test_empty_input(self):
        self.assertEqual(filter_transactions([], None, "all"), [])


class TestSummarize(unittest.TestCase):
    """Test summary totals."""

    def test_income_expense_and_net(self):
        transactions = [
            txn(1, 25.50, "expense", "2025-05-30", category_id=1),
            txn(2, 2000, "income", "2025-05-30", category_id=4),
        ]
        summary = summarize(transactions)
        self.assertAlmostEqual(summary.total_income, 2000)
        self.assertAlmostEqual(summary.total_expenses, 25.50)
        self.assertAlmostEqual(summary.net_balance, 1974.50)
        self.assertEqual(summary.count, 2)

    def test_net_is_income_minus_expenses(self):
        transactions = [
            txn(1, 0.1, "expense", "2025-05-01"),
            txn(2, 0.2, "expense", "2025-05-02"),
            txn(3, 0.3, "income", "2025-05-03"),
            txn(4, 12.75, "income", "2025-05-04"),
        ]
        summary = summarize(transactions)
        self.assertEqual(summary.net_balance, summary.total_income - summary.total_expenses)

    def test_empty_list_gives_zeros(self):
        summary = summarize([])
        self.assertEqual(summary.total_income, 0)
        self.assertEqual(summary.total_expenses, 0)
        self.assertEqual(summary.net_balance, 0)
        self.assertEqual(summary.count, 0)


class TestGroupByTime(unittest.TestCase):
    """Test daily and monthly buckets."""

    def setUp(self):
        self.transactions = [
            txn(1, 100, "income", "2025-06-02"),
            txn(2, 40, "expense", "2025-05-30"),
            txn(3, 10, "expense", "2025-06-02"),
            txn(4, 5, "expense", "2025-05-01"),
            txn(5, 60, "income", "2025-05-30"),
        ]

    def test_daily_buckets_ascending_and_unique(self):
        buckets = group_by_time(self.transactions, "day")
        labels = [b.label for b in buckets]
        self.assertEqual(labels, ["2025-05-01", "2025-05-30", "2025-06-02"])
        self.assertEqual(len(labels), len(set(labels)))

        may_30 = buckets[1]
        self.assertAlmostEqual(may_30.income, 60)
        self.assertAlmostEqual(may_30.expenses, 40)
        self.assertAlmostEqual(may_30.net, 20)

    def test_bucket_key_is_transaction_date_not_created_at(self):
        late_entry = txn(1, 15, "expense", "2025-03-03", created_at=datetime(2025, 7, 1, 12, 0))
        buckets = group_by_time([late_entry], "day")
        self.assertEqual([b.label for b in buckets], ["2025-03-03"])

    def test_monthly_buckets(self):
        buckets = group_by_time(self.transactions, "month")
        self.assertEqual([b.label for b in buckets], ["2025-05", "2025-06"])
        self.assertAlmostEqual(buckets[0].income, 60)
        self.assertAlmostEqual(buckets[0].expenses, 45)
        self.assertAlmostEqual(buckets[1].net, 90)

    def test_months_sort_across_years(self):
        transactions = [
            txn(1, 1, "expense", "2025-01-15"),
            txn(2, 1, "expense", "2024-12-15"),
            txn(3, 1, "expense", "2024-02-15"),
        ]
        labels = [b.label for b in group_by_time(transactions, "month")]
        self.assertEqual(labels, ["2024-02", "2024-12", "2025-01"])

    def test_limit_keeps_most_recent_buckets(self):
        buckets = group_by_time(self.transactions, "day", limit=2)
        self.assertEqual([b.label for b in buckets], ["2025-05-30", "2025-06-02"])

    def test_non_positive_limit_keeps_everything(self):
        self.assertEqual(len(group_by_time(self.transactions, "day", limit=0)), 3)

    def test_empty_input(self):
        self.assertEqual(group_by_time([], "day"), [])
        self.assertEqual(group_by_time([], "month", limit=15), [])

    def test_unknown_granularity_raises(self):
        with self.assertRaises(ValueError):
            group_by_time(self.transactions, "week")


class TestGroupByCategory(unittest.TestCase):
    """Test category breakdowns."""

    def test_breakdown_sorted_by_total(self):
        transactions = [
            txn(1, 25.50, "expense", "2025-05-30", category_id=1),
            txn(2, 2000, "income", "2025-05-30", category_id=4),
            txn(3, 4.50, "expense", "2025-05-31", category_id=1),
        ]
        buckets = group_by_category(transactions, CATEGORIES)
        self.assertEqual([b.name for b in buckets], ["Salary", "Food"])

        food = buckets[1]
        self.assertEqual(food.category_id, 1)
        self.assertEqual(food.color, "#FF6B6B")
        self.assertAlmostEqual(food.expenses, 30)
        self.assertAlmostEqual(food.income, 0)
        self.assertAlmostEqual(food.net, -30)
        self.assertAlmostEqual(food.total, 30)

    def test_total_counts_income_and_expenses_as_magnitudes(self):
        transactions = [
            txn(1, 70, "income", "2025-05-01", category_id=2),
            txn(2, 30, "expense", "2025-05-02", category_id=2),
        ]
        (bucket,) = group_by_category(transactions, CATEGORIES)
        self.assertAlmostEqual(bucket.total, 100)
        self.assertAlmostEqual(bucket.net, 40)

    def test_deleted_category_lands_in_unknown(self):
        buckets = group_by_category([txn(1, 12.5, "expense", "2025-05-01", category_id=99)], CATEGORIES)
        self.assertEqual(len(buckets), 1)
        self.assertEqual(buckets[0].name, "Unknown")
        self.assertEqual(buckets[0].color, "#9CA3AF")
        self.assertIsNone(buckets[0].category_id)
        self.assertAlmostEqual(buckets[0].expenses, 12.5)
        self.assertAlmostEqual(buckets[0].income, 0)

    def test_dangling_references_share_one_unknown_bucket(self):
        transactions = [
            txn(1, 5, "expense", "2025-05-01", category_id=98),
            txn(2, 7, "income", "2025-05-01", category_id=None),
            txn(3, 1, "expense", "2025-05-01", category_id=1),
        ]
        buckets = group_by_category(transactions, CATEGORIES)
        unknown = [b for b in buckets if b.name == "Unknown"]
        self.assertEqual(len(unknown), 1)
        self.assertAlmostEqual(unknown[0].income, 7)
        self.assertAlmostEqual(unknown[0].expenses, 5)

    def test_zero_total_categories_are_excluded(self):
        transactions = [
            txn(1, 0, "expense", "2025-05-01", category_id=2),
            txn(2, 3, "expense", "2025-05-01", category_id=1),
        ]
        buckets = group_by_category(transactions, CATEGORIES)
        self.assertEqual([b.name for b in buckets], ["Food"])
        self.assertTrue(all(b.total != 0 for b in buckets))

    def test_empty_input(self):
        self.assertEqual(group_by_category([], CATEGORIES), [])


class TestHelpers(unittest.TestCase):
    """Test lookup, ordering and the dataframe view."""

    def test_resolve_category(self):
        self.assertEqual(resolve_category(2, CATEGORIES).name, "Transport")
        unknown = resolve_category(42, CATEGORIES)
        self.assertEqual((unknown.name, unknown.color), ("Unknown", "#9CA3AF"))

    def test_sort_newest_date_first(self):
        transactions = [
            txn(1, 1, "expense", "2025-05-01", created_at=datetime(2025, 5, 1, 8)),
            txn(2, 1, "expense", "2025-05-03", created_at=datetime(2025, 5, 3, 8)),
            txn(3, 1, "expense", "2025-05-01", created_at=datetime(2025, 5, 1, 9)),
        ]
        self.assertEqual([t.id for t in sort_transactions(transactions)], [2, 3, 1])
        self.assertEqual([t.id for t in sort_transactions(transactions, newest_first=False)], [1, 3, 2])

    def test_sort_by_created_at(self):
        transactions = [
            txn(1, 1, "expense", "2025-05-09", created_at=datetime(2025, 5, 1, 8)),
            txn(2, 1, "expense", "2025-05-01", created_at=datetime(2025, 5, 2, 8)),
        ]
        self.assertEqual([t.id for t in sort_transactions(transactions, key="created_at")], [2, 1])

    def test_frame_splits_income_and_expense(self):
        df = to_frame(
            [txn(1, 10, "income", "2025-05-01", category_id=4), txn(2, 4, "expense", "2025-05-02", category_id=77)],
            CATEGORIES,
        )
        self.assertEqual(list(df["Income"]), [10.0, 0.0])
        self.assertEqual(list(df["Expense"]), [0.0, 4.0])
        self.assertEqual(list(df["Category"]), ["Salary", "Unknown"])
        self.assertEqual(list(df["Month"]), ["2025-05", "2025-05"])

    def test_frame_of_empty_list(self):
        self.assertTrue(to_frame([]).empty)

class TestCategoryChoices(unittest.TestCase):
    """Test the options offered by the transaction edit form."""

    def test_known_category_keeps_plain_list(self):
        self.assertEqual(category_choices(CATEGORIES, 2), [1, 2, 4])

    def test_dangling_category_is_kept_as_current_choice(self):
        ids = category_choices(CATEGORIES, 99)
        self.assertEqual(ids, [99, 1, 2, 4])
        self.assertEqual(resolve_category(ids[0], CATEGORIES).name, "Unknown")

    def test_missing_category_is_kept(self):
        self.assertEqual(category_choices(CATEGORIES, None), [None, 1, 2, 4])

    def test_categories_are_not_modified(self):
        before = [c.id for c in CATEGORIES]
        category_choices(CATEGORIES, 99)
        self.assertEqual([c.id for c in CATEGORIES], before)


class TestPurity(unittest.TestCase):
    """Aggregations leave their inputs alone and give the same answer twice."""

    def setUp(self):
        self.transactions = [
            txn(1, 25.5, "expense", "2025-05-30", category_id=1),
            txn(2, 2000, "income", "2025-05-30", category_id=4),
            txn(3, 10, "expense", "2025-04-12", category_id=77),
            txn(4, 7, "expense", "2025-04-12", category_id=2),
        ]
        self.categories = list(CATEGORIES)
        self.before = copy.deepcopy(self.transactions)
        self.categories_before = copy.deepcopy(self.categories)

    def assertInputsUnchanged(self):
        self.assertEqual(self.transactions, self.before)
        self.assertEqual(self.categories, self.categories_before)

    def test_group_by_category_is_repeatable(self):
        first = group_by_category(self.transactions, self.categories)
        second = group_by_category(self.transactions, self.categories)
        self.assertEqual(first, second)
        self.assertInputsUnchanged()

    def test_group_by_time_is_repeatable(self):
        for granularity in ("day", "month"):
            first = group_by_time(self.transactions, granularity)
            second = group_by_time(self.transactions, granularity)
            self.assertEqual(first, second)
        self.assertInputsUnchanged()

    def test_filter_and_summarize_are_repeatable(self):
        rng = DateRange(start_date=date(2025, 5, 1), end_date=date(2025, 5, 31))
        self.assertEqual(filter_transactions(self.transactions, rng), filter_transactions(self.transactions, rng))
        self.assertEqual(summarize(self.transactions), summarize(self.transactions))
        self.assertInputsUnchanged()


if __name__ == "__main__":
    unittest.main()
