"""Tests for budget matching."""

from datetime import date
from decimal import Decimal

import pytest

from finsight.models.finance import Budget, Category, CategoryType
from finsight.reports import budgets_for_month, match_budgets, summarize_budgets
from finsight.reports.budgets import progress_percent

CATEGORIES = [
    Category(id="food", name="Food", type=CategoryType.EXPENSE),
    Category(id="fun", name="Entertainment", type=CategoryType.EXPENSE),
]


class TestMatchBudgets:
    def test_no_budgets_gives_no_rows(self):
        assert match_budgets([], {"food": Decimal("10")}, CATEGORIES) == []

    def test_zero_limit_is_left_out(self):
        budgets = [Budget(category_id="food", amount=0, month="2024-07")]
        assert match_budgets(budgets, {"food": Decimal("10")}, CATEGORIES) == []

    def test_overspent_budget(self):
        budgets = [Budget(category_id="food", amount=100, month="2024-07")]
        [row] = match_budgets(budgets, {"food": Decimal("150")}, CATEGORIES)
        assert row.category == "Food"
        assert row.progress_percent == pytest.approx(150.0)
        assert row.is_over
        assert row.display_label == "Over"
        assert row.remaining == Decimal("-50")

    def test_unspent_budget_is_zero_percent(self):
        budgets = [Budget(category_id="fun", amount=200, month="2024-07")]
        [row] = match_budgets(budgets, {}, CATEGORIES)
        assert row.spent == Decimal("0")
        assert row.display_label == "0%"

    def test_deleted_category_shows_as_other(self):
        budgets = [Budget(category_id="gone", amount=50, month="2024-07")]
        [row] = match_budgets(budgets, {}, CATEGORIES)
        assert row.category == "Other"


class TestSummaries:
    def test_summarize_budgets(self):
        budgets = [
            Budget(category_id="food", amount=100, month="2024-07"),
            Budget(category_id="fun", amount=300, month="2024-07"),
        ]
        rows = match_budgets(budgets, {"food": Decimal("150"), "fun": Decimal("50")}, CATEGORIES)
        summary = summarize_budgets(rows)
        assert summary.total_budget == Decimal("400.00")
        assert summary.total_spent == Decimal("200")
        assert summary.total_left == Decimal("200.00")
        assert summary.progress_percent == pytest.approx(50.0)

    def test_empty_summary(self):
        summary = summarize_budgets([])
        assert summary.total_budget == Decimal("0")
        assert summary.progress_percent == 0.0

    def test_progress_percent_zero_limit(self):
        assert progress_percent(Decimal("10"), Decimal("0")) == 0.0

    def test_budgets_for_month(self):
        budgets = [
            Budget(category_id="food", amount=1, month="2024-07"),
            Budget(category_id="food", amount=2, month="2024-08"),
        ]
        assert [b.amount for b in budgets_for_month(budgets, date(2024, 8, 20))] == [Decimal("2.00")]
