"""Tests for CSV export."""

from datetime import date

from finsight.models.finance import Category, CategoryType, ExpenseType, TransactionType
from finsight.reports import csv_filename, transactions_frame, transactions_to_csv
from finsight.reports.export import CSV_COLUMNS

CATEGORIES = [Category(id="food", name="Food", type=CategoryType.EXPENSE)]


class TestExport:
    def test_frame_is_newest_first(self, make_tx):
        txs = [
            make_tx(TransactionType.EXPENSE, 10, day=date(2024, 7, 1), category_id="food"),
            make_tx(TransactionType.INCOME, 20, day=date(2024, 7, 3)),
        ]
        frame = transactions_frame(txs, CATEGORIES)
        assert list(frame.columns) == CSV_COLUMNS
        assert list(frame["Date"]) == ["03-07-2024", "01-07-2024"]
        assert list(frame["Category"]) == ["Other", "Food"]

    def test_csv_text(self, make_tx):
        txs = [make_tx(
            TransactionType.EXPENSE, 12.5,
            category_id="food",
            expense_type=ExpenseType.WANT,
            description="Pizza",
        )]
        lines = transactions_to_csv(txs, CATEGORIES).splitlines()
        assert lines == [
            "Date,Type,Amount,Category,Description,Need/Want",
            "15-07-2024,expense,12.5,Food,Pizza,want",
        ]

    def test_empty_export_has_header(self):
        assert transactions_to_csv([]).splitlines() == [",".join(CSV_COLUMNS)]

    def test_filename(self):
        assert csv_filename("This Month") == "transactions-report-this-month.csv"
        assert csv_filename("March 2024") == "transactions-report-march-2024.csv"
