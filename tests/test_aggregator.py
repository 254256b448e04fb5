"""Tests for the pure report functions."""

from datetime import date
from decimal import Decimal

from finsight.models.finance import (
    RECONCILIATION_CATEGORY_ID,
    TRANSFER_CATEGORY_ID,
    Account,
    AccountType,
    Category,
    CategoryType,
    ExpenseType,
    TransactionType,
)
from finsight.models.reports import DateRange
from finsight.reports import (
    account_balance,
    account_balances,
    aggregate,
    category_totals,
    daily_totals,
    filter_by_range,
    net_worth,
    top_category,
)

CATEGORIES = [
    Category(id="salary", name="Salary", type=CategoryType.INCOME),
    Category(id="food", name="Food", type=CategoryType.EXPENSE),
    Category(id="rent", name="Housing", type=CategoryType.EXPENSE),
    Category(id="funds", name="Mutual Funds", type=CategoryType.INVESTMENT),
]


class TestAggregate:
    """Tests for period summaries."""

    def test_empty_input_gives_zero_summary(self):
        summary = aggregate([])
        assert summary.total_income == Decimal("0")
        assert summary.savings == Decimal("0")
        assert summary.spending_by_category == {}
        assert summary.is_empty

    def test_income_expense_investment_example(self, make_tx):
        """5000 income, 150 food, 1000 invested leaves 3850 saved."""
        txs = [
            make_tx(TransactionType.INCOME, 5000, category_id="salary"),
            make_tx(TransactionType.EXPENSE, 150, category_id="food", expense_type=ExpenseType.NEED),
            make_tx(TransactionType.INVESTMENT, 1000, category_id="funds"),
        ]
        summary = aggregate(txs, CATEGORIES)

        assert summary.total_income == Decimal("5000.00")
        assert summary.total_expense == Decimal("150.00")
        assert summary.total_investment == Decimal("1000.00")
        assert summary.savings == Decimal("3850.00")
        assert summary.spending_by_category == {"Food": Decimal("150.00")}
        assert summary.investment_by_category == {"Mutual Funds": Decimal("1000.00")}
        assert summary.needs_wants["need"] == Decimal("150.00")

    def test_savings_identity_and_category_sum(self, make_tx):
        txs = [
            make_tx(TransactionType.INCOME, 1200, category_id="salary"),
            make_tx(TransactionType.EXPENSE, 300, category_id="food"),
            make_tx(TransactionType.EXPENSE, 700, category_id="rent"),
            make_tx(TransactionType.EXPENSE, 45.5, category_id="gone"),
            make_tx(TransactionType.INVESTMENT, 250, category_id="funds"),
        ]
        s = aggregate(txs, CATEGORIES)
        assert s.savings == s.total_income - s.total_expense - s.total_investment
        assert sum(s.spending_by_category.values()) == s.total_expense
        assert s.spending_by_category["Other"] == Decimal("45.50")
        assert s.savings < 0

    def test_transfers_and_opening_balances_are_not_income(self, make_tx):
        txs = [
            make_tx(TransactionType.RECONCILIATION, 10000, category_id=RECONCILIATION_CATEGORY_ID),
            make_tx(TransactionType.TRANSFER, 500, category_id=TRANSFER_CATEGORY_ID),
            make_tx(TransactionType.INCOME, 500, account_id="acc-2", category_id=TRANSFER_CATEGORY_ID),
        ]
        s = aggregate(txs, CATEGORIES)
        assert s.total_income == Decimal("0")
        assert s.total_expense == Decimal("0")
        assert s.savings == Decimal("0")
        assert s.transaction_count == 3

    def test_needs_and_wants_split(self, make_tx):
        txs = [
            make_tx(TransactionType.EXPENSE, 100, category_id="food", expense_type=ExpenseType.NEED),
            make_tx(TransactionType.EXPENSE, 40, category_id="food", expense_type=ExpenseType.WANT),
            make_tx(TransactionType.EXPENSE, 10, category_id="food"),
        ]
        s = aggregate(txs, CATEGORIES)
        assert s.needs_wants == {"need": Decimal("100.00"), "want": Decimal("40.00")}
        assert s.total_expense == Decimal("150.00")

    def test_date_range_is_inclusive(self, make_tx):
        july = DateRange.for_month(2024, 7)
        txs = [
            make_tx(TransactionType.EXPENSE, 1, day=date(2024, 7, 1), category_id="food"),
            make_tx(TransactionType.EXPENSE, 2, day=date(2024, 7, 31), category_id="food"),
            make_tx(TransactionType.EXPENSE, 4, day=date(2024, 8, 1), category_id="food"),
            make_tx(TransactionType.EXPENSE, 8, day=date(2024, 6, 30), category_id="food"),
        ]
        assert aggregate(txs, CATEGORIES, july).total_expense == Decimal("3.00")
        assert len(filter_by_range(txs, None)) == 4

    def test_renamed_category_reports_new_name(self, make_tx):
        txs = [make_tx(TransactionType.EXPENSE, 80, category_id="food")]
        renamed = [Category(id="food", name="Groceries", type=CategoryType.EXPENSE)]
        assert aggregate(txs, renamed).spending_by_category == {"Groceries": Decimal("80.00")}


class TestCategoryTotals:
    def test_counts_expense_and_investment_by_id(self, make_tx):
        txs = [
            make_tx(TransactionType.EXPENSE, 100, category_id="food"),
            make_tx(TransactionType.EXPENSE, 50, category_id="food"),
            make_tx(TransactionType.INVESTMENT, 300, category_id="funds"),
            make_tx(TransactionType.INCOME, 999, category_id="salary"),
        ]
        assert category_totals(txs) == {"food": Decimal("150.00"), "funds": Decimal("300.00")}


class TestBalances:
    """Tests for the single balance rule."""

    def test_bank_account_balance(self, make_tx):
        account = Account(id="acc-1", name="Bank", type=AccountType.CHECKING)
        txs = [
            make_tx(TransactionType.RECONCILIATION, 1000),
            make_tx(TransactionType.INCOME, 500),
            make_tx(TransactionType.EXPENSE, 200),
            make_tx(TransactionType.TRANSFER, 100),
            make_tx(TransactionType.INVESTMENT, 50),
            make_tx(TransactionType.INCOME, 9999, account_id="other"),
        ]
        assert account_balance(account, txs) == Decimal("1150.00")

    def test_credit_balance_is_amount_owed(self, make_tx):
        card = Account(id="card", name="Visa", type=AccountType.CREDIT)
        txs = [
            make_tx(TransactionType.RECONCILIATION, 300, account_id="card"),
            make_tx(TransactionType.EXPENSE, 200, account_id="card"),
            make_tx(TransactionType.INCOME, 100, account_id="card", category_id=TRANSFER_CATEGORY_ID),
        ]
        assert account_balance(card, txs) == Decimal("400.00")

    def test_net_worth_subtracts_credit(self, make_tx):
        bank = Account(id="acc-1", name="Bank")
        card = Account(id="card", name="Visa", type=AccountType.CREDIT)
        txs = [
            make_tx(TransactionType.RECONCILIATION, 1200),
            make_tx(TransactionType.EXPENSE, 400, account_id="card"),
        ]
        balances = account_balances([bank, card], txs)
        assert [b.balance for b in balances] == [Decimal("1200.00"), Decimal("400.00")]
        assert balances[1].is_liability
        assert net_worth(balances) == Decimal("800.00")

    def test_account_without_transactions_is_zero(self):
        balances = account_balances([Account(id="x", name="Empty")], [])
        assert balances[0].balance == Decimal("0")


class TestDailyAndTop:
    def test_daily_totals_sorted_oldest_first(self, make_tx):
        txs = [
            make_tx(TransactionType.EXPENSE, 20, day=date(2024, 7, 3)),
            make_tx(TransactionType.INCOME, 100, day=date(2024, 7, 1)),
            make_tx(TransactionType.EXPENSE, 5, day=date(2024, 7, 3)),
            make_tx(TransactionType.INCOME, 50, day=date(2024, 7, 2), category_id=TRANSFER_CATEGORY_ID),
        ]
        daily = daily_totals(txs)
        assert [d.day for d in daily] == [date(2024, 7, 1), date(2024, 7, 2), date(2024, 7, 3)]
        assert daily[0].income == Decimal("100.00")
        assert daily[1].income == Decimal("0")
        assert daily[2].expense == Decimal("25.00")

    def test_top_category(self, make_tx):
        txs = [
            make_tx(TransactionType.EXPENSE, 100, category_id="food"),
            make_tx(TransactionType.EXPENSE, 700, category_id="rent"),
        ]
        assert top_category(aggregate(txs, CATEGORIES)) == "Housing"
        assert top_category(aggregate([])) is None
