"""
Tests for Finsight

Test strategy:
1. Unit tests for individual components (models, validators, report functions)
2. Integration tests for flows (against the in-memory store)
3. No real API calls in tests (fake model and HTTP session)
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from finsight.models.finance import (
    DEFAULT_CATEGORIES,
    RECONCILIATION_CATEGORY_ID,
    TRANSFER_CATEGORY_ID,
    Account,
    AccountType,
    Budget,
    Category,
    CategoryIndex,
    CategoryType,
    ExpenseType,
    Goal,
    GoalPeriod,
    GoalType,
    Transaction,
    TransactionType,
    next_month,
    parse_month,
    to_money,
)
from finsight.models.reports import (
    BudgetProgress,
    DateRange,
    PeriodKind,
    ReportPeriod,
)
from finsight.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestLedgerModels:
    """Tests for account and transaction models."""

    def test_account_strips_whitespace(self):
        """Test that whitespace is stripped from account names."""
        account = Account(name="  Salary Account  ")
        assert account.name == "Salary Account"

    def test_account_rejects_short_name(self):
        with pytest.raises(ValidationError):
            Account(name="A")

    def test_account_rejects_negative_opening_balance(self):
        with pytest.raises(ValidationError):
            Account(name="Wallet", initial_balance=-5)

    def test_credit_account_flag(self):
        assert Account(name="Visa", type=AccountType.CREDIT).is_credit
        assert not Account(name="Bank", type=AccountType.SAVINGS).is_credit

    def test_transaction_amount_is_unsigned(self):
        """Legacy negative expense amounts are stored as magnitudes."""
        t = Transaction(
            account_id="a1",
            date=date(2024, 7, 1),
            amount="-150.50",
            type=TransactionType.EXPENSE,
        )
        assert t.amount == Decimal("150.50")
        assert t.signed_amount == Decimal("-150.50")

    def test_transfer_legs(self):
        """Both sides of a transfer are recognised, ordinary income is not."""
        out = Transaction(account_id="a1", date=date(2024, 7, 1), amount=50, type=TransactionType.TRANSFER)
        into = Transaction(
            account_id="a2", date=date(2024, 7, 1), amount=50,
            type=TransactionType.INCOME, category_id=TRANSFER_CATEGORY_ID,
        )
        salary = Transaction(account_id="a2", date=date(2024, 7, 1), amount=50, type=TransactionType.INCOME)
        assert out.is_transfer_leg
        assert into.is_transfer_leg
        assert not salary.is_transfer_leg

    def test_transaction_amount_is_quantized(self):
        t = Transaction(account_id="a1", date=date(2024, 7, 1), amount=10.005, type=TransactionType.INCOME)
        assert t.amount.as_tuple().exponent == -2

    def test_transaction_rejects_garbage_amount(self):
        with pytest.raises(ValidationError):
            Transaction(account_id="a1", date=date(2024, 7, 1), amount="abc", type=TransactionType.INCOME)

    def test_transaction_parses_iso_timestamp_date(self):
        t = Transaction(
            account_id="a1",
            date="2024-07-03T10:15:00Z",
            amount=1,
            type=TransactionType.INCOME,
        )
        assert t.date == date(2024, 7, 3)

    def test_expense_type_dropped_for_non_expenses(self):
        t = Transaction(
            account_id="a1",
            date=date(2024, 7, 1),
            amount=100,
            type=TransactionType.INCOME,
            expense_type=ExpenseType.NEED,
        )
        assert t.expense_type is None

    def test_inflow_and_outflow_types(self):
        income = Transaction(account_id="a1", date=date(2024, 7, 1), amount=1, type=TransactionType.INCOME)
        opening = Transaction(
            account_id="a1", date=date(2024, 7, 1), amount=1, type=TransactionType.RECONCILIATION
        )
        transfer = Transaction(account_id="a1", date=date(2024, 7, 1), amount=1, type=TransactionType.TRANSFER)
        assert income.is_inflow and opening.is_inflow
        assert transfer.is_outflow and not transfer.is_inflow


class TestPlanningModels:
    """Tests for budgets and goals."""

    def test_budget_month_normalized_from_timestamp(self):
        budget = Budget(category_id="food", amount=100, month="2024-07-01T00:00:00")
        assert budget.month == date(2024, 7, 1)
        assert budget.month_key == "2024-07"

    def test_budget_month_from_any_day(self):
        assert Budget(category_id="food", amount=100, month=date(2024, 7, 19)).month == date(2024, 7, 1)

    def test_budget_rejects_negative_amount(self):
        with pytest.raises(ValidationError):
            Budget(category_id="food", amount=-1, month="2024-07")

    def test_long_term_goal_requires_matching_type(self):
        with pytest.raises(ValidationError) as exc:
            Goal(name="House", target_amount=1000, period=GoalPeriod.LONG_TERM, type=GoalType.SAVING)
        assert "long_term type and period together" in str(exc.value)

    def test_recurring_goal_cannot_use_long_term_type(self):
        with pytest.raises(ValidationError):
            Goal(name="Save", target_amount=1000, period=GoalPeriod.MONTHLY, type=GoalType.LONG_TERM)

    def test_goal_target_must_be_positive(self):
        with pytest.raises(ValidationError):
            Goal(name="Save", target_amount=0, period=GoalPeriod.MONTHLY, type=GoalType.SAVING)

    def test_goal_is_recurring(self):
        monthly = Goal(name="Save", target_amount=10, period=GoalPeriod.MONTHLY, type=GoalType.SAVING)
        house = Goal(name="House", target_amount=10, period=GoalPeriod.LONG_TERM, type=GoalType.LONG_TERM)
        assert monthly.is_recurring
        assert not house.is_recurring


class TestHelpers:
    """Tests for money and month helpers."""

    def test_to_money_rejects_nan(self):
        with pytest.raises(ValueError):
            to_money(float("nan"))

    @pytest.mark.parametrize("value", ["2024-07", "2024-07-31", "2024-07-01T00:00:00", datetime(2024, 7, 9, 8)])
    def test_parse_month(self, value):
        assert parse_month(value) == date(2024, 7, 1)

    def test_parse_month_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_month("July")

    def test_next_month_wraps_year(self):
        assert next_month(date(2024, 12, 1)) == date(2025, 1, 1)


class TestCategoryIndex:
    """Tests for id-to-name resolution."""

    def test_system_categories_always_present(self):
        index = CategoryIndex()
        assert TRANSFER_CATEGORY_ID in index
        assert RECONCILIATION_CATEGORY_ID in index
        assert index.name_of(TRANSFER_CATEGORY_ID) == "Transfer"

    def test_unknown_id_reports_as_other(self):
        index = CategoryIndex([Category(id="food", name="Food")])
        assert index.name_of("deleted-id") == "Other"
        assert index.name_of(None) == "Other"

    def test_find_by_name_is_case_insensitive(self):
        index = CategoryIndex([Category(id="food", name="Food")])
        assert index.find_by_name("  FOOD ").id == "food"
        assert index.find_by_name("transfer").id == TRANSFER_CATEGORY_ID

    def test_user_categories_excludes_system_and_filters_type(self):
        index = CategoryIndex([
            Category(id="s", name="Salary", type=CategoryType.INCOME),
            Category(id="f", name="food", type=CategoryType.EXPENSE),
            Category(id="b", name="Bills", type=CategoryType.EXPENSE),
        ])
        assert [c.name for c in index.user_categories()] == ["Bills", "food", "Salary"]
        assert [c.id for c in index.user_categories(CategoryType.EXPENSE)] == ["b", "f"]

    def test_default_categories_are_unique(self):
        names = [name.casefold() for name, _ in DEFAULT_CATEGORIES]
        assert len(names) == len(set(names)) == 10


class TestReportModels:
    """Tests for periods and progress rows."""

    def test_date_range_rejects_reversed(self):
        with pytest.raises(ValidationError):
            DateRange(start=date(2024, 7, 2), end=date(2024, 7, 1))

    def test_for_month_handles_leap_february(self):
        r = DateRange.for_month(2024, 2)
        assert r.end == date(2024, 2, 29)

    def test_current_month_period(self):
        r = ReportPeriod().date_range(date(2024, 7, 15))
        assert (r.start, r.end) == (date(2024, 7, 1), date(2024, 7, 31))

    def test_current_year_period(self):
        r = ReportPeriod(kind=PeriodKind.CURRENT_YEAR).date_range(date(2024, 7, 15))
        assert (r.start, r.end) == (date(2024, 1, 1), date(2024, 12, 31))

    def test_overall_period_is_unbounded(self):
        period = ReportPeriod(kind=PeriodKind.OVERALL)
        assert period.date_range(date(2024, 7, 15)) is None
        assert period.title(date(2024, 7, 15)) == "Overall"

    def test_custom_period_requires_month(self):
        with pytest.raises(ValidationError):
            ReportPeriod(kind=PeriodKind.CUSTOM, year=2024)

    def test_custom_period_title(self):
        assert ReportPeriod.custom(2024, 3).title(date(2024, 7, 15)) == "March 2024"

    def test_budget_progress_labels(self):
        over = BudgetProgress(
            budget_id="b", category_id="c", category="Food",
            limit=Decimal("100"), spent=Decimal("150"), progress_percent=150.0,
        )
        under = BudgetProgress(
            budget_id="b", category_id="c", category="Food",
            limit=Decimal("200"), spent=Decimal("50"), progress_percent=25.0,
        )
        assert over.is_over and over.display_label == "Over"
        assert under.display_label == "25%"
        assert under.remaining == Decimal("150")


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            severity=AuditSeverity.INFO,
            description="Test event",
            user_id="user-1",
        )
        assert event.event_type == AuditEventType.ACCOUNT_CREATED
        assert event.event_id is not None
        assert event.timestamp is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        correlation_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.RECORDS_CLEARED,
            severity=AuditSeverity.WARNING,
            description="Cleared",
            correlation_id=correlation_id,
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "records_cleared"
        assert log_dict["correlation_id"] == str(correlation_id)

    def test_builder_clear_incomplete_is_error(self):
        event = AuditEventBuilder.clear_incomplete(
            user_id="u",
            cleared_account_ids=["a1"],
            error_message="boom",
            correlation_id=uuid4(),
        )
        assert event.event_type == AuditEventType.CLEAR_INCOMPLETE
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "boom"
