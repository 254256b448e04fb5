"""Tests for goal evaluation."""

from datetime import date
from decimal import Decimal

import pytest

from finsight.models.finance import ExpenseType, Goal, GoalPeriod, GoalType, TransactionType
from finsight.reports import evaluate_goal, evaluate_goals

REF = date(2024, 7, 15)


class TestRecurringGoals:
    """Recurring goals are recomputed from the window's transactions."""

    def test_monthly_saving_goal(self, make_tx):
        goal = Goal(name="Save monthly", target_amount=2400, period=GoalPeriod.MONTHLY, type=GoalType.SAVING)
        txs = [
            make_tx(TransactionType.INCOME, 2000, day=date(2024, 7, 1)),
            make_tx(TransactionType.EXPENSE, 500, day=date(2024, 7, 5)),
            make_tx(TransactionType.INVESTMENT, 300, day=date(2024, 7, 9)),
            make_tx(TransactionType.INCOME, 9000, day=date(2024, 6, 30)),
        ]
        progress = evaluate_goal(goal, txs, [], REF)
        assert progress.current_amount == Decimal("1200.00")
        assert progress.progress_percent == pytest.approx(50.0)
        assert not progress.is_achieved

    def test_negative_savings_floor_progress_at_zero(self, make_tx):
        goal = Goal(name="Save monthly", target_amount=1000, period=GoalPeriod.MONTHLY, type=GoalType.SAVING)
        txs = [make_tx(TransactionType.EXPENSE, 400)]
        progress = evaluate_goal(goal, txs, [], REF)
        assert progress.current_amount == Decimal("-400.00")
        assert progress.progress_percent == 0.0

    def test_yearly_investment_goal(self, make_tx):
        goal = Goal(name="Invest", target_amount=1000, period=GoalPeriod.YEARLY, type=GoalType.INVESTMENT)
        txs = [
            make_tx(TransactionType.INVESTMENT, 300, day=date(2024, 1, 3)),
            make_tx(TransactionType.INVESTMENT, 900, day=date(2024, 11, 3)),
            make_tx(TransactionType.INVESTMENT, 500, day=date(2023, 12, 31)),
        ]
        progress = evaluate_goal(goal, txs, [], REF)
        assert progress.current_amount == Decimal("1200.00")
        assert progress.is_achieved

    def test_want_spending_goal_achieved_while_under_target(self, make_tx):
        goal = Goal(name="Fun cap", target_amount=500, period=GoalPeriod.MONTHLY, type=GoalType.WANT_SPENDING)
        txs = [
            make_tx(TransactionType.EXPENSE, 200, expense_type=ExpenseType.WANT),
            make_tx(TransactionType.EXPENSE, 900, expense_type=ExpenseType.NEED),
        ]
        progress = evaluate_goal(goal, txs, [], REF)
        assert progress.current_amount == Decimal("200.00")
        assert progress.is_spending_goal
        assert progress.is_achieved


class TestLongTermGoals:
    def test_stored_amount_is_used(self, make_tx):
        goal = Goal(
            name="House",
            target_amount=1000,
            current_amount=250,
            period=GoalPeriod.LONG_TERM,
            type=GoalType.LONG_TERM,
            target_date=date(2024, 8, 14),
        )
        progress = evaluate_goal(goal, [make_tx(TransactionType.INCOME, 99999)], [], REF)
        assert progress.current_amount == Decimal("250.00")
        assert progress.progress_percent == pytest.approx(25.0)
        assert progress.remaining == Decimal("750.00")
        assert progress.days_left == 30

    def test_days_left_never_negative(self):
        goal = Goal(
            name="Car",
            target_amount=10,
            period=GoalPeriod.LONG_TERM,
            type=GoalType.LONG_TERM,
            target_date=date(2024, 1, 1),
        )
        assert evaluate_goal(goal, [], [], REF).days_left == 0

    def test_evaluate_goals_keeps_order(self):
        goals = [
            Goal(name="First", target_amount=10, period=GoalPeriod.MONTHLY, type=GoalType.SAVING),
            Goal(name="Second", target_amount=10, period=GoalPeriod.LONG_TERM, type=GoalType.LONG_TERM),
        ]
        assert [p.goal.name for p in evaluate_goals(goals, [], [], REF)] == ["First", "Second"]
