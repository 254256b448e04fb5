"""
Goal Evaluator

Resolves each goal's current amount for a reference date.

Recurring goals are recomputed from the transactions of the calendar
month or year containing the reference date. Long-term goals keep
their stored current amount.
"""

import datetime as dt
from decimal import Decimal
from typing import Iterable, Optional, Union

from finsight.models.finance import (
    Category,
    CategoryIndex,
    Goal,
    GoalPeriod,
    GoalType,
    Transaction,
)
from finsight.models.reports import DateRange, FinancialSummary, GoalProgress
from finsight.reports.aggregator import aggregate


def goal_window(goal: Goal, reference_date: dt.date) -> Optional[DateRange]:
    if goal.period == GoalPeriod.MONTHLY:
        return DateRange.for_month(reference_date.year, reference_date.month)
    if goal.period == GoalPeriod.YEARLY:
        return DateRange.for_year(reference_date.year)
    return None


def _measure(goal_type: GoalType, summary: FinancialSummary) -> Decimal:
    if goal_type == GoalType.SAVING:
        return summary.savings
    if goal_type == GoalType.INVESTMENT:
        return summary.total_investment
    if goal_type == GoalType.NEED_SPENDING:
        return summary.needs_wants.get("need", Decimal("0.00"))
    if goal_type == GoalType.WANT_SPENDING:
        return summary.needs_wants.get("want", Decimal("0.00"))
    raise ValueError(f"Goal type {goal_type.value} is not recomputed")


def evaluate_goal(
    goal: Goal,
    transactions: Iterable[Transaction],
    categories: Union[Iterable[Category], CategoryIndex],
    reference_date: dt.date,
) -> GoalProgress:
    """
    Compute progress for one goal.

    Saving goals can go negative when outflows exceed income; the
    progress percentage is floored at zero but the amount is kept.
    """
    if goal.is_recurring:
        summary = aggregate(transactions, categories, goal_window(goal, reference_date))
        current = _measure(goal.type, summary)
    else:
        current = goal.current_amount

    days_left = None
    if goal.target_date is not None:
        days_left = max((goal.target_date - reference_date).days, 0)

    return GoalProgress(
        goal=goal,
        current_amount=current,
        progress_percent=max(float(current / goal.target_amount * 100), 0.0),
        days_left=days_left,
    )


def evaluate_goals(
    goals: Iterable[Goal],
    transactions: Iterable[Transaction],
    categories: Union[Iterable[Category], CategoryIndex],
    reference_date: dt.date,
) -> list[GoalProgress]:
    transactions = list(transactions)
    index = categories if isinstance(categories, CategoryIndex) else CategoryIndex(categories)
    return [evaluate_goal(g, transactions, index, reference_date) for g in goals]
