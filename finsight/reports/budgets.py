"""
Budget Matcher

Pairs each budget with what was actually spent in its category.
"""

import datetime as dt
from decimal import Decimal
from typing import Iterable, Mapping, Union

from finsight.models.finance import Budget, Category, CategoryIndex, parse_month
from finsight.models.reports import ZERO, BudgetProgress, BudgetSummary


def budgets_for_month(budgets: Iterable[Budget], month: dt.date) -> list[Budget]:
    """Budgets whose month is the month containing the given day."""
    wanted = parse_month(month)
    return [b for b in budgets if b.month == wanted]


def progress_percent(spent: Decimal, limit: Decimal) -> float:
    """spent / limit * 100, or 0 for a zero limit. Not clamped."""
    if limit <= 0:
        return 0.0
    return float(spent / limit * 100)


def match_budgets(
    budgets: Iterable[Budget],
    category_totals: Mapping[str, Decimal],
    categories: Union[Iterable[Category], CategoryIndex] = (),
) -> list[BudgetProgress]:
    """
    Build one progress row per budget with a positive limit.

    Args:
        budgets: Budgets of a single month
        category_totals: Spend keyed by category id for that month
        categories: Categories (or an index) used to resolve display names

    Returns:
        Rows in the input order; zero-limit budgets are left out.
    """
    index = categories if isinstance(categories, CategoryIndex) else CategoryIndex(categories)
    rows = []
    for budget in budgets:
        if budget.amount <= 0:
            continue
        spent = category_totals.get(budget.category_id, ZERO)
        rows.append(BudgetProgress(
            budget_id=budget.id,
            category_id=budget.category_id,
            category=index.name_of(budget.category_id),
            limit=budget.amount,
            spent=spent,
            progress_percent=progress_percent(spent, budget.amount),
        ))
    return rows


def summarize_budgets(progress: Iterable[BudgetProgress]) -> BudgetSummary:
    rows = list(progress)
    total_budget = sum((r.limit for r in rows), ZERO)
    total_spent = sum((r.spent for r in rows), ZERO)
    return BudgetSummary(
        total_budget=total_budget,
        total_spent=total_spent,
        total_left=total_budget - total_spent,
        progress_percent=progress_percent(total_spent, total_budget),
    )
