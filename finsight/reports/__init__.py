"""
Reports Package

Pure, in-memory computations over fetched documents.
"""

from finsight.reports.aggregator import (
    account_balance,
    account_balances,
    aggregate,
    category_totals,
    daily_totals,
    filter_by_range,
    net_worth,
    top_category,
)
from finsight.reports.display import insight_html
from finsight.reports.budgets import budgets_for_month, match_budgets, summarize_budgets
from finsight.reports.export import csv_filename, transactions_frame, transactions_to_csv
from finsight.reports.goals import evaluate_goal, evaluate_goals

__all__ = [
    "account_balance",
    "account_balances",
    "aggregate",
    "budgets_for_month",
    "category_totals",
    "csv_filename",
    "daily_totals",
    "evaluate_goal",
    "evaluate_goals",
    "filter_by_range",
    "insight_html",
    "match_budgets",
    "net_worth",
    "summarize_budgets",
    "top_category",
    "transactions_frame",
    "transactions_to_csv",
]
