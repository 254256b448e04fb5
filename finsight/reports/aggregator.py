"""
Aggregator

Pure functions that turn a list of transactions into report figures.
No I/O happens here; the flows fetch documents and pass them in.

DESIGN DECISION: There is exactly one balance rule in the codebase
(account_balance). Every page that shows a balance or net worth goes
through it.
"""

import datetime as dt
from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional, Union

from finsight.models.finance import (
    TRANSFER_CATEGORY_ID,
    Account,
    Category,
    CategoryIndex,
    ExpenseType,
    Transaction,
    TransactionType,
)
from finsight.models.reports import (
    ZERO,
    AccountBalance,
    DailyTotals,
    DateRange,
    FinancialSummary,
)

__all__ = [
    "account_balance",
    "account_balances",
    "aggregate",
    "category_totals",
    "daily_totals",
    "filter_by_range",
    "net_worth",
    "top_category",
]


def _as_index(categories) -> CategoryIndex:
    if isinstance(categories, CategoryIndex):
        return categories
    return CategoryIndex(categories or ())


def filter_by_range(
    transactions: Iterable[Transaction],
    date_range: Optional[DateRange],
) -> list[Transaction]:
    """Keep transactions dated inside the closed range; None keeps all."""
    if date_range is None:
        return list(transactions)
    return [t for t in transactions if date_range.contains(t.date)]


def is_counted_income(transaction: Transaction) -> bool:
    """Income that is not the receiving side of a transfer."""
    return (
        transaction.type == TransactionType.INCOME
        and transaction.category_id != TRANSFER_CATEGORY_ID
    )


def aggregate(
    transactions: Iterable[Transaction],
    categories: Union[Iterable[Category], CategoryIndex] = (),
    date_range: Optional[DateRange] = None,
) -> FinancialSummary:
    """
    Summarize transactions inside an optional date range.

    Args:
        transactions: Transactions from any number of accounts
        categories: Categories (or a prebuilt index) for name lookup
        date_range: Closed window; None means all time

    Returns:
        FinancialSummary with totals, per-category breakdowns and the
        need/want split. Empty input gives an all-zero summary.
    """
    index = _as_index(categories)
    in_range = filter_by_range(transactions, date_range)

    income = expense = investment = ZERO
    spending: dict[str, Decimal] = defaultdict(lambda: ZERO)
    investing: dict[str, Decimal] = defaultdict(lambda: ZERO)
    needs_wants = {ExpenseType.NEED.value: ZERO, ExpenseType.WANT.value: ZERO}

    for t in in_range:
        if is_counted_income(t):
            income += t.amount
        elif t.type == TransactionType.EXPENSE:
            expense += t.amount
            spending[index.name_of(t.category_id)] += t.amount
            if t.expense_type is not None:
                needs_wants[t.expense_type.value] += t.amount
        elif t.type == TransactionType.INVESTMENT:
            investment += t.amount
            investing[index.name_of(t.category_id)] += t.amount

    return FinancialSummary(
        total_income=income,
        total_expense=expense,
        total_investment=investment,
        savings=income - expense - investment,
        spending_by_category=dict(spending),
        investment_by_category=dict(investing),
        needs_wants=needs_wants,
        transaction_count=len(in_range),
    )


def category_totals(
    transactions: Iterable[Transaction],
    date_range: Optional[DateRange] = None,
) -> dict[str, Decimal]:
    """
    Expense and investment totals keyed by category id.

    Budgets may be set on investment categories too, so both types
    count as spend against a budget.
    """
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for t in filter_by_range(transactions, date_range):
        if t.type in (TransactionType.EXPENSE, TransactionType.INVESTMENT) and t.category_id:
            totals[t.category_id] += t.amount
    return dict(totals)


def account_balance(account: Account, transactions: Iterable[Transaction]) -> Decimal:
    """
    Derive an account's balance from its transactions.

    Non-credit accounts: inflows minus outflows.
    Credit accounts: amount owed, i.e. opening reconciliation plus
    outflows minus income (payments).
    """
    own = [t for t in transactions if t.account_id == account.id]
    if not account.is_credit:
        return sum((t.signed_amount for t in own), ZERO)

    owed = ZERO
    for t in own:
        if t.type == TransactionType.INCOME:
            owed -= t.amount
        else:
            owed += t.amount
    return owed


def account_balances(
    accounts: Iterable[Account],
    transactions: Iterable[Transaction],
) -> list[AccountBalance]:
    by_account: dict[str, list[Transaction]] = defaultdict(list)
    for t in transactions:
        by_account[t.account_id].append(t)
    return [
        AccountBalance(account=a, balance=account_balance(a, by_account.get(a.id, [])))
        for a in accounts
    ]


def net_worth(balances: Iterable[AccountBalance]) -> Decimal:
    """Assets minus credit amounts owed."""
    total = ZERO
    for b in balances:
        total += -b.balance if b.is_liability else b.balance
    return total


def daily_totals(transactions: Iterable[Transaction]) -> list[DailyTotals]:
    """Per-day income/expense/investment series, oldest day first."""
    days: dict[dt.date, DailyTotals] = {}
    for t in transactions:
        row = days.setdefault(t.date, DailyTotals(day=t.date))
        if is_counted_income(t):
            row.income += t.amount
        elif t.type == TransactionType.EXPENSE:
            row.expense += t.amount
        elif t.type == TransactionType.INVESTMENT:
            row.investment += t.amount
    return [days[d] for d in sorted(days)]


def top_category(summary: FinancialSummary) -> Optional[str]:
    """Name of the highest-spend category, or None without spending."""
    if not summary.spending_by_category:
        return None
    return max(summary.spending_by_category.items(), key=lambda item: item[1])[0]
