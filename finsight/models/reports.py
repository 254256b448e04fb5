"""
Report Models

Derived, never-persisted figures: date windows, summaries, budget and
goal progress rows. Everything here is computed from stored records on
each render.

DESIGN DECISION: Calendar windows are resolved against an explicit
reference date passed in by the caller. Nothing in this module reads
the wall clock.
"""

import calendar
import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from finsight.models.finance import Account, Category, Goal, Transaction

ZERO = Decimal("0.00")


class DateRange(BaseModel):
    """A closed [start, end] interval of days."""

    start: dt.date
    end: dt.date

    @model_validator(mode="after")
    def validate_order(self) -> "DateRange":
        if self.end < self.start:
            raise ValueError("Date range end must not be before its start")
        return self

    def contains(self, day: dt.date) -> bool:
        return self.start <= day <= self.end

    @classmethod
    def for_month(cls, year: int, month: int) -> "DateRange":
        last_day = calendar.monthrange(year, month)[1]
        return cls(start=dt.date(year, month, 1), end=dt.date(year, month, last_day))

    @classmethod
    def for_year(cls, year: int) -> "DateRange":
        return cls(start=dt.date(year, 1, 1), end=dt.date(year, 12, 31))


class PeriodKind(str, Enum):
    """Report window selector."""
    CURRENT_MONTH = "current_month"
    CURRENT_YEAR = "current_year"
    CUSTOM = "custom"
    OVERALL = "overall"


class ReportPeriod(BaseModel):
    """
    A report window relative to a reference date.

    CUSTOM needs both year and month; the other kinds ignore them.
    """

    kind: PeriodKind = PeriodKind.CURRENT_MONTH
    year: Optional[int] = Field(default=None, ge=1900, le=9999)
    month: Optional[int] = Field(default=None, ge=1, le=12)

    @model_validator(mode="after")
    def validate_custom(self) -> "ReportPeriod":
        if self.kind == PeriodKind.CUSTOM and (self.year is None or self.month is None):
            raise ValueError("A custom period needs a year and a month")
        return self

    @classmethod
    def custom(cls, year: int, month: int) -> "ReportPeriod":
        return cls(kind=PeriodKind.CUSTOM, year=year, month=month)

    def date_range(self, reference_date: dt.date) -> Optional[DateRange]:
        """Resolve to concrete dates; None means unbounded."""
        if self.kind == PeriodKind.CURRENT_MONTH:
            return DateRange.for_month(reference_date.year, reference_date.month)
        if self.kind == PeriodKind.CURRENT_YEAR:
            return DateRange.for_year(reference_date.year)
        if self.kind == PeriodKind.CUSTOM:
            return DateRange.for_month(self.year, self.month)
        return None

    def title(self, reference_date: dt.date) -> str:
        if self.kind == PeriodKind.CURRENT_MONTH:
            return "This Month"
        if self.kind == PeriodKind.CURRENT_YEAR:
            return "This Year"
        if self.kind == PeriodKind.CUSTOM:
            return dt.date(self.year, self.month, 1).strftime("%B %Y")
        return "Overall"


class FinancialSummary(BaseModel):
    """
    Aggregated figures for one window.

    Invariants:
    - savings == total_income - total_expense - total_investment
    - sum(spending_by_category.values()) == total_expense
    """

    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    total_investment: Decimal = ZERO
    savings: Decimal = ZERO
    spending_by_category: dict[str, Decimal] = Field(default_factory=dict)
    investment_by_category: dict[str, Decimal] = Field(default_factory=dict)
    needs_wants: dict[str, Decimal] = Field(
        default_factory=lambda: {"need": ZERO, "want": ZERO}
    )
    transaction_count: int = 0

    @property
    def is_empty(self) -> bool:
        return self.transaction_count == 0


class AccountBalance(BaseModel):
    """Derived balance of one account; for credit accounts, the amount owed."""

    account: Account
    balance: Decimal = ZERO

    @property
    def is_liability(self) -> bool:
        return self.account.is_credit


class DailyTotals(BaseModel):
    day: dt.date
    income: Decimal = ZERO
    expense: Decimal = ZERO
    investment: Decimal = ZERO


class BudgetProgress(BaseModel):
    """One budget line matched against actual spend."""

    budget_id: str
    category_id: str
    category: str
    limit: Decimal
    spent: Decimal = ZERO
    progress_percent: float = Field(
        default=0.0,
        description="spent / limit * 100, not clamped"
    )

    @property
    def is_over(self) -> bool:
        return self.progress_percent >= 100

    @property
    def remaining(self) -> Decimal:
        return self.limit - self.spent

    @property
    def display_label(self) -> str:
        if self.is_over:
            return "Over"
        return f"{self.progress_percent:.0f}%"


class BudgetSummary(BaseModel):
    total_budget: Decimal = ZERO
    total_spent: Decimal = ZERO
    total_left: Decimal = ZERO
    progress_percent: float = 0.0


class GoalProgress(BaseModel):
    """
    A goal with its current amount resolved for a reference date.

    Spending goals count as achieved while spend stays within target.
    """

    goal: Goal
    current_amount: Decimal = ZERO
    progress_percent: float = 0.0
    days_left: Optional[int] = None

    @property
    def remaining(self) -> Decimal:
        return max(self.goal.target_amount - self.current_amount, ZERO)

    @property
    def is_spending_goal(self) -> bool:
        return self.goal.type.value.endswith("_spending")

    @property
    def is_achieved(self) -> bool:
        if self.is_spending_goal:
            return self.current_amount <= self.goal.target_amount
        return self.current_amount >= self.goal.target_amount


class DashboardReport(BaseModel):
    """Everything one report page renders, computed in a single pass."""

    title: str
    date_range: Optional[DateRange] = None
    summary: FinancialSummary
    transactions: list[Transaction] = Field(
        default_factory=list,
        description="In-window transactions, newest first"
    )
    categories: list[Category] = Field(default_factory=list)
    balances: list[AccountBalance] = Field(default_factory=list)
    net_worth: Decimal = ZERO
    daily: list[DailyTotals] = Field(default_factory=list)
    budgets: list[BudgetProgress] = Field(default_factory=list)
    budget_summary: BudgetSummary = Field(default_factory=BudgetSummary)
    goals: list[GoalProgress] = Field(default_factory=list)

    def recent(self, limit: int) -> list[Transaction]:
        return self.transactions[:limit]
