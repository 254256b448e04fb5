"""
Data Models Package

This package contains all Pydantic models used in Finsight.
All data flowing through the system must conform to these schemas.
"""

from finsight.models.finance import (
    DEFAULT_CATEGORIES,
    RECONCILIATION_CATEGORY_ID,
    SYSTEM_CATEGORIES,
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
)
from finsight.models.reports import (
    AccountBalance,
    BudgetProgress,
    BudgetSummary,
    DailyTotals,
    DashboardReport,
    DateRange,
    FinancialSummary,
    GoalProgress,
    PeriodKind,
    ReportPeriod,
)
from finsight.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "DEFAULT_CATEGORIES",
    "RECONCILIATION_CATEGORY_ID",
    "SYSTEM_CATEGORIES",
    "TRANSFER_CATEGORY_ID",
    "Account",
    "AccountType",
    "Budget",
    "Category",
    "CategoryIndex",
    "CategoryType",
    "ExpenseType",
    "Goal",
    "GoalPeriod",
    "GoalType",
    "Transaction",
    "TransactionType",
    # Report models
    "AccountBalance",
    "BudgetProgress",
    "BudgetSummary",
    "DailyTotals",
    "DashboardReport",
    "DateRange",
    "FinancialSummary",
    "GoalProgress",
    "PeriodKind",
    "ReportPeriod",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
