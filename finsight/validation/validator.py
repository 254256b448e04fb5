"""
Two-Stage Form Validation

DESIGN DECISION: Form input is validated in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Build the pydantic model from the raw form values
- Type, format and cross-field rules (e.g. goal period vs type)
- Any failure here is an error; nothing can be saved

STAGE 2 - SEMANTIC VALIDATION:
- Business checks that need context: reference date, categories,
  configured thresholds
- Future dates, unusually large amounts, missing need/want flag,
  category type mismatches, duplicate names

IMPORTANT: Validation never rewrites user input beyond what the models
themselves normalize. It reports issues for the user to act on.
"""

import datetime as dt
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from finsight.config import AppSettings, get_settings
from finsight.models.finance import (
    Account,
    Budget,
    CategoryIndex,
    CategoryType,
    Goal,
    Transaction,
    TransactionType,
    to_money,
)

# Which category type each transaction type should use
EXPECTED_CATEGORY_TYPE = {
    TransactionType.INCOME: CategoryType.INCOME,
    TransactionType.EXPENSE: CategoryType.EXPENSE,
    TransactionType.INVESTMENT: CategoryType.INVESTMENT,
}


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(..., description="Field with the issue")
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'invalid_value', 'future_date', 'duplicate')"
    )
    message: str = Field(..., description="Human-readable description of the issue")
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of validating one form.

    model holds the constructed record when the schema stage passed.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    schema_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    model: Optional[Any] = Field(default=None, exclude=True)

    @property
    def is_valid(self) -> bool:
        return self.schema_valid and not self.errors

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == "warning"]


def issues_from_error(error: ValidationError) -> list[ValidationIssue]:
    """Convert pydantic errors into form issues."""
    issues = []
    for err in error.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "form"
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        issues.append(ValidationIssue(
            field=field,
            issue_type="invalid_value",
            message=message,
            severity="error",
        ))
    return issues


class FormValidator:
    """
    Validates user-entered records before they are written.

    Stage 1 runs without any context. Stage 2 needs a reference date
    and, for some forms, the user's categories.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _build(self, model_cls: type[BaseModel], data: Mapping[str, Any]) -> ValidationResult:
        """Stage 1: construct the model or collect its errors."""
        try:
            model = model_cls.model_validate(dict(data))
        except ValidationError as e:
            return ValidationResult(schema_valid=False, issues=issues_from_error(e))
        return ValidationResult(schema_valid=True, model=model)

    def _check_date(
        self,
        day: dt.date,
        reference_date: dt.date,
        field: str,
    ) -> list[ValidationIssue]:
        limit = reference_date + dt.timedelta(days=self._settings.future_date_tolerance_days)
        if day > limit:
            return [ValidationIssue(
                field=field,
                issue_type="future_date",
                message=f"Date ({day.isoformat()}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            )]
        return []

    def _check_amount(self, amount: Decimal, field: str = "amount") -> list[ValidationIssue]:
        issues = []
        if amount <= 0:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            ))
        elif amount > Decimal(str(self._settings.max_transaction_amount)):
            issues.append(ValidationIssue(
                field=field,
                issue_type="suspicious_value",
                message=f"Amount ({amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))
        return issues

    def validate_transaction(
        self,
        data: Mapping[str, Any],
        categories: CategoryIndex,
        reference_date: dt.date,
    ) -> ValidationResult:
        """
        Validate an income, expense or investment entry.

        Args:
            data: Raw form values for a Transaction
            categories: The user's categories
            reference_date: "Today" for the future-date check
        """
        result = self._build(Transaction, data)
        if not result.schema_valid:
            return result

        transaction: Transaction = result.model
        issues = result.issues

        raw_amount = data.get("amount")
        try:
            if raw_amount is not None and to_money(raw_amount) < 0:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="normalized",
                    message="Negative amount entered; it is stored as a positive amount",
                    severity="info",
                ))
        except ValueError:
            pass

        issues.extend(self._check_amount(transaction.amount))
        issues.extend(self._check_date(transaction.date, reference_date, "date"))

        if transaction.type == TransactionType.EXPENSE and transaction.expense_type is None:
            issues.append(ValidationIssue(
                field="expense_type",
                issue_type="missing",
                message="Expense is not marked as a need or a want",
                severity="warning",
                suggested_fix="Mark it so it shows up in the needs vs wants split",
            ))

        category = categories.get(transaction.category_id)
        if transaction.category_id and category is None:
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="unknown_category",
                message="Category not found; this entry will be reported under Other",
                severity="info",
            ))
        elif category is not None and not category.is_system:
            expected = EXPECTED_CATEGORY_TYPE.get(transaction.type)
            if expected is not None and category.type != expected:
                issues.append(ValidationIssue(
                    field="category_id",
                    issue_type="category_mismatch",
                    message=(
                        f"{category.name} is an {category.type.value} category "
                        f"but this is an {transaction.type.value}"
                    ),
                    severity="warning",
                ))

        return result

    def validate_transfer(
        self,
        source_account_id: str,
        destination_account_id: str,
        amount: Any,
        day: dt.date,
        reference_date: dt.date,
    ) -> ValidationResult:
        issues = []
        if not source_account_id or not destination_account_id:
            issues.append(ValidationIssue(
                field="account",
                issue_type="missing",
                message="Choose both a source and a destination account",
                severity="error",
            ))
        elif source_account_id == destination_account_id:
            issues.append(ValidationIssue(
                field="destination_account_id",
                issue_type="invalid_value",
                message="Source and destination accounts must be different",
                severity="error",
            ))

        try:
            issues.extend(self._check_amount(to_money(amount)))
        except ValueError as e:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=str(e),
                severity="error",
            ))
        issues.extend(self._check_date(day, reference_date, "date"))
        return ValidationResult(schema_valid=True, issues=issues)

    def validate_budget_amounts(
        self,
        amounts: Mapping[str, Any],
        categories: CategoryIndex,
        month: dt.date,
    ) -> ValidationResult:
        """
        Validate a budget planner submission (category id to amount).

        Blank amounts are skipped; result.model is the list of budgets
        that would be saved.
        """
        issues = []
        budgets = []
        for category_id, raw in amounts.items():
            if raw is None or raw == "":
                continue
            try:
                budget = Budget(category_id=category_id, amount=raw, month=month)
            except ValidationError as e:
                for issue in issues_from_error(e):
                    issue.field = f"{categories.name_of(category_id)}.{issue.field}"
                    issues.append(issue)
                continue
            if category_id not in categories:
                issues.append(ValidationIssue(
                    field=category_id,
                    issue_type="unknown_category",
                    message="Budget refers to a category that no longer exists",
                    severity="error",
                ))
                continue
            budgets.append(budget)
        return ValidationResult(schema_valid=not issues, issues=issues, model=budgets)

    def validate_goal(
        self,
        data: Mapping[str, Any],
        reference_date: dt.date,
    ) -> ValidationResult:
        result = self._build(Goal, data)
        if not result.schema_valid:
            return result

        goal: Goal = result.model
        if goal.target_date is not None and goal.target_date < reference_date:
            result.issues.append(ValidationIssue(
                field="target_date",
                issue_type="past_date",
                message="Target date is already in the past",
                severity="warning",
            ))
        if goal.is_recurring and goal.current_amount > 0:
            result.issues.append(ValidationIssue(
                field="current_amount",
                issue_type="ignored",
                message="Recurring goals track progress from transactions; the entered amount is not used",
                severity="info",
            ))
        return result

    def validate_account(self, data: Mapping[str, Any]) -> ValidationResult:
        return self._build(Account, data)

    def validate_category_name(
        self,
        name: str,
        categories: Iterable,
        exclude_id: Optional[str] = None,
    ) -> ValidationResult:
        """Names are unique per user, ignoring case."""
        issues = []
        cleaned = (name or "").strip()
        if not cleaned:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Category name is required",
                severity="error",
            ))
        else:
            wanted = cleaned.casefold()
            for category in categories:
                if category.id != exclude_id and category.name.casefold() == wanted:
                    issues.append(ValidationIssue(
                        field="name",
                        issue_type="duplicate",
                        message=f'A category named "{category.name}" already exists',
                        severity="error",
                    ))
                    break
        return ValidationResult(schema_valid=True, issues=issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """One line per issue, errors first, for a form footer."""
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        icons = {"error": "❌", "warning": "⚠️", "info": "ℹ️"}
        order = {"error": 0, "warning": 1, "info": 2}
        lines = [
            f"{icons[i.severity]} {i.message}"
            for i in sorted(result.issues, key=lambda i: order[i.severity])
        ]
        return "\n".join(lines)
