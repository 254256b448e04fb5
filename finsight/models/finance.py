"""
Core Data Models for Finsight

These models define the strict schemas for every record we persist.
They are designed to:
1. Enforce type safety at runtime
2. Normalize values at the single write boundary
3. Be serializable for storage and logging

DESIGN DECISION: Transaction amounts are always unsigned magnitudes.
Any signed input is normalized here, and the direction of money is
derived purely from the transaction type everywhere else.

DESIGN DECISION: Transactions and budgets point at categories by id.
Names are resolved through CategoryIndex, so renaming a category
touches exactly one document.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Iterable, Iterator, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountType(str, Enum):
    """Kinds of money containers a user can hold."""
    CHECKING = "checking"
    SAVINGS = "savings"
    INVESTMENT = "investment"
    CREDIT = "credit"  # Balance is shown as an amount owed
    OTHER = "other"


class TransactionType(str, Enum):
    """
    Direction and purpose of a money movement.

    RECONCILIATION is only written by the system (opening balances).
    """
    INCOME = "income"
    EXPENSE = "expense"
    INVESTMENT = "investment"
    TRANSFER = "transfer"
    RECONCILIATION = "reconciliation"


class ExpenseType(str, Enum):
    """Discretionary sub-classification of an expense."""
    NEED = "need"
    WANT = "want"


class CategoryType(str, Enum):
    """Which kind of transaction a category groups."""
    EXPENSE = "expense"
    INCOME = "income"
    INVESTMENT = "investment"


class GoalPeriod(str, Enum):
    """How often a goal resets."""
    MONTHLY = "monthly"
    YEARLY = "yearly"
    LONG_TERM = "long_term"


class GoalType(str, Enum):
    """What a goal measures."""
    SAVING = "saving"
    INVESTMENT = "investment"
    NEED_SPENDING = "need_spending"
    WANT_SPENDING = "want_spending"
    LONG_TERM = "long_term"


INFLOW_TYPES = frozenset({TransactionType.INCOME, TransactionType.RECONCILIATION})
OUTFLOW_TYPES = frozenset({
    TransactionType.EXPENSE,
    TransactionType.INVESTMENT,
    TransactionType.TRANSFER,
})

TRANSFER_CATEGORY_ID = "transfer"
RECONCILIATION_CATEGORY_ID = "reconciliation"
OTHER_CATEGORY_NAME = "Other"

CENT = Decimal("0.01")


def new_id() -> str:
    """Generate a document id."""
    return uuid4().hex


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def to_money(value) -> Decimal:
    """Convert a stored or typed number to a 2-place Decimal."""
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError):
            raise ValueError(f"Not a valid amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Not a valid amount: {value!r}")
    return amount.quantize(CENT)


def parse_month(value) -> dt.date:
    """
    Parse a month reference into the first day of that month.

    Accepts dates, datetimes, "YYYY-MM", "YYYY-MM-DD" and full ISO
    timestamps such as "2024-07-01T00:00:00".
    """
    if isinstance(value, dt.datetime):
        return value.date().replace(day=1)
    if isinstance(value, dt.date):
        return value.replace(day=1)
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 7:
            text = f"{text}-01"
        try:
            return dt.datetime.fromisoformat(text.replace("Z", "+00:00")).date().replace(day=1)
        except ValueError:
            pass
    raise ValueError(f"Not a valid month: {value!r}")


def month_start_iso(month: dt.date) -> str:
    """Storage form of a budget month: an ISO month-start timestamp."""
    return dt.datetime(month.year, month.month, 1).isoformat()


def next_month(month: dt.date) -> dt.date:
    if month.month == 12:
        return dt.date(month.year + 1, 1, 1)
    return dt.date(month.year, month.month + 1, 1)


# =============================================================================
# CORE RECORDS
# =============================================================================

class Account(BaseModel):
    """
    A named money container.

    The stored initial_balance is informational only. The balance shown
    to the user is always derived from the account's transactions.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(
        ...,
        min_length=2,
        max_length=100,
        description="Display name"
    )
    type: AccountType = Field(
        default=AccountType.CHECKING,
        description="Account kind"
    )
    initial_balance: Decimal = Field(
        default=Decimal("0.00"),
        ge=0,
        description="Opening balance (amount owed for credit accounts)"
    )
    created_at: dt.datetime = Field(default_factory=utc_now)

    @field_validator("initial_balance", mode="before")
    @classmethod
    def coerce_balance(cls, v):
        return to_money(v if v is not None else 0)

    @property
    def is_credit(self) -> bool:
        return self.type == AccountType.CREDIT


class Transaction(BaseModel):
    """
    A single dated money movement tied to one account.

    CRITICAL: amount is an unsigned magnitude. Signed input (legacy
    documents stored expenses as negative numbers) is normalized here.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    account_id: str = Field(..., min_length=1)
    date: dt.date = Field(..., description="Day the money moved")
    description: str = Field(default="", max_length=200)
    amount: Decimal = Field(..., description="Unsigned magnitude")
    category_id: Optional[str] = Field(
        default=None,
        description="Stable category reference; unknown ids report as Other"
    )
    type: TransactionType
    expense_type: Optional[ExpenseType] = Field(
        default=None,
        description="Need/want flag, expenses only"
    )
    created_at: dt.datetime = Field(default_factory=utc_now)

    @field_validator("amount", mode="before")
    @classmethod
    def normalize_amount(cls, v) -> Decimal:
        """Store every amount as an unsigned magnitude."""
        return abs(to_money(v))

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v):
        if isinstance(v, dt.datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            return dt.datetime.fromisoformat(v.replace("Z", "+00:00")).date()
        return v

    @model_validator(mode="after")
    def drop_stray_expense_type(self) -> "Transaction":
        """Only expenses carry a need/want flag."""
        if self.type != TransactionType.EXPENSE and self.expense_type is not None:
            self.expense_type = None
        return self

    @property
    def is_inflow(self) -> bool:
        return self.type in INFLOW_TYPES

    @property
    def is_outflow(self) -> bool:
        return self.type in OUTFLOW_TYPES

    @property
    def is_transfer_leg(self) -> bool:
        """Either side of a transfer between two accounts."""
        return self.type == TransactionType.TRANSFER or self.category_id == TRANSFER_CATEGORY_ID

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign implied by the type (inflows positive)."""
        return self.amount if self.is_inflow else -self.amount


class Category(BaseModel):
    """A label grouping transactions for budgeting and reporting."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=50)
    type: CategoryType = Field(default=CategoryType.EXPENSE)

    @property
    def is_system(self) -> bool:
        return self.id in SYSTEM_CATEGORY_IDS


class Budget(BaseModel):
    """
    A spending limit for one category in one month.

    Only one budget per (category, month) is kept; the planner flow
    looks the pair up before writing.
    """

    id: str = Field(default_factory=new_id)
    category_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0, description="Monthly limit")
    month: dt.date = Field(..., description="First day of the budget month")

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        return to_money(v)

    @field_validator("month", mode="before")
    @classmethod
    def normalize_month(cls, v) -> dt.date:
        return parse_month(v)

    @property
    def month_key(self) -> str:
        return self.month.strftime("%Y-%m")


class Goal(BaseModel):
    """
    A savings/spending target.

    Recurring goals (monthly/yearly) have their current amount recomputed
    from transactions on every read. Long-term goals keep current_amount
    as a stored field that only the user edits.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=2, max_length=100)
    target_amount: Decimal = Field(..., gt=0)
    current_amount: Decimal = Field(default=Decimal("0.00"), ge=0)
    period: GoalPeriod
    type: GoalType
    target_date: Optional[dt.date] = None

    @field_validator("target_amount", "current_amount", mode="before")
    @classmethod
    def coerce_amounts(cls, v):
        return to_money(v if v is not None else 0)

    @field_validator("target_date", mode="before")
    @classmethod
    def parse_target_date(cls, v):
        if isinstance(v, dt.datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            return dt.datetime.fromisoformat(v.replace("Z", "+00:00")).date()
        return v or None

    @model_validator(mode="after")
    def validate_period_matches_type(self) -> "Goal":
        """Long-term period if and only if long-term type."""
        long_term_period = self.period == GoalPeriod.LONG_TERM
        long_term_type = self.type == GoalType.LONG_TERM
        if long_term_period != long_term_type:
            raise ValueError(
                "Long-term goals must use the long_term type and period together"
            )
        return self

    @property
    def is_recurring(self) -> bool:
        return self.period != GoalPeriod.LONG_TERM


SYSTEM_CATEGORIES = (
    Category(id=TRANSFER_CATEGORY_ID, name="Transfer", type=CategoryType.INCOME),
    Category(id=RECONCILIATION_CATEGORY_ID, name="Reconciliation", type=CategoryType.INCOME),
)
SYSTEM_CATEGORY_IDS = frozenset(c.id for c in SYSTEM_CATEGORIES)

DEFAULT_CATEGORIES = (
    ("Income", CategoryType.INCOME),
    ("Food", CategoryType.EXPENSE),
    ("Shopping", CategoryType.EXPENSE),
    ("Housing", CategoryType.EXPENSE),
    ("Transportation", CategoryType.EXPENSE),
    ("Utilities", CategoryType.EXPENSE),
    ("Entertainment", CategoryType.EXPENSE),
    ("Health", CategoryType.EXPENSE),
    ("Investment", CategoryType.INVESTMENT),
    (OTHER_CATEGORY_NAME, CategoryType.EXPENSE),
)


class CategoryIndex:
    """
    Lookup table from category id to category.

    System categories are always present. Anything that cannot be
    resolved reports under the "Other" name.
    """

    def __init__(self, categories: Iterable[Category] = ()):
        self._by_id: dict[str, Category] = {c.id: c for c in SYSTEM_CATEGORIES}
        for category in categories:
            self._by_id[category.id] = category

    def get(self, category_id: Optional[str]) -> Optional[Category]:
        if not category_id:
            return None
        return self._by_id.get(category_id)

    def name_of(self, category_id: Optional[str]) -> str:
        category = self.get(category_id)
        return category.name if category else OTHER_CATEGORY_NAME

    def find_by_name(self, name: str) -> Optional[Category]:
        wanted = name.strip().casefold()
        for category in self._by_id.values():
            if category.name.casefold() == wanted:
                return category
        return None

    def user_categories(
        self,
        *types: CategoryType,
    ) -> list[Category]:
        """Categories the user owns, optionally limited to some types."""
        result = [
            c for c in self._by_id.values()
            if not c.is_system and (not types or c.type in types)
        ]
        return sorted(result, key=lambda c: c.name.casefold())

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._by_id

    def __iter__(self) -> Iterator[Category]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)
