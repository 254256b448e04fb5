"""
Finance Repository

Maps the finance models to and from store documents and knows the
collection layout:

    users/{uid}/accounts
    users/{uid}/accounts/{account_id}/transactions
    users/{uid}/categories
    users/{uid}/budgets
    users/{uid}/goals

DESIGN DECISION: Amounts are stored as floats (the store's native
number type) and read back as 2-place Decimals through the models.
Dates are stored as ISO strings so range filters compare correctly.
"""

from typing import Iterable, Optional

from finsight.models.finance import (
    Account,
    Budget,
    Category,
    Goal,
    Transaction,
    month_start_iso,
)
from finsight.models.reports import DateRange
from finsight.services.storage.interface import DocumentStore, Filter, WriteBatch


def accounts_path(user_id: str) -> str:
    return f"users/{user_id}/accounts"


def transactions_path(user_id: str, account_id: str) -> str:
    return f"users/{user_id}/accounts/{account_id}/transactions"


def categories_path(user_id: str) -> str:
    return f"users/{user_id}/categories"


def budgets_path(user_id: str) -> str:
    return f"users/{user_id}/budgets"


def goals_path(user_id: str) -> str:
    return f"users/{user_id}/goals"


# =============================================================================
# CONVERTERS
# =============================================================================

def account_to_doc(account: Account) -> dict:
    return {
        "name": account.name,
        "type": account.type.value,
        "initial_balance": float(account.initial_balance),
        "created_at": account.created_at.isoformat(),
    }


def transaction_to_doc(transaction: Transaction) -> dict:
    return {
        "account_id": transaction.account_id,
        "date": transaction.date.isoformat(),
        "description": transaction.description,
        "amount": float(transaction.amount),
        "category_id": transaction.category_id,
        "type": transaction.type.value,
        "expense_type": transaction.expense_type.value if transaction.expense_type else None,
        "created_at": transaction.created_at.isoformat(),
    }


def category_to_doc(category: Category) -> dict:
    return {"name": category.name, "type": category.type.value}


def budget_to_doc(budget: Budget) -> dict:
    return {
        "category_id": budget.category_id,
        "amount": float(budget.amount),
        "month": month_start_iso(budget.month),
    }


def goal_to_doc(goal: Goal) -> dict:
    return {
        "name": goal.name,
        "target_amount": float(goal.target_amount),
        "current_amount": float(goal.current_amount),
        "period": goal.period.value,
        "type": goal.type.value,
        "target_date": goal.target_date.isoformat() if goal.target_date else None,
    }


class FinanceRepository:
    """
    Typed access to one store for all users.

    Reads return models; writes either go straight to the store or are
    staged onto a caller-owned WriteBatch so that related changes commit
    together.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    def batch(self) -> WriteBatch:
        return self.store.batch()

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    async def list_accounts(self, user_id: str) -> list[Account]:
        docs = await self.store.get_documents(accounts_path(user_id))
        accounts = [Account.model_validate(d) for d in docs]
        return sorted(accounts, key=lambda a: a.created_at)

    async def get_account(self, user_id: str, account_id: str) -> Optional[Account]:
        doc = await self.store.get_document(accounts_path(user_id), account_id)
        return Account.model_validate(doc) if doc else None

    def new_account_id(self, user_id: str) -> str:
        return self.store.new_id(accounts_path(user_id))

    def stage_account(self, batch: WriteBatch, user_id: str, account: Account) -> None:
        batch.set(accounts_path(user_id), account.id, account_to_doc(account))

    def stage_account_delete(self, batch: WriteBatch, user_id: str, account_id: str) -> None:
        batch.delete(accounts_path(user_id), account_id)

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def list_transactions(
        self,
        user_id: str,
        account_id: str,
        date_range: Optional[DateRange] = None,
    ) -> list[Transaction]:
        filters = []
        if date_range is not None:
            filters = [
                Filter("date", ">=", date_range.start.isoformat()),
                Filter("date", "<=", date_range.end.isoformat()),
            ]
        docs = await self.store.get_documents(transactions_path(user_id, account_id), filters)
        # The parent path is authoritative for the owning account
        return [Transaction.model_validate({**d, "account_id": account_id}) for d in docs]

    async def list_all_transactions(
        self,
        user_id: str,
        accounts: Optional[Iterable[Account]] = None,
        date_range: Optional[DateRange] = None,
    ) -> list[Transaction]:
        """Transactions of every account, newest first."""
        if accounts is None:
            accounts = await self.list_accounts(user_id)
        result: list[Transaction] = []
        for account in accounts:
            result.extend(await self.list_transactions(user_id, account.id, date_range))
        return sorted(result, key=lambda t: (t.date, t.created_at), reverse=True)

    async def save_transaction(self, user_id: str, transaction: Transaction) -> None:
        await self.store.set_document(
            transactions_path(user_id, transaction.account_id),
            transaction.id,
            transaction_to_doc(transaction),
        )

    async def delete_transaction(self, user_id: str, account_id: str, transaction_id: str) -> None:
        await self.store.delete_document(transactions_path(user_id, account_id), transaction_id)

    def new_transaction_id(self, user_id: str, account_id: str) -> str:
        return self.store.new_id(transactions_path(user_id, account_id))

    def stage_transaction(self, batch: WriteBatch, user_id: str, transaction: Transaction) -> None:
        batch.set(
            transactions_path(user_id, transaction.account_id),
            transaction.id,
            transaction_to_doc(transaction),
        )

    def stage_transaction_delete(
        self,
        batch: WriteBatch,
        user_id: str,
        account_id: str,
        transaction_id: str,
    ) -> None:
        batch.delete(transactions_path(user_id, account_id), transaction_id)

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self, user_id: str) -> list[Category]:
        docs = await self.store.get_documents(categories_path(user_id))
        return [Category.model_validate(d) for d in docs]

    async def get_category(self, user_id: str, category_id: str) -> Optional[Category]:
        doc = await self.store.get_document(categories_path(user_id), category_id)
        return Category.model_validate(doc) if doc else None

    def new_category_id(self, user_id: str) -> str:
        return self.store.new_id(categories_path(user_id))

    def stage_category(self, batch: WriteBatch, user_id: str, category: Category) -> None:
        batch.set(categories_path(user_id), category.id, category_to_doc(category))

    def stage_category_rename(
        self,
        batch: WriteBatch,
        user_id: str,
        category_id: str,
        name: str,
    ) -> None:
        batch.update(categories_path(user_id), category_id, {"name": name})

    def stage_category_delete(self, batch: WriteBatch, user_id: str, category_id: str) -> None:
        batch.delete(categories_path(user_id), category_id)

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    async def list_budgets(self, user_id: str, month=None) -> list[Budget]:
        """All budgets, or only those of one month (any day of it)."""
        filters = []
        if month is not None:
            filters = [Filter("month", "==", month_start_iso(month))]
        docs = await self.store.get_documents(budgets_path(user_id), filters)
        return [Budget.model_validate(d) for d in docs]

    def new_budget_id(self, user_id: str) -> str:
        return self.store.new_id(budgets_path(user_id))

    def stage_budget(self, batch: WriteBatch, user_id: str, budget: Budget) -> None:
        batch.set(budgets_path(user_id), budget.id, budget_to_doc(budget))

    def stage_budget_delete(self, batch: WriteBatch, user_id: str, budget_id: str) -> None:
        batch.delete(budgets_path(user_id), budget_id)

    async def delete_budget(self, user_id: str, budget_id: str) -> None:
        await self.store.delete_document(budgets_path(user_id), budget_id)

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    async def list_goals(self, user_id: str) -> list[Goal]:
        docs = await self.store.get_documents(goals_path(user_id))
        return [Goal.model_validate(d) for d in docs]

    async def get_goal(self, user_id: str, goal_id: str) -> Optional[Goal]:
        doc = await self.store.get_document(goals_path(user_id), goal_id)
        return Goal.model_validate(doc) if doc else None

    async def add_goal(self, user_id: str, goal: Goal) -> Goal:
        """Create a goal under a store-generated id."""
        doc_id = await self.store.add_document(goals_path(user_id), goal_to_doc(goal))
        return goal.model_copy(update={"id": doc_id})

    async def save_goal(self, user_id: str, goal: Goal) -> None:
        await self.store.set_document(goals_path(user_id), goal.id, goal_to_doc(goal))

    async def delete_goal(self, user_id: str, goal_id: str) -> None:
        await self.store.delete_document(goals_path(user_id), goal_id)

    def stage_goal_delete(self, batch: WriteBatch, user_id: str, goal_id: str) -> None:
        batch.delete(goals_path(user_id), goal_id)
