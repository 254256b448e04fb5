"""
Main Orchestrator for Finsight

This module ties together all the components and defines the flows
the pages call:
1. Ledger (accounts, transactions, transfers, categories)
2. Planning (budgets, goals)
3. Reports (dashboard figures, AI commentary, CSV export, clearing data)

DESIGN DECISION: The orchestrator enforces the rules the document
store cannot:
- Category names are unique per user (lookup before write)
- One budget per (category, month) (upsert)
- Related writes share one batch (account + its transactions,
  both legs of a transfer, a category + its budgets)
- Every mutation is audited
"""

import datetime as dt
from decimal import Decimal
from typing import Any, Mapping, NamedTuple, Optional
from uuid import UUID

import structlog

from finsight.agents import (
    BudgetGoalSuggestionsInput,
    BudgetGoalSuggestionsOutput,
    InsightAgent,
    PersonalizedInsightsInput,
    PersonalizedInsightsOutput,
    TransactionLine,
    TransactionSummaryInput,
    TransactionSummaryOutput,
)
from finsight.agents.ai_agents import (
    INSIGHTS_UNAVAILABLE_MESSAGE,
    NOT_ENOUGH_DATA_MESSAGE,
    SUGGESTIONS_UNAVAILABLE_MESSAGE,
    SUMMARY_UNAVAILABLE_MESSAGE,
)
from finsight.audit import AuditLogger, configure_logging, create_correlation_id
from finsight.config import get_settings
from finsight.models.finance import (
    DEFAULT_CATEGORIES,
    RECONCILIATION_CATEGORY_ID,
    TRANSFER_CATEGORY_ID,
    Account,
    AccountType,
    Budget,
    Category,
    CategoryIndex,
    CategoryType,
    Goal,
    Transaction,
    TransactionType,
    month_start_iso,
    next_month,
    parse_month,
    to_money,
)
from finsight.models.reports import (
    DashboardReport,
    DateRange,
    GoalProgress,
    PeriodKind,
    ReportPeriod,
)
from finsight.reports import (
    account_balances,
    aggregate,
    category_totals,
    csv_filename,
    daily_totals,
    evaluate_goals,
    filter_by_range,
    match_budgets,
    net_worth,
    summarize_budgets,
    transactions_to_csv,
)
from finsight.services.auth import FirebaseAuthService
from finsight.services.storage import (
    DocumentStore,
    DuplicateError,
    FinanceRepository,
    InMemoryDocumentStore,
    NotFoundError,
    PartialClearError,
    StorageError,
)

logger = structlog.get_logger(__name__)


class LedgerFlow:
    """
    Accounts, transactions and categories.

    Flow for a new user:
    1. ensure_default_categories() seeds the starter categories
    2. create_account() writes the account and its opening balance
    3. save_transaction() / record_transfer() add activity
    """

    def __init__(
        self,
        repository: FinanceRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._repo = repository
        self._audit_logger = audit_logger

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    async def list_accounts(self, user_id: str) -> list[Account]:
        return await self._repo.list_accounts(user_id)

    async def create_account(
        self,
        user_id: str,
        name: str,
        account_type: AccountType,
        opening_balance: Any = 0,
        reference_date: Optional[dt.date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Account:
        """
        Create an account.

        A non-zero opening balance is written as an "Initial Balance"
        reconciliation transaction in the same batch. For credit
        accounts the opening balance is the amount owed.
        """
        correlation_id = correlation_id or create_correlation_id()
        account = Account(
            id=self._repo.new_account_id(user_id),
            name=name,
            type=account_type,
            initial_balance=opening_balance,
        )

        batch = self._repo.batch()
        self._repo.stage_account(batch, user_id, account)
        if account.initial_balance > 0:
            opening = Transaction(
                id=self._repo.new_transaction_id(user_id, account.id),
                account_id=account.id,
                date=reference_date or account.created_at.date(),
                description="Initial Balance",
                amount=account.initial_balance,
                category_id=RECONCILIATION_CATEGORY_ID,
                type=TransactionType.RECONCILIATION,
            )
            self._repo.stage_transaction(batch, user_id, opening)
        await batch.commit()

        if self._audit_logger:
            await self._audit_logger.log_account_created(
                user_id=user_id,
                account_id=account.id,
                name=account.name,
                opening_balance=str(account.initial_balance),
                correlation_id=correlation_id,
            )
        return account

    async def update_account(
        self,
        user_id: str,
        account_id: str,
        name: str,
        account_type: AccountType,
    ) -> Account:
        """Rename or retype an account. The balance is not touched."""
        existing = await self._repo.get_account(user_id, account_id)
        if existing is None:
            raise NotFoundError(f"Account {account_id} not found")
        updated = Account(**{**existing.model_dump(), "name": name, "type": account_type})
        batch = self._repo.batch()
        self._repo.stage_account(batch, user_id, updated)
        await batch.commit()
        return updated

    async def delete_account(
        self,
        user_id: str,
        account_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """
        Delete an account together with all of its transactions.

        Returns:
            Number of transactions deleted
        """
        correlation_id = correlation_id or create_correlation_id()
        transactions = await self._repo.list_transactions(user_id, account_id)

        batch = self._repo.batch()
        for t in transactions:
            self._repo.stage_transaction_delete(batch, user_id, account_id, t.id)
        self._repo.stage_account_delete(batch, user_id, account_id)
        await batch.commit()

        if self._audit_logger:
            await self._audit_logger.log_account_deleted(
                user_id=user_id,
                account_id=account_id,
                transaction_count=len(transactions),
                correlation_id=correlation_id,
            )
        return len(transactions)

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def list_transactions(
        self,
        user_id: str,
        date_range: Optional[DateRange] = None,
        account_id: Optional[str] = None,
    ) -> list[Transaction]:
        """All transactions in range, newest first, optionally for one account."""
        if account_id is not None:
            account = await self._repo.get_account(user_id, account_id)
            if account is None:
                raise NotFoundError(f"Account {account_id} not found")
            accounts = [account]
        else:
            accounts = None
        return await self._repo.list_all_transactions(user_id, accounts, date_range)

    async def save_transaction(
        self,
        user_id: str,
        transaction: Transaction,
        previous_account_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Create or replace a transaction.

        When an edit moves the transaction to another account, the old
        document is removed in the same batch.
        """
        correlation_id = correlation_id or create_correlation_id()
        if await self._repo.get_account(user_id, transaction.account_id) is None:
            raise NotFoundError(f"Account {transaction.account_id} not found")

        batch = self._repo.batch()
        if previous_account_id and previous_account_id != transaction.account_id:
            self._repo.stage_transaction_delete(batch, user_id, previous_account_id, transaction.id)
        self._repo.stage_transaction(batch, user_id, transaction)
        await batch.commit()

        if self._audit_logger:
            await self._audit_logger.log_transaction_saved(
                user_id=user_id,
                transaction_id=transaction.id,
                transaction_type=transaction.type.value,
                amount=str(transaction.amount),
                correlation_id=correlation_id,
            )
        return transaction

    async def delete_transaction(self, user_id: str, account_id: str, transaction_id: str) -> None:
        await self._repo.delete_transaction(user_id, account_id, transaction_id)

    async def record_transfer(
        self,
        user_id: str,
        source_account_id: str,
        destination_account_id: str,
        amount: Any,
        day: dt.date,
        description: str = "",
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Transaction, Transaction]:
        """
        Move money between two accounts.

        One batch writes a transfer outflow on the source and an income
        entry in the system Transfer category on the destination. The
        destination leg is not counted as income in reports.

        Raises:
            ValueError: If both accounts are the same
            NotFoundError: If either account is missing
        """
        if source_account_id == destination_account_id:
            raise ValueError("Source and destination accounts must be different")
        correlation_id = correlation_id or create_correlation_id()

        source = await self._repo.get_account(user_id, source_account_id)
        destination = await self._repo.get_account(user_id, destination_account_id)
        if source is None or destination is None:
            raise NotFoundError("Transfer account not found")

        outgoing = Transaction(
            id=self._repo.new_transaction_id(user_id, source.id),
            account_id=source.id,
            date=day,
            description=description or f"Transfer to {destination.name}",
            amount=amount,
            category_id=TRANSFER_CATEGORY_ID,
            type=TransactionType.TRANSFER,
        )
        incoming = Transaction(
            id=self._repo.new_transaction_id(user_id, destination.id),
            account_id=destination.id,
            date=day,
            description=description or f"Transfer from {source.name}",
            amount=amount,
            category_id=TRANSFER_CATEGORY_ID,
            type=TransactionType.INCOME,
        )

        batch = self._repo.batch()
        self._repo.stage_transaction(batch, user_id, outgoing)
        self._repo.stage_transaction(batch, user_id, incoming)
        await batch.commit()

        if self._audit_logger:
            await self._audit_logger.log_transfer_recorded(
                user_id=user_id,
                source_id=source.id,
                destination_id=destination.id,
                amount=str(outgoing.amount),
                correlation_id=correlation_id,
            )
        return outgoing, incoming

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self, user_id: str) -> list[Category]:
        return await self._repo.list_categories(user_id)

    async def category_index(self, user_id: str) -> CategoryIndex:
        return CategoryIndex(await self._repo.list_categories(user_id))

    async def ensure_default_categories(self, user_id: str) -> list[Category]:
        """Seed the starter categories for a user who has none."""
        existing = await self._repo.list_categories(user_id)
        if existing:
            return existing

        categories = [
            Category(id=self._repo.new_category_id(user_id), name=name, type=category_type)
            for name, category_type in DEFAULT_CATEGORIES
        ]
        batch = self._repo.batch()
        for category in categories:
            self._repo.stage_category(batch, user_id, category)
        await batch.commit()
        logger.info("categories_seeded", user_id=user_id, count=len(categories))
        return categories

    async def _check_unique_name(
        self,
        user_id: str,
        name: str,
        exclude_id: Optional[str] = None,
    ) -> None:
        index = await self.category_index(user_id)
        clash = index.find_by_name(name)
        if clash is not None and clash.id != exclude_id:
            raise DuplicateError(f'A category named "{clash.name}" already exists')

    async def create_category(
        self,
        user_id: str,
        name: str,
        category_type: CategoryType,
    ) -> Category:
        """
        Raises:
            DuplicateError: If the name is taken (case-insensitive)
        """
        category = Category(id=self._repo.new_category_id(user_id), name=name, type=category_type)
        await self._check_unique_name(user_id, category.name)
        batch = self._repo.batch()
        self._repo.stage_category(batch, user_id, category)
        await batch.commit()
        return category

    async def rename_category(
        self,
        user_id: str,
        category_id: str,
        new_name: str,
        correlation_id: Optional[UUID] = None,
    ) -> Category:
        """
        Rename a category with a single-document update.

        Transactions and budgets hold the id, so they pick up the new
        name on the next read.
        """
        correlation_id = correlation_id or create_correlation_id()
        existing = await self._repo.get_category(user_id, category_id)
        if existing is None:
            raise NotFoundError(f"Category {category_id} not found")
        renamed = Category(id=existing.id, name=new_name, type=existing.type)
        await self._check_unique_name(user_id, renamed.name, exclude_id=category_id)

        batch = self._repo.batch()
        self._repo.stage_category_rename(batch, user_id, category_id, renamed.name)
        await batch.commit()

        if self._audit_logger:
            await self._audit_logger.log_category_renamed(
                user_id=user_id,
                category_id=category_id,
                old_name=existing.name,
                new_name=renamed.name,
                correlation_id=correlation_id,
            )
        return renamed

    async def delete_category(
        self,
        user_id: str,
        category_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """
        Delete a category and its budgets in one batch.

        Its transactions are kept and report under "Other".

        Returns:
            Number of budgets deleted
        """
        correlation_id = correlation_id or create_correlation_id()
        if await self._repo.get_category(user_id, category_id) is None:
            raise NotFoundError(f"Category {category_id} not found")
        budgets = [b for b in await self._repo.list_budgets(user_id) if b.category_id == category_id]

        batch = self._repo.batch()
        for budget in budgets:
            self._repo.stage_budget_delete(batch, user_id, budget.id)
        self._repo.stage_category_delete(batch, user_id, category_id)
        await batch.commit()

        if self._audit_logger:
            await self._audit_logger.log_category_deleted(
                user_id=user_id,
                category_id=category_id,
                budget_count=len(budgets),
                correlation_id=correlation_id,
            )
        return len(budgets)


class PlanningFlow:
    """
    Budgets and goals.

    Budgets are keyed by (category, month); saving the planner is an
    upsert over that key, optionally repeated for the following month.
    """

    def __init__(
        self,
        repository: FinanceRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._repo = repository
        self._audit_logger = audit_logger

    async def list_budgets(self, user_id: str, month: Optional[dt.date] = None) -> list[Budget]:
        return await self._repo.list_budgets(user_id, month)

    async def _stage_month(
        self,
        batch,
        user_id: str,
        month: dt.date,
        amounts: Mapping[str, Decimal],
    ) -> list[Budget]:
        existing = {b.category_id: b for b in await self._repo.list_budgets(user_id, month)}
        saved = []
        for category_id, amount in amounts.items():
            current = existing.get(category_id)
            budget = Budget(
                id=current.id if current else self._repo.new_budget_id(user_id),
                category_id=category_id,
                amount=amount,
                month=month,
            )
            self._repo.stage_budget(batch, user_id, budget)
            saved.append(budget)
        return saved

    async def save_budgets(
        self,
        user_id: str,
        month: dt.date,
        amounts: Mapping[str, Any],
        carry_forward: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> list[Budget]:
        """
        Upsert per-category limits for a month.

        Args:
            month: Any day of the budget month
            amounts: Category id to limit; None entries are skipped
            carry_forward: Also write the same limits into the next month

        Returns:
            Budgets written for the requested month
        """
        correlation_id = correlation_id or create_correlation_id()
        month = parse_month(month)
        cleaned = {cid: to_money(v) for cid, v in amounts.items() if v is not None and v != ""}

        batch = self._repo.batch()
        saved = await self._stage_month(batch, user_id, month, cleaned)
        if carry_forward:
            await self._stage_month(batch, user_id, next_month(month), cleaned)
        await batch.commit()

        if self._audit_logger:
            await self._audit_logger.log_budgets_saved(
                user_id=user_id,
                month=month_start_iso(month),
                count=len(saved),
                carried_forward=carry_forward,
                correlation_id=correlation_id,
            )
        return saved

    async def delete_budget(self, user_id: str, budget_id: str) -> None:
        await self._repo.delete_budget(user_id, budget_id)

    async def list_goals(self, user_id: str) -> list[Goal]:
        return await self._repo.list_goals(user_id)

    async def create_goal(self, user_id: str, goal: Goal) -> Goal:
        """Store a new goal; the returned copy carries the stored id."""
        return await self._repo.add_goal(user_id, goal)

    async def update_goal_progress(self, user_id: str, goal_id: str, current_amount: Any) -> Goal:
        """Set the stored amount of a long-term goal."""
        goal = await self._repo.get_goal(user_id, goal_id)
        if goal is None:
            raise NotFoundError(f"Goal {goal_id} not found")
        if goal.is_recurring:
            raise ValueError("Recurring goals track progress from transactions")
        updated = Goal(**{**goal.model_dump(), "current_amount": current_amount})
        await self._repo.save_goal(user_id, updated)
        return updated

    async def delete_goal(self, user_id: str, goal_id: str) -> None:
        await self._repo.delete_goal(user_id, goal_id)

    async def goal_progress(self, user_id: str, reference_date: dt.date) -> list[GoalProgress]:
        goals = await self._repo.list_goals(user_id)
        if not goals:
            return []
        categories = await self._repo.list_categories(user_id)
        transactions = await self._repo.list_all_transactions(
            user_id, date_range=DateRange.for_year(reference_date.year)
        )
        return evaluate_goals(goals, transactions, categories, reference_date)


class ReportFlow:
    """
    Read-side flow for the dashboard and reports pages.

    Fetches everything once, then hands it to the pure report
    functions. AI requests are separate calls so a page can render
    before they resolve.
    """

    def __init__(
        self,
        repository: FinanceRepository,
        agent: Optional[InsightAgent] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._repo = repository
        self._agent = agent
        self._audit_logger = audit_logger

    @property
    def ai_available(self) -> bool:
        return self._agent is not None

    async def load_report(
        self,
        user_id: str,
        period: ReportPeriod,
        reference_date: dt.date,
    ) -> DashboardReport:
        """
        Compute every figure for one period.

        Balances and net worth are all-time. Budgets use the period's
        month (the reference month for year and overall views).
        """
        date_range = period.date_range(reference_date)
        accounts = await self._repo.list_accounts(user_id)
        categories = await self._repo.list_categories(user_id)
        index = CategoryIndex(categories)
        all_transactions = await self._repo.list_all_transactions(user_id, accounts)
        in_window = filter_by_range(all_transactions, date_range)

        if period.kind == PeriodKind.CUSTOM:
            budget_month = dt.date(period.year, period.month, 1)
        else:
            budget_month = reference_date.replace(day=1)
        month_range = DateRange.for_month(budget_month.year, budget_month.month)
        budgets = await self._repo.list_budgets(user_id, budget_month)
        progress = match_budgets(budgets, category_totals(all_transactions, month_range), index)

        goals = await self._repo.list_goals(user_id)
        balances = account_balances(accounts, all_transactions)

        return DashboardReport(
            title=period.title(reference_date),
            date_range=date_range,
            summary=aggregate(in_window, index),
            transactions=in_window,
            categories=categories,
            balances=balances,
            net_worth=net_worth(balances),
            daily=daily_totals(in_window),
            budgets=progress,
            budget_summary=summarize_budgets(progress),
            goals=evaluate_goals(goals, all_transactions, index, reference_date),
        )

    async def get_insights(self, report: DashboardReport) -> PersonalizedInsightsOutput:
        data = PersonalizedInsightsInput.from_summary(
            report.summary, [g.goal for g in report.goals]
        )
        if self._agent is None:
            message = INSIGHTS_UNAVAILABLE_MESSAGE if data.has_enough_data else NOT_ENOUGH_DATA_MESSAGE
            return PersonalizedInsightsOutput(insights=message, is_fallback=True)
        return await self._agent.get_personalized_insights(data)

    async def suggest_budget_goals(
        self,
        report: DashboardReport,
        risk_tolerance: str = "medium",
    ) -> BudgetGoalSuggestionsOutput:
        if self._agent is None:
            return BudgetGoalSuggestionsOutput(note=SUGGESTIONS_UNAVAILABLE_MESSAGE)
        data = BudgetGoalSuggestionsInput(
            income=float(report.summary.total_income),
            spending_by_category={k: float(v) for k, v in report.summary.spending_by_category.items()},
            financial_goals=[g.goal.name for g in report.goals],
            risk_tolerance=risk_tolerance,
        )
        return await self._agent.suggest_budget_goals(data)

    async def summarize_transactions(self, report: DashboardReport) -> TransactionSummaryOutput:
        if self._agent is None:
            return TransactionSummaryOutput(summary=SUMMARY_UNAVAILABLE_MESSAGE, is_fallback=True)
        index = CategoryIndex(report.categories)
        data = TransactionSummaryInput(
            transactions=[TransactionLine.from_transaction(t, index) for t in report.transactions],
            budget_goals={b.category: float(b.limit) for b in report.budgets},
        )
        return await self._agent.summarize_transactions(data)

    def export_csv(self, report: DashboardReport) -> tuple[str, str]:
        """Returns (file name, CSV text) for the report's transactions."""
        return (
            csv_filename(report.title),
            transactions_to_csv(report.transactions, report.categories),
        )

    async def clear_records(
        self,
        user_id: str,
        date_range: Optional[DateRange] = None,
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """
        Delete a user's data.

        With a date range, only transactions inside it are deleted.
        Without one, everything goes: one commit per account (the
        account and its transactions), then one commit for budgets,
        categories and goals.

        Returns:
            Number of documents deleted

        Raises:
            PartialClearError: A commit failed after earlier ones
                succeeded; cleared_account_ids lists what is gone
        """
        correlation_id = correlation_id or create_correlation_id()
        scope = "all" if date_range is None else "period"
        accounts = await self._repo.list_accounts(user_id)
        cleared: list[str] = []
        deleted = 0

        for account in accounts:
            transactions = await self._repo.list_transactions(user_id, account.id, date_range)
            batch = self._repo.batch()
            for t in transactions:
                self._repo.stage_transaction_delete(batch, user_id, account.id, t.id)
            if date_range is None:
                self._repo.stage_account_delete(batch, user_id, account.id)
            if not len(batch):
                continue
            try:
                await batch.commit()
            except StorageError as e:
                await self._fail_clear(user_id, cleared, e, correlation_id)
            cleared.append(account.id)
            deleted += len(transactions) + (1 if date_range is None else 0)

        if date_range is None:
            batch = self._repo.batch()
            for budget in await self._repo.list_budgets(user_id):
                self._repo.stage_budget_delete(batch, user_id, budget.id)
            for category in await self._repo.list_categories(user_id):
                self._repo.stage_category_delete(batch, user_id, category.id)
            for goal in await self._repo.list_goals(user_id):
                self._repo.stage_goal_delete(batch, user_id, goal.id)
            if len(batch):
                count = len(batch)
                try:
                    await batch.commit()
                except StorageError as e:
                    await self._fail_clear(user_id, cleared, e, correlation_id)
                deleted += count

        if self._audit_logger:
            await self._audit_logger.log_records_cleared(
                user_id=user_id,
                scope=scope,
                deleted_count=deleted,
                correlation_id=correlation_id,
            )
        return deleted

    async def _fail_clear(
        self,
        user_id: str,
        cleared: list[str],
        error: StorageError,
        correlation_id: UUID,
    ) -> None:
        if self._audit_logger:
            await self._audit_logger.log_clear_incomplete(
                user_id=user_id,
                cleared_account_ids=list(cleared),
                error_message=str(error),
                correlation_id=correlation_id,
            )
        raise PartialClearError(
            f"Clearing stopped after {len(cleared)} account(s): {error}",
            cleared_account_ids=list(cleared),
        ) from error


class AppComponents(NamedTuple):
    ledger: LedgerFlow
    planning: PlanningFlow
    reports: ReportFlow
    auth: Optional[FirebaseAuthService]
    audit_logger: AuditLogger
    storage_mode: str


def create_app_components(
    use_storage: bool = True,
    store: Optional[DocumentStore] = None,
    agent: Optional[InsightAgent] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to connect to Firestore. When False, or
                    when Firestore is not configured, an in-memory
                    store is used and nothing survives a restart.
        store: Explicit store, mainly for tests
        agent: Explicit AI agent, mainly for tests

    Returns:
        AppComponents with flows, auth service and audit logger
    """
    configure_logging(get_settings().app.log_level_number)
    audit_logger = AuditLogger()
    storage_mode = "custom" if store is not None else "memory"

    if store is None and use_storage:
        try:
            from finsight.services.storage.firestore import FirestoreClient, FirestoreDocumentStore

            store = FirestoreDocumentStore(FirestoreClient())
            storage_mode = "firestore"
        except Exception as e:
            # Firestore not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e))
            store = None
    if store is None:
        store = InMemoryDocumentStore()

    auth = None
    if storage_mode == "firestore":
        try:
            auth = FirebaseAuthService()
        except Exception as e:
            logger.warning("auth_not_configured", error=str(e))

    if agent is None:
        try:
            agent = InsightAgent(audit_logger=audit_logger)
        except Exception as e:
            logger.warning("ai_not_configured", error=str(e))

    repository = FinanceRepository(store)
    return AppComponents(
        ledger=LedgerFlow(repository, audit_logger=audit_logger),
        planning=PlanningFlow(repository, audit_logger=audit_logger),
        reports=ReportFlow(repository, agent=agent, audit_logger=audit_logger),
        auth=auth,
        audit_logger=audit_logger,
        storage_mode=storage_mode,
    )
