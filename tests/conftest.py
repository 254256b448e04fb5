"""Shared fixtures: an in-memory store wired into the real flows."""

import datetime as dt

import pytest

from finsight.audit import AuditLogger
from finsight.config import AppSettings
from finsight.models.finance import Transaction, TransactionType
from finsight.orchestrator import LedgerFlow, PlanningFlow, ReportFlow
from finsight.services.storage import FinanceRepository, InMemoryDocumentStore

TODAY = dt.date(2024, 7, 15)
USER = "user-1"


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def user_id():
    return USER


@pytest.fixture
def app_settings():
    return AppSettings(_env_file=None)


@pytest.fixture
def make_tx():
    """Factory for transactions with sensible defaults."""

    def _make(
        type: TransactionType,
        amount,
        day: dt.date = TODAY,
        account_id: str = "acc-1",
        category_id=None,
        expense_type=None,
        description: str = "",
    ) -> Transaction:
        return Transaction(
            account_id=account_id,
            date=day,
            description=description,
            amount=amount,
            category_id=category_id,
            type=type,
            expense_type=expense_type,
        )

    return _make


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def repository(store):
    return FinanceRepository(store)


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def ledger(repository, audit_logger):
    return LedgerFlow(repository, audit_logger=audit_logger)


@pytest.fixture
def planning(repository, audit_logger):
    return PlanningFlow(repository, audit_logger=audit_logger)


@pytest.fixture
def reports(repository, audit_logger):
    return ReportFlow(repository, agent=None, audit_logger=audit_logger)
