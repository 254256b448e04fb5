"""Tests for the in-memory document store and the finance repository."""

from datetime import date

import pytest

from finsight.models.finance import Budget, Category, CategoryType, TransactionType
from finsight.models.reports import DateRange
from finsight.services.storage import (
    Filter,
    InMemoryDocumentStore,
    NotFoundError,
    StorageError,
)
from finsight.services.storage.repository import (
    budgets_path,
    transactions_path,
)


class TestInMemoryStore:
    """Store semantics the flows rely on."""

    async def test_filters(self, store):
        await store.set_document("c", "a", {"date": "2024-07-01", "kind": "x"})
        await store.set_document("c", "b", {"date": "2024-07-15", "kind": "y"})
        await store.set_document("c", "c", {"date": "2024-08-01", "kind": "x"})
        await store.set_document("c", "d", {"kind": "x"})

        july = await store.get_documents("c", [
            Filter("date", ">=", "2024-07-01"),
            Filter("date", "<=", "2024-07-31"),
        ])
        assert sorted(d["id"] for d in july) == ["a", "b"]

        xs = await store.get_documents("c", [Filter("kind", "==", "x")])
        assert sorted(d["id"] for d in xs) == ["a", "c", "d"]

        picked = await store.get_documents("c", [Filter("kind", "in", ["y"])])
        assert [d["id"] for d in picked] == ["b"]

    async def test_unknown_operator_is_rejected(self, store):
        await store.set_document("c", "a", {"v": 1})
        with pytest.raises(ValueError):
            await store.get_documents("c", [Filter("v", "!=", 1)])

    async def test_missing_document(self, store):
        assert await store.get_document("c", "nope") is None
        await store.delete_document("c", "nope")

    async def test_returned_documents_are_copies(self, store):
        await store.set_document("c", "a", {"v": 1})
        doc = await store.get_document("c", "a")
        doc["v"] = 2
        assert (await store.get_document("c", "a"))["v"] == 1

    async def test_merge_keeps_other_fields(self, store):
        await store.set_document("c", "a", {"v": 1, "w": 2})
        await store.set_document("c", "a", {"v": 5}, merge=True)
        assert await store.get_document("c", "a") == {"v": 5, "w": 2, "id": "a"}


class TestWriteBatch:
    async def test_batch_commits_all_writes(self, store):
        batch = store.batch()
        batch.set("c", "a", {"v": 1})
        batch.set("c", "b", {"v": 2})
        assert len(batch) == 2
        await batch.commit()
        assert store.collection_size("c") == 2

    async def test_failed_batch_applies_nothing(self, store):
        await store.set_document("c", "a", {"v": 1})
        batch = store.batch()
        batch.delete("c", "a")
        batch.set("c", "b", {"v": 2})
        batch.update("c", "missing", {"v": 3})
        with pytest.raises(NotFoundError):
            await batch.commit()
        assert await store.get_document("c", "a") is not None
        assert await store.get_document("c", "b") is None

    async def test_simulated_commit_failure(self):
        store = InMemoryDocumentStore(fail_after_commits=1)
        first = store.batch()
        first.set("c", "a", {"v": 1})
        await first.commit()

        second = store.batch()
        second.set("c", "b", {"v": 2})
        with pytest.raises(StorageError):
            await second.commit()
        assert store.collection_size("c") == 1
        assert store.commit_count == 1


class TestFinanceRepository:
    async def test_transactions_filtered_by_date(self, repository, store, make_tx, user_id):
        for day in (date(2024, 6, 30), date(2024, 7, 1), date(2024, 7, 31), date(2024, 8, 1)):
            await repository.save_transaction(user_id, make_tx(TransactionType.EXPENSE, 10, day=day))

        in_july = await repository.list_transactions(user_id, "acc-1", DateRange.for_month(2024, 7))
        assert sorted(t.date for t in in_july) == [date(2024, 7, 1), date(2024, 7, 31)]
        assert store.collection_size(transactions_path(user_id, "acc-1")) == 4

    async def test_transaction_round_trip_keeps_fields(self, repository, make_tx, user_id):
        original = make_tx(TransactionType.EXPENSE, "12.30", category_id="food", description="Lunch")
        await repository.save_transaction(user_id, original)
        [loaded] = await repository.list_transactions(user_id, "acc-1")
        assert loaded.id == original.id
        assert loaded.amount == original.amount
        assert loaded.category_id == "food"
        assert loaded.description == "Lunch"

    async def test_legacy_signed_amount_is_normalized_on_read(self, repository, store, user_id):
        await store.set_document(transactions_path(user_id, "acc-1"), "old", {
            "date": "2024-07-02",
            "amount": -75.0,
            "type": "expense",
            "category_id": "food",
        })
        [loaded] = await repository.list_transactions(user_id, "acc-1")
        assert float(loaded.amount) == 75.0
        assert loaded.account_id == "acc-1"

    async def test_budgets_filtered_by_month(self, repository, user_id):
        batch = repository.batch()
        repository.stage_budget(batch, user_id, Budget(category_id="food", amount=100, month="2024-07"))
        repository.stage_budget(batch, user_id, Budget(category_id="food", amount=200, month="2024-08"))
        await batch.commit()

        july = await repository.list_budgets(user_id, date(2024, 7, 20))
        assert [float(b.amount) for b in july] == [100.0]
        assert len(await repository.list_budgets(user_id)) == 2

    async def test_category_rename_needs_existing_document(self, repository, user_id):
        batch = repository.batch()
        repository.stage_category_rename(batch, user_id, "missing", "New")
        with pytest.raises(NotFoundError):
            await batch.commit()

    async def test_users_are_isolated(self, repository, user_id):
        batch = repository.batch()
        repository.stage_category(batch, user_id, Category(name="Food", type=CategoryType.EXPENSE))
        await batch.commit()
        assert await repository.list_categories("someone-else") == []
        assert budgets_path(user_id) == f"users/{user_id}/budgets"
