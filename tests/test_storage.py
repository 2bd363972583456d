"""Tests for the key-value stores and the budget repository."""

import pytest

from src.services.storage import (
    BudgetRepository,
    CorruptDataError,
    InMemoryStore,
    JsonFileStore,
    StorageError,
)


class TestJsonFileStore:
    """Tests for the file-backed store."""

    def test_missing_key(self, tmp_path):
        assert JsonFileStore(tmp_path).get("nothing") is None

    def test_set_get_delete(self, tmp_path):
        store = JsonFileStore(tmp_path / "data")
        store.set("budget_data_v1", '{"a": 1}')

        assert (tmp_path / "data" / "budget_data_v1.json").exists()
        assert store.get("budget_data_v1") == '{"a": 1}'
        assert store.delete("budget_data_v1") is True
        assert store.delete("budget_data_v1") is False
        assert store.get("budget_data_v1") is None

    def test_overwrite_leaves_no_temp_files(self, tmp_path):
        store = JsonFileStore(tmp_path)
        store.set("k", "one")
        store.set("k", "two")
        assert store.get("k") == "two"
        assert [p.name for p in tmp_path.iterdir()] == ["k.json"]

    def test_non_ascii_text(self, tmp_path):
        store = JsonFileStore(tmp_path)
        store.set("k", "Alimentação")
        assert store.get("k") == "Alimentação"

    def test_write_failure_is_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file where a directory should be")
        with pytest.raises(StorageError):
            JsonFileStore(blocker / "data").set("k", "v")


class TestInMemoryStore:
    """Tests for the dictionary-backed store."""

    def test_initial_values_are_copied(self):
        initial = {"k": "v"}
        store = InMemoryStore(initial)
        store.set("k", "changed")
        assert initial == {"k": "v"}
        assert store.get("k") == "changed"

    def test_delete(self):
        store = InMemoryStore({"k": "v"})
        assert store.delete("k") is True
        assert store.delete("k") is False


class TestBudgetRepository:
    """Tests for BudgetRepository."""

    def test_load_nothing(self, store):
        assert BudgetRepository(store).load() is None

    def test_round_trip(self, store, sample_budget):
        repository = BudgetRepository(store)
        repository.save(sample_budget)
        assert repository.load() == sample_budget

    def test_uses_fixed_key(self, store, empty_budget):
        BudgetRepository(store).save(empty_budget)
        assert store.get("budget_data_v1") is not None

    def test_custom_key(self, store, empty_budget):
        repository = BudgetRepository(store, key="other")
        repository.save(empty_budget)
        assert repository.key == "other"
        assert store.get("budget_data_v1") is None

    @pytest.mark.parametrize("blob", ["not json", "[]", '{"2026": []}'])
    def test_corrupt_blob(self, blob):
        repository = BudgetRepository(InMemoryStore({"budget_data_v1": blob}))
        with pytest.raises(CorruptDataError):
            repository.load()

    def test_file_backed_round_trip(self, tmp_path, sample_budget):
        BudgetRepository(JsonFileStore(tmp_path)).save(sample_budget)
        assert BudgetRepository(JsonFileStore(tmp_path)).load() == sample_budget

    def test_clear(self, store, empty_budget):
        repository = BudgetRepository(store)
        repository.save(empty_budget)
        assert repository.clear() is True
        assert repository.load() is None
