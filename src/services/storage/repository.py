"""
Budget Repository

Serializes the AnnualBudget to a single JSON blob under a fixed key.
Read once at startup, written after every change.
"""

from typing import Optional

from pydantic import ValidationError

from src.models.budget import AnnualBudget
from src.services.storage.interface import (
    CorruptDataError,
    KeyValueStoreInterface,
)


class BudgetRepository:
    """Loads and saves the annual budget through a key-value store."""

    def __init__(self, store: KeyValueStoreInterface, key: str = "budget_data_v1"):
        self._store = store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> Optional[AnnualBudget]:
        """
        Read the stored budget.

        Returns:
            The budget, or None if nothing is stored

        Raises:
            CorruptDataError: If the stored blob is not a valid budget
            StorageError: If the store cannot be read
        """
        raw = self._store.get(self._key)
        if raw is None:
            return None
        try:
            return AnnualBudget.model_validate_json(raw)
        except ValidationError as e:
            raise CorruptDataError(f"Stored budget under '{self._key}' is invalid: {e}") from e

    def save(self, budget: AnnualBudget) -> None:
        """
        Raises:
            StorageError: If the write fails
        """
        self._store.set(self._key, budget.to_json())

    def clear(self) -> bool:
        return self._store.delete(self._key)
