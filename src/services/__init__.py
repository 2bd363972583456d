"""Services package."""

from src.services.storage import (
    BudgetRepository,
    CorruptDataError,
    InMemoryStore,
    JsonFileStore,
    KeyValueStoreInterface,
    StorageError,
)

__all__ = [
    # Storage services
    "BudgetRepository",
    "CorruptDataError",
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStoreInterface",
    "StorageError",
]
