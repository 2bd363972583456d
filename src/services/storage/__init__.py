"""
Storage Services Package

Provides the key-value store interface, its file-backed and in-memory
implementations, and the budget repository built on top of them.
"""

from src.services.storage.interface import (
    CorruptDataError,
    KeyValueStoreInterface,
    StorageError,
)
from src.services.storage.local_store import InMemoryStore, JsonFileStore
from src.services.storage.repository import BudgetRepository

__all__ = [
    # Interfaces
    "KeyValueStoreInterface",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    # Implementations
    "BudgetRepository",
    "InMemoryStore",
    "JsonFileStore",
]
