"""
Abstract Storage Interface

DESIGN DECISION: The tracker persists one serialized blob under a fixed
key, like a browser's local storage. We define that key-value contract
as an abstract interface so that:
1. The file-backed store can be swapped for something else later
2. Tests use an in-memory store
3. The repository stays unaware of where bytes end up

The interface is intentionally tiny. This is not a database.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStoreInterface(ABC):
    """
    Abstract interface for a string key -> string value store.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored text, or None if the key is absent

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store a value, replacing any previous one.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the key existed
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDataError(StorageError):
    """Stored data exists but cannot be deserialized."""
    pass
