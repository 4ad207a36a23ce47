"""
Abstract Storage Interface

DESIGN DECISION: The registry persists its whole collection as one blob.
This allows us to:
1. Swap the local JSON file for Google Sheets without touching the registry
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally tiny - get the collection, replace the
collection. Every mutation is a full read-modify-write.
"""

import copy
from abc import ABC, abstractmethod
from typing import Any, Optional


StoredCollection = list[dict[str, Any]]


class ResidentStoreInterface(ABC):
    """
    Abstract interface for the resident blob store.

    Records cross this boundary as plain JSON-compatible dicts
    (camelCase keys, enum display strings).
    """

    @abstractmethod
    def get(self) -> Optional[StoredCollection]:
        """
        Read the stored collection.

        Returns:
            The stored list of records, or None if nothing was ever stored

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set(self, collection: StoredCollection) -> None:
        """
        Replace the stored collection.

        Args:
            collection: The complete list of records to store

        Raises:
            StorageError: If the write fails
        """
        pass


class InMemoryResidentStore(ResidentStoreInterface):
    """
    Process-local store.

    Copies on the way in and out so callers can never mutate
    the stored collection by accident.
    """

    def __init__(self, initial: Optional[StoredCollection] = None):
        self._data = copy.deepcopy(initial) if initial is not None else None
        self.write_count = 0

    def get(self) -> Optional[StoredCollection]:
        if self._data is None:
            return None
        return copy.deepcopy(self._data)

    def set(self, collection: StoredCollection) -> None:
        self._data = copy.deepcopy(collection)
        self.write_count += 1


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateKeyError(StorageError):
    """Attempted to store a resident whose NIK is already registered."""

    def __init__(self, nik: str, message: Optional[str] = None):
        self.nik = nik
        super().__init__(
            message or "NIK ini sudah terdaftar dalam sistem. Gunakan NIK yang berbeda."
        )
