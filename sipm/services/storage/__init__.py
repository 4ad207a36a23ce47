"""
Storage Services Package

Provides the abstract blob-store interface and its implementations.
The local JSON file is the default backend; Google Sheets is optional.
"""

from sipm.services.storage.interface import (
    DuplicateKeyError,
    InMemoryResidentStore,
    NotFoundError,
    ResidentStoreInterface,
    StorageError,
    StoredCollection,
)
from sipm.services.storage.json_file import JsonFileResidentStore

__all__ = [
    # Interface
    "ResidentStoreInterface",
    "StoredCollection",
    # Exceptions
    "DuplicateKeyError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryResidentStore",
    "JsonFileResidentStore",
]
