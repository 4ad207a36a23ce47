"""Services package."""

from sipm.services.attachment import AttachmentError, encode_attachment
from sipm.services.storage import (
    DuplicateKeyError,
    InMemoryResidentStore,
    JsonFileResidentStore,
    NotFoundError,
    ResidentStoreInterface,
    StorageError,
)

__all__ = [
    # Attachments
    "AttachmentError",
    "encode_attachment",
    # Storage services
    "DuplicateKeyError",
    "InMemoryResidentStore",
    "JsonFileResidentStore",
    "NotFoundError",
    "ResidentStoreInterface",
    "StorageError",
]
