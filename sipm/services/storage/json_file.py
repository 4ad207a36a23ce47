"""
Local JSON File Storage

DESIGN DECISION: The default backend is a single JSON file on the
operator's machine, named after the storage key. This mirrors the
browser-storage blob the registry historically used, so an exported
blob can be dropped in as-is.

Writes go to a temporary file first and are then renamed over the
target, so a crash mid-write never leaves half a collection behind.
"""

import json
import os
from pathlib import Path
from typing import Optional

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from sipm.config import get_settings
from sipm.logger import get_logger
from sipm.services.storage.interface import (
    ResidentStoreInterface,
    StorageError,
    StoredCollection,
)


logger = get_logger(__name__)


class JsonFileResidentStore(ResidentStoreInterface):
    """Stores the resident collection at `<data_dir>/<storage_key>.json`."""

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        storage_key: Optional[str] = None,
    ):
        if data_dir is None or storage_key is None:
            settings = get_settings().storage
            data_dir = data_dir if data_dir is not None else settings.data_dir
            storage_key = storage_key or settings.storage_key
        self._path = Path(data_dir) / f"{storage_key}.json"

    @property
    def path(self) -> Path:
        return self._path

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _read_text(self) -> str:
        return self._path.read_text(encoding="utf-8")

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write_text(self, text: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".json.tmp")
        tmp_path.write_text(text, encoding="utf-8")
        os.replace(tmp_path, self._path)

    def get(self) -> Optional[StoredCollection]:
        """Read the collection, or None when the file doesn't exist yet."""
        if not self._path.exists():
            return None

        try:
            raw = self._read_text()
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}")

        if not raw.strip():
            return None

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Stored collection at {self._path} is not valid JSON: {e}")

        if not isinstance(data, list):
            raise StorageError(
                f"Stored collection at {self._path} must be a list, got {type(data).__name__}"
            )
        return data

    def set(self, collection: StoredCollection) -> None:
        """Replace the collection on disk."""
        try:
            text = json.dumps(collection, ensure_ascii=False, indent=2)
            self._write_text(text)
        except (OSError, TypeError, ValueError) as e:
            logger.error("storage_write_failed", path=str(self._path), error=str(e))
            raise StorageError(f"Failed to write {self._path}: {e}")
