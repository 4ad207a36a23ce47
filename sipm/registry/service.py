"""
Resident Registry Service

The registry is the ONLY component that writes resident data.
It enforces, on every mutation:
1. NIK uniqueness across all residents
2. A death certificate for every DECEASED resident
3. `id` and `created_at` assigned once, at creation, never changed

Every mutation is a full read-modify-write of the stored collection.
There is no concurrent-writer safety; the registry assumes one
active session at a time.
"""

from typing import Any, Optional, Union

from pydantic import ValidationError as SchemaError

from sipm.logger import get_logger
from sipm.models.resident import (
    Resident,
    ResidentInput,
    ResidentUpdate,
    new_resident_id,
    seed_resident,
)
from sipm.services.storage import (
    DuplicateKeyError,
    NotFoundError,
    ResidentStoreInterface,
    StorageError,
)
from sipm.validation import ResidentValidator


logger = get_logger(__name__)

# Fields that may be explicitly cleared by an update
_NULLABLE_FIELDS = {"death_certificate_img"}


class ResidentRegistry:
    """
    Create, read, update and delete residents against a blob store.

    Validation (NIK length, required fields, death certificate) is
    enforced here too, so the invariants hold regardless of caller
    discipline.
    """

    def __init__(
        self,
        storage: ResidentStoreInterface,
        validator: Optional[ResidentValidator] = None,
    ):
        self._storage = storage
        self._validator = validator or ResidentValidator()

    # -------------------------------------------------------------------------
    # Persistence helpers
    # -------------------------------------------------------------------------

    def _load(self) -> list[Resident]:
        """Read the collection, seeding storage on first-ever access."""
        stored = self._storage.get()
        if stored is None:
            seed = seed_resident()
            self._storage.set([seed.to_storage_dict()])
            logger.info("registry_seeded", resident_id=seed.id)
            return [seed]

        try:
            return [Resident.model_validate(record) for record in stored]
        except SchemaError as e:
            raise StorageError(f"Stored resident collection is malformed: {e}")

    def _save(self, residents: list[Resident]) -> None:
        self._storage.set([r.to_storage_dict() for r in residents])

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list(self) -> list[Resident]:
        """All residents in storage order."""
        return self._load()

    def get(self, resident_id: str) -> Optional[Resident]:
        """Find a resident by id, or None."""
        return next((r for r in self._load() if r.id == resident_id), None)

    def nik_exists(self, nik: str, exclude_id: Optional[str] = None) -> bool:
        """True if a resident other than `exclude_id` already has this NIK."""
        return any(r.nik == nik and r.id != exclude_id for r in self._load())

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create(self, fields: Union[ResidentInput, dict[str, Any]]) -> Resident:
        """
        Register a new resident.

        Raises:
            ValidationError: Candidate is incomplete or malformed
            DuplicateKeyError: NIK is already registered
        """
        candidate = (
            fields if isinstance(fields, ResidentInput)
            else ResidentInput.model_validate(fields)
        )
        self._validator.ensure_valid(candidate, check_duplicates=False)

        residents = self._load()
        if any(r.nik == candidate.nik for r in residents):
            logger.warning("resident_rejected", reason="duplicate_nik", operation="create")
            raise DuplicateKeyError(candidate.nik)

        resident = Resident.from_input(candidate)
        taken = {r.id for r in residents}
        while resident.id in taken:
            resident = resident.model_copy(update={"id": new_resident_id()})

        residents.append(resident)
        self._save(residents)

        logger.info("resident_created", resident_id=resident.id, status=resident.status.value)
        return resident

    def update(
        self,
        resident_id: str,
        fields: Union[ResidentUpdate, dict[str, Any]],
    ) -> Resident:
        """
        Apply a partial update to an existing resident.

        `id` and `created_at` are never overwritten, even if supplied.

        Raises:
            DuplicateKeyError: New NIK belongs to another resident
            NotFoundError: No resident with this id
            ValidationError: The merged record is incomplete or malformed
        """
        update = (
            fields if isinstance(fields, ResidentUpdate)
            else ResidentUpdate.model_validate(fields)
        )
        changes = {
            key: value
            for key, value in update.changes().items()
            if value is not None or key in _NULLABLE_FIELDS
        }

        residents = self._load()

        new_nik = changes.get("nik")
        if new_nik is not None and any(
            r.nik == new_nik and r.id != resident_id for r in residents
        ):
            logger.warning("resident_rejected", reason="duplicate_nik", operation="update")
            raise DuplicateKeyError(new_nik, "NIK baru sudah digunakan oleh penduduk lain.")

        index = next(
            (i for i, r in enumerate(residents) if r.id == resident_id),
            None,
        )
        if index is None:
            raise NotFoundError(f"Data tidak ditemukan: {resident_id}")

        existing = residents[index]
        merged = Resident.model_validate({
            **existing.model_dump(),
            **changes,
            "id": existing.id,
            "created_at": existing.created_at,
        })
        self._validator.ensure_valid(merged.to_input(), check_duplicates=False)

        residents[index] = merged
        self._save(residents)

        logger.info(
            "resident_updated",
            resident_id=resident_id,
            fields=sorted(changes),
        )
        return merged

    def delete(self, resident_id: str) -> None:
        """
        Remove a resident. Deleting an unknown id is a no-op.
        """
        residents = self._load()
        remaining = [r for r in residents if r.id != resident_id]
        self._save(remaining)

        if len(remaining) < len(residents):
            logger.info("resident_deleted", resident_id=resident_id)
        else:
            logger.info("resident_delete_noop", resident_id=resident_id)
