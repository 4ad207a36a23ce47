"""
Main Orchestrator for SIPM

This module ties together all the components and defines the
flows the UI drives:
1. Registry (form → validate → create/update → re-read)
2. Reports (filter → dashboard / trend → export)

DESIGN DECISION: Flows return (result, message) tuples.
Expected failures (invalid form, duplicate NIK, export failure)
become a message for the operator; they never crash the app.
Storage failures still propagate, since there is nothing the
operator can correct in the form.
"""

from datetime import tzinfo
from typing import Optional

from sipm.auth import MockSessionProvider, SessionProvider
from sipm.config import Settings, get_settings
from sipm.exporters import ExportArtifact, ExportError, ExportFormat, get_exporter
from sipm.logger import get_logger
from sipm.models.report import DashboardStats, ReportCriteria, ReportPeriod, TrendPoint
from sipm.models.resident import Resident, ResidentInput
from sipm.models.validation import ValidationResult
from sipm.registry import ResidentRegistry
from sipm.reports import (
    ReportFilter,
    dashboard_stats,
    format_timestamp,
    search_residents,
)
from sipm.services.attachment import AttachmentError, encode_attachment
from sipm.services.storage import (
    DuplicateKeyError,
    JsonFileResidentStore,
    NotFoundError,
    ResidentStoreInterface,
)
from sipm.validation import ResidentValidator, ValidationError


logger = get_logger(__name__)

SAVED_MESSAGE = "Data penduduk berhasil disimpan."
DELETED_MESSAGE = "Data penduduk telah dihapus."

EXPORT_FAILED_MESSAGES = {
    ExportFormat.PDF: "Gagal membuat PDF. Silakan coba lagi.",
    ExportFormat.XLSX: "Gagal membuat file Excel. Silakan coba lagi.",
}


class RegistryFlow:
    """
    Orchestrates resident data entry.

    Flow:
    1. Attach → Encode an uploaded death certificate (optional)
    2. Check → Validate the form, including NIK uniqueness
    3. Save → Create or update through the registry
    4. Refresh → Re-read the full list
    """

    def __init__(
        self,
        registry: ResidentRegistry,
        validator: Optional[ResidentValidator] = None,
    ):
        self._registry = registry
        self._validator = validator or ResidentValidator(registry)

    @property
    def registry(self) -> ResidentRegistry:
        return self._registry

    def list_residents(self, search: str = "") -> list[Resident]:
        """All residents, optionally narrowed by the table search box."""
        return search_residents(self._registry.list(), search)

    def check_candidate(
        self,
        candidate: ResidentInput,
        editing_id: Optional[str] = None,
    ) -> tuple[ValidationResult, str]:
        """
        Validate form input before submission.

        Returns:
            (validation_result, user_message)
        """
        result = self._validator.validate(candidate, exclude_id=editing_id)
        return result, self._validator.get_user_friendly_summary(result)

    def attach_certificate(
        self,
        data: bytes,
        filename: str,
    ) -> tuple[Optional[str], str]:
        """
        Encode an uploaded death certificate.

        Returns:
            (data_url, message); data_url is None if the file was rejected
        """
        try:
            return encode_attachment(data, filename), "Surat kematian berhasil diunggah."
        except AttachmentError as e:
            logger.warning("attachment_rejected", filename=filename, error=str(e))
            return None, str(e)

    def save_resident(
        self,
        candidate: ResidentInput,
        editing_id: Optional[str] = None,
    ) -> tuple[Optional[Resident], str]:
        """
        Create a resident, or update `editing_id` with the form contents.

        Returns:
            (saved_resident, message); saved_resident is None on rejection
        """
        try:
            self._validator.ensure_valid(candidate, exclude_id=editing_id)
            if editing_id is None:
                resident = self._registry.create(candidate)
            else:
                resident = self._registry.update(editing_id, candidate.model_dump())
        except (ValidationError, DuplicateKeyError, NotFoundError) as e:
            return None, str(e)

        return resident, SAVED_MESSAGE

    def delete_resident(self, resident_id: str) -> str:
        """Delete a resident. Unknown ids are ignored."""
        self._registry.delete(resident_id)
        return DELETED_MESSAGE


class ReportFlow:
    """
    Orchestrates report views and exports.

    Nothing here writes to storage.
    """

    def __init__(self, tz: tzinfo, village_name: str = "PARUNGKAMAL"):
        self._tz = tz
        self._village_name = village_name
        self._filter = ReportFilter(tz)

    @property
    def tz(self) -> tzinfo:
        """Timezone every report date is shown in."""
        return self._tz

    def entry_time(self, resident: Resident) -> str:
        return format_timestamp(resident.created_at, self._tz)

    def filter(
        self,
        residents: list[Resident],
        criteria: ReportCriteria,
    ) -> list[Resident]:
        return self._filter.filter(residents, criteria)

    def dashboard(
        self,
        residents: list[Resident],
    ) -> tuple[DashboardStats, list[TrendPoint]]:
        """Headline figures and the cumulative trend."""
        return dashboard_stats(residents), self._filter.trend_series(residents)

    def export(
        self,
        residents: list[Resident],
        export_format: ExportFormat,
        period: ReportPeriod = ReportPeriod.MONTHLY,
    ) -> tuple[Optional[ExportArtifact], str]:
        """
        Export an already-filtered list.

        Returns:
            (artifact, message); artifact is None if generation failed
        """
        exporter = get_exporter(export_format, self._tz, self._village_name)
        try:
            artifact = exporter.export(residents, period)
        except ExportError as e:
            logger.error(
                "export_failed",
                export_format=export_format.value,
                rows=len(residents),
                error=str(e),
            )
            return None, EXPORT_FAILED_MESSAGES[export_format]

        logger.info(
            "export_completed",
            export_format=export_format.value,
            rows=artifact.row_count,
            filename=artifact.filename,
        )
        return artifact, f"Laporan {artifact.filename} siap diunduh."


def create_storage(settings: Settings) -> ResidentStoreInterface:
    """
    Build the configured storage backend.

    Falls back to the local JSON file if Google Sheets is selected
    but can't be configured.
    """
    storage_settings = settings.storage
    if storage_settings.backend == "google_sheets":
        try:
            from sipm.services.storage.google_sheets import (
                GoogleSheetsClient,
                GoogleSheetsResidentStore,
            )
            return GoogleSheetsResidentStore(GoogleSheetsClient())
        except Exception as e:
            # Storage not configured - continue with the local file
            logger.warning("sheets_unavailable_using_json", error=str(e))

    return JsonFileResidentStore(storage_settings.data_dir, storage_settings.storage_key)


def create_app_components(
    storage: Optional[ResidentStoreInterface] = None,
    settings: Optional[Settings] = None,
) -> tuple[RegistryFlow, ReportFlow, SessionProvider]:
    """
    Factory function to create all application components.

    Args:
        storage: Storage backend to use. Built from settings if None
                 (pass an InMemoryResidentStore in tests).
        settings: Settings to use. Defaults to get_settings().

    Returns:
        (registry_flow, report_flow, session_provider)
    """
    settings = settings or get_settings()
    if storage is None:
        storage = create_storage(settings)

    report_settings = settings.report
    registry = ResidentRegistry(storage)

    registry_flow = RegistryFlow(registry)
    report_flow = ReportFlow(
        tz=report_settings.tzinfo,
        village_name=report_settings.village_name,
    )

    return registry_flow, report_flow, MockSessionProvider()
