"""Integration tests for the registry and report flows (in-memory storage)."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

import sipm.orchestrator as orchestrator
from sipm.config import Settings
from sipm.exporters import ExportFormat
from sipm.models.report import ReportCriteria, ReportPeriod, StatusFilter
from sipm.models.resident import ResidentStatus
from sipm.orchestrator import (
    DELETED_MESSAGE,
    SAVED_MESSAGE,
    RegistryFlow,
    ReportFlow,
    create_app_components,
)
from sipm.services.storage import InMemoryResidentStore, JsonFileResidentStore

from tests.conftest import make_input, make_resident, png_bytes
from tests.test_exporters import FailingExporter


@pytest.fixture
def components():
    return create_app_components(storage=InMemoryResidentStore(), settings=Settings())


@pytest.fixture
def registry_flow(components) -> RegistryFlow:
    return components[0]


@pytest.fixture
def report_flow(components) -> ReportFlow:
    return components[1]


class TestRegistryFlow:
    """Form → validate → save → re-read."""

    def test_save_new_resident(self, registry_flow):
        resident, message = registry_flow.save_resident(make_input())
        assert message == SAVED_MESSAGE
        assert resident in registry_flow.list_residents()

    def test_save_duplicate_reports_message(self, registry_flow):
        registry_flow.save_resident(make_input())
        resident, message = registry_flow.save_resident(make_input(name="Orang Lain"))
        assert resident is None
        assert "NIK" in message
        assert len(registry_flow.list_residents()) == 2

    def test_save_deceased_without_certificate(self, registry_flow):
        resident, message = registry_flow.save_resident(
            make_input(status=ResidentStatus.DECEASED)
        )
        assert resident is None
        assert "surat kematian" in message

    def test_edit_resident(self, registry_flow):
        created, _ = registry_flow.save_resident(make_input())
        updated, message = registry_flow.save_resident(
            make_input(occupation="Guru"), editing_id=created.id
        )
        assert message == SAVED_MESSAGE
        assert updated.id == created.id
        assert updated.created_at == created.created_at
        assert updated.occupation == "Guru"

    def test_edit_missing_resident(self, registry_flow):
        resident, message = registry_flow.save_resident(
            make_input(nik="3201999999999999"), editing_id="missing"
        )
        assert resident is None
        assert "tidak ditemukan" in message

    def test_attach_certificate_then_save_deceased(self, registry_flow):
        url, _ = registry_flow.attach_certificate(png_bytes(), "surat.png")
        resident, message = registry_flow.save_resident(make_input(
            status=ResidentStatus.DECEASED,
            death_certificate_img=url,
        ))
        assert message == SAVED_MESSAGE
        assert resident.death_certificate_img == url

    def test_attach_rejected_file(self, registry_flow):
        url, message = registry_flow.attach_certificate(b"not an image", "surat.png")
        assert url is None
        assert "not a readable image" in message

    def test_check_candidate_flags_duplicate(self, registry_flow):
        created, _ = registry_flow.save_resident(make_input())
        result, summary = registry_flow.check_candidate(make_input())
        assert not result.is_valid
        assert "sudah digunakan" in summary

        result, _ = registry_flow.check_candidate(make_input(), editing_id=created.id)
        assert result.is_valid

    def test_search_and_delete(self, registry_flow):
        created, _ = registry_flow.save_resident(make_input())
        assert registry_flow.list_residents("siti") == [created]

        assert registry_flow.delete_resident(created.id) == DELETED_MESSAGE
        assert registry_flow.list_residents("siti") == []
        assert registry_flow.delete_resident(created.id) == DELETED_MESSAGE


class TestReportFlow:
    """Filter → dashboard → export."""

    def test_dashboard(self, registry_flow, report_flow):
        registry_flow.save_resident(make_input())
        stats, trend = report_flow.dashboard(registry_flow.list_residents())
        assert stats.total == 2
        assert [p.population for p in trend] == [1, 2]

    def test_filter_then_export(self, registry_flow, report_flow):
        registry_flow.save_resident(make_input())
        residents = registry_flow.list_residents()
        filtered = report_flow.filter(residents, ReportCriteria(dusun_contains="sawah"))
        assert len(filtered) == 1

        artifact, message = report_flow.export(filtered, ExportFormat.XLSX)
        assert artifact.row_count == 1
        assert artifact.filename in message

    def test_export_pdf(self, report_flow):
        artifact, _ = report_flow.export([], ExportFormat.PDF, ReportPeriod.YEARLY)
        assert artifact.content.startswith(b"%PDF")

    def test_export_failure_returns_message(self, report_flow, monkeypatch):
        monkeypatch.setattr(
            orchestrator,
            "get_exporter",
            lambda export_format, tz, village_name: FailingExporter(tz),
        )
        artifact, message = report_flow.export([], ExportFormat.XLSX)
        assert artifact is None
        assert message == "Gagal membuat file Excel. Silakan coba lagi."

    def test_entry_time_uses_village_timezone(self, report_flow):
        resident = make_resident(datetime(2024, 3, 9, 20, 0, tzinfo=timezone.utc))
        assert report_flow.tz == ZoneInfo("Asia/Jakarta")
        assert report_flow.entry_time(resident) == "10/3/2024, 03.00.00"

    def test_filter_far_future_is_empty(self, registry_flow):
        flow = ReportFlow(timezone.utc)
        criteria = ReportCriteria(
            status=StatusFilter.ALIVE,
            period=ReportPeriod.DAILY,
            reference_date=date(2099, 1, 1),
        )
        assert flow.filter(registry_flow.list_residents(), criteria) == []


class TestCreateAppComponents:
    """Tests for the component factory."""

    def test_default_storage_is_json_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SIPM_STORAGE_BACKEND", "json")
        monkeypatch.setenv("SIPM_STORAGE_DATA_DIR", str(tmp_path))
        storage = orchestrator.create_storage(Settings())
        assert isinstance(storage, JsonFileResidentStore)
        assert storage.path == tmp_path / "sipm_premium_v1.json"

    def test_seeded_registry(self, registry_flow):
        assert [r.id for r in registry_flow.list_residents()] == ["1"]
