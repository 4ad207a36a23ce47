"""Tests for XLSX and PDF exporters."""

from datetime import datetime, timezone
from io import BytesIO
from zoneinfo import ZoneInfo

import pytest
from openpyxl import load_workbook

from sipm.exporters import (
    ExportError,
    ExportFormat,
    PdfExporter,
    SpreadsheetExporter,
    get_exporter,
)
from sipm.exporters.pdf import plan_rows, row_cells
from sipm.exporters.spreadsheet import COLUMNS, SHEET_NAME
from sipm.models.report import ReportPeriod
from sipm.models.resident import ResidentStatus

from tests.conftest import make_resident


GENERATED_AT = datetime(2024, 3, 10, 7, 5, 0, tzinfo=timezone.utc)
GENERATED_MILLIS = int(GENERATED_AT.timestamp() * 1000)


def fixed_clock():
    return GENERATED_AT


@pytest.fixture
def residents(certificate_url):
    return [
        make_resident(
            datetime(2024, 3, 1, 2, 30, tzinfo=timezone.utc),
            id="a", nik="3201000000000001", name="Ahmad Fauzi", rt="001", dusun="Krajan",
        ),
        make_resident(
            datetime(2024, 3, 2, 9, 0, tzinfo=timezone.utc),
            id="b", nik="3201000000000002", name="Bunga Citra Lestari Wulandari Putri",
            rt="002", dusun="Sawah Lebak Wetan",
            status=ResidentStatus.DECEASED, death_certificate_img=certificate_url,
        ),
    ]


class TestSpreadsheetExporter:
    """Tests for the XLSX exporter."""

    def test_export_rows(self, residents, utc):
        artifact = SpreadsheetExporter(utc, clock=fixed_clock).export(residents)

        sheet = load_workbook(BytesIO(artifact.content))[SHEET_NAME]
        rows = list(sheet.iter_rows(values_only=True))

        assert list(rows[0]) == COLUMNS
        assert len(rows) == 3
        assert rows[1][0] == "3201000000000001"
        assert rows[1][1] == "Ahmad Fauzi"
        assert rows[2][6] == "Meninggal"
        assert rows[1][8] == "1/3/2024, 02.30.00"

    def test_nik_stays_text(self, residents, utc):
        artifact = SpreadsheetExporter(utc).export(residents)
        sheet = load_workbook(BytesIO(artifact.content))[SHEET_NAME]
        assert isinstance(sheet["A2"].value, str)

    def test_empty_input_still_has_header(self, utc):
        artifact = SpreadsheetExporter(utc).export([])
        sheet = load_workbook(BytesIO(artifact.content))[SHEET_NAME]
        rows = list(sheet.iter_rows(values_only=True))
        assert rows == [tuple(COLUMNS)]
        assert artifact.row_count == 0

    def test_artifact_metadata(self, residents, utc):
        artifact = SpreadsheetExporter(utc, clock=fixed_clock).export(residents)
        assert artifact.filename == f"SIPM_Report_{GENERATED_MILLIS}.xlsx"
        assert artifact.mime_type.endswith("spreadsheetml.sheet")
        assert artifact.row_count == 2

    def test_timestamps_use_local_timezone(self, residents):
        df = SpreadsheetExporter(ZoneInfo("Asia/Jakarta")).to_dataframe(residents)
        assert df["Tanggal Input"].tolist()[0] == "1/3/2024, 09.30.00"


class TestPdfExporter:
    """Tests for the PDF exporter."""

    def test_export_produces_pdf(self, residents, utc):
        artifact = PdfExporter(utc, clock=fixed_clock).export(residents, ReportPeriod.WEEKLY)
        assert artifact.content.startswith(b"%PDF")
        assert artifact.mime_type == "application/pdf"
        assert artifact.filename == f"SIPM_Parungkamal_Report_{GENERATED_MILLIS}.pdf"

    def test_village_name_in_filename(self, utc):
        artifact = PdfExporter(utc, village_name="SUKAMAJU", clock=fixed_clock).export([])
        assert artifact.filename.startswith("SIPM_Sukamaju_Report_")

    def test_empty_input_is_valid_pdf(self, utc):
        artifact = PdfExporter(utc).export([])
        assert artifact.content.startswith(b"%PDF")
        assert artifact.row_count == 0

    def test_long_export_is_valid_pdf(self, residents, utc):
        many = [residents[0]] * 60
        artifact = PdfExporter(utc).export(many)
        assert artifact.content.startswith(b"%PDF")
        assert artifact.row_count == 60

    def test_row_cells_truncate(self, residents, utc):
        cells = row_cells(residents[1], utc)
        assert cells[0] == "3201000000000002"
        assert cells[1] == "Bunga Citra Lestari Wula"
        assert cells[2] == "002/Sawah Leba"
        assert cells[3] == "Meninggal"
        assert cells[4] == "2/3/2024"


class TestPagination:
    """Tests for plan_rows."""

    def test_first_page_capacity(self):
        placements = plan_rows(27)
        assert {page for page, _ in placements} == {0}
        assert placements[0] == (0, 62)
        assert placements[-1] == (0, 270)

    def test_28th_row_starts_new_page(self):
        placements = plan_rows(28)
        assert placements[-1] == (1, 20)

    def test_continuation_page_capacity(self):
        placements = plan_rows(27 + 32 + 1)
        assert placements[27 + 31] == (1, 268)
        assert placements[-1] == (2, 20)

    def test_no_rows(self):
        assert plan_rows(0) == []


class FailingExporter(SpreadsheetExporter):
    def _render(self, residents, period, generated_at):
        raise ValueError("encoder exploded")


class TestExportErrors:
    """Library failures surface as ExportError."""

    def test_render_failure_becomes_export_error(self, utc):
        with pytest.raises(ExportError, match="encoder exploded") as exc_info:
            FailingExporter(utc).export([])
        assert exc_info.value.export_format == ExportFormat.XLSX

    def test_get_exporter(self, utc):
        assert isinstance(get_exporter(ExportFormat.XLSX, utc), SpreadsheetExporter)
        assert isinstance(get_exporter(ExportFormat.PDF, utc), PdfExporter)
