"""
Document (PDF) export via reportlab.

Layout is measured in millimetres from the top edge of an A4 page,
then flipped to reportlab's bottom-left origin when drawing.
"""

from datetime import datetime, tzinfo
from io import BytesIO
from typing import Callable, Optional, Sequence

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from sipm.exporters.base import ExportFormat, ResidentExporter
from sipm.models.report import ReportPeriod
from sipm.models.resident import Resident
from sipm.reports.formatting import format_date, format_timestamp


PAGE_WIDTH, PAGE_HEIGHT = A4

MARGIN_LEFT = 14
MARGIN_RIGHT = 196
HEADER_Y = 52
FIRST_ROW_Y = 62
ROW_HEIGHT = 8
PAGE_BREAK_Y = 275
CONTINUATION_Y = 20

NAME_MAX = 24
DUSUN_MAX = 10

EMPTY_MESSAGE = "Tidak ada data tersedia untuk filter ini."

# (label, x in mm)
TABLE_COLUMNS = [
    ("NIK", 14),
    ("NAMA LENGKAP", 45),
    ("RT/DUSUN", 100),
    ("STATUS", 145),
    ("TGL INPUT", 175),
]

SLATE_500 = (100 / 255, 116 / 255, 139 / 255)
SLATE_200 = (226 / 255, 232 / 255, 240 / 255)
SLATE_800 = (30 / 255, 41 / 255, 59 / 255)


def plan_rows(count: int) -> list[tuple[int, int]]:
    """
    Place `count` table rows.

    Returns (page_index, y_mm) per row. A new page starts once the
    running y position has passed the content-area threshold.
    """
    placements = []
    page = 0
    y = FIRST_ROW_Y
    for _ in range(count):
        if y > PAGE_BREAK_Y:
            page += 1
            y = CONTINUATION_Y
        placements.append((page, y))
        y += ROW_HEIGHT
    return placements


def row_cells(resident: Resident, tz: tzinfo) -> list[str]:
    """The five printed cells for one resident."""
    return [
        resident.nik,
        resident.name[:NAME_MAX],
        f"{resident.rt}/{resident.dusun[:DUSUN_MAX]}",
        resident.status.value,
        format_date(resident.created_at, tz),
    ]


class PdfExporter(ResidentExporter):
    """Paginated tabular report with a title block."""

    export_format = ExportFormat.PDF
    mime_type = "application/pdf"

    def __init__(
        self,
        tz: tzinfo,
        village_name: str = "PARUNGKAMAL",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(tz, clock)
        self._village_name = village_name

    @staticmethod
    def _y(y_mm: float) -> float:
        return PAGE_HEIGHT - y_mm * mm

    def _text(self, doc: canvas.Canvas, x_mm: float, y_mm: float, text: str) -> None:
        doc.drawString(x_mm * mm, self._y(y_mm), text)

    def _rule(self, doc: canvas.Canvas, y_mm: float) -> None:
        doc.line(MARGIN_LEFT * mm, self._y(y_mm), MARGIN_RIGHT * mm, self._y(y_mm))

    def _draw_title_block(
        self,
        doc: canvas.Canvas,
        period: ReportPeriod,
        generated_at: datetime,
    ) -> None:
        doc.setFont("Helvetica-Bold", 22)
        self._text(doc, MARGIN_LEFT, 25, "LAPORAN STRATEGIS KEPENDUDUKAN")

        doc.setFontSize(10)
        doc.setFillColorRGB(*SLATE_500)
        self._text(
            doc, MARGIN_LEFT, 32,
            f"DESA {self._village_name.upper()} | PERIODE: {period.value.upper()}",
        )
        self._text(
            doc, MARGIN_LEFT, 37,
            f"TANGGAL CETAK: {format_timestamp(generated_at, self._tz)}",
        )

        doc.setStrokeColorRGB(*SLATE_200)
        self._rule(doc, 42)

        doc.setFontSize(9)
        doc.setFillColorRGB(*SLATE_800)
        for label, x in TABLE_COLUMNS:
            self._text(doc, x, HEADER_Y, label)
        self._rule(doc, HEADER_Y + 2)

    def _render(
        self,
        residents: Sequence[Resident],
        period: ReportPeriod,
        generated_at: datetime,
    ) -> tuple[str, bytes]:
        buffer = BytesIO()
        doc = canvas.Canvas(buffer, pagesize=A4)
        doc.setTitle("Laporan Kependudukan")

        self._draw_title_block(doc, period, generated_at)
        doc.setFont("Helvetica", 9)

        current_page = 0
        for resident, (page, y) in zip(residents, plan_rows(len(residents))):
            if page != current_page:
                doc.showPage()
                doc.setFont("Helvetica", 9)
                doc.setFillColorRGB(*SLATE_800)
                current_page = page
            for (_, x), cell in zip(TABLE_COLUMNS, row_cells(resident, self._tz)):
                self._text(doc, x, y, cell)

        if not residents:
            self._text(doc, MARGIN_LEFT, FIRST_ROW_Y, EMPTY_MESSAGE)

        doc.showPage()
        doc.save()

        prefix = f"SIPM_{self._village_name.title()}_Report"
        return self._filename(prefix, generated_at), buffer.getvalue()
