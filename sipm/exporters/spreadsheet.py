"""Spreadsheet (XLSX) export via pandas + openpyxl."""

from datetime import datetime
from io import BytesIO
from typing import Sequence

import pandas as pd
from openpyxl.utils import get_column_letter

from sipm.exporters.base import ExportFormat, ResidentExporter
from sipm.models.report import ReportPeriod
from sipm.models.resident import Resident
from sipm.reports.formatting import format_timestamp


SHEET_NAME = "Data_Masyarakat"

COLUMNS = [
    "NIK",
    "Nama",
    "Gender",
    "RT",
    "Dusun",
    "Alamat",
    "Status",
    "Pekerjaan",
    "Tanggal Input",
]


class SpreadsheetExporter(ResidentExporter):
    """One row per resident on a single `Data_Masyarakat` sheet."""

    export_format = ExportFormat.XLSX
    mime_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    def to_dataframe(self, residents: Sequence[Resident]) -> pd.DataFrame:
        rows = [
            {
                "NIK": r.nik,
                "Nama": r.name,
                "Gender": r.gender.value,
                "RT": r.rt,
                "Dusun": r.dusun,
                "Alamat": r.address,
                "Status": r.status.value,
                "Pekerjaan": r.occupation,
                "Tanggal Input": format_timestamp(r.created_at, self._tz),
            }
            for r in residents
        ]
        # Explicit columns keep the header row when there are no residents
        return pd.DataFrame(rows, columns=COLUMNS, dtype=str)

    def _render(
        self,
        residents: Sequence[Resident],
        period: ReportPeriod,
        generated_at: datetime,
    ) -> tuple[str, bytes]:
        df = self.to_dataframe(residents)

        output = BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name=SHEET_NAME)
            sheet = writer.sheets[SHEET_NAME]
            for index, column in enumerate(COLUMNS):
                longest = max([len(column)] + [len(v) for v in df[column]])
                letter = get_column_letter(index + 1)
                sheet.column_dimensions[letter].width = min(longest + 2, 60)

        return self._filename("SIPM_Report", generated_at), output.getvalue()
