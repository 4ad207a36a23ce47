"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as an alternative backend because:
1. Village staff can view the registry directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- No transactions (set() rewrites the whole sheet)
- A cell holds at most 50,000 characters, which bounds the size of
  an embedded death certificate image

The implementation follows the abstract interface, so the registry
doesn't know which backend it is talking to.
"""

from typing import Any, Optional

import gspread
from gspread.utils import rowcol_to_a1
from google.oauth2.service_account import Credentials
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from sipm.config import get_settings
from sipm.logger import get_logger
from sipm.services.storage.interface import (
    ResidentStoreInterface,
    StorageError,
    StoredCollection,
)


logger = get_logger(__name__)

# Column mappings for the Residents sheet (same keys as the JSON blob)
RESIDENT_COLUMNS = [
    "id",
    "nik",
    "name",
    "gender",
    "dob",
    "address",
    "rt",
    "dusun",
    "maritalStatus",
    "occupation",
    "status",
    "deathCertificateImg",
    "createdAt",
]

SHEETS_CELL_LIMIT = 50_000
_LAST_COLUMN = rowcol_to_a1(1, len(RESIDENT_COLUMNS)).rstrip("0123456789")


class SheetsConnectionError(StorageError):
    """Could not connect to Google Sheets."""
    pass


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise SheetsConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise SheetsConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise SheetsConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_residents_sheet(self, create: bool = True) -> Optional[gspread.Worksheet]:
        """
        Get the Residents worksheet.

        With create=False, returns None when the sheet doesn't exist yet.
        """
        spreadsheet = self.get_spreadsheet()
        try:
            return spreadsheet.worksheet(self._settings.residents_sheet_name)
        except gspread.WorksheetNotFound:
            if not create:
                return None
            sheet = spreadsheet.add_worksheet(
                title=self._settings.residents_sheet_name,
                rows=1000,
                cols=len(RESIDENT_COLUMNS),
            )
            sheet.append_row(RESIDENT_COLUMNS)
            return sheet


class GoogleSheetsResidentStore(ResidentStoreInterface):
    """
    Google Sheets implementation of the resident store.

    One resident per row under a header row. Empty cells mean
    the field is absent.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _record_to_row(self, record: dict[str, Any]) -> list[str]:
        """Convert a stored record to a spreadsheet row."""
        row = []
        for column in RESIDENT_COLUMNS:
            value = record.get(column)
            text = "" if value is None else str(value)
            if len(text) > SHEETS_CELL_LIMIT:
                raise StorageError(
                    f"Field '{column}' of resident {record.get('id')} is too large "
                    f"for a Sheets cell ({len(text)} > {SHEETS_CELL_LIMIT} characters)"
                )
            row.append(text)
        return row

    def _row_to_record(self, header: list[str], row: list[str]) -> dict[str, Any]:
        """Convert a spreadsheet row to a stored record."""
        record = {}
        for index, column in enumerate(header):
            if column not in RESIDENT_COLUMNS:
                continue
            value = row[index] if index < len(row) else ""
            if value != "":
                record[column] = value
        return record

    def get(self) -> Optional[StoredCollection]:
        """Read all resident rows, or None when the sheet was never created."""
        try:
            sheet = self._client.get_residents_sheet(create=False)
            if sheet is None:
                return None
            values = sheet.get_all_values()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read residents sheet: {e}")

        if not values:
            return []

        header, rows = values[0], values[1:]
        if "id" not in header:
            return []

        # Skip rows without an id (blank or hand-edited rows)
        id_index = header.index("id")
        return [
            self._row_to_record(header, row)
            for row in rows
            if id_index < len(row) and row[id_index]
        ]

    @retry(
        retry=retry_if_exception_type(gspread.exceptions.APIError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _write_rows(self, rows: list[list[str]]) -> None:
        # Overwrite in place, then drop leftover rows; a failed update
        # leaves the previous collection readable.
        sheet = self._client.get_residents_sheet(create=True)
        if sheet.row_count < len(rows):
            sheet.add_rows(len(rows) - sheet.row_count)
        sheet.update(values=rows, range_name="A1")
        if sheet.row_count > len(rows):
            sheet.batch_clear([f"A{len(rows) + 1}:{_LAST_COLUMN}"])

    def set(self, collection: StoredCollection) -> None:
        """Rewrite the sheet with the given collection."""
        rows = [RESIDENT_COLUMNS] + [self._record_to_row(r) for r in collection]
        try:
            self._write_rows(rows)
        except StorageError:
            raise
        except Exception as e:
            logger.error("sheets_write_failed", error=str(e), rows=len(collection))
            raise StorageError(f"Failed to write residents sheet: {e}")
