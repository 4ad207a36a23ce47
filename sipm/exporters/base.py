"""
Exporter interface.

An exporter turns a filtered resident list into a downloadable
artifact. Any failure inside the formatting library surfaces as
ExportError; stored data is never touched.
"""

from abc import ABC, abstractmethod
from datetime import datetime, tzinfo
from enum import Enum
from typing import Callable, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from sipm.models.report import ReportPeriod
from sipm.models.resident import Resident, utcnow


class ExportFormat(str, Enum):
    """Supported artifact formats."""
    XLSX = "xlsx"
    PDF = "pdf"


class ExportArtifact(BaseModel):
    """A generated file, ready to hand to the browser."""
    model_config = ConfigDict(frozen=True)

    filename: str
    content: bytes
    mime_type: str
    row_count: int


class ExportError(Exception):
    """The export library failed to produce an artifact."""

    def __init__(self, export_format: ExportFormat, message: str):
        self.export_format = export_format
        super().__init__(message)


class ResidentExporter(ABC):
    """
    Base class for exporters.

    Subclasses implement `_render`; `export` wraps it so that every
    library failure becomes an ExportError.
    """

    export_format: ExportFormat
    mime_type: str

    def __init__(
        self,
        tz: tzinfo,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._tz = tz
        self._clock = clock or utcnow

    def _filename(self, prefix: str, generated_at: datetime) -> str:
        millis = int(generated_at.timestamp() * 1000)
        return f"{prefix}_{millis}.{self.export_format.value}"

    @abstractmethod
    def _render(
        self,
        residents: Sequence[Resident],
        period: ReportPeriod,
        generated_at: datetime,
    ) -> tuple[str, bytes]:
        """Return (filename, content)."""
        pass

    def export(
        self,
        residents: Sequence[Resident],
        period: ReportPeriod = ReportPeriod.MONTHLY,
    ) -> ExportArtifact:
        """
        Build the artifact. An empty list still produces a valid file.

        Raises:
            ExportError: If the underlying library fails
        """
        generated_at = self._clock()
        try:
            filename, content = self._render(residents, period, generated_at)
        except ExportError:
            raise
        except Exception as e:
            raise ExportError(
                self.export_format,
                f"Failed to generate {self.export_format.value.upper()} report: {e}",
            ) from e

        return ExportArtifact(
            filename=filename,
            content=content,
            mime_type=self.mime_type,
            row_count=len(residents),
        )
