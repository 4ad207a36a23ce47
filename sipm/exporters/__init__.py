"""
Exporters Package

Turns a filtered resident list into an XLSX or PDF artifact.
"""

from datetime import tzinfo

from sipm.exporters.base import (
    ExportArtifact,
    ExportError,
    ExportFormat,
    ResidentExporter,
)
from sipm.exporters.pdf import PdfExporter
from sipm.exporters.spreadsheet import SpreadsheetExporter


def get_exporter(
    export_format: ExportFormat,
    tz: tzinfo,
    village_name: str = "PARUNGKAMAL",
) -> ResidentExporter:
    """Exporter for the requested format."""
    if export_format == ExportFormat.XLSX:
        return SpreadsheetExporter(tz)
    if export_format == ExportFormat.PDF:
        return PdfExporter(tz, village_name=village_name)
    raise ValueError(f"Unsupported export format: {export_format}")


__all__ = [
    "ExportArtifact",
    "ExportError",
    "ExportFormat",
    "PdfExporter",
    "ResidentExporter",
    "SpreadsheetExporter",
    "get_exporter",
]
