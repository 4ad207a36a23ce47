"""Report views derived from the registry."""

from sipm.reports.filter import ReportFilter, dashboard_stats, search_residents
from sipm.reports.formatting import format_date, format_short_date, format_timestamp

__all__ = [
    "ReportFilter",
    "dashboard_stats",
    "format_date",
    "format_short_date",
    "format_timestamp",
    "search_residents",
]
