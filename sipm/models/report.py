"""
Report models.

Criteria for deriving report views from the registry,
and the small summary shapes the dashboard renders.
"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from sipm.models.resident import ResidentStatus


class ReportPeriod(str, Enum):
    """Time window applied around the reference date."""
    DAILY = "harian"
    WEEKLY = "mingguan"
    MONTHLY = "bulanan"
    YEARLY = "tahunan"


class StatusFilter(str, Enum):
    """Life-status filter. ANY keeps every record."""
    ALIVE = ResidentStatus.ALIVE.value
    DECEASED = ResidentStatus.DECEASED.value
    ANY = "all"


class ReportCriteria(BaseModel):
    """
    Filter criteria for a report view.

    All criteria combine with logical AND.
    Empty strings and a missing reference date disable their filter.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    rt_contains: Optional[str] = Field(
        default=None,
        description="Keep residents whose RT contains this substring"
    )
    dusun_contains: Optional[str] = Field(
        default=None,
        description="Keep residents whose dusun contains this (case-insensitive)"
    )
    status: StatusFilter = StatusFilter.ANY
    period: ReportPeriod = ReportPeriod.MONTHLY
    reference_date: Optional[date] = Field(
        default=None,
        description="Anchor date for the period filter"
    )


class DashboardStats(BaseModel):
    """Headline population figures."""
    total: int = Field(ge=0)
    male: int = Field(ge=0)
    female: int = Field(ge=0)
    deceased: int = Field(ge=0)


class TrendPoint(BaseModel):
    """One point of the cumulative population chart."""
    label: str
    population: int = Field(ge=0)
    mortality: int = Field(ge=0)
