"""
Report Filter

DESIGN DECISION: Report views are DERIVED, never stored.
Every view is recomputed from the registry's full list, so a
report can never disagree with the data it was built from.

Filtering preserves the input order. Only the trend series
sorts, by creation time.
"""

from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, Optional, Sequence

from sipm.models.report import (
    DashboardStats,
    ReportCriteria,
    ReportPeriod,
    StatusFilter,
    TrendPoint,
)
from sipm.models.resident import Gender, Resident, ResidentStatus
from sipm.reports.formatting import format_short_date


_SECONDS_PER_DAY = 24 * 3600


class ReportFilter:
    """
    Applies ReportCriteria to a resident collection.

    Creation timestamps are stored in UTC; calendar comparisons
    (same day, month, year) are made in the configured local timezone.
    """

    def __init__(self, tz: tzinfo):
        self._tz = tz

    def _local(self, moment: datetime) -> datetime:
        return moment.astimezone(self._tz)

    def _matches_period(
        self,
        resident: Resident,
        period: ReportPeriod,
        reference: Optional[date],
    ) -> bool:
        if reference is None:
            return True

        created = self._local(resident.created_at)

        if period == ReportPeriod.DAILY:
            return created.date() == reference
        if period == ReportPeriod.MONTHLY:
            return (created.year, created.month) == (reference.year, reference.month)
        if period == ReportPeriod.YEARLY:
            return created.year == reference.year
        if period == ReportPeriod.WEEKLY:
            # Forward-looking window: [reference, reference + 7 days]
            start = datetime(reference.year, reference.month, reference.day, tzinfo=self._tz)
            diff_days = (created - start).total_seconds() / _SECONDS_PER_DAY
            return 0 <= diff_days <= 7
        return True

    def matches(self, resident: Resident, criteria: ReportCriteria) -> bool:
        """True if one resident passes every criterion."""
        if criteria.rt_contains and criteria.rt_contains not in resident.rt:
            return False
        if (
            criteria.dusun_contains
            and criteria.dusun_contains.lower() not in resident.dusun.lower()
        ):
            return False
        if (
            criteria.status != StatusFilter.ANY
            and resident.status.value != criteria.status.value
        ):
            return False
        return self._matches_period(resident, criteria.period, criteria.reference_date)

    def filter(
        self,
        residents: Iterable[Resident],
        criteria: ReportCriteria,
    ) -> list[Resident]:
        """Residents matching all criteria, in input order."""
        return [r for r in residents if self.matches(r, criteria)]

    def trend_series(self, residents: Iterable[Resident]) -> list[TrendPoint]:
        """
        Cumulative population and mortality, one point per resident.

        Residents are taken in creation order; each point counts every
        resident created up to and including that one.
        """
        points = []
        population = 0
        mortality = 0
        for resident in sorted(residents, key=lambda r: r.created_at):
            population += 1
            if resident.status == ResidentStatus.DECEASED:
                mortality += 1
            points.append(TrendPoint(
                label=format_short_date(self._local(resident.created_at)),
                population=population,
                mortality=mortality,
            ))
        return points


def dashboard_stats(residents: Sequence[Resident]) -> DashboardStats:
    """Headline counts for the dashboard."""
    return DashboardStats(
        total=len(residents),
        male=sum(1 for r in residents if r.gender == Gender.MALE),
        female=sum(1 for r in residents if r.gender == Gender.FEMALE),
        deceased=sum(1 for r in residents if r.status == ResidentStatus.DECEASED),
    )


def search_residents(residents: Iterable[Resident], term: str) -> list[Resident]:
    """Registry table search: name (case-insensitive) or NIK substring."""
    if not term:
        return list(residents)
    needle = term.lower()
    return [r for r in residents if needle in r.name.lower() or term in r.nik]
