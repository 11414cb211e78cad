"""Monthly inspection activity scored against role quotas.

Everything here is a pure function of a roster/report snapshot so that the
dashboard can be re-derived at any time.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum
from typing import Iterable

from inspection.domain.models import Officer, Report
from inspection.domain.states import ReportStatus

SUB_DIVISION_SHARE = 0.33


class ColorBand(str, Enum):
    GREEN = "green"
    AMBER = "amber"
    RED = "red"

    @property
    def hex(self) -> str:
        return _BAND_HEX[self]


_BAND_HEX = {
    ColorBand.GREEN: "#10b981",
    ColorBand.AMBER: "#f59e0b",
    ColorBand.RED: "#ef4444",
}


@dataclass(frozen=True)
class OfficerStat:
    name: str
    designation: str
    level: str
    visit_count: int
    target: int
    target_label: str
    percentage: float
    color: ColorBand


@dataclass(frozen=True)
class PeriodSummary:
    inspections: int
    active_sites: int
    pending: int


def target_for(level: str, total_sites: int) -> tuple[int, str]:
    if level == "EE":
        return 3, "Target: 3-5"
    if level == "SE":
        return 3, "Target: 3-4"
    if level in {"SDO", "AEE"}:
        target = math.ceil(total_sites * SUB_DIVISION_SHARE)
        return target, f"Target: ~{target} (33%)"
    if level == "JE":
        return total_sites, f"Target: {total_sites} (100%)"
    return 0, "As Required"


def completion_percentage(visits: int, target: int) -> float:
    if target <= 0:
        return 100.0
    return min(100.0, visits / target * 100)


def color_band(percentage: float) -> ColorBand:
    if percentage >= 100:
        return ColorBand.GREEN
    if percentage >= 50:
        return ColorBand.AMBER
    return ColorBand.RED


def parse_report_date(value: str) -> datetime | None:
    text = (value or "").strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None


def reports_in_period(
    reports: Iterable[Report],
    year: int,
    month: int,
    tz: tzinfo | None = None,
) -> list[Report]:
    """Reports created in `month` (1-12) of `year`, on the calendar of `tz`.

    `tz` defaults to the local zone. Naive timestamps are taken as local.
    """
    selected: list[Report] = []
    for report in reports:
        created = parse_report_date(report.date)
        if created is None:
            continue
        created = created.astimezone(tz)
        if created.year == year and created.month == month:
            selected.append(report)
    return selected


def compute_officer_stats(
    year: int,
    month: int,
    officers: Iterable[Officer],
    reports: Iterable[Report],
    total_sites: int,
    tz: tzinfo | None = None,
) -> list[OfficerStat]:
    monthly = reports_in_period(reports, year, month, tz)
    visits_by_officer: dict[str, int] = {}
    for report in monthly:
        visits_by_officer[report.officer] = visits_by_officer.get(report.officer, 0) + 1

    stats: list[OfficerStat] = []
    for officer in officers:
        if officer.level == "ADMIN":
            continue
        visits = visits_by_officer.get(officer.name, 0)
        target, label = target_for(officer.level, total_sites)
        pct = completion_percentage(visits, target)
        stats.append(
            OfficerStat(
                name=officer.name,
                designation=officer.designation,
                level=officer.level,
                visit_count=visits,
                target=target,
                target_label=label,
                percentage=pct,
                color=color_band(pct),
            )
        )
    return sorted(stats, key=lambda s: s.percentage, reverse=True)


def period_summary(
    reports: Iterable[Report], year: int, month: int, tz: tzinfo | None = None
) -> PeriodSummary:
    monthly = reports_in_period(reports, year, month, tz)
    return PeriodSummary(
        inspections=len(monthly),
        active_sites=len({r.site for r in monthly}),
        pending=len([r for r in monthly if r.status != ReportStatus.CLOSED]),
    )
