"""Jurisdiction rules deciding which officer may see a site or act on a report.

Two distinct matchers live here on purpose:

* site visibility (map browsing) tokenises the jurisdiction on commas and
  tests each token against the site's district and name;
* SDO task eligibility treats the whole jurisdiction as one string and tests
  whether it contains the report's site name.

Both are substring based, so a short token can match an unrelated name.
"""
from __future__ import annotations

from typing import Iterable

from inspection.domain.models import Officer, Report, Site
from inspection.domain.states import STAGE_OWNERS, ReportStatus, coerce_status

BOSS_LEVELS = {"ADMIN", "CE", "SE"}
ALL_TOKEN = "ALL"


def parse_jurisdiction(raw: str | None) -> list[str]:
    if raw is None:
        raw = ALL_TOKEN
    return [token.strip() for token in raw.upper().split(",") if token.strip()]


def is_boss(officer: Officer) -> bool:
    if officer.level in BOSS_LEVELS:
        return True
    return ALL_TOKEN in parse_jurisdiction(officer.jurisdiction)


def is_visible(officer: Officer, site: Site) -> bool:
    if is_boss(officer):
        return True
    site_name = (site.name or "").upper()
    district = (site.district or "").upper()
    return any(token in district or token in site_name for token in parse_jurisdiction(officer.jurisdiction))


def matches_search(site: Site, search: str) -> bool:
    haystack = (site.name or "").upper() + (site.district or "").upper()
    return (search or "").upper() in haystack


def filter_sites(officer: Officer, sites: Iterable[Site], search: str = "") -> list[Site]:
    return [s for s in sites if matches_search(s, search) and is_visible(officer, s)]


def site_in_jurisdiction(officer: Officer, site_name: str) -> bool:
    jurisdiction = (officer.jurisdiction or "").lower()
    return jurisdiction == "all" or (site_name or "").lower() in jurisdiction


def is_actionable(officer: Officer, report: Report) -> bool:
    status = coerce_status(report.status)
    owner = STAGE_OWNERS.get(status) if status else None
    if owner is None or officer.level != owner:
        return False
    if status == ReportStatus.PENDING_COMPLIANCE:
        return site_in_jurisdiction(officer, report.site)
    # EE, SE and CE approvals are organisation-wide.
    return True
