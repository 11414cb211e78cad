from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from threading import RLock
from typing import Any

from pydantic import ValidationError

from inspection.contracts.payloads import LoadAllResponse
from inspection.domain.jurisdiction import is_actionable
from inspection.domain.models import Officer, Report, Site, officer_key_for_name
from inspection.domain.states import ReportStatus
from inspection.infra.fallback import fallback_payload
from inspection.infra.store_client import SheetStoreClient, StoreError

logger = logging.getLogger(__name__)

SOURCE_STORE = "store"
SOURCE_FALLBACK = "fallback"


class RepositoryError(RuntimeError):
    pass


@dataclass
class Dataset:
    sites: list[Site] = field(default_factory=list)
    officers: list[Officer] = field(default_factory=list)
    reports: list[Report] = field(default_factory=list)
    source: str = SOURCE_STORE
    error: str | None = None


def _parse_officers(rows: list[dict[str, Any]]) -> list[Officer]:
    officers: list[Officer] = []
    seen: set[str] = set()
    for position, row in enumerate(rows):
        officer = Officer.from_row(row)
        if officer.id in seen:
            officer.id = officer_key_for_name(officer.name, position)
            logger.warning("Duplicate officer %r at roster row %s; keyed as %s", officer.name, position, officer.id)
        seen.add(officer.id)
        officers.append(officer)
    return officers


def _parse_payload(payload: dict[str, Any], source: str, error: str | None = None) -> Dataset:
    data = LoadAllResponse.model_validate(payload)
    return Dataset(
        sites=[Site.from_row(r) for r in data.sites],
        officers=_parse_officers(data.officers),
        reports=[Report.from_row(r) for r in data.reports],
        source=source,
        error=error,
    )


def load_dataset(client: SheetStoreClient | None) -> Dataset:
    """Load every sheet from the store, degrading to the built-in dataset."""
    error: str | None = None
    if client is None:
        error = "Store client not configured"
    else:
        try:
            payload = client.load_all()
            if payload.get("status") != "success":
                raise StoreError(f"Store status {payload.get('status')!r}")
            return _parse_payload(payload, SOURCE_STORE)
        except (StoreError, ValidationError) as exc:
            error = str(exc)
    logger.warning("Using fallback dataset: %s", error)
    return _parse_payload(fallback_payload(), SOURCE_FALLBACK, error)


class Repository:
    """In-memory sites, officers and reports for one session.

    Sites are reference data. Reports are append-only; only their status
    changes after creation.
    """

    def __init__(self, dataset: Dataset | None = None) -> None:
        dataset = dataset or Dataset()
        self._lock = RLock()
        self._sites: list[Site] = list(dataset.sites)
        self._officers: dict[str, Officer] = {}
        for officer in dataset.officers:
            self._officers[officer.id] = officer
        self._reports: dict[int | str, Report] = {}
        for report in dataset.reports:
            self._reports[report.id] = report
        self.source = dataset.source
        self.error = dataset.error

    @classmethod
    def from_store(cls, client: SheetStoreClient | None) -> "Repository":
        return cls(load_dataset(client))

    @property
    def using_store(self) -> bool:
        return self.source == SOURCE_STORE

    # Sites

    def list_sites(self) -> list[Site]:
        with self._lock:
            return list(self._sites)

    def get_site(self, site_name: str) -> Site | None:
        with self._lock:
            for site in self._sites:
                if site.name == site_name:
                    return site
            return None

    def unique_locations(self) -> list[str]:
        with self._lock:
            districts = list(dict.fromkeys(s.district for s in self._sites if s.district))
            names = [s.name for s in self._sites if s.name]
            return sorted(districts + names)

    # Officers

    def list_officers(self) -> list[Officer]:
        with self._lock:
            return [replace(o) for o in self._officers.values()]

    def get_officer(self, officer_id: str) -> Officer | None:
        with self._lock:
            officer = self._officers.get(officer_id)
            return replace(officer) if officer else None

    def find_officer_by_name(self, name: str) -> Officer | None:
        with self._lock:
            for officer in self._officers.values():
                if officer.name == name:
                    return replace(officer)
            return None

    def upsert_officer(self, officer: Officer) -> Officer:
        with self._lock:
            self._officers[officer.id] = replace(officer)
            return replace(officer)

    # Reports

    def next_report_id(self) -> int:
        with self._lock:
            candidate = int(time.time() * 1000)
            numeric = [r for r in self._reports if isinstance(r, int)]
            if numeric:
                candidate = max(candidate, max(numeric) + 1)
            return candidate

    def create(self, report: Report) -> Report:
        with self._lock:
            if report.id in self._reports:
                raise RepositoryError(f"Report already exists: {report.id}")
            self._reports[report.id] = replace(report)
            return replace(report)

    def get(self, report_id: int | str) -> Report | None:
        with self._lock:
            report = self._reports.get(report_id)
            return replace(report) if report else None

    def update_status(self, report_id: int | str, new_status: ReportStatus) -> Report:
        with self._lock:
            existing = self._reports.get(report_id)
            if not existing:
                raise RepositoryError(f"Report not found: {report_id}")
            existing.status = ReportStatus(new_status)
            return replace(existing)

    def list_reports(self) -> list[Report]:
        with self._lock:
            return [replace(r) for r in self._reports.values()]

    def all_for_site(self, site_name: str) -> list[Report]:
        return [r for r in self.list_reports() if r.site == site_name]

    def all_pending_for(self, officer: Officer) -> list[Report]:
        return [r for r in self.list_reports() if is_actionable(officer, r)]
