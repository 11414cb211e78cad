from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import NAMESPACE_URL, uuid4, uuid5

from inspection.domain.states import INITIAL_STATUS, ReportStatus, coerce_status


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def officer_key_for_name(name: str, position: int | None = None) -> str:
    """Stable surrogate id for roster rows that arrive without one.

    `position` (the row index) only disambiguates rows sharing a name.
    """
    seed = f"cwc-officer:{name.strip()}"
    if position is not None:
        seed = f"{seed}#{position}"
    return str(uuid5(NAMESPACE_URL, seed))


def coerce_record_id(value: Any) -> int | str:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return str(value or "")


def _coerce_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class Officer:
    name: str
    designation: str = ""
    level: str = ""
    jurisdiction: str | None = None
    password: str = ""
    office: str = ""
    id: str = field(default_factory=lambda: str(uuid4()))

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Officer":
        name = str(row.get("name") or "").strip()
        jurisdiction = row.get("jurisdiction")
        return cls(
            name=name,
            designation=str(row.get("designation") or ""),
            level=str(row.get("level") or "").strip().upper(),
            jurisdiction=None if jurisdiction is None else str(jurisdiction),
            password=str(row.get("password") if row.get("password") is not None else ""),
            office=str(row.get("office") or ""),
            id=str(row.get("id") or officer_key_for_name(name)),
        )

    def to_row(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Site:
    id: int | str
    name: str
    district: str = ""
    lat: float | None = None
    lng: float | None = None
    status: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Site":
        return cls(
            id=coerce_record_id(row.get("id")),
            name=str(row.get("name") or ""),
            district=str(row.get("district") or ""),
            lat=_coerce_float(row.get("lat")),
            lng=_coerce_float(row.get("lng")),
            status=row.get("status") or None,
        )

    def to_row(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Report:
    id: int | str
    officer: str
    inspector_role: str
    site: str
    remarks: str
    date: str = field(default_factory=utc_now)
    status: ReportStatus = INITIAL_STATUS

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Report":
        raw_date = row.get("date")
        if isinstance(raw_date, datetime):
            raw_date = raw_date.isoformat()
        return cls(
            id=coerce_record_id(row.get("id")),
            officer=str(row.get("officer") or ""),
            inspector_role=str(row.get("inspectorRole") or row.get("inspector_role") or "").strip().upper(),
            site=str(row.get("site") or ""),
            remarks=str(row.get("remarks") or ""),
            date=str(raw_date or ""),
            # Rows carrying an unknown status are normalised to the initial state.
            status=coerce_status(row.get("status")) or INITIAL_STATUS,
        )

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "officer": self.officer,
            "inspectorRole": self.inspector_role,
            "site": self.site,
            "remarks": self.remarks,
            "status": self.status.value,
        }
