from __future__ import annotations

from typing import Any

from inspection.domain.models import utc_now

CORE_EVENTS = {
    "report.submitted",
    "report.status_changed",
    "officer.upserted",
    "store.propagation_failed",
    "store.replayed",
}

EVENT_REQUIRED_KEYS: dict[str, set[str]] = {
    "report.submitted": {"report_id", "site", "status"},
    "report.status_changed": {"report_id", "from_status", "to_status", "action"},
    "officer.upserted": {"officer_id", "name", "update"},
    "store.propagation_failed": {"sequence", "action", "error"},
    "store.replayed": {"attempted", "acknowledged"},
}


def validate_event_payload(event_type: str, payload: dict[str, Any]) -> None:
    if event_type not in CORE_EVENTS:
        raise ValueError(f"Unsupported event type: {event_type}")
    missing = sorted(k for k in EVENT_REQUIRED_KEYS.get(event_type, set()) if k not in payload)
    if missing:
        raise ValueError(f"Event payload missing required keys for {event_type}: {missing}")


def build_event_envelope(
    *,
    event_type: str,
    actor_id: str | None,
    actor_name: str | None,
    payload: dict[str, Any],
    note: str | None = None,
) -> dict[str, Any]:
    validate_event_payload(event_type, payload)
    return {
        "event_type": event_type,
        "actor_id": actor_id,
        "actor_name": actor_name,
        "payload": payload,
        "note": note,
        "created_at": utc_now(),
    }
