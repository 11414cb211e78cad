from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from pydantic import ValidationError

from inspection.contracts.payloads import OfficerInput, UpsertOfficerPayload, first_error_message
from inspection.domain.models import Officer
from inspection.events.bus import InMemoryEventBus
from inspection.events.contracts import build_event_envelope
from inspection.infra.repositories import Repository
from inspection.services.auth_service import SessionContext
from inspection.services.sync_service import OutboxService

logger = logging.getLogger(__name__)

SDO_JURISDICTIONS = [
    "Coimbatore Sub-Division",
    "Trichy Sub-Division",
    "Madurai Sub-Division",
    "Thanjavur Sub-Division",
    "Salem Sub-Division",
    "Erode Sub-Division",
    "Karur Sub-Division",
    "Tirunelveli Sub-Division",
    "Vellore Sub-Division",
    "Dharmapuri Sub-Division",
]


def add_jurisdiction_token(current: str, value: str) -> str:
    """Append a picked location to a comma-separated jurisdiction string."""
    if not value:
        return current
    if value in current:
        return current
    return f"{current}, {value}" if current else value


@dataclass(frozen=True)
class OfficerResult:
    officer: Officer
    message: str
    synced: bool | None
    notice: str | None = None


class AdminService:
    def __init__(self, repo: Repository, outbox: OutboxService, *, bus: InMemoryEventBus | None = None) -> None:
        self.repo = repo
        self.outbox = outbox
        self.bus = bus or InMemoryEventBus()

    def jurisdiction_choices(self) -> dict[str, list[str]]:
        return {"sub_divisions": list(SDO_JURISDICTIONS), "locations": self.repo.unique_locations()}

    def add_officer(self, ctx: SessionContext, fields: dict[str, Any]) -> OfficerResult:
        self._require_admin(ctx)
        data = self._validate(fields)
        officer = Officer(**data.model_dump())
        saved = self.repo.upsert_officer(officer)
        return self._propagate(ctx, saved, old_name="", update=False)

    def update_officer(self, ctx: SessionContext, officer_id: str, fields: dict[str, Any]) -> OfficerResult:
        self._require_admin(ctx)
        existing = self.repo.get_officer(officer_id)
        if existing is None:
            raise ValueError(f"Officer not found: {officer_id}")
        data = self._validate(fields)
        saved = self.repo.upsert_officer(replace(existing, **data.model_dump()))
        # The store still keys officers by name, so it needs the name being replaced.
        return self._propagate(ctx, saved, old_name=existing.name, update=True)

    def _propagate(self, ctx: SessionContext, officer: Officer, *, old_name: str, update: bool) -> OfficerResult:
        logger.info("%s officer %s (%s)", "Updated" if update else "Added", officer.name, officer.id)
        envelope = build_event_envelope(
            event_type="officer.upserted",
            actor_id=ctx.officer.id,
            actor_name=ctx.officer.name,
            payload={"officer_id": officer.id, "name": officer.name, "update": update},
        )
        self.bus.publish("officer.upserted", envelope)

        payload = UpsertOfficerPayload(
            action="UPDATE_USER" if update else "ADD_USER",
            oldName=old_name,
            name=officer.name,
            designation=officer.designation,
            office=officer.office,
            level=officer.level,
            password=officer.password,
            jurisdiction=officer.jurisdiction or "",
        ).model_dump()
        result = self.outbox.push(payload["action"], payload)

        notice = None
        if result.ok is False:
            notice = f"Failed to reach store: {result.message}"
            ctx.go_offline(notice)
        return OfficerResult(
            officer=officer,
            message="User Updated" if update else "User Added",
            synced=result.ok,
            notice=notice,
        )

    @staticmethod
    def _validate(fields: dict[str, Any]) -> OfficerInput:
        try:
            return OfficerInput(**fields)
        except ValidationError as exc:
            raise ValueError(first_error_message(exc)) from exc

    @staticmethod
    def _require_admin(ctx: SessionContext) -> None:
        if not ctx.is_admin:
            raise PermissionError("Only administrators can manage officers")
