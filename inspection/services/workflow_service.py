from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from inspection.contracts.payloads import (
    ObservationInput,
    SubmitReportPayload,
    UpdateStatusPayload,
    first_error_message,
)
from inspection.domain.jurisdiction import filter_sites, is_actionable
from inspection.domain.models import Report, Site, coerce_record_id, utc_now
from inspection.domain.state_machine import StateMachine
from inspection.domain.states import INITIAL_STATUS, WorkflowAction
from inspection.events.bus import InMemoryEventBus
from inspection.events.contracts import build_event_envelope
from inspection.infra.repositories import Repository
from inspection.services.auth_service import SessionContext
from inspection.services.sync_service import DispatchResult, OutboxService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionResult:
    report: Report
    message: str
    synced: bool | None
    notice: str | None = None


class WorkflowService:
    def __init__(
        self,
        repo: Repository,
        outbox: OutboxService,
        *,
        bus: InMemoryEventBus | None = None,
        state_machine: StateMachine | None = None,
    ) -> None:
        self.repo = repo
        self.outbox = outbox
        self.bus = bus or InMemoryEventBus()
        self.sm = state_machine or StateMachine()

    def visible_sites(self, ctx: SessionContext, search: str = "") -> list[Site]:
        return filter_sites(ctx.officer, self.repo.list_sites(), search)

    def site_history(self, site_name: str) -> list[Report]:
        return self.repo.all_for_site(site_name)

    def pending_tasks(self, ctx: SessionContext) -> list[Report]:
        return self.repo.all_pending_for(ctx.officer)

    def submit_observation(self, ctx: SessionContext, site_name: str, remarks: str) -> ActionResult:
        if ctx.is_admin:
            raise PermissionError("Administrators do not file observations")
        try:
            data = ObservationInput(site=site_name, remarks=remarks or "")
        except ValidationError as exc:
            raise ValueError(first_error_message(exc)) from exc
        site = self.repo.get_site(data.site)
        if site is None:
            raise ValueError(f"Unknown site: {data.site}")

        report = Report(
            id=self.repo.next_report_id(),
            date=utc_now(),
            officer=ctx.officer.name,
            inspector_role=ctx.officer.level,
            site=site.name,
            remarks=data.remarks,
            status=INITIAL_STATUS,
        )
        created = self.repo.create(report)
        logger.info("Observation %s logged at %s by %s", created.id, created.site, created.officer)
        self._event(
            ctx,
            "report.submitted",
            {"report_id": created.id, "site": created.site, "status": created.status.value},
        )

        payload = SubmitReportPayload(**created.to_row()).model_dump()
        result = self.outbox.push("SUBMIT", payload)
        return self._result(ctx, created, "Observation Logged. Assigned to SDO for Compliance.", result)

    def submit_compliance(self, ctx: SessionContext, report_id: int | str, note: str | None = None) -> ActionResult:
        return self._act(ctx, report_id, WorkflowAction.COMPLY, note)

    def approve(self, ctx: SessionContext, report_id: int | str) -> ActionResult:
        return self._act(ctx, report_id, WorkflowAction.APPROVE, None)

    def _act(
        self,
        ctx: SessionContext,
        report_id: int | str,
        action: WorkflowAction,
        note: str | None,
    ) -> ActionResult:
        report = self.repo.get(coerce_record_id(report_id))
        if report is None:
            raise ValueError(f"Report not found: {report_id}")
        if not is_actionable(ctx.officer, report):
            raise PermissionError(f"{ctx.officer.name} cannot act on report {report.id} ({report.status.value})")

        previous = report.status
        target = self.sm.transition(previous, report.inspector_role, action)
        updated = self.repo.update_status(report.id, target)
        logger.info("Report %s %s -> %s by %s", report.id, previous.value, target.value, ctx.officer.name)
        self._event(
            ctx,
            "report.status_changed",
            {
                "report_id": report.id,
                "from_status": previous.value,
                "to_status": target.value,
                "action": action.value,
            },
            note=note,
        )

        payload = UpdateStatusPayload(rowId=report.id, status=target.value, note=note).model_dump()
        result = self.outbox.push("UPDATE_STATUS", payload)
        return self._result(ctx, updated, f"Status Updated to: {target.value}", result)

    def _result(self, ctx: SessionContext, report: Report, message: str, dispatch: DispatchResult) -> ActionResult:
        notice = None
        if dispatch.ok is False:
            notice = f"Saved locally only (offline mode): {dispatch.message}"
            ctx.go_offline(notice)
        return ActionResult(report=report, message=message, synced=dispatch.ok, notice=notice)

    def _event(self, ctx: SessionContext, event_type: str, payload: dict[str, Any], note: str | None = None) -> None:
        envelope = build_event_envelope(
            event_type=event_type,
            actor_id=ctx.officer.id,
            actor_name=ctx.officer.name,
            payload=payload,
            note=note,
        )
        self.bus.publish(event_type, envelope)
