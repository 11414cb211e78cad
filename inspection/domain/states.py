from __future__ import annotations

from enum import Enum


class ReportStatus(str, Enum):
    PENDING_COMPLIANCE = "Pending Compliance"
    PENDING_EE = "Pending EE"
    PENDING_SE = "Pending SE"
    PENDING_CE = "Pending CE"
    CLOSED = "Closed"


class WorkflowAction(str, Enum):
    COMPLY = "COMPLY"
    APPROVE = "APPROVE"


class OfficerLevel(str, Enum):
    SDO = "SDO"
    EE = "EE"
    SE = "SE"
    CE = "CE"
    ADMIN = "ADMIN"
    JE = "JE"
    AEE = "AEE"


INITIAL_STATUS = ReportStatus.PENDING_COMPLIANCE

# Which action each open status accepts, and the level that holds the task.
STAGE_ACTIONS: dict[ReportStatus, WorkflowAction] = {
    ReportStatus.PENDING_COMPLIANCE: WorkflowAction.COMPLY,
    ReportStatus.PENDING_EE: WorkflowAction.APPROVE,
    ReportStatus.PENDING_SE: WorkflowAction.APPROVE,
    ReportStatus.PENDING_CE: WorkflowAction.APPROVE,
}

STAGE_OWNERS: dict[ReportStatus, str] = {
    ReportStatus.PENDING_COMPLIANCE: OfficerLevel.SDO.value,
    ReportStatus.PENDING_EE: OfficerLevel.EE.value,
    ReportStatus.PENDING_SE: OfficerLevel.SE.value,
    ReportStatus.PENDING_CE: OfficerLevel.CE.value,
}

ALLOWED_TRANSITIONS: dict[ReportStatus, set[ReportStatus]] = {
    ReportStatus.PENDING_COMPLIANCE: {ReportStatus.PENDING_EE},
    ReportStatus.PENDING_EE: {ReportStatus.PENDING_SE, ReportStatus.CLOSED},
    ReportStatus.PENDING_SE: {ReportStatus.PENDING_CE, ReportStatus.CLOSED},
    ReportStatus.PENDING_CE: {ReportStatus.CLOSED},
    ReportStatus.CLOSED: set(),
}


def coerce_status(value: str | ReportStatus | None) -> ReportStatus | None:
    if isinstance(value, ReportStatus):
        return value
    try:
        return ReportStatus(str(value or "").strip())
    except ValueError:
        return None
