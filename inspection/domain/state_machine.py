from __future__ import annotations

from typing import Callable

from inspection.domain.ranks import rank
from inspection.domain.states import (
    ALLOWED_TRANSITIONS,
    STAGE_ACTIONS,
    ReportStatus,
    WorkflowAction,
    coerce_status,
)

RankFn = Callable[[str], int]

# Highest inspector rank whose observation is fully settled at each approval stage.
CLOSING_RANK: dict[ReportStatus, int] = {
    ReportStatus.PENDING_EE: 2,
    ReportStatus.PENDING_SE: 3,
}

FORWARD_STAGE: dict[ReportStatus, ReportStatus] = {
    ReportStatus.PENDING_EE: ReportStatus.PENDING_SE,
    ReportStatus.PENDING_SE: ReportStatus.PENDING_CE,
}


class InvalidTransitionError(ValueError):
    pass


def next_status(
    current: ReportStatus | str,
    inspector_role: str,
    action: WorkflowAction | str,
    rank_of: RankFn = rank,
) -> ReportStatus | str:
    """Status a report moves to when `action` is taken at `current`.

    `inspector_role` is the level the report's creator held when filing it.
    Unknown combinations leave the status unchanged.
    """
    status = coerce_status(current)
    try:
        act = WorkflowAction(action)
    except ValueError:
        return status or current
    if status is None:
        return current

    if status == ReportStatus.PENDING_COMPLIANCE:
        return ReportStatus.PENDING_EE if act == WorkflowAction.COMPLY else status
    if act != WorkflowAction.APPROVE:
        return status
    if status in CLOSING_RANK:
        if rank_of(inspector_role) <= CLOSING_RANK[status]:
            return ReportStatus.CLOSED
        return FORWARD_STAGE[status]
    if status == ReportStatus.PENDING_CE:
        return ReportStatus.CLOSED
    return status


class StateMachine:
    def __init__(self, rank_of: RankFn = rank) -> None:
        self.rank_of = rank_of

    def transition(
        self,
        current: ReportStatus | str,
        inspector_role: str,
        action: WorkflowAction | str,
    ) -> ReportStatus:
        status = coerce_status(current)
        if status is None:
            raise InvalidTransitionError(f"Unknown report status: {current}")
        try:
            act = WorkflowAction(action)
        except ValueError as exc:
            raise InvalidTransitionError(f"Unknown workflow action: {action}") from exc

        expected = STAGE_ACTIONS.get(status)
        if expected is None:
            raise InvalidTransitionError(f"Report is {status.value}; no further actions accepted")
        if act != expected:
            raise InvalidTransitionError(f"{act.value} is not valid while report is {status.value}")

        target = next_status(status, inspector_role, act, self.rank_of)
        if target not in ALLOWED_TRANSITIONS[status]:
            raise InvalidTransitionError(f"Invalid transition {status.value} -> {target}")
        return ReportStatus(target)
