from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Any

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from inspection.domain.models import Officer, Report, Site
from inspection.infra.repositories import RepositoryError
from inspection.services.app_services import InspectionServices, build_services
from inspection.services.auth_service import SessionContext
from inspection.services.workflow_service import ActionResult


app = FastAPI(title="Site Inspection Workflow API", version="1.0.0")

_services: InspectionServices | None = None


def get_services() -> InspectionServices:
    global _services
    if _services is None:
        _services = build_services()
    return _services


class LoginRequest(BaseModel):
    officer_id: str = Field(min_length=1)
    password: str


class ObservationRequest(BaseModel):
    site: str
    remarks: str = ""


class ComplianceRequest(BaseModel):
    note: str | None = None


class OfficerRequest(BaseModel):
    name: str = ""
    designation: str = ""
    office: str = ""
    level: str = ""
    password: str = ""
    jurisdiction: str = ""


class ReplayRequest(BaseModel):
    limit: int | None = Field(default=None, ge=1)


def _ctx(
    x_session_token: str = Header(..., alias="X-Session-Token"),
    services: InspectionServices = Depends(get_services),
) -> SessionContext:
    ctx = services.auth.resolve_token(x_session_token)
    if ctx is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session token")
    return ctx


def _officer_out(officer: Officer) -> dict[str, Any]:
    row = officer.to_row()
    row.pop("password", None)
    return row


def _report_out(report: Report) -> dict[str, Any]:
    return report.to_row()


def _site_out(site: Site) -> dict[str, Any]:
    return site.to_row()


def _action_out(result: ActionResult) -> dict[str, Any]:
    return {
        "report": _report_out(result.report),
        "message": result.message,
        "synced": result.synced,
        "notice": result.notice,
    }


@app.exception_handler(ValueError)
async def value_error_handler(_request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(PermissionError)
async def permission_error_handler(_request: Request, exc: PermissionError) -> JSONResponse:
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.exception_handler(RepositoryError)
async def repository_error_handler(_request: Request, exc: RepositoryError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.get("/health")
def health(services: InspectionServices = Depends(get_services)) -> dict[str, Any]:
    return {
        "status": "ok",
        "data_source": services.repo.source,
        "load_error": services.repo.error,
        "pending_writes": len(services.outbox.pending()),
    }


@app.get("/officers/roster")
def roster(search: str = "", services: InspectionServices = Depends(get_services)) -> list[dict[str, Any]]:
    return [_officer_out(o) for o in services.auth.login_roster(search)]


@app.post("/auth/login")
def login(payload: LoginRequest, services: InspectionServices = Depends(get_services)) -> dict[str, Any]:
    res = services.auth.sign_in(officer_id=payload.officer_id, password=payload.password)
    if not res.ok or not res.data:
        raise HTTPException(status_code=401, detail=res.message)
    ctx: SessionContext = res.data["context"]
    return {
        "token": res.data["token"],
        "officer": _officer_out(ctx.officer),
        "tab": res.data["tab"],
        "tabs": ctx.available_tabs(),
        "offline": ctx.offline,
    }


@app.post("/auth/logout")
def logout(
    x_session_token: str = Header(..., alias="X-Session-Token"),
    services: InspectionServices = Depends(get_services),
) -> dict[str, bool]:
    return {"revoked": services.auth.revoke_token(x_session_token)}


@app.get("/sites")
def list_sites(
    search: str = "",
    ctx: SessionContext = Depends(_ctx),
    services: InspectionServices = Depends(get_services),
) -> list[dict[str, Any]]:
    return [_site_out(s) for s in services.workflow.visible_sites(ctx, search)]


@app.get("/sites/{site_name}/reports")
def site_history(
    site_name: str,
    _officer: SessionContext = Depends(_ctx),
    services: InspectionServices = Depends(get_services),
) -> list[dict[str, Any]]:
    return [_report_out(r) for r in services.workflow.site_history(site_name)]


@app.post("/reports")
def submit_observation(
    payload: ObservationRequest,
    ctx: SessionContext = Depends(_ctx),
    services: InspectionServices = Depends(get_services),
) -> dict[str, Any]:
    return _action_out(services.workflow.submit_observation(ctx, payload.site, payload.remarks))


@app.get("/tasks")
def pending_tasks(
    ctx: SessionContext = Depends(_ctx),
    services: InspectionServices = Depends(get_services),
) -> list[dict[str, Any]]:
    if ctx.is_admin:
        return []
    return [_report_out(r) for r in services.workflow.pending_tasks(ctx)]


@app.post("/reports/{report_id}/comply")
def submit_compliance(
    report_id: str,
    payload: ComplianceRequest,
    ctx: SessionContext = Depends(_ctx),
    services: InspectionServices = Depends(get_services),
) -> dict[str, Any]:
    return _action_out(services.workflow.submit_compliance(ctx, report_id, payload.note))


@app.post("/reports/{report_id}/approve")
def approve(
    report_id: str,
    ctx: SessionContext = Depends(_ctx),
    services: InspectionServices = Depends(get_services),
) -> dict[str, Any]:
    return _action_out(services.workflow.approve(ctx, report_id))


@app.get("/dashboard")
def dashboard(
    year: int | None = None,
    month: int | None = None,
    ctx: SessionContext = Depends(_ctx),
    services: InspectionServices = Depends(get_services),
) -> dict[str, Any]:
    today = date.today()
    return services.metrics.dashboard(ctx, year or today.year, month or today.month)


@app.get("/admin/jurisdictions")
def jurisdiction_choices(
    ctx: SessionContext = Depends(_ctx),
    services: InspectionServices = Depends(get_services),
) -> dict[str, list[str]]:
    if not ctx.is_admin:
        raise HTTPException(status_code=403, detail="Administrators only")
    return services.admin.jurisdiction_choices()


@app.post("/officers")
def add_officer(
    payload: OfficerRequest,
    ctx: SessionContext = Depends(_ctx),
    services: InspectionServices = Depends(get_services),
) -> dict[str, Any]:
    result = services.admin.add_officer(ctx, payload.model_dump())
    return {"officer": _officer_out(result.officer), "message": result.message, "synced": result.synced, "notice": result.notice}


@app.put("/officers/{officer_id}")
def update_officer(
    officer_id: str,
    payload: OfficerRequest,
    ctx: SessionContext = Depends(_ctx),
    services: InspectionServices = Depends(get_services),
) -> dict[str, Any]:
    result = services.admin.update_officer(ctx, officer_id, payload.model_dump())
    return {"officer": _officer_out(result.officer), "message": result.message, "synced": result.synced, "notice": result.notice}


@app.get("/outbox")
def outbox_entries(
    ctx: SessionContext = Depends(_ctx),
    services: InspectionServices = Depends(get_services),
) -> list[dict[str, Any]]:
    if not ctx.is_admin:
        raise HTTPException(status_code=403, detail="Administrators only")
    return [asdict(e) for e in services.outbox.entries()]


@app.post("/outbox/replay")
def replay_outbox(
    payload: ReplayRequest,
    ctx: SessionContext = Depends(_ctx),
    services: InspectionServices = Depends(get_services),
) -> dict[str, Any]:
    if not ctx.is_admin:
        raise HTTPException(status_code=403, detail="Administrators only")
    return services.outbox.replay_pending(limit=payload.limit)
