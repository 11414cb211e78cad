from __future__ import annotations

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from inspection.api.main import app, get_services
from inspection.config import settings
from inspection.infra.repositories import Repository
from inspection.infra.store_client import SheetStoreClient
from inspection.services.app_services import build_services

PASSWORDS = {"sdo-salem": "abc"}


@pytest.fixture
def services(dataset, fake_session):
    cfg = replace(settings, propagation_mode="inline")
    client = SheetStoreClient("https://store.example/exec", session=fake_session)
    return build_services(cfg, client=client, repo=Repository(dataset))


@pytest.fixture
def api(services):
    app.dependency_overrides[get_services] = lambda: services
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def as_officer(api: TestClient):
    """Signs in and returns the headers carrying the session token."""

    def _headers(officer_id: str) -> dict[str, str]:
        res = api.post("/auth/login", json={"officer_id": officer_id, "password": PASSWORDS.get(officer_id, "123")})
        assert res.status_code == 200
        return {"X-Session-Token": res.json()["token"]}

    return _headers


def test_health_reports_data_source(api: TestClient) -> None:
    body = api.get("/health").json()
    assert body["status"] == "ok"
    assert body["data_source"] == "store"
    assert body["pending_writes"] == 0


def test_roster_hides_passwords(api: TestClient) -> None:
    rows = api.get("/officers/roster").json()
    assert rows[0]["level"] == "CE"
    assert all("password" not in row for row in rows)


def test_login_success_and_failure(api: TestClient) -> None:
    ok = api.post("/auth/login", json={"officer_id": "sdo", "password": "123"})
    assert ok.status_code == 200
    assert ok.json()["tabs"] == ["HOME", "APPROVALS"]
    assert ok.json()["token"]

    bad = api.post("/auth/login", json={"officer_id": "sdo", "password": "nope"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Invalid Password"


def test_missing_or_unknown_session_token(api: TestClient) -> None:
    assert api.get("/sites").status_code == 422
    assert api.get("/sites", headers={"X-Session-Token": "forged"}).status_code == 401


def test_roster_id_alone_cannot_act_as_admin(api: TestClient) -> None:
    admin_id = next(row["id"] for row in api.get("/officers/roster").json() if row["level"] == "ADMIN")
    fields = {"name": "X", "designation": "Y", "level": "JE", "password": "p", "jurisdiction": "Musiri"}

    assert api.post("/officers", json=fields, headers={"X-Officer-ID": admin_id}).status_code == 422
    assert api.post("/officers", json=fields, headers={"X-Session-Token": admin_id}).status_code == 401


def test_logout_revokes_token(api: TestClient, as_officer) -> None:
    headers = as_officer("ee")
    assert api.get("/sites", headers=headers).status_code == 200
    assert api.post("/auth/logout", headers=headers).json() == {"revoked": True}
    assert api.get("/sites", headers=headers).status_code == 401


def test_sites_are_filtered_for_sdo(api: TestClient, as_officer) -> None:
    names = [s["name"] for s in api.get("/sites", headers=as_officer("sdo")).json()]
    assert names == ["Musiri"]


def test_full_approval_flow(api: TestClient, as_officer) -> None:
    sdo, ee = as_officer("sdo"), as_officer("ee")
    assert [t["id"] for t in api.get("/tasks", headers=sdo).json()] == [101]

    comply = api.post("/reports/101/comply", json={"note": "done"}, headers=sdo)
    assert comply.status_code == 200
    assert comply.json()["report"]["status"] == "Pending EE"

    approve = api.post("/reports/101/approve", headers=ee)
    assert approve.json()["message"] == "Status Updated to: Closed"

    history = api.get("/sites/Musiri/reports", headers=as_officer("ce")).json()
    assert history[0]["status"] == "Closed"


def test_error_mapping(api: TestClient, as_officer) -> None:
    ee, admin = as_officer("ee"), as_officer("admin")
    assert api.post("/reports", json={"site": "Musiri", "remarks": " "}, headers=ee).status_code == 400
    assert api.post("/reports", json={"site": "Musiri", "remarks": "x"}, headers=admin).status_code == 403
    assert api.post("/reports/101/approve", headers=ee).status_code == 403
    assert api.post("/reports/555/approve", headers=ee).status_code == 400


def test_admin_has_no_tasks(api: TestClient, as_officer) -> None:
    assert api.get("/tasks", headers=as_officer("admin")).json() == []


def test_dashboard_access(api: TestClient, as_officer) -> None:
    ce = as_officer("ce")
    body = api.get("/dashboard", params={"year": 2024, "month": 3}, headers=ce).json()
    assert body["summary"] == {"inspections": 1, "active_sites": 1, "pending": 1}
    ee_row = next(row for row in body["officers"] if row["name"] == "EE Trichy")
    assert ee_row["visits"] == 1
    assert ee_row["target_label"] == "Target: 3-5"
    assert all(row["level"] != "ADMIN" for row in body["officers"])

    assert api.get("/dashboard", headers=as_officer("sdo")).status_code == 403
    assert api.get("/dashboard", params={"year": 2024, "month": 13}, headers=ce).status_code == 400


def test_officer_admin_endpoints(api: TestClient, as_officer, fake_session) -> None:
    admin = as_officer("admin")
    fields = {
        "name": "JE Musiri",
        "designation": "Junior Engineer",
        "level": "je",
        "password": "pw",
        "jurisdiction": "Musiri",
    }
    created = api.post("/officers", json=fields, headers=admin)
    assert created.status_code == 200
    officer_id = created.json()["officer"]["id"]
    assert created.json()["officer"]["level"] == "JE"

    renamed = api.put(f"/officers/{officer_id}", json={**fields, "name": "JE Karur"}, headers=admin)
    assert renamed.json()["message"] == "User Updated"
    assert fake_session.posts[-1]["json"]["oldName"] == "JE Musiri"

    assert api.post("/officers", json=fields, headers=as_officer("ce")).status_code == 403
    assert api.post("/officers", json={**fields, "name": ""}, headers=admin).status_code == 400


def test_outbox_endpoints_are_admin_only(api: TestClient, as_officer, services) -> None:
    admin = as_officer("admin")
    services.outbox.record("SUBMIT", {"id": 7})

    entries = api.get("/outbox", headers=admin).json()
    assert entries[0]["sequence"] == 1
    assert api.get("/outbox", headers=as_officer("ee")).status_code == 403

    summary = api.post("/outbox/replay", json={}, headers=admin).json()
    assert summary["acknowledged"] == 1
    assert summary["remaining"] == 0


def test_jurisdiction_choices_endpoint(api: TestClient, as_officer) -> None:
    body = api.get("/admin/jurisdictions", headers=as_officer("admin")).json()
    assert "Trichy Sub-Division" in body["sub_divisions"]
    assert api.get("/admin/jurisdictions", headers=as_officer("ee")).status_code == 403
