from __future__ import annotations

import pytest

from inspection.domain.models import Officer
from inspection.infra.fallback import fallback_payload
from inspection.infra.repositories import Repository, load_dataset
from inspection.infra.session_store import SessionStore
from inspection.services.auth_service import (
    TAB_ADMIN,
    TAB_DASHBOARD,
    TAB_HOME,
    TAB_TASKS,
    AuthService,
    SessionContext,
)


@pytest.fixture
def session_store(tmp_path) -> SessionStore:
    return SessionStore(tmp_path / "session.json", key="test_user")


def test_sign_in_trims_both_passwords(repo, session_store) -> None:
    auth = AuthService(repo, session_store)
    res = auth.sign_in(officer_id="sdo", password=" 123 ")
    assert res.ok
    assert res.data["tab"] == TAB_HOME
    assert res.data["context"].officer.name == "SDO Trichy"


def test_wrong_password_is_rejected(auth: AuthService) -> None:
    res = auth.sign_in(officer_id="sdo-salem", password="123")
    assert not res.ok
    assert res.message == "Invalid Password"


def test_unknown_officer_is_rejected(auth: AuthService) -> None:
    assert auth.sign_in(officer_id="nobody", password="123").message == "Unknown officer"


def test_admin_lands_on_admin_tab(auth: AuthService) -> None:
    assert auth.sign_in(officer_id="admin", password="123").data["tab"] == TAB_ADMIN


def test_session_round_trip(repo, session_store) -> None:
    auth = AuthService(repo, session_store)
    auth.sign_in(officer_id="ee", password="123")

    restored = AuthService(repo, session_store).restore()
    assert restored is not None
    assert restored.officer.id == "ee"
    assert restored.officer.name == "EE Trichy"

    auth.sign_out()
    assert auth.restore() is None


def test_restore_trusts_stored_record(repo, session_store) -> None:
    session_store.save(Officer(id="gone", name="Retired EE", level="EE", password="old"))
    ctx = AuthService(repo, session_store).restore()
    assert ctx is not None and ctx.officer.name == "Retired EE"


def test_corrupt_session_file_is_ignored(repo, tmp_path) -> None:
    path = tmp_path / "session.json"
    path.write_text("{not json", encoding="utf-8")
    assert AuthService(repo, SessionStore(path, key="k")).restore() is None


def test_session_keys_share_a_file(tmp_path) -> None:
    path = tmp_path / "session.json"
    SessionStore(path, key="a").save(Officer(id="1", name="One"))
    SessionStore(path, key="b").save(Officer(id="2", name="Two"))
    SessionStore(path, key="a").clear()
    assert SessionStore(path, key="a").restore() is None
    assert SessionStore(path, key="b").restore().name == "Two"


def test_login_roster_is_ranked_and_searchable(auth: AuthService) -> None:
    assert [o.level for o in auth.login_roster()][:4] == ["CE", "SE", "EE", "SDO"]
    assert [o.name for o in auth.login_roster("chief")] == ["Chief Engineer"]


def test_fallback_session_starts_offline() -> None:
    repo = Repository(load_dataset(None))
    officer = next(o for o in repo.list_officers() if o.level == "SDO")
    res = AuthService(repo).sign_in(officer_id=officer.id, password="123")
    assert res.ok
    assert res.data["context"].offline is True
    assert officer.jurisdiction == "Trichy, Hogenakkal"


def test_fallback_payload_is_fresh_each_call() -> None:
    first = fallback_payload()
    first["sites"].clear()
    assert len(fallback_payload()["sites"]) == 3


@pytest.mark.parametrize(
    "level, tabs",
    [
        ("ADMIN", [TAB_HOME, TAB_DASHBOARD, TAB_ADMIN]),
        ("CE", [TAB_HOME, TAB_DASHBOARD, TAB_TASKS]),
        ("EE", [TAB_HOME, TAB_DASHBOARD, TAB_TASKS]),
        ("SDO", [TAB_HOME, TAB_TASKS]),
    ],
)
def test_available_tabs_by_level(level: str, tabs: list[str]) -> None:
    assert SessionContext(officer=Officer(name="x", level=level)).available_tabs() == tabs


def test_sign_in_issues_a_resolvable_token(auth: AuthService) -> None:
    token = auth.sign_in(officer_id="ee", password="123").data["token"]

    ctx = auth.resolve_token(token)
    assert ctx is not None and ctx.officer.id == "ee"
    assert auth.resolve_token("ee") is None
    assert auth.resolve_token("") is None


def test_failed_sign_in_issues_no_token(auth: AuthService) -> None:
    assert auth.sign_in(officer_id="ee", password="wrong").data is None


def test_revoked_token_no_longer_resolves(auth: AuthService) -> None:
    token = auth.sign_in(officer_id="ce", password="123").data["token"]
    assert auth.revoke_token(token) is True
    assert auth.resolve_token(token) is None
    assert auth.revoke_token(token) is False
