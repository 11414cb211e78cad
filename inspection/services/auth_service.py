from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass, field
from threading import RLock
from typing import Any

from inspection.domain.models import Officer
from inspection.domain.ranks import login_roster
from inspection.infra.repositories import Repository
from inspection.infra.session_store import SessionStore

logger = logging.getLogger(__name__)

TAB_HOME = "HOME"
TAB_ADMIN = "ADMIN"
TAB_TASKS = "APPROVALS"
TAB_DASHBOARD = "DASHBOARD"


@dataclass
class AuthResponse:
    ok: bool
    message: str
    data: dict[str, Any] | None = None


@dataclass
class SessionContext:
    """Everything a workflow call needs to know about the signed-in officer."""

    officer: Officer
    offline: bool = False
    notices: list[str] = field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return self.officer.level == "ADMIN"

    def landing_tab(self) -> str:
        return TAB_ADMIN if self.is_admin else TAB_HOME

    def available_tabs(self) -> list[str]:
        tabs = [TAB_HOME]
        if self.officer.level != "SDO":
            tabs.append(TAB_DASHBOARD)
        if self.is_admin:
            tabs.append(TAB_ADMIN)
        else:
            tabs.append(TAB_TASKS)
        return tabs

    def go_offline(self, notice: str) -> None:
        self.offline = True
        self.notices.append(notice)


class AuthService:
    def __init__(self, repo: Repository, session_store: SessionStore | None = None) -> None:
        self.repo = repo
        self.session_store = session_store
        self._lock = RLock()
        # sha256(token) -> officer id; raw tokens are never kept.
        self._tokens: dict[str, str] = {}

    def login_roster(self, search: str = "") -> list[Officer]:
        return login_roster(self.repo.list_officers(), search)

    def sign_in(self, *, officer_id: str, password: str) -> AuthResponse:
        officer = self.repo.get_officer(officer_id)
        if officer is None:
            return AuthResponse(False, "Unknown officer")
        if str(officer.password).strip() != str(password).strip():
            logger.info("Rejected sign-in for %s", officer.name)
            return AuthResponse(False, "Invalid Password")

        ctx = SessionContext(officer=officer, offline=not self.repo.using_store)
        if self.session_store is not None:
            self.session_store.save(officer)
        return AuthResponse(
            True,
            f"Signed in as {officer.name}",
            {"context": ctx, "tab": ctx.landing_tab(), "token": self._issue_token(officer)},
        )

    def resolve_token(self, token: str) -> SessionContext | None:
        """Session for a token handed out by `sign_in`, or None."""
        with self._lock:
            officer_id = self._tokens.get(_token_digest(token))
        if officer_id is None:
            return None
        officer = self.repo.get_officer(officer_id)
        if officer is None:
            return None
        return SessionContext(officer=officer, offline=not self.repo.using_store)

    def revoke_token(self, token: str) -> bool:
        with self._lock:
            return self._tokens.pop(_token_digest(token), None) is not None

    def _issue_token(self, officer: Officer) -> str:
        token = secrets.token_urlsafe(32)
        with self._lock:
            self._tokens[_token_digest(token)] = officer.id
        return token

    def restore(self) -> SessionContext | None:
        if self.session_store is None:
            return None
        officer = self.session_store.restore()
        if officer is None:
            return None
        return SessionContext(officer=officer, offline=not self.repo.using_store)

    def sign_out(self) -> None:
        if self.session_store is not None:
            self.session_store.clear()


def _token_digest(token: str) -> str:
    return hashlib.sha256((token or "").strip().encode("utf-8")).hexdigest()
