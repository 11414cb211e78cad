"""Shared fixtures: an in-memory dataset and a scripted HTTP session for the store."""
from __future__ import annotations

from typing import Any

import pytest
import requests

from inspection.domain.models import Officer, Report, Site
from inspection.domain.states import ReportStatus
from inspection.events.bus import InMemoryEventBus
from inspection.infra.repositories import Dataset, Repository
from inspection.infra.store_client import SheetStoreClient
from inspection.services.admin_service import AdminService
from inspection.services.auth_service import AuthService, SessionContext
from inspection.services.metrics_service import MetricsService
from inspection.services.sync_service import OutboxService
from inspection.services.workflow_service import WorkflowService


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    """Stands in for requests.Session; records calls and replays scripted results."""

    def __init__(self, get_result: Any = None, post_result: Any = None) -> None:
        self.get_result = get_result if get_result is not None else FakeResponse(200, {"status": "success"})
        self.post_result = post_result if post_result is not None else FakeResponse(200, {"status": "success"})
        self.gets: list[dict[str, Any]] = []
        self.posts: list[dict[str, Any]] = []

    def get(self, url: str, timeout: float | None = None) -> FakeResponse:
        self.gets.append({"url": url, "timeout": timeout})
        if isinstance(self.get_result, Exception):
            raise self.get_result
        return self.get_result

    def post(self, url: str, json: dict[str, Any] | None = None, timeout: float | None = None) -> FakeResponse:
        self.posts.append({"url": url, "json": json, "timeout": timeout})
        if isinstance(self.post_result, Exception):
            raise self.post_result
        return self.post_result


def make_sites() -> list[Site]:
    return [
        Site(id=1, name="Hogenakkal", district="Dharmapuri", lat=12.1208, lng=77.7855),
        Site(id=2, name="Musiri", district="Trichy", lat=10.95, lng=78.44),
        Site(id=3, name="Kodumudi", district="Erode", lat=11.17, lng=77.88),
        Site(id=4, name="Mettur", district="Salem", lat=11.79, lng=77.8),
    ]


def make_officers() -> list[Officer]:
    return [
        Officer(id="admin", name="Admin", designation="IT Head", level="ADMIN", password="123"),
        Officer(id="ce", name="Chief Engineer", designation="CE (SRO)", level="CE", password="123"),
        Officer(id="se", name="Sup. Engineer", designation="SE (Trichy)", level="SE", password="123"),
        Officer(id="ee", name="EE Trichy", designation="EE (Trichy)", level="EE", password="123"),
        Officer(
            id="sdo",
            name="SDO Trichy",
            designation="Sub-Div Officer",
            level="SDO",
            jurisdiction="Trichy Sub-Division, Musiri",
            password="123",
        ),
        Officer(
            id="sdo-salem",
            name="SDO Salem",
            designation="Sub-Div Officer",
            level="SDO",
            jurisdiction="Salem Sub-Division",
            password="abc",
        ),
    ]


@pytest.fixture
def dataset() -> Dataset:
    return Dataset(
        sites=make_sites(),
        officers=make_officers(),
        reports=[
            Report(
                id=101,
                date="2024-03-05T10:00:00+00:00",
                officer="EE Trichy",
                inspector_role="EE",
                site="Musiri",
                remarks="Gauge post repainting needed",
                status=ReportStatus.PENDING_COMPLIANCE,
            )
        ],
    )


@pytest.fixture
def repo(dataset: Dataset) -> Repository:
    return Repository(dataset)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(fake_session: FakeSession) -> SheetStoreClient:
    return SheetStoreClient("https://store.example/exec", timeout=5, session=fake_session)


@pytest.fixture
def bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def outbox(client: SheetStoreClient, bus: InMemoryEventBus) -> OutboxService:
    return OutboxService(client, bus=bus)


@pytest.fixture
def workflow(repo: Repository, outbox: OutboxService, bus: InMemoryEventBus) -> WorkflowService:
    return WorkflowService(repo, outbox, bus=bus)


@pytest.fixture
def admin(repo: Repository, outbox: OutboxService, bus: InMemoryEventBus) -> AdminService:
    return AdminService(repo, outbox, bus=bus)


@pytest.fixture
def metrics(repo: Repository) -> MetricsService:
    return MetricsService(repo)


@pytest.fixture
def auth(repo: Repository) -> AuthService:
    return AuthService(repo)


@pytest.fixture
def ctx_for(repo: Repository):
    def _make(officer_id: str) -> SessionContext:
        officer = repo.get_officer(officer_id)
        assert officer is not None
        return SessionContext(officer=officer)

    return _make


@pytest.fixture
def offline_session() -> FakeSession:
    return FakeSession(
        get_result=requests.ConnectionError("network down"),
        post_result=requests.ConnectionError("network down"),
    )


@pytest.fixture
def make_response():
    return FakeResponse


@pytest.fixture
def make_session():
    return FakeSession
