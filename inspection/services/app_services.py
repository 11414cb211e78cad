from __future__ import annotations

from dataclasses import dataclass

from inspection.config import Settings, settings as default_settings
from inspection.events.bus import InMemoryEventBus
from inspection.infra.repositories import Repository
from inspection.infra.session_store import SessionStore
from inspection.infra.store_client import SheetStoreClient
from inspection.services.admin_service import AdminService
from inspection.services.auth_service import AuthService
from inspection.services.metrics_service import MetricsService
from inspection.services.sync_service import OutboxService
from inspection.services.workflow_service import WorkflowService


@dataclass
class InspectionServices:
    repo: Repository
    bus: InMemoryEventBus
    outbox: OutboxService
    auth: AuthService
    workflow: WorkflowService
    admin: AdminService
    metrics: MetricsService


def build_services(
    cfg: Settings | None = None,
    *,
    client: SheetStoreClient | None = None,
    session_store: SessionStore | None = None,
    repo: Repository | None = None,
) -> InspectionServices:
    cfg = cfg or default_settings
    if client is None and cfg.store_url:
        client = SheetStoreClient(cfg.store_url, timeout=cfg.store_timeout_seconds)
    repo = repo or Repository.from_store(client)
    bus = InMemoryEventBus()
    outbox = OutboxService(client, bus=bus, background=cfg.background_propagation())
    return InspectionServices(
        repo=repo,
        bus=bus,
        outbox=outbox,
        auth=AuthService(repo, session_store),
        workflow=WorkflowService(repo, outbox, bus=bus),
        admin=AdminService(repo, outbox, bus=bus),
        metrics=MetricsService(repo),
    )
