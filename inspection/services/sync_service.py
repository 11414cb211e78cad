from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from threading import RLock
from typing import Any

from inspection.domain.models import utc_now
from inspection.events.bus import InMemoryEventBus
from inspection.events.contracts import build_event_envelope
from inspection.infra.store_client import SheetStoreClient, StoreError

logger = logging.getLogger(__name__)

# Fields blanked from a payload once the store has it.
REDACTED_FIELDS = ("password",)


@dataclass
class OutboxEntry:
    sequence: int
    action: str
    payload: dict[str, Any]
    created_at: str = field(default_factory=utc_now)
    acknowledged: bool = False
    in_flight: bool = False
    attempts: int = 0
    last_error: str | None = None


@dataclass(frozen=True)
class DispatchResult:
    sequence: int
    ok: bool | None
    message: str


class OutboxService:
    """Local write log pushed to the store on a best-effort basis.

    Every write gets a monotonic sequence number. A failed push leaves the
    entry unacknowledged; nothing retries it until `replay_pending` runs.
    Only the newest `keep_acknowledged` delivered entries are retained.
    """

    def __init__(
        self,
        client: SheetStoreClient | None,
        *,
        bus: InMemoryEventBus | None = None,
        background: bool = False,
        keep_acknowledged: int = 50,
    ) -> None:
        self.client = client
        self.bus = bus
        self.keep_acknowledged = max(0, keep_acknowledged)
        self._lock = RLock()
        self._entries: list[OutboxEntry] = []
        self._sequence = 0
        # One worker keeps background pushes in sequence order.
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="outbox") if background else None

    def record(self, action: str, payload: dict[str, Any]) -> OutboxEntry:
        with self._lock:
            self._sequence += 1
            entry = OutboxEntry(sequence=self._sequence, action=action, payload={**payload, "action": action})
            self._entries.append(entry)
            return entry

    def push(self, action: str, payload: dict[str, Any]) -> DispatchResult:
        entry = self.record(action, payload)
        if self._executor is not None:
            self._claim(entry)
            self._executor.submit(self._send, entry)
            return DispatchResult(entry.sequence, None, f"{action} queued")
        return self.dispatch(entry)

    def dispatch(self, entry: OutboxEntry) -> DispatchResult:
        """Send one entry unless it is already delivered or being sent."""
        if not self._claim(entry):
            return DispatchResult(entry.sequence, None, f"{entry.action} already in flight or sent")
        return self._send(entry)

    def _claim(self, entry: OutboxEntry) -> bool:
        with self._lock:
            if entry.acknowledged or entry.in_flight:
                return False
            entry.in_flight = True
            entry.attempts += 1
            return True

    def _send(self, entry: OutboxEntry) -> DispatchResult:
        try:
            if self.client is None:
                raise StoreError("Store client not configured")
            self.client.post_action(entry.payload)
        except StoreError as exc:
            with self._lock:
                entry.in_flight = False
                entry.last_error = str(exc)
            logger.warning("Propagation of #%s %s failed: %s", entry.sequence, entry.action, exc)
            self._emit(
                "store.propagation_failed",
                {"sequence": entry.sequence, "action": entry.action, "error": str(exc)},
            )
            return DispatchResult(entry.sequence, False, str(exc))

        with self._lock:
            entry.in_flight = False
            entry.acknowledged = True
            entry.last_error = None
            entry.payload = {k: ("" if k in REDACTED_FIELDS else v) for k, v in entry.payload.items()}
            self._prune()
        return DispatchResult(entry.sequence, True, f"{entry.action} sent")

    def _prune(self) -> None:
        acknowledged = [e for e in self._entries if e.acknowledged]
        excess = len(acknowledged) - self.keep_acknowledged
        if excess <= 0:
            return
        dropped = {id(e) for e in acknowledged[:excess]}
        self._entries = [e for e in self._entries if id(e) not in dropped]

    def entries(self) -> list[OutboxEntry]:
        with self._lock:
            return [replace(e, payload=dict(e.payload)) for e in self._entries]

    def pending(self) -> list[OutboxEntry]:
        with self._lock:
            return [e for e in self._entries if not e.acknowledged]

    def replay_pending(self, limit: int | None = None) -> dict[str, Any]:
        """Re-send unacknowledged entries oldest first; stops at the first failure.

        Entries a background push is still sending are skipped.
        """
        with self._lock:
            batch = sorted((e for e in self._entries if not e.acknowledged and not e.in_flight), key=lambda e: e.sequence)
        if limit is not None:
            batch = batch[: max(0, limit)]

        attempted = 0
        acknowledged = 0
        failures: list[dict[str, Any]] = []
        for entry in batch:
            result = self.dispatch(entry)
            if result.ok is None:
                continue
            attempted += 1
            if not result.ok:
                failures.append({"sequence": entry.sequence, "action": entry.action, "error": result.message})
                break
            acknowledged += 1

        summary = {
            "attempted": attempted,
            "acknowledged": acknowledged,
            "remaining": len(self.pending()),
            "failures": failures,
        }
        self._emit("store.replayed", {"attempted": attempted, "acknowledged": acknowledged})
        return summary

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)

    def _emit(self, event_type: str, payload: dict[str, Any]) -> None:
        if self.bus is None:
            return
        envelope = build_event_envelope(event_type=event_type, actor_id=None, actor_name=None, payload=payload)
        self.bus.publish(event_type, envelope)
