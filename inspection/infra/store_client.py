from __future__ import annotations

import logging
from typing import Any

import requests

from inspection.config import settings

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    pass


class SheetStoreClient:
    """Spreadsheet-backed HTTP endpoint acting as the system of record.

    Reads are a single GET returning every sheet; writes are JSON POSTs tagged
    with an ``action`` field. Write responses are never interpreted.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = (base_url if base_url is not None else settings.store_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.store_timeout_seconds
        self.session = session or requests.Session()

    def configured(self) -> bool:
        return bool(self.base_url)

    def load_all(self) -> dict[str, Any]:
        if not self.configured():
            raise StoreError("Store URL missing")
        try:
            res = self.session.get(self.base_url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise StoreError(f"Store unreachable: {exc}") from exc
        if res.status_code >= 400:
            raise StoreError(f"Store load failed [{res.status_code}] {res.text[:200]}")
        try:
            data = res.json()
        except ValueError as exc:
            raise StoreError("Store returned a non-JSON payload") from exc
        if not isinstance(data, dict):
            raise StoreError("Store payload is not an object")
        return data

    def post_action(self, payload: dict[str, Any]) -> None:
        if not self.configured():
            raise StoreError("Store URL missing")
        action = payload.get("action")
        try:
            res = self.session.post(self.base_url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise StoreError(f"{action} failed: {exc}") from exc
        if res.status_code >= 400:
            raise StoreError(f"{action} failed [{res.status_code}] {res.text[:200]}")
        logger.debug("Store accepted %s", action)

    def append_report(self, payload: dict[str, Any]) -> None:
        self.post_action({**payload, "action": "SUBMIT"})

    def update_status(self, report_id: int | str, status: str, note: str | None = None) -> None:
        self.post_action({"action": "UPDATE_STATUS", "rowId": report_id, "status": status, "note": note})

    def upsert_officer(self, payload: dict[str, Any], *, update: bool) -> None:
        self.post_action({**payload, "action": "UPDATE_USER" if update else "ADD_USER"})
