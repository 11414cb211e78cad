from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from inspection.config import settings
from inspection.domain.models import Officer

logger = logging.getLogger(__name__)


class SessionStore:
    """Keeps the signed-in officer record between launches.

    The file holds a JSON object keyed by storage key, so several keys may
    share one file. The stored record is trusted on restore.
    """

    def __init__(self, path: str | Path | None = None, key: str | None = None) -> None:
        self.path = Path(path or settings.session_file)
        self.key = key or settings.session_storage_key

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def save(self, officer: Officer) -> None:
        data = self._read_all()
        data[self.key] = officer.to_row()
        self._write_all(data)

    def restore(self) -> Officer | None:
        row = self._read_all().get(self.key)
        if not isinstance(row, dict) or not row.get("name"):
            return None
        return Officer.from_row(row)

    def clear(self) -> None:
        data = self._read_all()
        if data.pop(self.key, None) is not None:
            self._write_all(data)
