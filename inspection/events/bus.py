from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable

EventHandler = Callable[[dict[str, Any]], None]

logger = logging.getLogger(__name__)


class InMemoryEventBus:
    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._subscribers[event_type].append(handler)

    def publish(self, event_type: str, envelope: dict[str, Any]) -> None:
        handlers = [*self._subscribers.get(event_type, []), *self._subscribers.get("*", [])]
        for handler in handlers:
            # A failing listener must not undo a workflow step that already happened.
            try:
                handler(envelope)
            except Exception:
                logger.exception("Event handler failed for %s", event_type)
