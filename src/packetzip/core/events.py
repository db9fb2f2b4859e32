"""Operation event bus.

ArchiveService publishes ``operation.start`` and ``operation.end`` envelopes
here. Subscribers receive ``(event, envelope)``; a failing subscriber is
logged and skipped.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from packetzip.core.logging import get_logger

_logger = get_logger(__name__)

EventHandler = Callable[[str, dict[str, Any]], None]


class EventBus:
    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        """Register handler; subscribing the same handler again is a no-op."""
        if handler not in self._handlers:
            self._handlers.append(handler)

    def publish(self, event: str, data: dict[str, Any]) -> None:
        for handler in list(self._handlers):
            try:
                handler(event, data)
            except Exception as e:
                _logger.error(f"event handler failed event={event!r}: {type(e).__name__}: {e}")

    def clear(self) -> None:
        self._handlers.clear()


_EVENT_BUS = EventBus()


def get_event_bus() -> EventBus:
    return _EVENT_BUS
