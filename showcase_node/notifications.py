"""Notification sinks: where badge awards and rank changes are delivered.

The engine hands events to a sink and moves on; it never sends notifications
itself. Sinks are expected to deliver at-least-once, so consumers deduplicate
on `event.dedup_key`.
"""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod

from showcase_node.entities.events import NotificationEvent

logger = logging.getLogger(__name__)


class NotificationSink(ABC):

    @abstractmethod
    def publish(self, event: NotificationEvent) -> None:
        pass


class LoggingNotificationSink(NotificationSink):
    """Default sink: writes each event to the log."""

    def publish(self, event: NotificationEvent) -> None:
        logger.info("notification %s: %s", event.kind, event.to_payload())


class InMemoryNotificationSink(NotificationSink):
    def __init__(self):
        self._lock = threading.Lock()
        self.events: list[NotificationEvent] = []

    def publish(self, event: NotificationEvent) -> None:
        with self._lock:
            self.events.append(event)

    def of_kind(self, kind: str) -> list[NotificationEvent]:
        with self._lock:
            return [e for e in self.events if e.kind == kind]

    def clear(self):
        """Clear all events (only for testing)."""
        with self._lock:
            self.events.clear()


def deliver(sink: NotificationSink, event: NotificationEvent) -> bool:
    """Publish to `sink`; a failing sink is logged and never undoes engine state."""
    try:
        sink.publish(event)
        return True
    except Exception as exc:
        logger.warning("notification sink failed for %s %s: %s", event.kind, event.dedup_key, exc)
        return False
