"""Deterministic replay of an activity log into a fresh engine."""
from __future__ import annotations

import logging
from typing import Iterable

from showcase_node.engine_config import EngineConfig
from showcase_node.entities.project import ActivityEvent
from showcase_node.notifications import NotificationSink
from showcase_node.services.engine import ShowcaseEngine
from showcase_node.store.interfaces import DataStore
from showcase_node.store.memory import InMemoryDataStore

logger = logging.getLogger(__name__)


def replay(
    events: Iterable[ActivityEvent],
    config: EngineConfig | None = None,
    store: DataStore | None = None,
    notification_sink: NotificationSink | None = None,
    **engine_kwargs,
) -> ShowcaseEngine:
    """Apply `events` in order to a new engine and return it.

    Replaying the same log twice yields identical users, projects and scores.
    """
    engine = ShowcaseEngine(
        store if store is not None else InMemoryDataStore(),
        config=config,
        notification_sink=notification_sink,
        **engine_kwargs,
    )
    applied = 0
    for event in events:
        engine.apply(event)
        applied += 1
    logger.info("replayed %d events", applied)
    return engine
