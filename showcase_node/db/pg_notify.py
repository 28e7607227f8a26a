"""PostgreSQL NOTIFY delivery for engine notifications.

Usage:
    from showcase_node.db.pg_notify import PgNotifySink
    sink = PgNotifySink(channel="showcase_events")
    engine = ShowcaseEngine(store, notification_sink=sink)

Listeners receive the JSON payload of each BadgeAwarded / RankChanged event.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable

import psycopg2
from sqlalchemy.engine import make_url

from showcase_node.db.session import database_url
from showcase_node.entities.events import NotificationEvent
from showcase_node.notifications import NotificationSink

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL = "showcase_events"


def notify(channel: str = DEFAULT_CHANNEL, payload: str = "", connection: Any = None) -> None:
    """Send a NOTIFY on the given channel with an optional payload string."""
    own_conn = connection is None
    if own_conn:
        connection = _raw_connection()
    try:
        connection.autocommit = True
        with connection.cursor() as cur:
            cur.execute("SELECT pg_notify(%s, %s)", (channel, payload))
    finally:
        if own_conn:
            connection.close()


class PgNotifySink(NotificationSink):
    def __init__(self, channel: str = DEFAULT_CHANNEL, connection_factory: Callable[[], Any] | None = None):
        self.channel = channel
        self._connection_factory = connection_factory

    def publish(self, event: NotificationEvent) -> None:
        payload = json.dumps(event.to_payload(), sort_keys=True, separators=(",", ":"))
        connection = self._connection_factory() if self._connection_factory else None
        try:
            notify(self.channel, payload, connection=connection)
        finally:
            if connection is not None:
                connection.close()
        logger.debug("notified %s: %s", self.channel, payload)


def _raw_connection():
    """Get a raw psycopg2 connection (not SQLAlchemy session)."""
    url = make_url(database_url())
    return psycopg2.connect(
        host=url.host,
        port=url.port or 5432,
        user=url.username,
        password=url.password,
        dbname=url.database,
    )
