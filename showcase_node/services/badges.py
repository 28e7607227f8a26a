"""Badge evaluation: award each badge at most once, never revoke."""
from __future__ import annotations

import logging
from datetime import datetime

from showcase_node.badges.rules import BadgeDefinition, MetricsSnapshot
from showcase_node.entities.events import BadgeAwarded
from showcase_node.notifications import LoggingNotificationSink, NotificationSink, deliver
from showcase_node.services.locks import KeyedLocks
from showcase_node.services.score import ScoreCache
from showcase_node.store.interfaces import DataStore


class BadgeEngine:
    def __init__(
        self,
        store: DataStore,
        definitions: tuple[BadgeDefinition, ...],
        score_cache: ScoreCache,
        notification_sink: NotificationSink | None = None,
        user_locks: KeyedLocks | None = None,
    ):
        self.store = store
        self.definitions = definitions
        self.score_cache = score_cache
        self.notification_sink = notification_sink or LoggingNotificationSink()
        self.user_locks = user_locks or KeyedLocks()
        self.logger = logging.getLogger(__name__)

    def evaluate(self, user_id: str, snapshot: MetricsSnapshot, timestamp: datetime) -> list[str]:
        """Award every badge whose rule `snapshot` satisfies and the user does not hold yet.

        Returns the newly awarded badge ids in catalogue order. Calling it again
        with the same (or a smaller) snapshot awards nothing.
        """
        with self.user_locks.get(user_id):
            user = self.store.get_user(user_id)
            if user is None:
                return []

            awarded: list[str] = []
            for badge in self.definitions:
                if user.has_badge(badge.id):
                    continue
                if badge.is_met(snapshot):
                    user.badges[badge.id] = timestamp
                    awarded.append(badge.id)

            if not awarded:
                return []
            self.store.put_user(user)

        self.score_cache.mark_stale(user_id)
        for badge_id in awarded:
            self.logger.info("badge %s awarded to %s", badge_id, user_id)
            deliver(self.notification_sink, BadgeAwarded(badge_id=badge_id, user_id=user_id, timestamp=timestamp))
        return awarded
