"""Leaderboard builder: refresh scores, order users, assign ranks, paginate.

Ordering (descending score, then):
1. more badges held at `as_of`
2. earlier join time
3. user id, lexical

The last key is unique, so the order is total and no two entries share a rank.

Rank changes are tracked across leaderboard builds only. A build for an
`as_of` earlier than the last tracked one is a historical read and leaves the
tracked ranks alone.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime

from showcase_node.clock import ensure_utc
from showcase_node.entities.events import RankChanged
from showcase_node.entities.score import LeaderboardEntry, ScoreRecord
from showcase_node.entities.user import User
from showcase_node.notifications import NotificationSink, deliver
from showcase_node.services.score import ScoreCalculator


def sort_key(score: float, user: User, as_of: datetime) -> tuple[float, int, datetime, str]:
    return (-score, -user.badge_count_as_of(as_of), ensure_utc(user.joined_at), user.id)


class LeaderboardBuilder:
    def __init__(
        self,
        calculator: ScoreCalculator,
        notification_sink: NotificationSink | None = None,
    ):
        self.calculator = calculator
        self.notification_sink = notification_sink
        self._previous_ranks: dict[str, int] = {}
        self._tracked_as_of: datetime | None = None
        self._rank_lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    def rank_all(self, users: list[User], as_of: datetime) -> list[LeaderboardEntry]:
        as_of = ensure_utc(as_of)

        # 1. fresh score per user as of one timestamp
        scored: list[tuple[ScoreRecord, User]] = [
            (self.calculator.refresh(user, as_of), user) for user in users
        ]

        # 2. total order
        scored.sort(key=lambda pair: sort_key(pair[0].value, pair[1], as_of))

        # 3. dense ranks
        return [
            LeaderboardEntry(
                rank=idx,
                user_id=user.id,
                score=record.value,
                badge_count=user.badge_count_as_of(as_of),
                joined_at=ensure_utc(user.joined_at),
            )
            for idx, (record, user) in enumerate(scored, start=1)
        ]

    def build(self, users: list[User], page: int, page_size: int, as_of: datetime) -> list[LeaderboardEntry]:
        if page < 0 or page_size < 1:
            raise ValueError(f"invalid page {page} / page_size {page_size}")

        as_of = ensure_utc(as_of)
        ranked = self.rank_all(users, as_of)
        self._track_rank_changes(ranked, as_of)

        # 4. slice; past the end is simply empty
        start = page * page_size
        entries = ranked[start:start + page_size]
        self.logger.info(
            "leaderboard built as of %s: %d users, page %d → %d entries",
            as_of.isoformat(), len(ranked), page, len(entries),
        )
        return entries

    def _track_rank_changes(self, ranked: list[LeaderboardEntry], as_of: datetime) -> None:
        with self._rank_lock:
            if self._tracked_as_of is not None and as_of < self._tracked_as_of:
                return
            previous = self._previous_ranks
            self._previous_ranks = {entry.user_id: entry.rank for entry in ranked}
            self._tracked_as_of = as_of

        if self.notification_sink is None or not previous:
            return
        for entry in ranked:
            old_rank = previous.get(entry.user_id)
            if old_rank is not None and entry.rank < old_rank:
                deliver(
                    self.notification_sink,
                    RankChanged(user_id=entry.user_id, old_rank=old_rank, new_rank=entry.rank, timestamp=as_of),
                )
