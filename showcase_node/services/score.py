"""Score calculator: decayed upvotes + decayed views + badge bonuses.

    score = Σ upvote_weight · decay(upvote_age)
          + Σ view_weight   · decay(view_age)
          + Σ badge.bonus

with `decay(age) = 2 ** (-age_days / half_life_days)`. The computation reads
nothing but the data model and the `as_of` timestamp, so identical inputs give
bit-identical results. Events (and badge awards) timestamped after `as_of` do
not count.

Scores are cached per user in a `ScoreCache`. Writes bump the user's
staleness generation; a cached record is served only while its generation is
current and it was computed for the same `as_of`.
"""
from __future__ import annotations

import logging
import math
import threading
from datetime import datetime

from showcase_node.clock import ensure_utc
from showcase_node.engine_config import EngineConfig
from showcase_node.entities.project import Project
from showcase_node.entities.score import ScoreRecord
from showcase_node.entities.user import User
from showcase_node.store.interfaces import DataStore

SECONDS_PER_DAY = 86400.0


def age_in_days(timestamp: datetime, as_of: datetime) -> float:
    return (ensure_utc(as_of) - ensure_utc(timestamp)).total_seconds() / SECONDS_PER_DAY


def decay(age_days: float, half_life_days: float) -> float:
    """Exponential half-life weight in (0, 1]; ages below zero count as zero."""
    return 2.0 ** (-max(age_days, 0.0) / half_life_days)


class ScoreCache:
    """Cached ScoreRecords plus a per-user staleness generation."""

    def __init__(self) -> None:
        self._records: dict[str, ScoreRecord] = {}
        self._versions: dict[str, int] = {}
        self._lock = threading.Lock()

    def version(self, user_id: str) -> int:
        return self._versions.get(user_id, 0)

    def mark_stale(self, user_id: str) -> None:
        with self._lock:
            self._versions[user_id] = self._versions.get(user_id, 0) + 1

    def is_stale(self, user_id: str) -> bool:
        record = self._records.get(user_id)
        return record is None or record.version != self.version(user_id)

    def get(self, user_id: str) -> ScoreRecord | None:
        return self._records.get(user_id)

    def fresh(self, user_id: str, as_of: datetime) -> ScoreRecord | None:
        record = self._records.get(user_id)
        if record is None or record.version != self.version(user_id):
            return None
        if record.computed_at != as_of:
            return None
        return record

    def put(self, record: ScoreRecord) -> None:
        with self._lock:
            current = self._records.get(record.user_id)
            # an older generation never replaces a newer one
            if current is None or record.version >= current.version:
                self._records[record.user_id] = record

    def invalidate(self, user_id: str) -> None:
        with self._lock:
            self._records.pop(user_id, None)
            self._versions[user_id] = self._versions.get(user_id, 0) + 1


class ScoreCalculator:
    def __init__(self, store: DataStore, config: EngineConfig, cache: ScoreCache | None = None):
        self.store = store
        self.config = config
        self.cache = cache or ScoreCache()
        self.logger = logging.getLogger(__name__)

    def compute_score(self, user: User, projects: list[Project], as_of: datetime, version: int = 0) -> ScoreRecord:
        """Pure score computation over one user's data as of `as_of`."""
        as_of = ensure_utc(as_of)
        half_life = self.config.half_life_days

        upvote_terms: list[float] = []
        view_terms: list[float] = []
        for project in sorted(projects, key=lambda p: p.id):
            for upvote in project.upvotes:
                age = age_in_days(upvote.timestamp, as_of)
                if age >= 0:
                    upvote_terms.append(self.config.upvote_weight * decay(age, half_life))
            for view in project.views:
                age = age_in_days(view.timestamp, as_of)
                if age >= 0:
                    view_terms.append(self.config.view_weight * decay(age, half_life))

        badge_terms: list[float] = []
        for badge_id, awarded_at in user.badges.items():
            definition = self.config.badge(badge_id)
            if definition is not None and ensure_utc(awarded_at) <= as_of:
                badge_terms.append(definition.bonus)

        upvote_component = math.fsum(upvote_terms)
        view_component = math.fsum(view_terms)
        badge_component = math.fsum(badge_terms)
        return ScoreRecord(
            user_id=user.id,
            value=math.fsum((upvote_component, view_component, badge_component)),
            upvote_component=upvote_component,
            view_component=view_component,
            badge_component=badge_component,
            computed_at=as_of,
            version=version,
        )

    def refresh(self, user: User, as_of: datetime) -> ScoreRecord:
        """Serve the cached record when fresh for `as_of`, otherwise recompute and cache it."""
        as_of = ensure_utc(as_of)
        cached = self.cache.fresh(user.id, as_of)
        if cached is not None:
            return cached

        # generation is read before the data so a concurrent write leaves the record stale
        version = self.cache.version(user.id)
        current = self.store.get_user(user.id) or user
        projects = self.store.projects_by_owner(user.id)
        record = self.compute_score(current, projects, as_of, version=version)
        self.cache.put(record)
        return record

    def refresh_by_id(self, user_id: str, as_of: datetime) -> ScoreRecord | None:
        user = self.store.get_user(user_id)
        if user is None:
            return None
        return self.refresh(user, as_of)

    def invalidate(self, user_id: str) -> None:
        self.cache.invalidate(user_id)
        self.logger.debug("score cache invalidated for %s", user_id)
