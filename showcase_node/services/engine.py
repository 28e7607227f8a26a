"""ShowcaseEngine: the write and read entry points of the leaderboard engine.

Write API (`publish_project`, `upvote`, `view`) is the only way activity enters
the engine: aggregate metrics → re-evaluate badges → mark scores stale.

Read API (`leaderboard`, `user_score`, `user_rank`) requires a valid session
token from the external auth layer. Without one the result is ACCESS_DENIED
and carries no data at all.

Every outcome is returned as a result value; nothing here raises for a bad
request.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from showcase_node.clock import Clock, ensure_utc, utc_now
from showcase_node.engine_config import EngineConfig
from showcase_node.entities.project import ActivityEvent, ProjectPublished, UpvoteEvent, ViewEvent
from showcase_node.notifications import LoggingNotificationSink, NotificationSink
from showcase_node.results import (
    ACCESS_DENIED_MESSAGE,
    LeaderboardResult,
    RankResult,
    RejectReason,
    ResultStatus,
    ScoreResult,
    WriteResult,
)
from showcase_node.services.badges import BadgeEngine
from showcase_node.services.leaderboard import LeaderboardBuilder
from showcase_node.services.locks import KeyedLocks
from showcase_node.services.metrics import MetricsAggregator
from showcase_node.services.score import ScoreCache, ScoreCalculator
from showcase_node.store.interfaces import DataStore

SessionValidator = Callable[[str | None], bool]

DEFAULT_MAX_PAGE_SIZE = 100


def _deny_all(token: str | None) -> bool:
    return False


def _valid_id(value: str | None) -> bool:
    return isinstance(value, str) and bool(value.strip())


class ShowcaseEngine:
    def __init__(
        self,
        store: DataStore,
        config: EngineConfig | None = None,
        notification_sink: NotificationSink | None = None,
        session_validator: SessionValidator | None = None,
        clock: Clock | None = None,
        max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
    ):
        self.store = store
        self.config = config or EngineConfig()
        self.notification_sink = notification_sink or LoggingNotificationSink()
        self.session_validator = session_validator or _deny_all
        self.clock = clock or utc_now
        self.max_page_size = max_page_size

        project_locks = KeyedLocks()
        user_locks = KeyedLocks()
        self.score_cache = ScoreCache()
        self.calculator = ScoreCalculator(store, self.config, self.score_cache)
        self.metrics = MetricsAggregator(
            store, self.config, self.score_cache,
            project_locks=project_locks, user_locks=user_locks,
        )
        self.badges = BadgeEngine(
            store, self.config.badge_definitions, self.score_cache,
            notification_sink=self.notification_sink, user_locks=user_locks,
        )
        self.leaderboard_builder = LeaderboardBuilder(self.calculator, self.notification_sink)
        self.logger = logging.getLogger(__name__)

    # ── write API ──

    def publish_project(self, owner_id: str, project_id: str, timestamp: datetime | None = None) -> WriteResult:
        if not (_valid_id(owner_id) and _valid_id(project_id)):
            return self._reject(RejectReason.INVALID_ARGUMENT, "owner_id and project_id are required")
        ts = self._timestamp(timestamp)

        result = self.metrics.publish_project(owner_id, project_id, ts)
        if result.status != ResultStatus.ACCEPTED:
            return self._log_outcome("publish", result)

        awarded = self._evaluate_badges(owner_id, ts)
        return self._with_awards(result, awarded)

    def upvote(self, voter_id: str, project_id: str, timestamp: datetime | None = None) -> WriteResult:
        if not (_valid_id(voter_id) and _valid_id(project_id)):
            return self._reject(RejectReason.INVALID_ARGUMENT, "voter_id and project_id are required")
        ts = self._timestamp(timestamp)

        result = self.metrics.record_upvote(voter_id, project_id, ts)
        if result.status != ResultStatus.ACCEPTED:
            return self._log_outcome("upvote", result)

        project = self.store.get_project(project_id)
        awarded: list[str] = []
        if project is not None:
            awarded.extend(self._evaluate_badges(project.owner_id, ts))
            if voter_id != project.owner_id:
                awarded.extend(self._evaluate_badges(voter_id, ts))
        return self._with_awards(result, awarded)

    def view(self, project_id: str, viewer_id: str | None = None, timestamp: datetime | None = None) -> WriteResult:
        if not _valid_id(project_id):
            return self._reject(RejectReason.INVALID_ARGUMENT, "project_id is required")
        if viewer_id is not None and not _valid_id(viewer_id):
            viewer_id = None
        ts = self._timestamp(timestamp)

        result = self.metrics.record_view(project_id, ts, viewer_id)
        if result.status != ResultStatus.ACCEPTED:
            return self._log_outcome("view", result)

        project = self.store.get_project(project_id)
        awarded = self._evaluate_badges(project.owner_id, ts) if project is not None else []
        return self._with_awards(result, awarded)

    def apply(self, event: ActivityEvent) -> WriteResult:
        """Apply one recorded activity event through the write API."""
        if isinstance(event, ProjectPublished):
            return self.publish_project(event.owner_id, event.project_id, event.timestamp)
        if isinstance(event, UpvoteEvent):
            return self.upvote(event.voter_id, event.project_id, event.timestamp)
        if isinstance(event, ViewEvent):
            return self.view(event.project_id, event.viewer_id, event.timestamp)
        return self._reject(RejectReason.INVALID_ARGUMENT, f"unsupported event {type(event).__name__}")

    # ── read API ──

    def leaderboard(
        self,
        session_token: str | None,
        page: int = 0,
        page_size: int = 10,
        as_of: datetime | None = None,
    ) -> LeaderboardResult:
        if not self._authorized(session_token):
            return LeaderboardResult(status=ResultStatus.ACCESS_DENIED, message=ACCESS_DENIED_MESSAGE)
        if page < 0 or page_size < 1 or page_size > self.max_page_size:
            self.logger.info("leaderboard request rejected (page=%s, page_size=%s)", page, page_size)
            return LeaderboardResult(
                status=ResultStatus.REJECTED,
                reason=RejectReason.INVALID_ARGUMENT,
                message=f"page must be >= 0 and page_size between 1 and {self.max_page_size}",
            )

        users = self.store.list_users()
        entries = self.leaderboard_builder.build(users, page, page_size, self._timestamp(as_of))
        return LeaderboardResult(
            status=ResultStatus.ACCEPTED,
            entries=tuple(entries),
            page=page,
            page_size=page_size,
            total=len(users),
        )

    def user_score(self, session_token: str | None, user_id: str, as_of: datetime | None = None) -> ScoreResult:
        if not self._authorized(session_token):
            return ScoreResult(status=ResultStatus.ACCESS_DENIED, message=ACCESS_DENIED_MESSAGE)
        record = self.calculator.refresh_by_id(user_id, self._timestamp(as_of)) if _valid_id(user_id) else None
        if record is None:
            return ScoreResult(
                status=ResultStatus.REJECTED,
                reason=RejectReason.UNKNOWN_USER,
                message=f"unknown user {user_id!r}",
            )
        return ScoreResult(status=ResultStatus.ACCEPTED, record=record)

    def user_rank(self, session_token: str | None, user_id: str, as_of: datetime | None = None) -> RankResult:
        if not self._authorized(session_token):
            return RankResult(status=ResultStatus.ACCESS_DENIED, message=ACCESS_DENIED_MESSAGE)
        ranked = self.leaderboard_builder.rank_all(self.store.list_users(), self._timestamp(as_of))
        for entry in ranked:
            if entry.user_id == user_id:
                return RankResult(status=ResultStatus.ACCEPTED, entry=entry)
        return RankResult(
            status=ResultStatus.REJECTED,
            reason=RejectReason.UNKNOWN_USER,
            message=f"unknown user {user_id!r}",
        )

    # ── removal hooks (the store deletes, the engine forgets) ──

    def on_user_removed(self, user_id: str) -> None:
        self.calculator.invalidate(user_id)

    def on_project_removed(self, project_id: str, owner_id: str) -> None:
        self.calculator.invalidate(owner_id)
        self.logger.info("project %s removed, score of %s invalidated", project_id, owner_id)

    # ── internals ──

    def _evaluate_badges(self, user_id: str, timestamp: datetime) -> list[str]:
        snapshot = self.metrics.snapshot(user_id)
        return self.badges.evaluate(user_id, snapshot, timestamp)

    def _authorized(self, session_token: str | None) -> bool:
        if self.session_validator(session_token):
            return True
        self.logger.warning("read request denied: missing or invalid session")
        return False

    def _timestamp(self, timestamp: datetime | None) -> datetime:
        return ensure_utc(timestamp) if timestamp is not None else self.clock()

    def _reject(self, reason: RejectReason, message: str) -> WriteResult:
        self.logger.info("write rejected: %s (%s)", message, reason)
        return WriteResult.rejected(reason, message)

    def _log_outcome(self, operation: str, result: WriteResult) -> WriteResult:
        if result.status == ResultStatus.REJECTED:
            self.logger.info("%s rejected: %s (%s)", operation, result.message, result.reason)
        return result

    @staticmethod
    def _with_awards(result: WriteResult, awarded: list[str]) -> WriteResult:
        if not awarded:
            return result
        return WriteResult(
            status=result.status,
            reason=result.reason,
            message=result.message,
            awarded_badges=tuple(awarded),
            upvote_count=result.upvote_count,
            view_count=result.view_count,
        )
