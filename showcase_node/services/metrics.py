"""Metrics aggregator: dedup and count upvotes, views and published projects.

Every mutation of a project happens under that project's lock, every mutation
of a user under that user's lock, and no operation ever holds two locks.
Counts only go up. Each accepted write marks the owning user's score stale;
recomputation is left to the score calculator.
"""
from __future__ import annotations

import logging
from datetime import datetime

from showcase_node.badges.rules import MetricsSnapshot
from showcase_node.engine_config import EngineConfig
from showcase_node.entities.project import Project, UpvoteEvent, ViewEvent
from showcase_node.entities.user import User
from showcase_node.results import RejectReason, ResultStatus, WriteResult
from showcase_node.services.locks import KeyedLocks
from showcase_node.services.score import ScoreCache
from showcase_node.store.interfaces import DataStore


class MetricsAggregator:
    def __init__(
        self,
        store: DataStore,
        config: EngineConfig,
        score_cache: ScoreCache,
        project_locks: KeyedLocks | None = None,
        user_locks: KeyedLocks | None = None,
    ):
        self.store = store
        self.config = config
        self.score_cache = score_cache
        self.project_locks = project_locks or KeyedLocks()
        self.user_locks = user_locks or KeyedLocks()
        self.logger = logging.getLogger(__name__)

    # ── writes ──

    def publish_project(self, owner_id: str, project_id: str, timestamp: datetime) -> WriteResult:
        with self.project_locks.get(project_id):
            existing = self.store.get_project(project_id)
            if existing is not None:
                if existing.owner_id != owner_id:
                    return WriteResult.rejected(
                        RejectReason.OWNER_MISMATCH,
                        f"project {project_id!r} is owned by another user",
                    )
                self.logger.debug("project %s already published", project_id)
                return WriteResult(
                    status=ResultStatus.DUPLICATE,
                    upvote_count=existing.upvote_count,
                    view_count=existing.view_count,
                )
            self.store.put_project(Project(id=project_id, owner_id=owner_id, created_at=timestamp))

        self.ensure_user(owner_id, timestamp)
        self.score_cache.mark_stale(owner_id)
        self.logger.debug("project %s published by %s", project_id, owner_id)
        return WriteResult(status=ResultStatus.ACCEPTED, upvote_count=0, view_count=0)

    def record_upvote(self, voter_id: str, project_id: str, timestamp: datetime) -> WriteResult:
        with self.project_locks.get(project_id):
            project = self.store.get_project(project_id)
            if project is None:
                return WriteResult.rejected(RejectReason.UNKNOWN_PROJECT, f"unknown project {project_id!r}")
            if project.has_upvote_from(voter_id):
                self.logger.debug("upvote %s → %s already counted", voter_id, project_id)
                return WriteResult(
                    status=ResultStatus.DUPLICATE,
                    upvote_count=project.upvote_count,
                    view_count=project.view_count,
                )
            project.upvotes.append(UpvoteEvent(voter_id=voter_id, project_id=project_id, timestamp=timestamp))
            project.upvote_count += 1
            self.store.put_project(project)

        self.ensure_user(voter_id, timestamp, upvotes_cast_delta=1)
        self.score_cache.mark_stale(project.owner_id)
        self.logger.debug("upvote %s → %s counted (%d)", voter_id, project_id, project.upvote_count)
        return WriteResult(
            status=ResultStatus.ACCEPTED,
            upvote_count=project.upvote_count,
            view_count=project.view_count,
        )

    def record_view(self, project_id: str, timestamp: datetime, viewer_id: str | None = None) -> WriteResult:
        window = self.config.view_dedup_window
        with self.project_locks.get(project_id):
            project = self.store.get_project(project_id)
            if project is None:
                return WriteResult.rejected(RejectReason.UNKNOWN_PROJECT, f"unknown project {project_id!r}")
            if viewer_id and project.has_recent_view(viewer_id, timestamp, window):
                self.logger.debug("view of %s by %s inside dedup window", project_id, viewer_id)
                return WriteResult(
                    status=ResultStatus.DUPLICATE,
                    upvote_count=project.upvote_count,
                    view_count=project.view_count,
                )
            project.views.append(ViewEvent(project_id=project_id, timestamp=timestamp, viewer_id=viewer_id))
            project.view_count += 1
            self.store.put_project(project)

        self.score_cache.mark_stale(project.owner_id)
        return WriteResult(
            status=ResultStatus.ACCEPTED,
            upvote_count=project.upvote_count,
            view_count=project.view_count,
        )

    def ensure_user(self, user_id: str, timestamp: datetime, upvotes_cast_delta: int = 0) -> User:
        """Create the user on first activity; optionally bump the upvotes-cast counter."""
        with self.user_locks.get(user_id):
            user = self.store.get_user(user_id)
            created = user is None
            if user is None:
                user = User(id=user_id, joined_at=timestamp)
            if created or upvotes_cast_delta:
                user.upvotes_cast += upvotes_cast_delta
                self.store.put_user(user)
        if created:
            self.logger.debug("user %s created on first activity", user_id)
        return user

    # ── reads ──

    def snapshot(self, user_id: str) -> MetricsSnapshot:
        user = self.store.get_user(user_id)
        projects = self.store.projects_by_owner(user_id)
        return MetricsSnapshot(
            project_count=len(projects),
            total_upvotes=sum(p.upvote_count for p in projects),
            total_views=sum(p.view_count for p in projects),
            upvoted_project_count=sum(1 for p in projects if p.upvote_count > 0),
            upvotes_cast=user.upvotes_cast if user else 0,
        )
