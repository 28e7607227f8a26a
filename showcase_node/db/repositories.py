"""SQLModel-backed DataStore. Each put commits on its own; there are no multi-record transactions."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from showcase_node.clock import ensure_utc
from showcase_node.entities.project import Project, UpvoteEvent, ViewEvent
from showcase_node.entities.user import User
from showcase_node.db.tables import ProjectRow, UserRow
from showcase_node.store.interfaces import DataStore


class DBDataStore(DataStore):
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── users ──

    def get_user(self, user_id: str) -> Optional[User]:
        with Session(self._engine) as session:
            row = session.get(UserRow, user_id)
            return self._user_to_domain(row) if row else None

    def put_user(self, user: User):
        with Session(self._engine) as session:
            existing = session.get(UserRow, user.id)
            row = self._user_to_row(user)
            if existing is None:
                session.add(row)
            else:
                existing.joined_at = row.joined_at
                existing.upvotes_cast = row.upvotes_cast
                existing.badges_json = row.badges_json
                existing.updated_at = datetime.now(timezone.utc)
                session.add(existing)
            session.commit()

    def list_users(self) -> list[User]:
        with Session(self._engine) as session:
            rows = session.exec(select(UserRow)).all()
            return [self._user_to_domain(row) for row in rows]

    # ── projects ──

    def get_project(self, project_id: str) -> Optional[Project]:
        with Session(self._engine) as session:
            row = session.get(ProjectRow, project_id)
            return self._project_to_domain(row) if row else None

    def put_project(self, project: Project):
        with Session(self._engine) as session:
            existing = session.get(ProjectRow, project.id)
            row = self._project_to_row(project)
            if existing is None:
                session.add(row)
            else:
                existing.owner_id = row.owner_id
                existing.created_at = row.created_at
                existing.upvote_count = row.upvote_count
                existing.view_count = row.view_count
                existing.upvotes_json = row.upvotes_json
                existing.views_json = row.views_json
                existing.updated_at = datetime.now(timezone.utc)
                session.add(existing)
            session.commit()

    def list_projects(self) -> list[Project]:
        with Session(self._engine) as session:
            rows = session.exec(select(ProjectRow)).all()
            return [self._project_to_domain(row) for row in rows]

    def projects_by_owner(self, owner_id: str) -> list[Project]:
        with Session(self._engine) as session:
            rows = session.exec(select(ProjectRow).where(ProjectRow.owner_id == owner_id)).all()
            return [self._project_to_domain(row) for row in rows]

    # ── mapping ──

    @staticmethod
    def _user_to_row(user: User) -> UserRow:
        return UserRow(
            id=user.id,
            joined_at=ensure_utc(user.joined_at),
            upvotes_cast=user.upvotes_cast,
            badges_json={badge_id: ensure_utc(ts).isoformat() for badge_id, ts in user.badges.items()},
        )

    @staticmethod
    def _user_to_domain(row: UserRow) -> User:
        return User(
            id=row.id,
            joined_at=ensure_utc(row.joined_at),
            upvotes_cast=row.upvotes_cast or 0,
            badges={badge_id: _parse_ts(ts) for badge_id, ts in (row.badges_json or {}).items()},
        )

    @staticmethod
    def _project_to_row(project: Project) -> ProjectRow:
        return ProjectRow(
            id=project.id,
            owner_id=project.owner_id,
            created_at=ensure_utc(project.created_at),
            upvote_count=project.upvote_count,
            view_count=project.view_count,
            upvotes_json=[
                {"voter_id": e.voter_id, "timestamp": ensure_utc(e.timestamp).isoformat()}
                for e in project.upvotes
            ],
            views_json=[
                {"viewer_id": e.viewer_id, "timestamp": ensure_utc(e.timestamp).isoformat()}
                for e in project.views
            ],
        )

    @staticmethod
    def _project_to_domain(row: ProjectRow) -> Project:
        return Project(
            id=row.id,
            owner_id=row.owner_id,
            created_at=ensure_utc(row.created_at),
            upvote_count=row.upvote_count or 0,
            view_count=row.view_count or 0,
            upvotes=[
                UpvoteEvent(voter_id=e["voter_id"], project_id=row.id, timestamp=_parse_ts(e["timestamp"]))
                for e in (row.upvotes_json or [])
            ],
            views=[
                ViewEvent(project_id=row.id, timestamp=_parse_ts(e["timestamp"]), viewer_id=e.get("viewer_id"))
                for e in (row.views_json or [])
            ],
        )


def _parse_ts(value: Any) -> datetime:
    if isinstance(value, datetime):
        return ensure_utc(value)
    return ensure_utc(datetime.fromisoformat(str(value)))
