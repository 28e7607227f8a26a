"""DBDataStore against an in-memory SQLite database."""
from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from showcase_node.db.init_db import init_db
from showcase_node.db.repositories import DBDataStore
from showcase_node.entities.project import Project, UpvoteEvent, ViewEvent
from showcase_node.entities.user import User
from showcase_node.notifications import InMemoryNotificationSink
from showcase_node.services.engine import ShowcaseEngine

T0 = datetime(2026, 2, 1, 9, 30, tzinfo=timezone.utc)


def _sqlite_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return engine


class TestDBDataStore(unittest.TestCase):
    def setUp(self):
        self.store = DBDataStore(_sqlite_engine())

    def test_user_round_trip(self):
        user = User(id="u1", joined_at=T0, badges={"first-project": T0 + timedelta(hours=1)}, upvotes_cast=3)
        self.store.put_user(user)

        loaded = self.store.get_user("u1")

        self.assertEqual(loaded.id, "u1")
        self.assertEqual(loaded.joined_at, T0)
        self.assertEqual(loaded.joined_at.tzinfo, timezone.utc)
        self.assertEqual(loaded.badges, {"first-project": T0 + timedelta(hours=1)})
        self.assertEqual(loaded.upvotes_cast, 3)

    def test_put_user_updates_existing_row(self):
        self.store.put_user(User(id="u1", joined_at=T0))
        self.store.put_user(User(id="u1", joined_at=T0, badges={"supporter": T0}, upvotes_cast=5))

        self.assertEqual(len(self.store.list_users()), 1)
        self.assertEqual(self.store.get_user("u1").upvotes_cast, 5)

    def test_missing_records(self):
        self.assertIsNone(self.store.get_user("nobody"))
        self.assertIsNone(self.store.get_project("nothing"))

    def test_project_round_trip(self):
        project = Project(
            id="p1",
            owner_id="u1",
            created_at=T0,
            upvote_count=1,
            view_count=1,
            upvotes=[UpvoteEvent(voter_id="v1", project_id="p1", timestamp=T0)],
            views=[ViewEvent(project_id="p1", timestamp=T0, viewer_id=None)],
        )
        self.store.put_project(project)

        loaded = self.store.get_project("p1")

        self.assertEqual(loaded.upvotes, project.upvotes)
        self.assertEqual(loaded.views, project.views)
        self.assertEqual(loaded.upvote_count, 1)

    def test_projects_by_owner(self):
        self.store.put_project(Project(id="p1", owner_id="u1", created_at=T0))
        self.store.put_project(Project(id="p2", owner_id="u2", created_at=T0))
        self.store.put_project(Project(id="p3", owner_id="u1", created_at=T0))

        owned = sorted(p.id for p in self.store.projects_by_owner("u1"))

        self.assertEqual(owned, ["p1", "p3"])
        self.assertEqual(len(self.store.list_projects()), 3)


class TestEngineOnDatabase(unittest.TestCase):
    def test_duplicate_upvotes_count_once(self):
        engine = ShowcaseEngine(
            DBDataStore(_sqlite_engine()),
            notification_sink=InMemoryNotificationSink(),
            session_validator=lambda token: token == "tok",
        )
        engine.publish_project("u1", "p1", T0)

        results = [engine.upvote("v1", "p1", T0 + timedelta(minutes=i)) for i in range(5)]

        self.assertEqual(engine.store.get_project("p1").upvote_count, 1)
        self.assertEqual(sum(1 for r in results if r.status == "ACCEPTED"), 1)
        score = engine.user_score("tok", "u1", as_of=T0).record
        self.assertEqual(score.upvote_component, 10.0)


if __name__ == "__main__":
    unittest.main()
