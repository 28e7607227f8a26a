from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from showcase_node.engine_config import EngineConfig
from showcase_node.entities.project import Project, UpvoteEvent, ViewEvent
from showcase_node.entities.score import ScoreRecord
from showcase_node.entities.user import User
from showcase_node.services.score import ScoreCache, ScoreCalculator, decay
from showcase_node.store.memory import InMemoryDataStore

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _day(n: float) -> datetime:
    return T0 + timedelta(days=n)


def _project(project_id="p1", owner_id="u1", upvotes=(), views=()):
    upvote_events = [UpvoteEvent(voter_id=v, project_id=project_id, timestamp=ts) for v, ts in upvotes]
    view_events = [ViewEvent(project_id=project_id, timestamp=ts, viewer_id=v) for v, ts in views]
    return Project(
        id=project_id, owner_id=owner_id, created_at=T0,
        upvote_count=len(upvote_events), view_count=len(view_events),
        upvotes=upvote_events, views=view_events,
    )


class TestDecay(unittest.TestCase):
    def test_half_life_halves_weight(self):
        self.assertEqual(decay(0, 30), 1.0)
        self.assertEqual(decay(30, 30), 0.5)
        self.assertEqual(decay(60, 30), 0.25)

    def test_contribution_at_half_life_is_exactly_half(self):
        config = EngineConfig(upvote_weight=10, view_weight=0, half_life_days=30, badge_definitions=())
        calculator = ScoreCalculator(InMemoryDataStore(), config)
        user = User(id="u1", joined_at=T0)
        project = _project(upvotes=[("v1", T0)])

        fresh = calculator.compute_score(user, [project], as_of=T0)
        aged = calculator.compute_score(user, [project], as_of=_day(30))

        self.assertEqual(aged.upvote_component, fresh.upvote_component / 2)

    def test_never_negative(self):
        self.assertGreater(decay(10_000, 30), 0.0)
        self.assertEqual(decay(-3, 30), 1.0)


class TestComputeScore(unittest.TestCase):
    def setUp(self):
        self.config = EngineConfig(upvote_weight=10, view_weight=1, half_life_days=30)
        self.calculator = ScoreCalculator(InMemoryDataStore(), self.config)
        self.user = User(id="u1", joined_at=T0)

    def test_three_upvotes_decay_to_fifteen_after_one_half_life(self):
        project = _project(upvotes=[("v1", T0), ("v2", T0), ("v3", T0)])

        record = self.calculator.compute_score(self.user, [project], as_of=_day(30))

        self.assertAlmostEqual(record.upvote_component, 15.0)
        self.assertEqual(record.view_component, 0.0)

    def test_views_and_upvotes_are_summed(self):
        project = _project(upvotes=[("v1", T0)], views=[(None, T0), ("x", T0)])

        record = self.calculator.compute_score(self.user, [project], as_of=T0)

        self.assertEqual(record.upvote_component, 10.0)
        self.assertEqual(record.view_component, 2.0)
        self.assertEqual(record.value, 12.0)

    def test_identical_inputs_give_identical_scores(self):
        projects = [
            _project("p1", upvotes=[("v1", _day(1)), ("v2", _day(3.7))], views=[(None, _day(2.2))]),
            _project("p2", upvotes=[("v3", _day(11.1))]),
        ]

        first = self.calculator.compute_score(self.user, projects, as_of=_day(40))
        second = self.calculator.compute_score(self.user, list(reversed(projects)), as_of=_day(40))

        self.assertEqual(first, second)

    def test_events_after_as_of_do_not_count(self):
        project = _project(upvotes=[("v1", _day(10))], views=[(None, _day(10))])

        record = self.calculator.compute_score(self.user, [project], as_of=_day(5))

        self.assertEqual(record.value, 0.0)

    def test_badge_bonus_counts_permanently(self):
        self.user.badges["rising-star"] = T0
        self.user.badges["retired-badge"] = T0   # no longer in the catalogue

        record = self.calculator.compute_score(self.user, [], as_of=_day(365))

        self.assertEqual(record.badge_component, 20.0)

    def test_badge_awarded_after_as_of_is_ignored(self):
        self.user.badges["rising-star"] = _day(2)

        record = self.calculator.compute_score(self.user, [], as_of=_day(1))

        self.assertEqual(record.badge_component, 0.0)


class TestScoreCache(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDataStore()
        self.store.put_user(User(id="u1", joined_at=T0))
        self.store.put_project(_project(upvotes=[("v1", T0)]))
        self.calculator = ScoreCalculator(self.store, EngineConfig())

    def test_refresh_serves_cached_record_for_same_as_of(self):
        user = self.store.get_user("u1")
        first = self.calculator.refresh(user, _day(1))
        second = self.calculator.refresh(user, _day(1))

        self.assertIs(first, second)
        self.assertFalse(self.calculator.cache.is_stale("u1"))

    def test_stale_record_is_recomputed(self):
        user = self.store.get_user("u1")
        first = self.calculator.refresh(user, _day(1))

        project = self.store.get_project("p1")
        project.upvotes.append(UpvoteEvent(voter_id="v2", project_id="p1", timestamp=T0))
        project.upvote_count += 1
        self.store.put_project(project)
        self.calculator.cache.mark_stale("u1")
        self.assertTrue(self.calculator.cache.is_stale("u1"))

        second = self.calculator.refresh(user, _day(1))

        self.assertGreater(second.value, first.value)
        self.assertFalse(self.calculator.cache.is_stale("u1"))

    def test_older_generation_never_replaces_newer(self):
        cache = ScoreCache()
        newer = ScoreRecord("u1", 5.0, 5.0, 0.0, 0.0, computed_at=T0, version=2)
        older = ScoreRecord("u1", 1.0, 1.0, 0.0, 0.0, computed_at=T0, version=1)

        cache.put(newer)
        cache.put(older)

        self.assertIs(cache.get("u1"), newer)

    def test_invalidate_drops_record(self):
        user = self.store.get_user("u1")
        self.calculator.refresh(user, _day(1))

        self.calculator.invalidate("u1")

        self.assertIsNone(self.calculator.cache.get("u1"))
        self.assertTrue(self.calculator.cache.is_stale("u1"))


if __name__ == "__main__":
    unittest.main()
