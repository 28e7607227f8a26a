from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class ScoreRecord:
    """Derived score for one user as of `computed_at`. Always recomputable, never authoritative."""
    user_id: str
    value: float
    upvote_component: float
    view_component: float
    badge_component: float
    computed_at: datetime
    version: int = 0   # staleness generation the record was computed from

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "value": self.value,
            "upvote_component": self.upvote_component,
            "view_component": self.view_component,
            "badge_component": self.badge_component,
            "computed_at": self.computed_at.isoformat(),
        }


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    user_id: str
    score: float
    badge_count: int
    joined_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "user_id": self.user_id,
            "score": self.score,
            "badge_count": self.badge_count,
            "joined_at": self.joined_at.isoformat(),
        }
