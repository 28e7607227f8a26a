from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Union


@dataclass(frozen=True)
class UpvoteEvent:
    """One upvote. At most one per (voter, project) pair."""
    voter_id: str
    project_id: str
    timestamp: datetime


@dataclass(frozen=True)
class ViewEvent:
    """One counted view. Append-only, never retracted."""
    project_id: str
    timestamp: datetime
    viewer_id: str | None = None


@dataclass(frozen=True)
class ProjectPublished:
    owner_id: str
    project_id: str
    timestamp: datetime


ActivityEvent = Union[ProjectPublished, UpvoteEvent, ViewEvent]


@dataclass
class Project:
    id: str
    owner_id: str
    created_at: datetime
    upvote_count: int = 0
    view_count: int = 0
    upvotes: list[UpvoteEvent] = field(default_factory=list)   # in arrival order
    views: list[ViewEvent] = field(default_factory=list)       # in arrival order

    def has_upvote_from(self, voter_id: str) -> bool:
        return any(event.voter_id == voter_id for event in self.upvotes)

    def has_recent_view(self, viewer_id: str, timestamp: datetime, window: timedelta) -> bool:
        """True when `viewer_id` already has a counted view less than `window` away from `timestamp`."""
        for event in reversed(self.views):
            if event.viewer_id == viewer_id and abs(timestamp - event.timestamp) < window:
                return True
        return False
