from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from showcase_node.clock import ensure_utc


@dataclass
class User:
    id: str
    joined_at: datetime
    badges: dict[str, datetime] = field(default_factory=dict)   # badge id → award time, in award order
    upvotes_cast: int = 0

    def has_badge(self, badge_id: str) -> bool:
        return badge_id in self.badges

    def badge_count_as_of(self, as_of: datetime) -> int:
        """Badges already awarded at `as_of`."""
        as_of = ensure_utc(as_of)
        return sum(1 for awarded_at in self.badges.values() if ensure_utc(awarded_at) <= as_of)
