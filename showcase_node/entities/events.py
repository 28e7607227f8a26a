"""Notification events handed to the external notifier.

Delivery is at-least-once; consumers deduplicate on `dedup_key`.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Union


@dataclass(frozen=True)
class BadgeAwarded:
    badge_id: str
    user_id: str
    timestamp: datetime

    kind = "badge_awarded"

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.badge_id, self.user_id)

    def to_payload(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "badge_id": self.badge_id,
            "user_id": self.user_id,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class RankChanged:
    user_id: str
    old_rank: int
    new_rank: int
    timestamp: datetime

    kind = "rank_changed"

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.user_id, self.timestamp.isoformat())

    def to_payload(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "user_id": self.user_id,
            "old_rank": self.old_rank,
            "new_rank": self.new_rank,
            "timestamp": self.timestamp.isoformat(),
        }


NotificationEvent = Union[BadgeAwarded, RankChanged]
