"""Explicit result values returned by the engine's write and read APIs.

Nothing in the public API raises for a bad request. Duplicates are not errors:
a repeated upvote or a deduplicated view comes back as DUPLICATE and changes
nothing.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from showcase_node.entities.score import LeaderboardEntry, ScoreRecord


class ResultStatus(StrEnum):
    ACCEPTED = "ACCEPTED"
    DUPLICATE = "DUPLICATE"
    REJECTED = "REJECTED"
    ACCESS_DENIED = "ACCESS_DENIED"


class RejectReason(StrEnum):
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    UNKNOWN_PROJECT = "UNKNOWN_PROJECT"
    UNKNOWN_USER = "UNKNOWN_USER"
    OWNER_MISMATCH = "OWNER_MISMATCH"


@dataclass(frozen=True)
class WriteResult:
    status: ResultStatus
    reason: RejectReason | None = None
    message: str | None = None
    awarded_badges: tuple[str, ...] = ()
    upvote_count: int | None = None
    view_count: int | None = None

    @property
    def ok(self) -> bool:
        return self.status in (ResultStatus.ACCEPTED, ResultStatus.DUPLICATE)

    @classmethod
    def rejected(cls, reason: RejectReason, message: str) -> "WriteResult":
        return cls(status=ResultStatus.REJECTED, reason=reason, message=message)


@dataclass(frozen=True)
class LeaderboardResult:
    status: ResultStatus
    entries: tuple[LeaderboardEntry, ...] = ()
    page: int | None = None
    page_size: int | None = None
    total: int | None = None
    reason: RejectReason | None = None
    message: str | None = None


@dataclass(frozen=True)
class ScoreResult:
    status: ResultStatus
    record: ScoreRecord | None = None
    reason: RejectReason | None = None
    message: str | None = None


@dataclass(frozen=True)
class RankResult:
    status: ResultStatus
    entry: LeaderboardEntry | None = None
    reason: RejectReason | None = None
    message: str | None = None


ACCESS_DENIED_MESSAGE = "authenticated session required"
