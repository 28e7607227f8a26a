"""Badge rules: a closed set of rule kinds over a fixed metrics snapshot.

Each badge is a `BadgeDefinition` whose `rule` is one of:

- **threshold**: `snapshot.<metric> >= threshold`
- **first**: first occurrence of a metric (`snapshot.<metric> >= 1`)
- **all_of**: every nested rule matches (composite AND)

Rules are pydantic models tagged by `kind`, so a badge catalogue can be loaded
from JSON and evaluation stays total: every rule either matches or it doesn't.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

MetricName = Literal[
    "project_count",
    "total_upvotes",
    "total_views",
    "upvoted_project_count",
    "upvotes_cast",
]


@dataclass(frozen=True)
class MetricsSnapshot:
    """A user's activity counts at one point in time."""

    project_count: int = 0
    total_upvotes: int = 0
    total_views: int = 0
    upvoted_project_count: int = 0   # projects with at least one upvote
    upvotes_cast: int = 0

    def get(self, metric: str) -> int:
        return int(getattr(self, metric))


class ThresholdRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["threshold"] = "threshold"
    metric: MetricName
    threshold: int = Field(ge=1)

    def matches(self, snapshot: MetricsSnapshot) -> bool:
        return snapshot.get(self.metric) >= self.threshold


class FirstOccurrenceRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["first"] = "first"
    metric: MetricName

    def matches(self, snapshot: MetricsSnapshot) -> bool:
        return snapshot.get(self.metric) >= 1


class AllOfRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["all_of"] = "all_of"
    rules: tuple[BadgeRule, ...] = Field(min_length=1)

    def matches(self, snapshot: MetricsSnapshot) -> bool:
        return all(rule.matches(snapshot) for rule in self.rules)


BadgeRule = Annotated[
    Union[ThresholdRule, FirstOccurrenceRule, AllOfRule],
    Field(discriminator="kind"),
]

AllOfRule.model_rebuild()


class BadgeDefinition(BaseModel):
    """Static badge configuration. Awards are per-user facts stored on the User."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    label: str
    rule: BadgeRule
    bonus: float = Field(default=0.0, ge=0, allow_inf_nan=False)

    def is_met(self, snapshot: MetricsSnapshot) -> bool:
        return self.rule.matches(snapshot)


DEFAULT_BADGES: tuple[BadgeDefinition, ...] = (
    BadgeDefinition(
        id="first-project",
        label="First Launch",
        rule=FirstOccurrenceRule(metric="project_count"),
        bonus=5.0,
    ),
    BadgeDefinition(
        id="rising-star",
        label="Rising Star",
        rule=ThresholdRule(metric="total_upvotes", threshold=10),
        bonus=20.0,
    ),
    BadgeDefinition(
        id="crowd-favorite",
        label="Crowd Favorite",
        rule=ThresholdRule(metric="upvoted_project_count", threshold=3),
        bonus=15.0,
    ),
    BadgeDefinition(
        id="spotlight",
        label="In the Spotlight",
        rule=ThresholdRule(metric="total_views", threshold=100),
        bonus=10.0,
    ),
    BadgeDefinition(
        id="supporter",
        label="Supporter",
        rule=ThresholdRule(metric="upvotes_cast", threshold=5),
        bonus=5.0,
    ),
    BadgeDefinition(
        id="trailblazer",
        label="Trailblazer",
        rule=AllOfRule(rules=(
            ThresholdRule(metric="project_count", threshold=3),
            ThresholdRule(metric="total_upvotes", threshold=10),
            ThresholdRule(metric="upvotes_cast", threshold=5),
        )),
        bonus=25.0,
    ),
)
