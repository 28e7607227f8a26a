"""Engine configuration: scoring weights, decay, view dedup and the badge catalogue.

All options have defaults. Invalid values are rejected when the config is
loaded (`ConfigurationError`), never clamped. Changing the config never
rewrites stored events; it only affects later score computations.

Keys may be given in snake_case or camelCase (`upvoteWeight`, `halfLifeDays`, ...).
"""
from __future__ import annotations

from datetime import timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from showcase_node.badges.rules import DEFAULT_BADGES, BadgeDefinition
from showcase_node.errors import ConfigurationError


class EngineConfig(BaseModel):
    """Single source of truth for how activity turns into score and badges."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        allow_inf_nan=False,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    upvote_weight: float = Field(default=10.0, ge=0)
    view_weight: float = Field(default=1.0, ge=0)
    half_life_days: float = Field(default=30.0, gt=0)
    view_dedup_window_minutes: float = Field(default=30.0, ge=0)
    badge_definitions: tuple[BadgeDefinition, ...] = DEFAULT_BADGES

    @field_validator("badge_definitions")
    @classmethod
    def _unique_badge_ids(cls, value: tuple[BadgeDefinition, ...]) -> tuple[BadgeDefinition, ...]:
        seen: set[str] = set()
        for badge in value:
            if badge.id in seen:
                raise ValueError(f"duplicate badge id {badge.id!r}")
            seen.add(badge.id)
        return value

    @property
    def view_dedup_window(self) -> timedelta:
        return timedelta(minutes=self.view_dedup_window_minutes)

    def badge(self, badge_id: str) -> BadgeDefinition | None:
        for definition in self.badge_definitions:
            if definition.id == badge_id:
                return definition
        return None

    @classmethod
    def load(cls, data: dict[str, Any]) -> "EngineConfig":
        """Validate raw config data, raising ConfigurationError on any problem."""
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigurationError(f"invalid engine configuration: {exc}") from exc
