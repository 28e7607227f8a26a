from showcase_node.badges.rules import (
    DEFAULT_BADGES,
    AllOfRule,
    BadgeDefinition,
    BadgeRule,
    FirstOccurrenceRule,
    MetricsSnapshot,
    ThresholdRule,
)

__all__ = [
    "AllOfRule",
    "BadgeDefinition",
    "BadgeRule",
    "DEFAULT_BADGES",
    "FirstOccurrenceRule",
    "MetricsSnapshot",
    "ThresholdRule",
]
