from __future__ import annotations


class ShowcaseError(Exception):
    """Base class for engine errors."""


class ConfigurationError(ShowcaseError):
    """Engine configuration failed validation. Fatal at startup."""
