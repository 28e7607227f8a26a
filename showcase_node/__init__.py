"""Weighted leaderboard and badge achievement engine for the project showcase."""

__version__ = "0.1.0"
