"""Standup Digest: weekly reports from daily standup updates."""

__version__ = "0.1.0"
