"""CLI command modules."""

from .contacts import health, stale, upcoming
from .dashboard import focus, preferences, review, segments, standup
from .reminders import reminders, resolve, suggest

__all__ = [
    "health",
    "stale",
    "upcoming",
    "focus",
    "segments",
    "review",
    "standup",
    "preferences",
    "suggest",
    "resolve",
    "reminders",
]
