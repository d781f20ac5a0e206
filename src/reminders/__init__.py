"""Follow-up reminders: auto-suggestion, auto-resolution and storage."""

from .resolution import ReminderResolutionResult, ReminderResolver, resolve_with_rules
from .store import ReminderNotFoundError, ReminderStore
from .suggestion import (
    AutoReminderRequest,
    AutoReminderSuggestion,
    quick_reminder_date,
    suggest_auto_reminder,
)

__all__ = [
    "AutoReminderRequest",
    "AutoReminderSuggestion",
    "suggest_auto_reminder",
    "quick_reminder_date",
    "ReminderResolver",
    "ReminderResolutionResult",
    "resolve_with_rules",
    "ReminderStore",
    "ReminderNotFoundError",
]
