"""Contact read models, cadence staleness, health scoring and date resolution."""

from .cadence import FREQUENCY_DAYS, frequency_days, get_staleness, parse_frequency
from .dates import UpcomingDate, get_upcoming_dates
from .health import RelationshipHealth, calculate_relationship_health
from .models import Contact, Conversation, Group, ImportantDate, Reminder
from .snapshot import Snapshot, load_snapshot
from .stale import StaleContact, get_stale_contacts

__all__ = [
    "FREQUENCY_DAYS",
    "frequency_days",
    "get_staleness",
    "parse_frequency",
    "RelationshipHealth",
    "calculate_relationship_health",
    "StaleContact",
    "get_stale_contacts",
    "UpcomingDate",
    "get_upcoming_dates",
    "Contact",
    "Conversation",
    "Group",
    "ImportantDate",
    "Reminder",
    "Snapshot",
    "load_snapshot",
]
