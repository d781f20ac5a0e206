"""Shared enums and types for rapport."""

from enum import StrEnum


class ContactFrequency(StrEnum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class InteractionType(StrEnum):
    CALL = "call"
    TEXT = "text"
    EMAIL = "email"
    COFFEE = "coffee"
    DINNER = "dinner"
    HANGOUT = "hangout"
    MEETING = "meeting"
    WHATSAPP = "whatsapp"
    OTHER = "other"


class ReminderStatus(StrEnum):
    PENDING = "PENDING"
    SENT = "SENT"
    DISMISSED = "DISMISSED"


class ImportantDateLabel(StrEnum):
    BIRTHDAY = "birthday"
    ANNIVERSARY = "anniversary"
    CUSTOM = "custom"


class Staleness(StrEnum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


class HealthStatus(StrEnum):
    STRONG = "strong"
    STEADY = "steady"
    AT_RISK = "at-risk"


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FocusSource(StrEnum):
    REMINDER = "reminder"
    IMPORTANT_DATE = "important-date"
    STALE_CONTACT = "stale-contact"


class DecisionSource(StrEnum):
    RULES = "rules"
    LLM = "llm"
