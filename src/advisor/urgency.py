"""Outreach urgency shared by segment queues and the weekly review.

Segments bind to user groups by alias substring at query time, not by id, so
renaming a group to "Close family" still lands it in the family queue.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from contacts.health import RelationshipHealth, calculate_relationship_health
from contacts.models import Contact, Conversation, Group, Reminder
from contacts.timeutils import days_since
from shared_types import Priority

OVERDUE_WEIGHT = 18
PENDING_WEIGHT = 7
LONG_GAP_DAYS = 45
LONG_GAP_BONUS = 8
NO_HISTORY_BONUS = 10

HIGH_URGENCY = 60
MEDIUM_URGENCY = 40

PRIORITY_RANK = {Priority.HIGH: 2, Priority.MEDIUM: 1, Priority.LOW: 0}

DEFAULT_ACTION = "Check in"
CLOSE_LOOP_ACTION = "Close loop"
FOLLOW_UP_ACTION = "Send follow-up"


@dataclass(frozen=True)
class SegmentConfig:
    key: str
    title: str
    aliases: tuple[str, ...]
    default_action: str
    fallback_reason: str


SEGMENTS: tuple[SegmentConfig, ...] = (
    SegmentConfig(
        key="family",
        title="Family",
        aliases=("family", "relatives", "parents", "siblings"),
        default_action="Call",
        fallback_reason="No family check-ins logged yet",
    ),
    SegmentConfig(
        key="friends",
        title="Friends",
        aliases=("friend", "buddies", "pals", "social"),
        default_action="Plan hangout",
        fallback_reason="No hangouts logged yet",
    ),
    SegmentConfig(
        key="work",
        title="Work",
        aliases=("work", "colleague", "coworker", "professional", "team", "client", "network"),
        default_action="Check in",
        fallback_reason="No work touchpoints logged yet",
    ),
)


def group_matches(group: Group, config: SegmentConfig) -> bool:
    name = (group.name or "").lower()
    return any(alias in name for alias in config.aliases)


def find_segment_group(groups: Iterable[Group], config: SegmentConfig) -> Optional[Group]:
    for group in groups:
        if group_matches(group, config):
            return group
    return None


def segment_for_contact(contact: Contact) -> Optional[SegmentConfig]:
    """First segment (in SEGMENTS order) any of the contact's groups maps to."""
    for config in SEGMENTS:
        if find_segment_group(contact.groups, config):
            return config
    return None


def urgency_priority(score: int) -> Priority:
    if score >= HIGH_URGENCY:
        return Priority.HIGH
    if score >= MEDIUM_URGENCY:
        return Priority.MEDIUM
    return Priority.LOW


def action_label(segment: Optional[SegmentConfig], overdue: int, pending: int) -> str:
    if segment is None:
        return DEFAULT_ACTION
    if overdue > 0:
        return CLOSE_LOOP_ACTION
    if segment.key == "work" and pending > 0:
        return FOLLOW_UP_ACTION
    return segment.default_action


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


@dataclass
class ContactUrgency:
    contact: Contact
    health: RelationshipHealth
    days_since_last: int | None  # None = no interaction history
    pending_count: int
    overdue_count: int
    urgency: int
    priority: Priority
    reason: str

    @property
    def has_history(self) -> bool:
        return self.days_since_last is not None

    @property
    def has_open_reminders(self) -> bool:
        return self.pending_count > 0 or self.overdue_count > 0

    def in_cooldown(self, cooldown_days: int) -> bool:
        """Recently contacted with nothing outstanding."""
        return (
            self.has_history
            and self.days_since_last <= cooldown_days
            and not self.has_open_reminders
        )


def assess_contact(
    contact: Contact,
    last_conversation: Optional[Conversation],
    pending_reminders: list[Reminder],
    now: datetime,
    fallback_reason: Optional[str] = None,
) -> ContactUrgency:
    """Score how much a contact needs outreach (higher = more urgent)."""
    last_at = last_conversation.timestamp if last_conversation else None
    health = calculate_relationship_health(
        contact_frequency=contact.contact_frequency,
        last_conversation_at=last_at,
        pending_reminders=pending_reminders,
        now=now,
    )
    elapsed = days_since(last_at, now) if last_at else None
    pending = health.pending_reminder_count
    overdue = health.overdue_reminder_count

    urgency = (100 - health.score) + OVERDUE_WEIGHT * overdue + PENDING_WEIGHT * pending
    if elapsed is not None and elapsed >= LONG_GAP_DAYS:
        urgency += LONG_GAP_BONUS
    if elapsed is None:
        urgency += NO_HISTORY_BONUS

    if overdue > 0:
        reason = f"{_plural(overdue, 'overdue reminder')} waiting"
    elif pending > 0:
        reason = f"{_plural(pending, 'pending follow-up')}"
    elif elapsed is None:
        reason = fallback_reason or "No interactions logged yet"
    else:
        reason = f"Last interaction {elapsed}d ago"

    return ContactUrgency(
        contact=contact,
        health=health,
        days_since_last=elapsed,
        pending_count=pending,
        overdue_count=overdue,
        urgency=urgency,
        priority=urgency_priority(urgency),
        reason=reason,
    )
