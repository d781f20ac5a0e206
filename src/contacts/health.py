"""Relationship health score from freshness, consistency and reminder follow-through."""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from shared_types import HealthStatus

from .cadence import frequency_days as cadence_days
from .cadence import parse_frequency
from .timeutils import days_since, local_now, parse_timestamp

DEFAULT_FREQUENCY_DAYS = 30

# Composite weights
FRESHNESS_WEIGHT = 0.45
CONSISTENCY_WEIGHT = 0.3
FOLLOW_THROUGH_WEIGHT = 0.25

# Per-reminder follow-through penalties
PENDING_PENALTY = 8
OVERDUE_PENALTY = 18
MIN_FOLLOW_THROUGH = 10

STRONG_THRESHOLD = 80
STEADY_THRESHOLD = 60


@dataclass
class RelationshipHealth:
    score: int
    status: HealthStatus
    freshness: int
    consistency: int
    follow_through: int
    pending_reminder_count: int
    overdue_reminder_count: int
    days_since_last_interaction: int


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _weighted_score(freshness: int, consistency: int, follow_through: int) -> int:
    """Weighted composite, rounded half up. Summed in hundredths so .5 is exact."""
    total = (
        freshness * round(FRESHNESS_WEIGHT * 100)
        + consistency * round(CONSISTENCY_WEIGHT * 100)
        + follow_through * round(FOLLOW_THROUGH_WEIGHT * 100)
    )
    return (total + 50) // 100


def freshness_score(days: int, frequency_days: int) -> int:
    ratio = days / frequency_days
    if ratio <= 0.8:
        return 100
    if ratio <= 1:
        return 90
    if ratio <= 1.5:
        return 70
    if ratio <= 2:
        return 50
    if ratio <= 3:
        return 30
    return 15


def consistency_score(days: int, frequency_days: Optional[int]) -> int:
    """Cadence-relative when a goal exists, raw-day curve otherwise."""
    if not frequency_days:
        if days <= 14:
            return 85
        if days <= 30:
            return 70
        if days <= 60:
            return 50
        return 30

    ratio = days / frequency_days
    if ratio <= 1:
        return 95
    if ratio <= 1.5:
        return 75
    if ratio <= 2:
        return 55
    if ratio <= 3:
        return 35
    return 20


def follow_through_score(pending_count: int, overdue_count: int) -> int:
    if pending_count == 0 and overdue_count == 0:
        return 100
    score = 100 - pending_count * PENDING_PENALTY - overdue_count * OVERDUE_PENALTY
    return int(_clamp(score, MIN_FOLLOW_THROUGH, 100))


def status_from_score(score: int) -> HealthStatus:
    if score >= STRONG_THRESHOLD:
        return HealthStatus.STRONG
    if score >= STEADY_THRESHOLD:
        return HealthStatus.STEADY
    return HealthStatus.AT_RISK


def _remind_at(reminder) -> Optional[datetime]:
    if isinstance(reminder, dict):
        return parse_timestamp(reminder.get("remind_at", reminder.get("remindAt")))
    return parse_timestamp(getattr(reminder, "remind_at", None))


def calculate_relationship_health(
    contact_frequency=None,
    last_conversation_at=None,
    pending_reminders: Iterable = (),
    now: Optional[datetime] = None,
) -> RelationshipHealth:
    """Score one relationship 0-100.

    Args:
        contact_frequency: Cadence enum/string; unknown values mean no goal.
        last_conversation_at: Timestamp of the latest interaction, if any.
        pending_reminders: Pending reminders (objects or dicts with remind_at).
        now: Reference time, defaults to the local clock.
    """
    now = local_now(now)
    cadence = parse_frequency(contact_frequency)
    goal_days = cadence_days(cadence)
    freq_days = goal_days or DEFAULT_FREQUENCY_DAYS

    raw_days = days_since(last_conversation_at, now)
    # No interaction at all counts as two full cycles overdue
    days = raw_days if raw_days is not None else freq_days * 2

    reminders = list(pending_reminders or [])
    pending_count = len(reminders)
    overdue_count = 0
    for reminder in reminders:
        remind_at = _remind_at(reminder)
        if remind_at is not None and remind_at < now:
            overdue_count += 1

    freshness = freshness_score(days, freq_days)
    consistency = consistency_score(days, goal_days)
    follow_through = follow_through_score(pending_count, overdue_count)

    score = _weighted_score(freshness, consistency, follow_through)
    score = int(_clamp(score, 0, 100))

    return RelationshipHealth(
        score=score,
        status=status_from_score(score),
        freshness=freshness,
        consistency=consistency,
        follow_through=follow_through,
        pending_reminder_count=pending_count,
        overdue_reminder_count=overdue_count,
        days_since_last_interaction=days,
    )
