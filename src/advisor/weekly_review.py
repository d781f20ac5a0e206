"""Weekly review: attended vs ignored contacts plus next steps."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

import structlog

from contacts.snapshot import Snapshot
from contacts.timeutils import local_now
from shared_types import Priority, ReminderStatus

from .urgency import PRIORITY_RANK, action_label, assess_contact, segment_for_contact

logger = structlog.get_logger()

DEFAULT_WINDOW_DAYS = 7
AT_RISK_THRESHOLD = 60
MAX_NEXT_STEPS = 5
PREVIEW_CHARS = 95


@dataclass
class WeeklyReviewContact:
    contact_id: str
    contact_name: str
    contact_last_name: str | None
    interaction_count: int = 0
    last_interaction_at: datetime | None = None
    last_interaction_preview: str | None = None
    health_score: int = 0
    urgency: int = 0
    priority: Priority = Priority.LOW
    reason: str = ""


@dataclass
class WeeklyReviewStep:
    contact_id: str
    contact_name: str
    contact_last_name: str | None
    priority: Priority
    reason: str
    action_label: str


@dataclass
class WeeklyReviewSummary:
    window_days: int
    window_start: datetime
    window_end: datetime
    interactions: int = 0
    unique_contacts: int = 0
    at_risk_contacts: int = 0
    open_loops: int = 0
    closed_loops: int = 0


@dataclass
class WeeklyReview:
    summary: WeeklyReviewSummary
    attended_contacts: list[WeeklyReviewContact] = field(default_factory=list)
    ignored_contacts: list[WeeklyReviewContact] = field(default_factory=list)
    next_steps: list[WeeklyReviewStep] = field(default_factory=list)


def preview_text(content: str, limit: int = PREVIEW_CHARS) -> str:
    """Single-line preview, whitespace collapsed, ellipsized past `limit`."""
    line = " ".join((content or "").split())
    if len(line) <= limit:
        return line
    return line[: limit - 1].rstrip() + "…"


def build_weekly_review(
    snapshot: Snapshot,
    window_days: int = DEFAULT_WINDOW_DAYS,
    now: Optional[datetime] = None,
    at_risk_threshold: int = AT_RISK_THRESHOLD,
) -> WeeklyReview:
    """Summarize the last `window_days` of relationship activity.

    Every contact lands in exactly one of attended / ignored.
    """
    now = local_now(now)
    window_start = now - timedelta(days=window_days)
    latest = snapshot.latest_conversations()
    pending = snapshot.pending_reminders_by_contact()

    in_window: dict[str, list] = {}
    for convo in snapshot.conversations:
        if convo.timestamp >= window_start:
            in_window.setdefault(convo.contact_id, []).append(convo)

    summary = WeeklyReviewSummary(
        window_days=window_days,
        window_start=window_start,
        window_end=now,
    )

    attended: list[WeeklyReviewContact] = []
    ignored: list[tuple] = []  # (row, (segment, assessed))

    for contact in snapshot.contacts:
        segment = segment_for_contact(contact)
        assessed = assess_contact(
            contact,
            latest.get(contact.id),
            pending.get(contact.id, []),
            now,
            fallback_reason=segment.fallback_reason if segment else None,
        )
        if assessed.health.score < at_risk_threshold:
            summary.at_risk_contacts += 1

        row = WeeklyReviewContact(
            contact_id=contact.id,
            contact_name=contact.name,
            contact_last_name=contact.last_name,
            health_score=assessed.health.score,
            urgency=assessed.urgency,
            priority=assessed.priority,
            reason=assessed.reason,
        )

        convos = in_window.get(contact.id)
        if convos:
            newest = max(convos, key=lambda c: c.timestamp)
            row.interaction_count = len(convos)
            row.last_interaction_at = newest.timestamp
            row.last_interaction_preview = preview_text(newest.content)
            attended.append(row)
            summary.interactions += len(convos)
        else:
            ignored.append((row, (segment, assessed)))

    summary.unique_contacts = len(attended)

    attended.sort(key=lambda r: r.last_interaction_at, reverse=True)
    attended.sort(key=lambda r: r.interaction_count, reverse=True)
    ignored.sort(key=lambda pair: (-PRIORITY_RANK[pair[0].priority], pair[0].health_score))

    next_steps = []
    for row, (segment, assessed) in ignored[:MAX_NEXT_STEPS]:
        next_steps.append(
            WeeklyReviewStep(
                contact_id=row.contact_id,
                contact_name=row.contact_name,
                contact_last_name=row.contact_last_name,
                priority=row.priority,
                reason=row.reason,
                action_label=action_label(segment, assessed.overdue_count, assessed.pending_count),
            )
        )

    for reminder in snapshot.reminders:
        if reminder.status == ReminderStatus.PENDING and reminder.remind_at < now:
            summary.open_loops += 1
        # dismissal time isn't tracked, remind_at stands in for it
        elif reminder.status == ReminderStatus.DISMISSED and window_start <= reminder.remind_at <= now:
            summary.closed_loops += 1

    logger.debug(
        "weekly_review.built",
        attended=len(attended),
        ignored=len(ignored),
        interactions=summary.interactions,
    )
    return WeeklyReview(
        summary=summary,
        attended_contacts=attended,
        ignored_contacts=[row for row, _ in ignored],
        next_steps=next_steps,
    )
