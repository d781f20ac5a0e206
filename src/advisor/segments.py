"""Segment queues: per-group outreach lists for family, friends and work."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import structlog

from contacts.snapshot import Snapshot
from contacts.timeutils import local_now
from shared_types import Priority

from .preferences import DEFAULT_PREFERENCES, DashboardPreferences
from .urgency import SEGMENTS, action_label, assess_contact, find_segment_group

logger = structlog.get_logger()


@dataclass
class SegmentQueueItem:
    contact_id: str
    contact_name: str
    urgency: int
    priority: Priority
    health_score: int
    reason: str
    action_label: str
    days_since_last: int | None
    pending_reminders: int
    overdue_reminders: int


@dataclass
class SegmentQueue:
    key: str
    title: str
    group_id: str
    group_name: str
    items: list[SegmentQueueItem] = field(default_factory=list)


def build_segment_queues(
    snapshot: Snapshot,
    preferences: DashboardPreferences = DEFAULT_PREFERENCES,
    now: Optional[datetime] = None,
) -> list[SegmentQueue]:
    """One queue per segment whose group exists and has members."""
    now = local_now(now)
    latest = snapshot.latest_conversations()
    pending = snapshot.pending_reminders_by_contact()
    groups = snapshot.all_groups()

    queues: list[SegmentQueue] = []
    for config in SEGMENTS:
        group = find_segment_group(groups, config)
        if group is None:
            continue
        members = [c for c in snapshot.contacts if any(g.id == group.id for g in c.groups)]
        if not members:
            continue

        items: list[SegmentQueueItem] = []
        for contact in members:
            assessed = assess_contact(
                contact,
                latest.get(contact.id),
                pending.get(contact.id, []),
                now,
                fallback_reason=config.fallback_reason,
            )
            if assessed.in_cooldown(preferences.cooldown_days):
                continue
            if not preferences.include_low_priority and assessed.priority == Priority.LOW:
                continue
            items.append(
                SegmentQueueItem(
                    contact_id=contact.id,
                    contact_name=contact.full_name,
                    urgency=assessed.urgency,
                    priority=assessed.priority,
                    health_score=assessed.health.score,
                    reason=assessed.reason,
                    action_label=action_label(config, assessed.overdue_count, assessed.pending_count),
                    days_since_last=assessed.days_since_last,
                    pending_reminders=assessed.pending_count,
                    overdue_reminders=assessed.overdue_count,
                )
            )

        items.sort(key=lambda i: i.urgency, reverse=True)
        queues.append(
            SegmentQueue(
                key=config.key,
                title=config.title,
                group_id=group.id,
                group_name=group.name,
                items=items[: preferences.segment_limit],
            )
        )
        logger.debug("segment_queue.built", segment=config.key, members=len(members), queued=len(items))

    return queues
