"""Today Focus: one ranked, per-contact queue fused from three signal streams.

Each stream scores its own candidates on a 0-100 scale:

    reminders        overdue 100, due today 96, in 1-2 days 90, later 82
    important dates  today 94, tomorrow 88, within 3 days 80, later 74
    stale contacts   ratio >= 2 -> 84, >= 1.4 -> 76, else 70

Candidates are then merged by contact id so a person appears at most once.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import structlog

from contacts.dates import UpcomingDate, get_upcoming_dates
from contacts.snapshot import Snapshot
from contacts.stale import StaleContact, get_stale_contacts
from contacts.timeutils import calendar_days_between, local_now
from shared_types import FocusSource, ImportantDateLabel, Priority, Staleness

from .preferences import DEFAULT_PREFERENCES, DashboardPreferences

logger = structlog.get_logger()

REMINDER_LOOKAHEAD_DAYS = 7
DATE_LOOKAHEAD_DAYS = 7

HIGH_PRIORITY_SCORE = 85
MEDIUM_PRIORITY_SCORE = 72

_DATE_ACTIONS = {
    ImportantDateLabel.BIRTHDAY: "Send wishes",
    ImportantDateLabel.ANNIVERSARY: "Send congrats",
}

_DATE_NAMES = {
    ImportantDateLabel.BIRTHDAY: "Birthday",
    ImportantDateLabel.ANNIVERSARY: "Anniversary",
}


@dataclass
class TodayFocusItem:
    contact_id: str
    contact_name: str
    source: FocusSource
    score: int
    action_label: str
    reason: str
    priority: Priority = Priority.LOW
    secondary_reason: str | None = None
    reasons: list[str] = field(default_factory=list)
    sources: list[FocusSource] = field(default_factory=list)


def focus_priority(score: int) -> Priority:
    if score >= HIGH_PRIORITY_SCORE:
        return Priority.HIGH
    if score >= MEDIUM_PRIORITY_SCORE:
        return Priority.MEDIUM
    return Priority.LOW


def _in_days(days: int) -> str:
    if days == 0:
        return "today"
    if days == 1:
        return "tomorrow"
    return f"in {days} days"


# --- Signal scoring ---


def score_reminder(remind_at: datetime, now: datetime) -> tuple[int, str]:
    """(score, reason) for a pending reminder. Overdue means due on an earlier calendar day."""
    days_until = calendar_days_between(now, remind_at)
    if days_until < 0:
        return 100, f"Reminder overdue by {-days_until}d"
    if days_until == 0:
        return 96, "Reminder due today"
    if days_until <= 2:
        return 90, f"Reminder due {_in_days(days_until)}"
    return 82, f"Reminder due {_in_days(days_until)}"


def score_important_date(upcoming: UpcomingDate) -> tuple[int, str, str]:
    """(score, reason, action label) for an upcoming date."""
    days = upcoming.days_until
    if days == 0:
        score = 94
    elif days == 1:
        score = 88
    elif days <= 3:
        score = 80
    else:
        score = 74
    name = _DATE_NAMES.get(upcoming.label, upcoming.label.capitalize() or "Important date")
    action = _DATE_ACTIONS.get(upcoming.label, "Reach out")
    return score, f"{name} {_in_days(days)}", action


def score_stale_contact(stale: StaleContact, cooldown_days: int) -> Optional[tuple[int, str]]:
    """(score, reason), or None when a merely-yellow contact is still in cooldown."""
    if stale.staleness == Staleness.YELLOW and stale.days_since <= cooldown_days:
        return None
    ratio = stale.ratio
    if ratio >= 2:
        score = 84
    elif ratio >= 1.4:
        score = 76
    else:
        score = 70
    return score, f"No contact in {stale.days_since}d (goal every {stale.frequency_days}d)"


# --- Merge ---


class _FocusMerger:
    """Keeps the highest-scoring signal per contact plus every distinct reason."""

    def __init__(self):
        self._items: dict[str, TodayFocusItem] = {}

    def add(
        self,
        contact_id: str,
        contact_name: str,
        source: FocusSource,
        score: int,
        action_label: str,
        reason: str,
    ) -> None:
        current = self._items.get(contact_id)
        if current is None:
            self._items[contact_id] = TodayFocusItem(
                contact_id=contact_id,
                contact_name=contact_name,
                source=source,
                score=score,
                action_label=action_label,
                reason=reason,
                reasons=[reason],
                sources=[source],
            )
            return

        if source not in current.sources:
            current.sources.append(source)
        if score > current.score:
            current.source = source
            current.score = score
            current.action_label = action_label
            current.reason = reason
            # primary reason leads the list
            current.reasons = [reason] + [r for r in current.reasons if r != reason]
        elif reason not in current.reasons:
            current.reasons.append(reason)

    def items(self) -> list[TodayFocusItem]:
        merged = list(self._items.values())
        for item in merged:
            item.secondary_reason = item.reasons[1] if len(item.reasons) > 1 else None
            item.priority = focus_priority(item.score)
        return merged


def build_today_focus(
    snapshot: Snapshot,
    preferences: DashboardPreferences = DEFAULT_PREFERENCES,
    now: Optional[datetime] = None,
) -> list[TodayFocusItem]:
    """Rank who to reach out to today.

    Ties on score fall back to contact name, then id, so the order is
    deterministic for a given snapshot.
    """
    now = local_now(now)
    contacts = snapshot.contacts_by_id()
    merger = _FocusMerger()

    def name_of(contact_id: str) -> str:
        contact = contacts.get(contact_id)
        return contact.full_name if contact else ""

    for reminder in sorted(snapshot.reminders, key=lambda r: r.remind_at):
        if not reminder.is_pending or reminder.contact_id not in contacts:
            continue
        if calendar_days_between(now, reminder.remind_at) > REMINDER_LOOKAHEAD_DAYS:
            continue
        score, reason = score_reminder(reminder.remind_at, now)
        merger.add(
            reminder.contact_id, name_of(reminder.contact_id),
            FocusSource.REMINDER, score, "Follow up", reason,
        )

    for upcoming in get_upcoming_dates(
        snapshot.important_dates, contacts, within_days=DATE_LOOKAHEAD_DAYS, now=now
    ):
        if upcoming.contact_id not in contacts:
            continue
        score, reason, action = score_important_date(upcoming)
        merger.add(
            upcoming.contact_id, upcoming.contact_full_name,
            FocusSource.IMPORTANT_DATE, score, action, reason,
        )

    for stale in get_stale_contacts(snapshot.contacts, snapshot.conversations, now=now):
        scored = score_stale_contact(stale, preferences.cooldown_days)
        if scored is None:
            continue
        score, reason = scored
        merger.add(
            stale.id, stale.full_name,
            FocusSource.STALE_CONTACT, score, "Check in", reason,
        )

    ranked = sorted(merger.items(), key=lambda i: (-i.score, i.contact_name.lower(), i.contact_id))

    result = ranked
    if not preferences.include_low_priority:
        filtered = [i for i in ranked if i.priority != Priority.LOW]
        # never hide the whole queue behind the low-priority filter
        if filtered:
            result = filtered

    logger.debug("today_focus.ranked", candidates=len(ranked), returned=min(len(result), preferences.focus_limit))
    return result[: preferences.focus_limit]
