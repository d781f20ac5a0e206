"""Daily standup digest: plain-text morning summary for chat delivery."""

from datetime import datetime
from typing import Optional

from contacts.dates import resolve_occurrence
from contacts.snapshot import Snapshot
from contacts.stale import get_stale_contacts
from contacts.timeutils import local_now, parse_timestamp
from shared_types import ImportantDateLabel

MAX_LINES_PER_SECTION = 5
DEFAULT_STANDUP_TIME = "08:00"

_DATE_LABELS = {
    ImportantDateLabel.BIRTHDAY: "Birthday",
    ImportantDateLabel.ANNIVERSARY: "Anniversary",
    ImportantDateLabel.CUSTOM: "Custom",
}


def humanize_days(days: int) -> str:
    if days >= 365:
        years = days // 365
        return f"{years} year{'' if years == 1 else 's'}"
    if days >= 30:
        months = days // 30
        return f"{months} month{'' if months == 1 else 's'}"
    if days >= 14:
        weeks = days // 7
        return f"{weeks} week{'' if weeks == 1 else 's'}"
    return f"{days} day{'' if days == 1 else 's'}"


def parse_standup_time(value: Optional[str]) -> tuple[int, int]:
    """'HH:MM' -> (hour, minute); anything invalid falls back to 08:00."""
    raw = (value or "").strip() or DEFAULT_STANDUP_TIME
    parts = raw.split(":")
    if len(parts) == 2 and parts[0].isdigit() and parts[1].isdigit():
        hour, minute = int(parts[0]), int(parts[1])
        if 0 <= hour <= 23 and 0 <= minute <= 59:
            return hour, minute
    return 8, 0


def is_standup_due(
    now: datetime,
    last_sent_at: Optional[datetime] = None,
    standup_time: Optional[str] = None,
) -> bool:
    """True once the configured time has passed and nothing went out today."""
    now = local_now(now)
    last_sent_at = parse_timestamp(last_sent_at)
    if last_sent_at is not None and last_sent_at.date() == now.date():
        return False
    hour, minute = parse_standup_time(standup_time)
    return (now.hour, now.minute) >= (hour, minute)


def _header(now: datetime) -> str:
    return f"Daily standup ({now.strftime('%A')}, {now.strftime('%b')} {now.day})"


def _todays_dates(snapshot: Snapshot, now: datetime) -> list:
    today = now.date()
    return [entry for entry in snapshot.important_dates if resolve_occurrence(entry, today) == today]


def build_daily_standup(snapshot: Snapshot, now: Optional[datetime] = None) -> str:
    """Today's dates, overdue check-ins and missed reminders as one message."""
    now = local_now(now)
    contacts = snapshot.contacts_by_id()

    def name_of(contact_id: str) -> str:
        contact = contacts.get(contact_id)
        return contact.full_name if contact else "Unknown"

    todays_dates = [d for d in _todays_dates(snapshot, now) if d.contact_id in contacts]
    overdue = [
        s
        for s in get_stale_contacts(snapshot.contacts, snapshot.conversations, now=now)
        if s.days_since >= s.frequency_days
    ][:MAX_LINES_PER_SECTION]
    due_reminders = sorted(
        (r for r in snapshot.reminders if r.is_pending and r.remind_at <= now),
        key=lambda r: r.remind_at,
    )[:MAX_LINES_PER_SECTION]

    lines = [_header(now), ""]

    if todays_dates:
        lines.append("Today:")
        for entry in todays_dates[:MAX_LINES_PER_SECTION]:
            name = name_of(entry.contact_id)
            if entry.label == ImportantDateLabel.BIRTHDAY:
                lines.append(f"- Today is {name}'s birthday")
            else:
                label = _DATE_LABELS.get(entry.label, entry.label)
                lines.append(f"- {name}: {label}")
        lines.append("")

    if overdue:
        lines.append("You should reach out to:")
        for stale in overdue:
            lines.append(
                f"- {stale.full_name}: it's been {humanize_days(stale.days_since)} since you last chatted"
            )
        lines.append("")

    if due_reminders:
        lines.append("Missed reminders:")
        for reminder in due_reminders:
            lines.append(f"- {name_of(reminder.contact_id)} ({reminder.remind_at.date().isoformat()})")
        lines.append("")

    if not todays_dates and not overdue and not due_reminders:
        lines.append(
            "You're all caught up. No birthdays, overdue check-ins, or missed reminders today."
        )

    return "\n".join(lines).strip()
