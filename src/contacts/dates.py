"""Upcoming important dates (birthdays, anniversaries, one-off events)."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional

import structlog

from .models import Contact, ImportantDate
from .timeutils import local_now

logger = structlog.get_logger()


@dataclass
class UpcomingDate:
    id: str
    contact_id: str
    contact_name: str
    contact_last_name: str | None
    label: str
    date: str
    year: int | None
    days_until: int
    occurs_on: date

    @property
    def contact_full_name(self) -> str:
        if self.contact_last_name:
            return f"{self.contact_name} {self.contact_last_name}"
        return self.contact_name


def _split_date(value: str) -> tuple[int, int, int] | None:
    parts = (value or "").strip().split("-")
    if len(parts) != 3:
        return None
    try:
        year, month, day = (int(p) for p in parts)
    except ValueError:
        return None
    return year, month, day


def _month_day(value: str) -> tuple[int, int] | None:
    """(month, day) of a date string, None when it can't exist in any year."""
    parts = _split_date(value)
    if parts is None:
        return None
    _, month, day = parts
    try:
        date(2000, month, day)  # leap year admits Feb 29
    except ValueError:
        return None
    return month, day


def _occurrence(year: int, month: int, day: int) -> date:
    try:
        return date(year, month, day)
    except ValueError:
        # Feb 29 outside leap years
        return date(year, 3, 1)


def next_occurrence(month: int, day: int, today: date) -> date:
    """Next calendar day matching (month, day), today included."""
    candidate = _occurrence(today.year, month, day)
    if candidate < today:
        candidate = _occurrence(today.year + 1, month, day)
    return candidate


def resolve_occurrence(entry: ImportantDate, today: date) -> date | None:
    """When the date next happens, or None if it never will / is malformed."""
    if not entry.recurring and entry.year:
        parts = _split_date(entry.date)
        if parts is None:
            return None
        try:
            return date(*parts)
        except ValueError:
            return None

    month_day = _month_day(entry.date)
    if month_day is None:
        return None
    return next_occurrence(*month_day, today)


def turning_age(year: int | None, occurs_on: date) -> int | None:
    """Age reached on the occurrence, for birthday display."""
    if not year:
        return None
    return occurs_on.year - year


def get_upcoming_dates(
    important_dates: Iterable[ImportantDate],
    contacts: Optional[dict[str, Contact]] = None,
    within_days: int = 30,
    now: Optional[datetime] = None,
) -> list[UpcomingDate]:
    """Dates occurring within `within_days` calendar days, soonest first."""
    today = local_now(now).date()
    contacts = contacts or {}
    upcoming: list[UpcomingDate] = []

    for entry in important_dates:
        occurs_on = resolve_occurrence(entry, today)
        if occurs_on is None:
            logger.debug("important_date.unresolvable", id=entry.id, date=entry.date)
            continue
        days_until = (occurs_on - today).days
        if days_until < 0 or days_until > within_days:
            continue

        contact = contacts.get(entry.contact_id)
        upcoming.append(
            UpcomingDate(
                id=entry.id,
                contact_id=entry.contact_id,
                contact_name=contact.name if contact else "",
                contact_last_name=contact.last_name if contact else None,
                label=entry.label,
                date=entry.date,
                year=entry.year,
                days_until=days_until,
                occurs_on=occurs_on,
            )
        )

    return sorted(upcoming, key=lambda u: u.days_until)
