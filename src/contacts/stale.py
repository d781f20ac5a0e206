"""Stale contact scanner: contacts approaching or past their cadence goal."""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from shared_types import ContactFrequency, Staleness

from .cadence import APPROACHING_RATIO, FREQUENCY_DAYS, get_staleness
from .models import Contact, Conversation
from .snapshot import latest_conversations
from .timeutils import days_since, local_now


@dataclass
class StaleContact:
    id: str
    name: str
    last_name: str | None
    contact_frequency: ContactFrequency
    last_conversation_date: datetime | None
    days_since: int
    frequency_days: int
    staleness: Staleness

    @property
    def ratio(self) -> float:
        return self.days_since / self.frequency_days

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.last_name}" if self.last_name else self.name


def get_stale_contacts(
    contacts: Iterable[Contact],
    conversations: Iterable[Conversation],
    now: Optional[datetime] = None,
) -> list[StaleContact]:
    """Contacts at >= 80% of their cadence, most overdue first.

    Contacts without a cadence goal are ignored. Without any conversation the
    contact's creation time stands in for the last interaction.
    """
    now = local_now(now)
    latest = latest_conversations(conversations)
    stale: list[StaleContact] = []

    for contact in contacts:
        if contact.contact_frequency is None:
            continue
        freq_days = FREQUENCY_DAYS[contact.contact_frequency]
        last = latest.get(contact.id)
        reference = last.timestamp if last else contact.created_at
        elapsed = days_since(reference, now)
        if elapsed is None:
            elapsed = 0

        if elapsed < freq_days * APPROACHING_RATIO:
            continue

        stale.append(
            StaleContact(
                id=contact.id,
                name=contact.name,
                last_name=contact.last_name,
                contact_frequency=contact.contact_frequency,
                last_conversation_date=last.timestamp if last else None,
                days_since=elapsed,
                frequency_days=freq_days,
                staleness=get_staleness(elapsed, freq_days),
            )
        )

    # sorted() is stable, so equal ratios keep input order
    return sorted(stale, key=lambda s: s.ratio, reverse=True)
