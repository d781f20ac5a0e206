"""Point-in-time snapshot of CRM rows, loaded from JSON/YAML or plain dicts."""

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable

import structlog
import yaml

from .models import Contact, Conversation, Group, ImportantDate, Reminder

logger = structlog.get_logger()

_SECTIONS = {
    "contacts": (Contact, ("contacts", "people")),
    "conversations": (Conversation, ("conversations", "interactions")),
    "reminders": (Reminder, ("reminders",)),
    "important_dates": (ImportantDate, ("important_dates", "importantDates", "dates")),
    "groups": (Group, ("groups",)),
}


def _section_rows(data: dict, keys: tuple) -> list:
    """First list found under any of the accepted keys."""
    for key in keys:
        if isinstance(data.get(key), list):
            return data[key]
    return []


def latest_conversations(conversations: Iterable[Conversation]) -> dict[str, Conversation]:
    """Most recent conversation per contact id."""
    latest: dict[str, Conversation] = {}
    for convo in conversations:
        current = latest.get(convo.contact_id)
        if current is None or convo.timestamp > current.timestamp:
            latest[convo.contact_id] = convo
    return latest


@dataclass
class Snapshot:
    contacts: list[Contact] = field(default_factory=list)
    conversations: list[Conversation] = field(default_factory=list)
    reminders: list[Reminder] = field(default_factory=list)
    important_dates: list[ImportantDate] = field(default_factory=list)
    groups: list[Group] = field(default_factory=list)

    def contact(self, contact_id: str) -> Contact | None:
        for c in self.contacts:
            if c.id == contact_id:
                return c
        return None

    def contacts_by_id(self) -> dict[str, Contact]:
        return {c.id: c for c in self.contacts}

    def latest_conversations(self) -> dict[str, Conversation]:
        return latest_conversations(self.conversations)

    def all_groups(self) -> list[Group]:
        """Declared groups first, then any only seen on contact memberships."""
        seen: dict[str, Group] = {g.id: g for g in self.groups}
        for contact in self.contacts:
            for group in contact.groups:
                seen.setdefault(group.id, group)
        return list(seen.values())

    def conversations_for(self, contact_id: str) -> list[Conversation]:
        """Conversations of one contact, newest first."""
        rows = [c for c in self.conversations if c.contact_id == contact_id]
        return sorted(rows, key=lambda c: c.timestamp, reverse=True)

    def with_reminders(self, reminders: Iterable[Reminder]) -> "Snapshot":
        """Copy with `reminders` overlaid by id; overlaid rows replace snapshot rows."""
        overlay = {r.id: r for r in reminders}
        merged = [overlay.pop(r.id, r) for r in self.reminders]
        merged.extend(overlay.values())
        return replace(self, reminders=merged)

    def pending_reminders_by_contact(self) -> dict[str, list[Reminder]]:
        grouped: dict[str, list[Reminder]] = {}
        for r in self.reminders:
            if r.is_pending:
                grouped.setdefault(r.contact_id, []).append(r)
        return grouped

    @classmethod
    def from_dict(cls, data: dict) -> "Snapshot":
        """Build from raw row dicts; malformed rows are skipped with a warning."""
        data = data or {}
        parsed: dict[str, list] = {}
        for attr, (model, keys) in _SECTIONS.items():
            rows = _section_rows(data, keys)
            items = []
            for idx, row in enumerate(rows):
                if not isinstance(row, dict):
                    logger.warning("snapshot.row_skipped", section=attr, index=idx, error="not a mapping")
                    continue
                try:
                    items.append(model.from_dict(row))
                except (ValueError, TypeError) as e:
                    logger.warning("snapshot.row_skipped", section=attr, index=idx, error=str(e))
            parsed[attr] = items

        # Contacts may carry nested conversations/dates, as ORM queries return them
        for raw in _section_rows(data, _SECTIONS["contacts"][1]):
            if not isinstance(raw, dict) or raw.get("id") is None:
                continue
            for attr in ("conversations", "important_dates", "reminders"):
                model, keys = _SECTIONS[attr]
                for row in _section_rows(raw, keys):
                    if not isinstance(row, dict):
                        continue
                    row = {"contact_id": raw["id"], **row}
                    try:
                        parsed[attr].append(model.from_dict(row))
                    except (ValueError, TypeError) as e:
                        logger.warning("snapshot.row_skipped", section=attr, error=str(e))

        snapshot = cls(**parsed)
        logger.debug(
            "snapshot.loaded",
            contacts=len(snapshot.contacts),
            conversations=len(snapshot.conversations),
            reminders=len(snapshot.reminders),
            important_dates=len(snapshot.important_dates),
        )
        return snapshot


def load_snapshot(path: str | Path) -> Snapshot:
    """Load a snapshot file (.json, .yaml or .yml)."""
    path = Path(path).expanduser()
    text = path.read_text()
    if path.suffix.lower() in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in snapshot {path}: {e}")
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in snapshot {path}: {e}")
    if not isinstance(data, dict):
        raise ValueError(f"Snapshot {path} must be a mapping of row lists")
    return Snapshot.from_dict(data)
