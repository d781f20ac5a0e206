"""Read-model rows for contacts, conversations, reminders and important dates.

Rows are snapshots handed over by the persistence layer. `from_dict` accepts
both snake_case and the camelCase wire names; required fields missing raise
ValueError so the caller can skip the row.
"""

from dataclasses import dataclass, field
from datetime import datetime

from shared_types import ContactFrequency, InteractionType, ReminderStatus

from .cadence import parse_frequency
from .timeutils import parse_timestamp


def _get(data: dict, *keys, default=None):
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _require(data: dict, *keys) -> str:
    value = _get(data, *keys)
    if value is None or str(value).strip() == "":
        raise ValueError(f"missing required field: {keys[0]}")
    return str(value)


def _require_timestamp(data: dict, *keys) -> datetime:
    dt = parse_timestamp(_get(data, *keys))
    if dt is None:
        raise ValueError(f"missing or invalid timestamp: {keys[0]}")
    return dt


@dataclass
class Group:
    id: str
    name: str

    @classmethod
    def from_dict(cls, data: dict) -> "Group":
        return cls(id=_require(data, "id"), name=str(_get(data, "name", default="")))


@dataclass
class Contact:
    id: str
    name: str
    last_name: str | None = None
    contact_frequency: ContactFrequency | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    groups: list[Group] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.last_name}" if self.last_name else self.name

    @classmethod
    def from_dict(cls, data: dict) -> "Contact":
        groups = []
        for raw in _get(data, "groups", default=[]) or []:
            # join-table rows nest the group under "group"
            if isinstance(raw, dict) and isinstance(raw.get("group"), dict):
                raw = raw["group"]
            if isinstance(raw, dict) and raw.get("id") is not None:
                groups.append(Group.from_dict(raw))
        return cls(
            id=_require(data, "id"),
            name=str(_get(data, "name", default="")),
            last_name=_get(data, "last_name", "lastName"),
            contact_frequency=parse_frequency(_get(data, "contact_frequency", "contactFrequency")),
            created_at=parse_timestamp(_get(data, "created_at", "createdAt")),
            updated_at=parse_timestamp(_get(data, "updated_at", "updatedAt")),
            groups=groups,
        )


@dataclass
class Conversation:
    id: str
    contact_id: str
    content: str
    timestamp: datetime
    type: InteractionType = InteractionType.OTHER

    @classmethod
    def from_dict(cls, data: dict) -> "Conversation":
        raw_type = str(_get(data, "type", default="other")).lower()
        try:
            interaction_type = InteractionType(raw_type)
        except ValueError:
            interaction_type = InteractionType.OTHER
        return cls(
            id=_require(data, "id"),
            contact_id=_require(data, "contact_id", "contactId"),
            content=str(_get(data, "content", default="")),
            timestamp=_require_timestamp(data, "timestamp"),
            type=interaction_type,
        )


@dataclass
class Reminder:
    id: str
    contact_id: str
    remind_at: datetime
    conversation_id: str | None = None
    status: ReminderStatus = ReminderStatus.PENDING
    context: str = ""  # content of the conversation that spawned it

    @property
    def is_pending(self) -> bool:
        return self.status == ReminderStatus.PENDING

    def is_overdue(self, now: datetime) -> bool:
        return self.is_pending and self.remind_at < now

    @classmethod
    def from_dict(cls, data: dict) -> "Reminder":
        raw_status = str(_get(data, "status", default="PENDING")).upper()
        try:
            status = ReminderStatus(raw_status)
        except ValueError as e:
            raise ValueError(f"unknown reminder status: {raw_status}") from e
        return cls(
            id=_require(data, "id"),
            contact_id=_require(data, "contact_id", "contactId"),
            remind_at=_require_timestamp(data, "remind_at", "remindAt"),
            conversation_id=_get(data, "conversation_id", "conversationId"),
            status=status,
            context=str(_get(data, "context", default="")),
        )


@dataclass
class ImportantDate:
    id: str
    contact_id: str
    label: str
    date: str  # YYYY-MM-DD
    year: int | None = None
    recurring: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> "ImportantDate":
        year = _get(data, "year")
        try:
            year = int(year) if year is not None else None
        except (TypeError, ValueError):
            year = None
        recurring = _get(data, "recurring", default=True)
        if isinstance(recurring, str):
            recurring = recurring.strip().lower() not in ("false", "0", "no")
        return cls(
            id=_require(data, "id"),
            contact_id=_require(data, "contact_id", "contactId"),
            label=str(_get(data, "label", default="custom")),
            date=str(_get(data, "date", default="")),
            year=year,
            recurring=bool(recurring),
        )
