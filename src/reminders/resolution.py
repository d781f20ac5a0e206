"""Auto-resolution: does a new conversation close out the contact's due reminders?

The LLM (when configured) judges each candidate separately. The keyword rules
only run when the model resolved nothing, and they are deliberately narrow:
at most the single oldest reminder that was already due when the
conversation happened.
"""

import json
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import structlog

from contacts.models import Conversation, Reminder
from contacts.timeutils import local_now
from shared_types import DecisionSource

from .suggestion import DEFAULT_MIN_CONFIDENCE, normalize_confidence

logger = structlog.get_logger()

DEFAULT_MAX_CANDIDATES = 8

_COMPLETION_RE = re.compile(
    r"\b(done|sent|shared|emailed|called|texted|messaged|reached out|followed up|"
    r"checked in|spoke|talked|met|scheduled|booked|confirmed)\b"
)
_NEGATION_RE = re.compile(
    r"\b(not yet|haven't|have not|didn't|did not|need to|todo|to-do|later|tomorrow)\b"
)

_SYSTEM_PROMPT = (
    "You decide whether a new conversation completes pending follow-up reminders. "
    "Return strict JSON only. No markdown. Mark resolved=true only when the "
    "conversation clearly shows the follow-up happened."
)


@dataclass
class ReminderResolutionResult:
    resolved_ids: list[str] = field(default_factory=list)
    source: DecisionSource = DecisionSource.RULES


def is_completion_text(content: str) -> bool:
    """Completion wording present and no deferral/negation wording."""
    normalized = (content or "").lower()
    return bool(_COMPLETION_RE.search(normalized)) and not _NEGATION_RE.search(normalized)


def resolve_with_rules(conversation: Conversation, candidates: list[Reminder]) -> list[str]:
    """Oldest candidate due at or before the conversation, if the text reads as done."""
    if not candidates or not is_completion_text(conversation.content):
        return []
    due = [r for r in candidates if r.remind_at <= conversation.timestamp]
    if not due:
        return []
    oldest = min(due, key=lambda r: r.remind_at)
    return [oldest.id]


def build_llm_messages(conversation: Conversation, candidates: list[Reminder]) -> list[dict]:
    payload = {
        "new_conversation": {
            "id": conversation.id,
            "timestamp": conversation.timestamp.isoformat(),
            "type": conversation.type.value,
            "content": conversation.content,
        },
        "reminders": [
            {
                "reminder_id": r.id,
                "remind_at": r.remind_at.isoformat(),
                "reminder_context": r.context,
            }
            for r in candidates
        ],
        "output_schema": {
            "items": [
                {
                    "reminder_id": "string",
                    "resolved": "boolean",
                    "confidence": "number 0..1",
                    "reason": "short string",
                }
            ]
        },
    }
    return [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {"role": "user", "content": json.dumps(payload)},
    ]


def resolve_with_llm(
    conversation: Conversation,
    candidates: list[Reminder],
    llm,
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
) -> list[str]:
    if llm is None or not candidates:
        return []
    parsed = llm.complete_json(build_llm_messages(conversation, candidates))
    if not parsed:
        return []
    items = parsed.get("items")
    if not isinstance(items, list):
        return []

    known = {r.id for r in candidates}
    resolved: list[str] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        reminder_id = item.get("reminder_id")
        if not isinstance(reminder_id, str):
            continue
        if reminder_id not in known or reminder_id in resolved:
            continue
        if item.get("resolved") is not True:
            continue
        if normalize_confidence(item.get("confidence"), 0.0) < min_confidence:
            continue
        resolved.append(reminder_id)
    return resolved


class ReminderResolver:
    """Resolves due reminders against a ReminderStore."""

    def __init__(
        self,
        store,
        llm=None,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
        max_candidates: int = DEFAULT_MAX_CANDIDATES,
    ):
        self.store = store
        self.llm = llm
        self.min_confidence = min_confidence
        self.max_candidates = max_candidates

    def resolve(
        self,
        contact_id: str,
        conversation: Conversation,
        now: Optional[datetime] = None,
    ) -> ReminderResolutionResult | None:
        now = local_now(now)
        candidates = self.store.due_pending_for_contact(contact_id, now, limit=self.max_candidates)
        if not candidates:
            return None

        resolved = resolve_with_llm(conversation, candidates, self.llm, self.min_confidence)
        source = DecisionSource.LLM
        if not resolved:
            resolved = resolve_with_rules(conversation, candidates)
            source = DecisionSource.RULES
        if not resolved:
            logger.debug("reminder_resolution.none", contact_id=contact_id, candidates=len(candidates))
            return None

        self.store.dismiss(resolved)
        logger.info(
            "reminder_resolution.resolved",
            contact_id=contact_id,
            count=len(resolved),
            source=source.value,
        )
        return ReminderResolutionResult(resolved_ids=resolved, source=source)
