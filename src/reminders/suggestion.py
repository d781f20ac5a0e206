"""Auto-reminder suggestions: should a logged conversation spawn a follow-up, and when.

Two opinions are fused:

- rules: explicit time cues ("tomorrow", "in 2 weeks") and follow-up intent words
- LLM (optional): {should_remind, days_until, confidence, reason}

Fusion order:
1. LLM confidently says no (confidence >= 0.75) -> nothing, even if rules fire.
2. LLM says yes with a day count and confidence >= min_confidence -> LLM.
3. Rules, if their confidence >= max(0.6, min_confidence - 0.1).
4. Otherwise nothing.
"""

import json
import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog

from contacts.cadence import frequency_days
from contacts.timeutils import add_days_at_hour, local_now, parse_timestamp
from shared_types import DecisionSource

logger = structlog.get_logger()

MIN_REMINDER_DAYS = 1
MAX_REMINDER_DAYS = 180
DEFAULT_REMINDER_HOUR = 9
DEFAULT_MIN_CONFIDENCE = 0.72

LLM_VETO_CONFIDENCE = 0.75
RULE_CONFIDENCE_FLOOR = 0.6
RULE_CONFIDENCE_SLACK = 0.1
LLM_DEFAULT_CONFIDENCE = 0.6

RULE_CONFIDENCE_BOTH = 0.86
RULE_CONFIDENCE_TIME_ONLY = 0.78
RULE_CONFIDENCE_INTENT_ONLY = 0.67

_INTENT_RE = re.compile(
    r"\b(follow\s?up|check\s?in|circle\s?back|remind me|ping|reach out|send|share)\b"
)
_IN_DAYS_RE = re.compile(r"\bin\s+(\d{1,3})\s+days?\b")
_IN_WEEKS_RE = re.compile(r"\bin\s+(\d{1,2})\s+weeks?\b")

_SYSTEM_PROMPT = (
    "You are a reminder extraction model. Return strict JSON only. No markdown. "
    "Choose should_remind=true only if there is a credible future follow-up action. "
    f"days_until must be an integer {MIN_REMINDER_DAYS}-{MAX_REMINDER_DAYS} or null."
)


@dataclass
class AutoReminderRequest:
    content: str
    contact_name: str
    contact_frequency: Optional[str] = None
    interaction_type: str = "other"
    conversation_timestamp: Optional[datetime] = None


@dataclass
class ReminderOpinion:
    """One engine's view, before fusion."""

    should_remind: bool
    days_until: int | None
    confidence: float
    reason: str
    source: DecisionSource


@dataclass
class AutoReminderSuggestion:
    remind_at: datetime
    days_until: int
    reason: str
    confidence: float
    source: DecisionSource
    should_create: bool = True


def clamp_days(value: int) -> int:
    return min(MAX_REMINDER_DAYS, max(MIN_REMINDER_DAYS, value))


def _is_number(value) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def normalize_days(value) -> int | None:
    if not _is_number(value):
        return None
    return clamp_days(int(math.floor(value + 0.5)))


def normalize_confidence(value, fallback: float) -> float:
    if not _is_number(value):
        return fallback
    return max(0.0, min(1.0, float(value)))


def extract_explicit_days(content: str) -> int | None:
    """Day offset named in (lower-cased) text, if any."""
    if re.search(r"\btomorrow\b", content):
        return 1
    if re.search(r"\bnext\s+week\b", content):
        return 7
    if re.search(r"\bnext\s+month\b", content):
        return 30

    match = _IN_DAYS_RE.search(content)
    if match:
        return clamp_days(int(match.group(1)))

    match = _IN_WEEKS_RE.search(content)
    if match:
        return clamp_days(int(match.group(1)) * 7)

    return None


def has_follow_up_intent(content: str) -> bool:
    return bool(_INTENT_RE.search(content))


def rule_opinion(request: AutoReminderRequest) -> ReminderOpinion:
    normalized = (request.content or "").lower()
    explicit_days = extract_explicit_days(normalized)
    intent = has_follow_up_intent(normalized)

    if not intent and explicit_days is None:
        return ReminderOpinion(
            should_remind=False,
            days_until=None,
            confidence=0.0,
            reason="No explicit follow-up signal found in the conversation.",
            source=DecisionSource.RULES,
        )

    if explicit_days is not None:
        days_until = explicit_days
    else:
        cadence = frequency_days(request.contact_frequency)
        days_until = clamp_days(max(2, int(math.floor(cadence / 2 + 0.5)))) if cadence else 7

    if explicit_days is not None and intent:
        confidence = RULE_CONFIDENCE_BOTH
    elif explicit_days is not None:
        confidence = RULE_CONFIDENCE_TIME_ONLY
    else:
        confidence = RULE_CONFIDENCE_INTENT_ONLY

    if explicit_days is not None:
        reason = f"Conversation includes a follow-up time cue ({days_until} day window)."
    else:
        reason = "Conversation includes follow-up intent language."

    return ReminderOpinion(
        should_remind=True,
        days_until=days_until,
        confidence=confidence,
        reason=reason,
        source=DecisionSource.RULES,
    )


def build_llm_messages(request: AutoReminderRequest, now: datetime) -> list[dict]:
    conversation_at = request.conversation_timestamp or now
    return [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {
            "role": "user",
            "content": json.dumps(
                {
                    "now_iso": now.isoformat(),
                    "contact_name": request.contact_name,
                    "interaction_type": request.interaction_type or "other",
                    "contact_frequency_days": frequency_days(request.contact_frequency),
                    "conversation_timestamp": conversation_at.isoformat(),
                    "conversation_content": request.content,
                    "output_schema": {
                        "should_remind": "boolean",
                        "days_until": "integer | null",
                        "confidence": "number 0..1",
                        "reason": "short string",
                    },
                }
            ),
        },
    ]


def llm_opinion(request: AutoReminderRequest, llm, now: datetime) -> ReminderOpinion | None:
    """Ask the model; any failure or malformed payload means no opinion."""
    if llm is None:
        return None
    parsed = llm.complete_json(build_llm_messages(request, now))
    if not parsed:
        return None

    reason = parsed.get("reason")
    if not isinstance(reason, str) or not reason.strip():
        reason = "Model identified follow-up intent in the conversation."

    return ReminderOpinion(
        should_remind=parsed.get("should_remind") is True,
        days_until=normalize_days(parsed.get("days_until")),
        confidence=normalize_confidence(parsed.get("confidence"), LLM_DEFAULT_CONFIDENCE),
        reason=reason.strip(),
        source=DecisionSource.LLM,
    )


def fuse_opinions(
    rules: ReminderOpinion,
    llm: ReminderOpinion | None,
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
) -> ReminderOpinion | None:
    if llm is not None:
        if not llm.should_remind and llm.confidence >= LLM_VETO_CONFIDENCE:
            return None
        if llm.should_remind and llm.days_until is not None and llm.confidence >= min_confidence:
            return llm

    rule_floor = max(RULE_CONFIDENCE_FLOOR, min_confidence - RULE_CONFIDENCE_SLACK)
    if rules.should_remind and rules.days_until is not None and rules.confidence >= rule_floor:
        return rules
    return None


def build_remind_at(base: Optional[datetime], days_until: int, now: datetime) -> datetime:
    """Base + days, at 09:00 local."""
    return add_days_at_hour(parse_timestamp(base) or now, days_until, DEFAULT_REMINDER_HOUR)


def quick_reminder_date(days: int, now: Optional[datetime] = None) -> datetime:
    """Manual "remind me in N days" shortcut, same 09:00 convention."""
    return add_days_at_hour(local_now(now), days, DEFAULT_REMINDER_HOUR)


def suggest_auto_reminder(
    request: AutoReminderRequest,
    llm=None,
    min_confidence: Optional[float] = None,
    now: Optional[datetime] = None,
) -> AutoReminderSuggestion | None:
    """Decide whether `request` warrants a reminder.

    Args:
        request: The newly logged conversation and its contact context.
        llm: A StructuredLLM (or anything with complete_json); None = rules only.
        min_confidence: Acceptance bar for the LLM path (default 0.72).
        now: Reference time.
    """
    now = local_now(now)
    threshold = DEFAULT_MIN_CONFIDENCE if min_confidence is None else max(0.0, min(1.0, min_confidence))

    rules = rule_opinion(request)
    model = llm_opinion(request, llm, now)
    selected = fuse_opinions(rules, model, threshold)

    if selected is None or selected.days_until is None:
        logger.debug(
            "auto_reminder.none",
            rules_confidence=rules.confidence,
            llm_confidence=model.confidence if model else None,
        )
        return None

    logger.info(
        "auto_reminder.suggested",
        source=selected.source.value,
        days_until=selected.days_until,
        confidence=selected.confidence,
    )
    return AutoReminderSuggestion(
        remind_at=build_remind_at(request.conversation_timestamp, selected.days_until, now),
        days_until=selected.days_until,
        reason=selected.reason,
        confidence=selected.confidence,
        source=selected.source,
    )
