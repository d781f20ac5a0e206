"""Tests for auto-resolving due reminders."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from contacts.models import Conversation, Reminder
from reminders.resolution import ReminderResolver, is_completion_text, resolve_with_rules
from reminders.store import ReminderStore
from shared_types import DecisionSource, InteractionType, ReminderStatus

NOW = datetime(2026, 3, 15, 10, 0)


def _conversation(content, at=NOW):
    return Conversation(id="v-new", contact_id="c1", content=content, timestamp=at, type=InteractionType.TEXT)


@pytest.fixture
def store(tmp_path):
    return ReminderStore(tmp_path / "reminders.db")


@pytest.fixture
def seeded(store):
    """Two due reminders (5d and 2d ago) and one in the future for c1."""
    older = store.create_if_missing("c1", NOW - timedelta(days=5), context="send the deck")
    newer = store.create_if_missing("c1", NOW - timedelta(days=2), context="ask about the move")
    future = store.create_if_missing("c1", NOW + timedelta(days=2), context="birthday gift")
    return older, newer, future


class TestCompletionText:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Sent her the deck", True),
            ("We talked for an hour", True),
            ("Followed up on the intro", True),
            ("Haven't sent it yet", False),
            ("Need to call him", False),
            ("done, will ping again tomorrow", False),
            ("just saying hi", False),
        ],
    )
    def test_keywords(self, text, expected):
        assert is_completion_text(text) is expected


class TestRuleResolution:
    def test_resolves_only_oldest_due(self):
        candidates = [
            Reminder(id="a", contact_id="c1", remind_at=NOW - timedelta(days=5)),
            Reminder(id="b", contact_id="c1", remind_at=NOW - timedelta(days=2)),
        ]
        assert resolve_with_rules(_conversation("Sent the deck"), candidates) == ["a"]

    def test_ignores_reminders_due_after_conversation(self):
        candidates = [Reminder(id="a", contact_id="c1", remind_at=NOW - timedelta(days=1))]
        convo = _conversation("Called her", at=NOW - timedelta(days=3))
        assert resolve_with_rules(convo, candidates) == []

    def test_negation_blocks(self):
        candidates = [Reminder(id="a", contact_id="c1", remind_at=NOW - timedelta(days=1))]
        assert resolve_with_rules(_conversation("didn't get to call"), candidates) == []


class TestReminderResolver:
    def test_rules_dismiss_oldest(self, store, seeded):
        older, newer, future = seeded
        result = ReminderResolver(store).resolve("c1", _conversation("Sent the deck over"), now=NOW)
        assert result.resolved_ids == [older.id]
        assert result.source == DecisionSource.RULES
        assert store.get(older.id).status == ReminderStatus.DISMISSED
        assert store.get(newer.id).status == ReminderStatus.PENDING
        assert store.get(future.id).status == ReminderStatus.PENDING

    def test_no_due_candidates(self, store):
        store.create_if_missing("c1", NOW + timedelta(days=1))
        assert ReminderResolver(store).resolve("c1", _conversation("done"), now=NOW) is None

    def test_nothing_resolved(self, store, seeded):
        assert ReminderResolver(store).resolve("c1", _conversation("need to send it"), now=NOW) is None

    def test_llm_resolves_multiple(self, store, seeded, mock_llm):
        older, newer, future = seeded
        mock_llm.complete_json.return_value = {
            "items": [
                {"reminder_id": older.id, "resolved": True, "confidence": 0.9},
                {"reminder_id": newer.id, "resolved": True, "confidence": 0.8},
                {"reminder_id": future.id, "resolved": True, "confidence": 0.99},
                {"reminder_id": "made-up", "resolved": True, "confidence": 0.99},
            ]
        }
        result = ReminderResolver(store, llm=mock_llm).resolve("c1", _conversation("caught up"), now=NOW)
        assert result.source == DecisionSource.LLM
        assert result.resolved_ids == [older.id, newer.id]
        assert store.get(future.id).status == ReminderStatus.PENDING

    def test_llm_low_confidence_and_truthy_strings_rejected(self, store, seeded, mock_llm):
        older, newer, _ = seeded
        mock_llm.complete_json.return_value = {
            "items": [
                {"reminder_id": older.id, "resolved": True, "confidence": 0.5},
                {"reminder_id": newer.id, "resolved": "true", "confidence": 0.95},
            ]
        }
        resolver = ReminderResolver(store, llm=mock_llm)
        assert resolver.resolve("c1", _conversation("caught up"), now=NOW) is None

    def test_llm_empty_falls_back_to_rules(self, store, seeded, mock_llm):
        older, _, _ = seeded
        mock_llm.complete_json.return_value = {"items": []}
        result = ReminderResolver(store, llm=mock_llm).resolve("c1", _conversation("Emailed him"), now=NOW)
        assert result.source == DecisionSource.RULES
        assert result.resolved_ids == [older.id]

    def test_llm_failure_falls_back_to_rules(self, store, seeded, mock_llm):
        mock_llm.complete_json.return_value = None
        result = ReminderResolver(store, llm=mock_llm).resolve("c1", _conversation("Met for lunch"), now=NOW)
        assert result.source == DecisionSource.RULES

    def test_llm_payload(self, store, seeded, mock_llm):
        older, newer, _ = seeded
        ReminderResolver(store, llm=mock_llm).resolve("c1", _conversation("hello"), now=NOW)
        payload = json.loads(mock_llm.complete_json.call_args.args[0][1]["content"])
        assert payload["new_conversation"]["type"] == "text"
        assert [r["reminder_id"] for r in payload["reminders"]] == [older.id, newer.id]
        assert payload["reminders"][0]["reminder_context"] == "send the deck"

    def test_candidate_cap(self, store, mock_llm):
        for days in range(1, 12):
            store.create_if_missing("c1", NOW - timedelta(days=days))
        ReminderResolver(store, llm=mock_llm, max_candidates=8).resolve("c1", _conversation("hey"), now=NOW)
        payload = json.loads(mock_llm.complete_json.call_args.args[0][1]["content"])
        assert len(payload["reminders"]) == 8

    def test_llm_malformed_ids_ignored(self, store, seeded, mock_llm):
        older, _, _ = seeded
        mock_llm.complete_json.return_value = {
            "items": [
                {"reminder_id": [older.id], "resolved": True, "confidence": 0.9},
                {"reminder_id": {"id": older.id}, "resolved": True, "confidence": 0.9},
                {"reminder_id": 7, "resolved": True, "confidence": 0.9},
            ]
        }
        resolver = ReminderResolver(store, llm=mock_llm)
        assert resolver.resolve("c1", _conversation("caught up"), now=NOW) is None
        assert store.get(older.id).status == ReminderStatus.PENDING

    def test_aware_now(self, store, seeded):
        older, _, _ = seeded
        aware_now = NOW.astimezone(timezone.utc)
        result = ReminderResolver(store).resolve("c1", _conversation("Sent the deck"), now=aware_now)
        assert result.resolved_ids == [older.id]
