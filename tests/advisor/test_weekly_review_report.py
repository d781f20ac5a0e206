"""Tests for the weekly review aggregator."""

from datetime import datetime, timedelta, timezone

from advisor.weekly_review import build_weekly_review, preview_text
from contacts.snapshot import Snapshot
from shared_types import Priority

NOW = datetime(2026, 3, 15, 10, 0)


class TestPreviewText:
    def test_collapses_whitespace(self):
        assert preview_text("Texted about the  game\nlast night") == "Texted about the game last night"

    def test_truncates(self):
        text = "word " * 40
        preview = preview_text(text)
        assert len(preview) <= 95
        assert preview.endswith("…")

    def test_empty(self):
        assert preview_text("") == ""


class TestBuildWeeklyReview:
    def test_partition_is_complete_and_disjoint(self, snapshot, now):
        review = build_weekly_review(snapshot, now=now)
        attended = {c.contact_id for c in review.attended_contacts}
        ignored = {c.contact_id for c in review.ignored_contacts}
        assert attended.isdisjoint(ignored)
        assert attended | ignored == {c.id for c in snapshot.contacts}

    def test_aware_now(self, snapshot, now):
        aware = build_weekly_review(snapshot, now=now.astimezone(timezone.utc))
        assert aware == build_weekly_review(snapshot, now=now)

    def test_attended(self, snapshot, now):
        review = build_weekly_review(snapshot, now=now)
        assert [c.contact_id for c in review.attended_contacts] == ["c-sam"]
        sam = review.attended_contacts[0]
        assert sam.interaction_count == 2
        assert sam.last_interaction_preview == "Coffee downtown"

    def test_ignored_order_and_next_steps(self, snapshot, now):
        review = build_weekly_review(snapshot, now=now)
        assert [c.contact_id for c in review.ignored_contacts] == ["c-mom", "c-zoe", "c-ava", "c-ben"]
        assert review.ignored_contacts[0].priority == Priority.MEDIUM
        steps = [(s.contact_id, s.action_label) for s in review.next_steps]
        assert steps == [
            ("c-mom", "Call"),
            ("c-zoe", "Check in"),
            ("c-ava", "Close loop"),
            ("c-ben", "Plan hangout"),
        ]

    def test_summary(self, snapshot, now):
        summary = build_weekly_review(snapshot, now=now).summary
        assert summary.window_days == 7
        assert summary.window_start == now - timedelta(days=7)
        assert summary.interactions == 2
        assert summary.unique_contacts == 1
        assert summary.at_risk_contacts == 1
        assert summary.open_loops == 1
        assert summary.closed_loops == 1

    def test_wider_window(self, snapshot, now):
        review = build_weekly_review(snapshot, window_days=14, now=now)
        assert {c.contact_id for c in review.attended_contacts} == {"c-sam", "c-ava"}

    def test_attended_sorted_by_count_then_recency(self):
        snapshot = Snapshot.from_dict(
            {
                "contacts": [{"id": "1", "name": "One"}, {"id": "2", "name": "Two"}, {"id": "3", "name": "Three"}],
                "conversations": [
                    {"id": "a", "contact_id": "1", "content": "x", "timestamp": "2026-03-10T10:00"},
                    {"id": "b", "contact_id": "2", "content": "x", "timestamp": "2026-03-14T10:00"},
                    {"id": "c", "contact_id": "3", "content": "x", "timestamp": "2026-03-11T10:00"},
                    {"id": "d", "contact_id": "3", "content": "x", "timestamp": "2026-03-12T10:00"},
                ],
            }
        )
        review = build_weekly_review(snapshot, now=NOW)
        assert [c.contact_id for c in review.attended_contacts] == ["3", "2", "1"]

    def test_next_steps_capped_at_five(self):
        snapshot = Snapshot.from_dict({"contacts": [{"id": str(i), "name": f"P{i}"} for i in range(8)]})
        review = build_weekly_review(snapshot, now=NOW)
        assert len(review.ignored_contacts) == 8
        assert len(review.next_steps) == 5

    def test_custom_at_risk_threshold(self, snapshot, now):
        summary = build_weekly_review(snapshot, now=now, at_risk_threshold=90).summary
        # Maria 49, Zoe 63, Ava 88
        assert summary.at_risk_contacts == 3
