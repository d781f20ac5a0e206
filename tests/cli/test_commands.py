"""CLI command tests using Click CliRunner.

Every invocation pins --now, the snapshot, the reminders db and an empty
config file so nothing from the real home directory leaks in.
"""

import json

import pytest
from click.testing import CliRunner

from cli.main import cli

NOW_ARG = "2026-03-15T10:00"


@pytest.fixture
def runner(monkeypatch):
    for var in ("REMINDER_LLM_PROVIDER", "REMINDER_LLM_API_KEY", "AUTO_REMINDER_MIN_CONFIDENCE"):
        monkeypatch.delenv(var, raising=False)
    # wide enough that rich never wraps ids in tables
    return CliRunner(env={"COLUMNS": "200"})


@pytest.fixture
def invoke(runner, tmp_path, snapshot_file):
    config_path = tmp_path / "rapport.yaml"
    config_path.write_text("logging:\n  level: ERROR\n")
    db_path = tmp_path / "reminders.db"

    def _invoke(*args):
        return runner.invoke(
            cli,
            ["-c", str(config_path), "-s", str(snapshot_file), "--db", str(db_path), "--now", NOW_ARG, *args],
        )

    return _invoke


def _json(result):
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


class TestContactCommands:
    def test_health_json_sorted_worst_first(self, invoke):
        rows = _json(invoke("health", "--json"))
        assert [(r["contact_id"], r["score"]) for r in rows] == [
            ("c-mom", 49),
            ("c-zoe", 63),
            ("c-ava", 88),
            ("c-sam", 97),
            ("c-ben", 99),
        ]
        assert rows[0]["status"] == "at-risk"

    def test_health_single_contact(self, invoke):
        rows = _json(invoke("health", "c-ava", "--json"))
        assert len(rows) == 1
        assert rows[0]["contact_name"] == "Ava Chen"

    def test_health_unknown_contact(self, invoke):
        result = invoke("health", "nobody")
        assert result.exit_code == 1
        assert "Unknown contact" in result.output

    def test_health_table(self, invoke):
        result = invoke("health")
        assert result.exit_code == 0
        assert "Relationship health" in result.output

    def test_stale_json(self, invoke):
        rows = _json(invoke("stale", "--json"))
        assert [r["id"] for r in rows] == ["c-mom", "c-ava"]
        assert rows[0]["staleness"] == "red"

    def test_upcoming_json(self, invoke):
        rows = _json(invoke("upcoming", "--json"))
        assert [(r["contact_id"], r["days_until"]) for r in rows] == [("c-zoe", 0), ("c-ben", 1)]
        assert rows[1]["occurs_on"] == "2026-03-16"

    def test_upcoming_empty_window(self, invoke):
        result = invoke("upcoming", "--days", "0")
        assert result.exit_code == 0


class TestDashboardCommands:
    def test_focus_json(self, invoke):
        items = _json(invoke("focus", "--json"))
        assert [i["contact_id"] for i in items] == ["c-ava", "c-zoe", "c-sam", "c-ben"]
        assert items[0]["sources"] == ["reminder", "stale-contact"]

    def test_focus_limit_override(self, invoke):
        items = _json(invoke("focus", "--limit", "8", "--json"))
        assert items[-1]["contact_id"] == "c-mom"
        assert items[-1]["priority"] == "medium"

    def test_focus_table(self, invoke):
        result = invoke("focus")
        assert result.exit_code == 0
        assert "Today Focus" in result.output

    def test_segments_json(self, invoke):
        queues = _json(invoke("segments", "--json"))
        by_key = {q["key"]: q for q in queues}
        assert [i["contact_id"] for i in by_key["family"]["items"]] == ["c-mom"]
        assert by_key["family"]["items"][0]["urgency"] == 51

    def test_review_json(self, invoke):
        review = _json(invoke("review", "--json"))
        assert review["summary"]["interactions"] == 2
        assert [c["contact_id"] for c in review["attended_contacts"]] == ["c-sam"]

    def test_review_panel(self, invoke):
        result = invoke("review")
        assert result.exit_code == 0
        assert "2 interactions with 1 people" in result.output

    def test_standup(self, invoke):
        result = invoke("standup")
        assert result.exit_code == 0
        assert result.stdout.startswith("Daily standup (Sunday, Mar 15)")

    def test_standup_not_due(self, runner, tmp_path, snapshot_file):
        config_path = tmp_path / "rapport.yaml"
        config_path.write_text("review:\n  standup_time: '11:30'\n")
        args = ["-c", str(config_path), "-s", str(snapshot_file), "--now", NOW_ARG, "standup"]
        result = runner.invoke(cli, args)
        assert result.exit_code == 0
        assert "not due yet" in result.output
        forced = runner.invoke(cli, [*args, "--force"])
        assert "Daily standup" in forced.output

    def test_preferences_json_with_overrides(self, invoke):
        result = invoke("preferences", "--set", "focusLimit=20", "--set", "cooldown_days=1", "--json")
        assert _json(result) == {
            "focus_limit": 8,
            "segment_limit": 2,
            "cooldown_days": 1,
            "include_low_priority": False,
        }

    def test_preferences_bad_assignment(self, invoke):
        result = invoke("preferences", "--set", "focus_limit")
        assert result.exit_code == 2


class TestReminderCommands:
    def test_suggest_save_list_resolve(self, invoke):
        suggested = _json(
            invoke("suggest", "c-sam", "I'll send the slides next week", "--save", "--conversation-id", "v9", "--json")
        )
        assert suggested["suggestion"]["source"] == "rules"
        assert suggested["suggestion"]["days_until"] == 7
        assert suggested["suggestion"]["remind_at"] == "2026-03-22T09:00:00"
        reminder_id = suggested["saved_reminder_id"]
        assert reminder_id

        again = _json(
            invoke("suggest", "c-sam", "I'll send the slides next week", "--save", "--conversation-id", "v9", "--json")
        )
        assert again["saved_reminder_id"] == reminder_id

        listed = invoke("reminders", "list", "c-sam")
        assert listed.exit_code == 0
        assert reminder_id in listed.output

        # not due yet, so a completion message resolves nothing
        assert _json(invoke("resolve", "c-sam", "Sent the slides", "--json")) is None

    def test_resolve_due_reminder(self, runner, tmp_path, snapshot_file):
        config_path = tmp_path / "rapport.yaml"
        config_path.write_text("{}\n")
        base = ["-c", str(config_path), "-s", str(snapshot_file), "--db", str(tmp_path / "r.db")]

        added = runner.invoke(cli, [*base, "--now", "2026-03-01T10:00", "reminders", "add", "c-ava", "--days", "3"])
        assert added.exit_code == 0

        result = runner.invoke(cli, [*base, "--now", NOW_ARG, "resolve", "c-ava", "Called her about the job", "--json"])
        resolved = _json(result)
        assert resolved["source"] == "rules"
        assert len(resolved["resolved_ids"]) == 1

    def test_suggest_nothing(self, invoke):
        result = _json(invoke("suggest", "c-sam", "Fun dinner", "--json"))
        assert result == {"suggestion": None, "saved_reminder_id": None}

    def test_suggest_unknown_contact(self, invoke):
        result = invoke("suggest", "nobody", "follow up tomorrow")
        assert result.exit_code == 1

    def test_add_and_dismiss(self, invoke):
        added = invoke("reminders", "add", "c-ben", "--days", "2", "--note", "send photos")
        assert added.exit_code == 0
        assert "2026-03-17 09:00" in added.output
        reminder_id = added.output.split()[1]

        assert "Dismissed" in invoke("reminders", "dismiss", reminder_id).output
        assert "Already dismissed" in invoke("reminders", "dismiss", reminder_id).output

    def test_dismiss_unknown(self, invoke):
        assert invoke("reminders", "dismiss", "nope").exit_code == 1

    def test_bad_now(self, runner):
        result = runner.invoke(cli, ["--now", "yesterday-ish", "focus"])
        assert result.exit_code != 0

    def test_added_reminder_reaches_focus(self, invoke):
        assert invoke("reminders", "add", "c-mom", "--days", "1").exit_code == 0
        items = _json(invoke("focus", "--json"))
        assert [i["contact_id"] for i in items] == ["c-ava", "c-zoe", "c-mom", "c-sam"]
        mom = items[2]
        assert mom["reason"] == "Reminder due tomorrow"
        assert mom["sources"] == ["reminder", "stale-contact"]

    def test_resolve_snapshot_reminder(self, invoke):
        resolved = _json(invoke("resolve", "c-ava", "Called her about the job", "--json"))
        assert resolved["resolved_ids"] == ["r1"]

        listed = invoke("reminders", "list", "c-ava", "--all")
        assert "r1" in listed.output
        assert "DISMISSED" in listed.output

        items = _json(invoke("focus", "--limit", "8", "--json"))
        ava = [i for i in items if i["contact_id"] == "c-ava"]
        assert all("reminder" not in i["sources"] for i in ava)
