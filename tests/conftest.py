"""Shared test fixtures for rapport."""

import json
import sys
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from contacts.snapshot import Snapshot  # noqa: E402

# Sunday 2026-03-15 10:00 local
NOW = datetime(2026, 3, 15, 10, 0)


def iso(dt: datetime) -> str:
    return dt.isoformat()


def days_ago(days: int, hour: int = 12) -> datetime:
    return (NOW - timedelta(days=days)).replace(hour=hour, minute=0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def snapshot_data():
    """A small CRM: family/friends/work groups, mixed cadences and reminders."""
    family = {"id": "g-fam", "name": "Family"}
    friends = {"id": "g-fr", "name": "Close Friends"}
    work = {"id": "g-work", "name": "Work Contacts"}
    return {
        "contacts": [
            {
                "id": "c-mom",
                "name": "Maria",
                "lastName": "Lopez",
                "contactFrequency": "weekly",
                "createdAt": iso(days_ago(400)),
                "groups": [{"group": family}],
            },
            {
                "id": "c-sam",
                "name": "Sam",
                "contact_frequency": "monthly",
                "created_at": iso(days_ago(300)),
                "groups": [friends],
            },
            {
                "id": "c-ava",
                "name": "Ava",
                "last_name": "Chen",
                "contact_frequency": "biweekly",
                "created_at": iso(days_ago(200)),
                "groups": [work],
            },
            {
                "id": "c-ben",
                "name": "Ben",
                "contact_frequency": "quarterly",
                "created_at": iso(days_ago(100)),
                "groups": [friends],
            },
            {
                "id": "c-zoe",
                "name": "Zoe",
                "created_at": iso(days_ago(10)),
                "groups": [],
            },
        ],
        "conversations": [
            # Maria: 15 days ago on a weekly cadence -> red
            {"id": "v1", "contactId": "c-mom", "content": "Sunday call", "type": "call",
             "timestamp": iso(days_ago(15))},
            # Sam: 2 days ago, twice this week
            {"id": "v2", "contact_id": "c-sam", "content": "Coffee downtown", "type": "coffee",
             "timestamp": iso(days_ago(2))},
            {"id": "v3", "contact_id": "c-sam", "content": "Texted about the  game\nlast night",
             "type": "text", "timestamp": iso(days_ago(5))},
            # Ava: 12 days ago, biweekly -> yellow (approaching)
            {"id": "v4", "contact_id": "c-ava", "content": "Project sync", "type": "meeting",
             "timestamp": iso(days_ago(12))},
            # Ben: 40 days ago, quarterly -> green
            {"id": "v5", "contact_id": "c-ben", "content": "Dinner", "type": "dinner",
             "timestamp": iso(days_ago(40))},
        ],
        "reminders": [
            {"id": "r1", "contactId": "c-ava", "remindAt": iso(days_ago(3, hour=9)),
             "status": "PENDING", "conversationId": "v4"},
            {"id": "r2", "contact_id": "c-sam", "remind_at": iso(NOW + timedelta(days=2)),
             "status": "PENDING"},
            {"id": "r3", "contact_id": "c-ben", "remind_at": iso(days_ago(4, hour=9)),
             "status": "DISMISSED"},
        ],
        "importantDates": [
            {"id": "d1", "contactId": "c-ben", "label": "birthday", "date": "1990-03-16",
             "year": 1990, "recurring": True},
            {"id": "d2", "contact_id": "c-zoe", "label": "anniversary", "date": "2015-03-15",
             "recurring": True},
        ],
    }


@pytest.fixture
def snapshot(snapshot_data):
    return Snapshot.from_dict(snapshot_data)


@pytest.fixture
def snapshot_file(tmp_path, snapshot_data):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(snapshot_data))
    return path


@pytest.fixture
def mock_llm():
    """StructuredLLM stand-in: set .complete_json.return_value per test."""
    llm = MagicMock()
    llm.complete_json.return_value = None
    return llm
