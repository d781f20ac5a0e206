"""Prioritization on top of contact health: focus queue, segments, reviews, standups."""

from .focus import TodayFocusItem, build_today_focus
from .preferences import (
    DEFAULT_PREFERENCES,
    DashboardPreferences,
    merge_preferences,
    parse_preferences,
    sanitize_preferences,
    serialize_preferences,
)
from .segments import SegmentQueue, SegmentQueueItem, build_segment_queues
from .standup import build_daily_standup, is_standup_due
from .weekly_review import WeeklyReview, build_weekly_review

__all__ = [
    "TodayFocusItem",
    "build_today_focus",
    "DashboardPreferences",
    "DEFAULT_PREFERENCES",
    "sanitize_preferences",
    "merge_preferences",
    "parse_preferences",
    "serialize_preferences",
    "SegmentQueue",
    "SegmentQueueItem",
    "build_segment_queues",
    "build_daily_standup",
    "is_standup_due",
    "WeeklyReview",
    "build_weekly_review",
]
