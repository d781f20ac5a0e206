"""Dashboard ranking preferences: sanitized tuning knobs for focus and segment queues."""

import json
import math
from dataclasses import asdict, dataclass

LIMITS = {
    "focus_limit": (2, 8),
    "segment_limit": (1, 5),
    "cooldown_days": (0, 14),
}

_ALIASES = {
    "focus_limit": ("focus_limit", "focusLimit"),
    "segment_limit": ("segment_limit", "segmentLimit"),
    "cooldown_days": ("cooldown_days", "cooldownDays"),
    "include_low_priority": ("include_low_priority", "includeLowPriority"),
}


@dataclass(frozen=True)
class DashboardPreferences:
    focus_limit: int = 4
    segment_limit: int = 2
    cooldown_days: int = 2
    include_low_priority: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


DEFAULT_PREFERENCES = DashboardPreferences()


def _lookup(raw: dict, field_name: str):
    for key in _ALIASES[field_name]:
        if key in raw:
            return raw[key]
    return None


def _coerce_int(value, field_name: str) -> int:
    default = getattr(DEFAULT_PREFERENCES, field_name)
    if isinstance(value, bool) or value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    low, high = LIMITS[field_name]
    return max(low, min(high, int(math.floor(number + 0.5))))


def _coerce_bool(value, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if value == "true":
        return True
    if value == "false":
        return False
    return default


def sanitize_preferences(raw: dict | None) -> DashboardPreferences:
    """Clamp every knob into its valid range, falling back to defaults."""
    source = raw or {}
    return DashboardPreferences(
        focus_limit=_coerce_int(_lookup(source, "focus_limit"), "focus_limit"),
        segment_limit=_coerce_int(_lookup(source, "segment_limit"), "segment_limit"),
        cooldown_days=_coerce_int(_lookup(source, "cooldown_days"), "cooldown_days"),
        include_low_priority=_coerce_bool(
            _lookup(source, "include_low_priority"), DEFAULT_PREFERENCES.include_low_priority
        ),
    )


def parse_preferences(raw_value: str | None) -> DashboardPreferences:
    if not raw_value:
        return DEFAULT_PREFERENCES
    try:
        parsed = json.loads(raw_value)
    except json.JSONDecodeError:
        return DEFAULT_PREFERENCES
    if not isinstance(parsed, dict):
        return DEFAULT_PREFERENCES
    return sanitize_preferences(parsed)


def serialize_preferences(preferences: DashboardPreferences) -> str:
    return json.dumps(preferences.to_dict())


def merge_preferences(base: DashboardPreferences, overrides: dict) -> DashboardPreferences:
    """Apply raw overrides (either key style, None = keep) on top of `base`."""
    merged = base.to_dict()
    for field_name in _ALIASES:
        value = _lookup(overrides, field_name)
        if value is not None:
            merged[field_name] = value
    return sanitize_preferences(merged)
