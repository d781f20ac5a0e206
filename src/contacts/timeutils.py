"""Calendar-day arithmetic on local, timezone-naive datetimes."""

from datetime import date, datetime, time, timedelta


def parse_timestamp(value) -> datetime | None:
    """Parse an ISO string / datetime / date into a local naive datetime.

    Offset-aware values are converted to the local zone first. Anything
    unparseable returns None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def calendar_days_between(earlier: datetime, later: datetime) -> int:
    """Whole local calendar days from `earlier` to `later` (may be negative)."""
    return (later.date() - earlier.date()).days


def days_since(timestamp, now: datetime) -> int | None:
    """Calendar days elapsed since `timestamp`, floored at 0. None if unparseable."""
    dt = parse_timestamp(timestamp)
    if dt is None:
        return None
    return max(0, calendar_days_between(dt, now))


def at_hour(day: datetime, hour: int) -> datetime:
    """Same calendar day, time-of-day forced to `hour`:00:00."""
    return day.replace(hour=hour, minute=0, second=0, microsecond=0)


def add_days_at_hour(base: datetime, days: int, hour: int) -> datetime:
    return at_hour(base + timedelta(days=days), hour)


def local_now(now=None) -> datetime:
    """Reference time as local naive; aware values are converted, None means the clock."""
    return parse_timestamp(now) or datetime.now()
