"""Contact cadence lookup and traffic-light staleness."""

from shared_types import ContactFrequency, Staleness

FREQUENCY_DAYS = {
    ContactFrequency.WEEKLY: 7,
    ContactFrequency.BIWEEKLY: 14,
    ContactFrequency.MONTHLY: 30,
    ContactFrequency.QUARTERLY: 90,
    ContactFrequency.YEARLY: 365,
}

FREQUENCY_LABELS = {
    ContactFrequency.WEEKLY: "Weekly",
    ContactFrequency.BIWEEKLY: "Every 2 weeks",
    ContactFrequency.MONTHLY: "Monthly",
    ContactFrequency.QUARTERLY: "Quarterly",
    ContactFrequency.YEARLY: "Yearly",
}

# Ratio at which a contact starts "approaching" its cadence goal
APPROACHING_RATIO = 0.8


def parse_frequency(value) -> ContactFrequency | None:
    """Coerce a raw cadence value; unknown values mean "no goal"."""
    if isinstance(value, ContactFrequency):
        return value
    if not isinstance(value, str):
        return None
    try:
        return ContactFrequency(value.strip().lower())
    except ValueError:
        return None


def frequency_days(value) -> int | None:
    freq = parse_frequency(value)
    if freq is None:
        return None
    return FREQUENCY_DAYS[freq]


def get_staleness(days_since: int, frequency_days: int) -> Staleness:
    """Classify days elapsed against a cadence.

    Both the "approaching" (0.8-1.0) and "at or past goal" (1.0-2.0) bands are
    yellow; only 2x the cadence escalates to red.
    """
    ratio = days_since / frequency_days
    if ratio >= 2:
        return Staleness.RED
    if ratio >= 1:
        return Staleness.YELLOW
    if ratio >= APPROACHING_RATIO:
        return Staleness.YELLOW
    return Staleness.GREEN
