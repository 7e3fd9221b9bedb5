"""
Time helpers.

pymongo hands back naive UTC datetimes, so everything stored or compared
in the services is naive UTC. Tests patch utcnow() to move the clock.
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: datetime) -> datetime:
    """Normalize an aware or naive datetime to naive UTC, millisecond precision."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    # BSON dates only carry milliseconds
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


# Month pickers send "2019-09"; bare years are accepted too
PARTIAL_DATE_FORMATS = ("%Y-%m", "%Y")


def parse_optional_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO date/datetime, "YYYY-MM" or "YYYY" string. Returns None for blank or invalid input."""
    if not value or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return to_utc_naive(datetime.fromisoformat(text))
    except ValueError:
        pass
    for fmt in PARTIAL_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None
