"""
Utility functions for schema validation.
"""
from datetime import datetime, timezone
from typing import Union

MIN_PROFICIENCY_LEVEL = 1
MAX_PROFICIENCY_LEVEL = 5


def clamp_proficiency(level: int) -> int:
    """
    Clamp a proficiency level into the closed range [1, 5].

    Out-of-range values saturate at the nearest boundary instead of being rejected.

    Args:
        level: Proficiency level (any integer)

    Returns:
        Proficiency level between MIN_PROFICIENCY_LEVEL and MAX_PROFICIENCY_LEVEL
    """
    return max(MIN_PROFICIENCY_LEVEL, min(MAX_PROFICIENCY_LEVEL, int(level)))


def ensure_utc(value: Union[datetime, str]) -> datetime:
    """
    Normalize an instant to a timezone-aware UTC datetime.

    Naive datetimes are interpreted as UTC. ISO-8601 strings are parsed first,
    including the 'Z' suffix used by JavaScript's Date.toISOString().

    Args:
        value: datetime or ISO-8601 string

    Returns:
        Timezone-aware datetime in UTC
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_iso_utc(value: datetime) -> str:
    """Format an instant the way the sheet web app stores it (e.g. 2024-01-01T10:00:00.000Z)."""
    value = ensure_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
