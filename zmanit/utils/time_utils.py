"""
Clock-time arithmetic.

Everything inside the engine is an integer minute-of-day. Clock strings
("08:30") and decimal hours (8.5) are converted here, once, at the boundary.
"""

from typing import Optional

from zmanit.core.exceptions import ValidationError

MINUTES_PER_DAY = 24 * 60


def parse_hhmm(value: str) -> Optional[int]:
    """Lenient "HH:MM" parser; returns None for anything malformed."""
    if not value:
        return None
    parts = value.strip().split(":")
    if len(parts) < 2 or len(parts) > 3:
        return None
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return None
    if hours < 0 or hours > 23 or minutes < 0 or minutes > 59:
        return None
    return hours * 60 + minutes


def hhmm_to_minutes(value: str) -> int:
    """
    Convert "HH:MM" to minutes since midnight.

    Raises:
        ValidationError: If the string is not a valid clock time
    """
    minutes = parse_hhmm(value)
    if minutes is None:
        raise ValidationError(f"Invalid clock time: {value!r}", details={"value": value})
    return minutes


def minutes_to_hhmm(minutes: int) -> str:
    """Format minutes since midnight as "HH:MM" (values past midnight wrap to 24:xx+)."""
    minutes = max(0, int(minutes))
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def decimal_hours_to_minutes(hours: float) -> int:
    """
    Convert decimal hours (8.5 = 08:30) to whole minutes.

    Rounded to the nearest minute so 16.25 * 60 never drifts to 974.9999.
    """
    if hours is None:
        raise ValidationError("Decimal hour value is required")
    minutes = int(round(float(hours) * 60))
    if minutes < 0 or minutes > MINUTES_PER_DAY:
        raise ValidationError(f"Hour out of range: {hours}", details={"value": hours})
    return minutes


def intervals_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    return start1 < end2 and start2 < end1


def overlap_minutes(start1: int, end1: int, start2: int, end2: int) -> int:
    """Length of the intersection of two half-open intervals (0 if disjoint)."""
    return max(0, min(end1, end2) - max(start1, start2))


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))


def format_duration(minutes: int) -> str:
    """Readable duration: "45m", "2h", "2h 30m"."""
    if not minutes or minutes <= 0:
        return "0m"
    if minutes < 60:
        return f"{minutes}m"
    hours, mins = divmod(minutes, 60)
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins:02d}m"
