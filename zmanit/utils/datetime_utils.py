"""
Timezone-aware datetime utilities.

The scheduling engine takes "today" and "now" as explicit inputs; these helpers
are used at the API boundary to derive them from the wall clock when a caller
does not supply them.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

# UTC timezone constant
UTC = timezone.utc


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Returns:
        datetime: Current UTC time with tzinfo set to UTC
    """
    return datetime.now(UTC)


def now_local(user_timezone: str) -> datetime:
    """Get the current wall-clock time in the user's timezone."""
    return now_utc().astimezone(ZoneInfo(user_timezone))


def get_user_today(user_timezone: str) -> date:
    """
    Get today's date in the user's timezone.

    Args:
        user_timezone: IANA timezone name (e.g., "Asia/Jerusalem")

    Returns:
        date: Today's date in the user's timezone

    Example:
        >>> get_user_today("Asia/Jerusalem")  # When UTC is 2026-01-19 23:00
        date(2026, 1, 20)  # local time is 2026-01-20 01:00
    """
    return now_local(user_timezone).date()


def minute_of_day(value: datetime) -> int:
    """Minutes elapsed since local midnight for a datetime."""
    return value.hour * 60 + value.minute


def ensure_local(dt: Optional[datetime], user_timezone: str) -> Optional[datetime]:
    """
    Ensure a datetime is timezone-aware and expressed in the user's timezone.

    Naive datetimes are assumed to already be local wall-clock time.
    """
    if dt is None:
        return None
    tz = ZoneInfo(user_timezone)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def week_dates(week_start: date, days: int = 7) -> list[date]:
    """Consecutive dates starting at week_start."""
    return [week_start + timedelta(days=offset) for offset in range(days)]


def sunday_index(day: date) -> int:
    """Weekday index with Sunday as 0, matching the weekly hours tables."""
    return (day.weekday() + 1) % 7


def week_start_for(day: date) -> date:
    """The Sunday that opens the week containing ``day``."""
    return day - timedelta(days=sunday_index(day))
