"""
Timezone-aware datetime utilities.

Records store timestamps as epoch milliseconds; these helpers convert them
to calendar dates in a viewer's timezone.
"""

from datetime import date, datetime, timezone
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


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(now_utc().timestamp() * 1000)


def ms_to_datetime(timestamp_ms: int, user_timezone: str = "UTC") -> datetime:
    """Convert epoch milliseconds to an aware datetime in the given timezone."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC).astimezone(ZoneInfo(user_timezone))


def datetime_to_ms(dt: datetime) -> int:
    """Convert a datetime to epoch milliseconds (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return int(dt.timestamp() * 1000)


def get_user_today(user_timezone: str, now: Optional[datetime] = None) -> date:
    """
    Get today's date in the user's timezone.

    Args:
        user_timezone: IANA timezone name (e.g., "Asia/Tokyo", "America/New_York")
        now: Reference instant, defaults to the current time

    Returns:
        date: Today's date in the user's timezone

    Example:
        >>> get_user_today("Asia/Tokyo")  # When UTC is 2024-01-19 23:00
        date(2024, 1, 20)  # JST is 2024-01-20 08:00
    """
    reference = now or now_utc()
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=UTC)
    return reference.astimezone(ZoneInfo(user_timezone)).date()
