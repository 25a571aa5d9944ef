"""
Time utility functions for parsing and displaying appointment times.

This module provides a consistent interface for time handling throughout the application:
- API communication: ISO 8601 strings with an explicit offset
- Internal handling: timezone-aware datetimes
- Customer-facing messages: "May 13, 2025 at 2:00 PM" / "2:00 PM"

All display times are rendered in the business timezone (America/Winnipeg by default).
"""

from typing import Optional, Union
from datetime import datetime
import pytz
from dateutil import parser

from .config import settings
from .logger import logger


DateTimeLike = Union[str, datetime, None]


def parse_iso_datetime(value: DateTimeLike, timezone: Optional[str] = None) -> datetime:
    """
    Parse an ISO 8601 string (or pass through a datetime) into an aware datetime.

    Naive values are interpreted as wall-clock time in the business timezone.

    Raises:
        ValueError: if the value is missing or not a valid ISO 8601 timestamp
    """
    if value is None or value == "":
        raise ValueError("missing datetime value")

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = parser.isoparse(value.strip())
    else:
        raise ValueError(f"unsupported datetime value: {value!r}")

    if dt.tzinfo is None:
        dt = pytz.timezone(timezone or settings.business_timezone).localize(dt)

    return dt


MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def to_local(value: DateTimeLike, timezone: Optional[str] = None) -> datetime:
    """Parse a timestamp and convert it to the business timezone (or the given one)."""
    tz = pytz.timezone(timezone or settings.business_timezone)
    return parse_iso_datetime(value, timezone).astimezone(tz)


class TimeFormat:
    """
    Display helpers for customer-facing messages.
    Unparsable input never raises: the original string is echoed back instead.
    """

    @staticmethod
    def clock(dt: datetime) -> str:
        """
        Render the wall-clock part of an already localized datetime.

        Examples:
            14:00 → "2:00 PM"
            09:05 → "9:05 AM"
            00:30 → "12:30 AM"
        """
        return dt.strftime("%I:%M %p").lstrip("0")

    @staticmethod
    def format_date_time(value: DateTimeLike, timezone: Optional[str] = None) -> str:
        """
        Format a timestamp as "Month D, YYYY at H:MM AM/PM" in the business timezone.

        Args:
            value: ISO 8601 string or datetime
            timezone: Override for the display timezone

        Returns:
            Formatted string, the original string if it can't be parsed,
            or "Invalid date" when nothing was given

        Examples:
            "2025-05-13T14:00:00-05:00" → "May 13, 2025 at 2:00 PM"
        """
        try:
            local = to_local(value, timezone)
            return f"{MONTH_NAMES[local.month - 1]} {local.day}, {local.year} at {TimeFormat.clock(local)}"
        except (ValueError, OverflowError, pytz.UnknownTimeZoneError) as e:
            logger.error(f"Error formatting date and time {value!r}: {e}")
            return value if isinstance(value, str) and value else "Invalid date"

    @staticmethod
    def format_time(value: DateTimeLike, timezone: Optional[str] = None) -> str:
        """
        Format a timestamp as "H:MM AM/PM" in the business timezone.

        Examples:
            "2025-01-15T20:00:00Z" → "2:00 PM"   (CST, -06:00)
            "2025-07-15T19:00:00Z" → "2:00 PM"   (CDT, -05:00)
        """
        try:
            return TimeFormat.clock(to_local(value, timezone))
        except (ValueError, OverflowError, pytz.UnknownTimeZoneError) as e:
            logger.error(f"Error formatting time {value!r}: {e}")
            return value if isinstance(value, str) and value else "Invalid time"


# Convenience functions for common use cases

def format_date_time(value: DateTimeLike, timezone: Optional[str] = None) -> str:
    """Shorthand for TimeFormat.format_date_time()"""
    return TimeFormat.format_date_time(value, timezone)


def format_time(value: DateTimeLike, timezone: Optional[str] = None) -> str:
    """Shorthand for TimeFormat.format_time()"""
    return TimeFormat.format_time(value, timezone)
