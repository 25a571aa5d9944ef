import pytz
from typing import Any, Iterable, Optional
from datetime import date, datetime, timedelta

from ..models import BusyInterval
from ..utils.config import settings
from ..utils.logger import logger
from ..utils.time_utils import DateTimeLike, parse_iso_datetime, to_local


class TimezoneManager:
    @staticmethod
    def get_timezone(timezone: Optional[str] = None):
        return pytz.timezone(timezone or settings.business_timezone)

    @staticmethod
    def to_local(value: DateTimeLike, timezone: Optional[str] = None) -> datetime:
        return to_local(value, timezone)

    @staticmethod
    def to_utc(value: DateTimeLike, timezone: Optional[str] = None) -> datetime:
        return parse_iso_datetime(value, timezone).astimezone(pytz.UTC)

    @staticmethod
    def shift_hours(value: DateTimeLike, hours: float, timezone: Optional[str] = None) -> datetime:
        # Elapsed-time shift; the result is in UTC.
        return TimezoneManager.to_utc(value, timezone) + timedelta(hours=hours)

    @staticmethod
    def shift_days(value: DateTimeLike, days: int, timezone: Optional[str] = None) -> datetime:
        # Calendar shift: keeps the local wall-clock time across DST changes.
        tz = TimezoneManager.get_timezone(timezone)
        local = TimezoneManager.to_local(value, timezone)
        shifted = tz.localize(local.replace(tzinfo=None) + timedelta(days=days))
        return shifted

    @staticmethod
    def local_date(value: DateTimeLike, timezone: Optional[str] = None) -> date:
        return TimezoneManager.to_local(value, timezone).date()

    @staticmethod
    def minutes_between(a: DateTimeLike, b: DateTimeLike) -> float:
        delta = parse_iso_datetime(a) - parse_iso_datetime(b)
        return abs(delta.total_seconds()) / 60

    @staticmethod
    def same_minute(slot_time: DateTimeLike, target_time: DateTimeLike, timezone: Optional[str] = None) -> bool:
        """Compare two instants on their local year/month/day/hour/minute only."""
        slot_local = TimezoneManager.to_local(slot_time, timezone)
        target_local = TimezoneManager.to_local(target_time, timezone)

        return (
            slot_local.year == target_local.year
            and slot_local.month == target_local.month
            and slot_local.day == target_local.day
            and slot_local.hour == target_local.hour
            and slot_local.minute == target_local.minute
        )

    @staticmethod
    def is_busy(instant: DateTimeLike, busy_intervals: Optional[Iterable[Any]]) -> bool:
        """
        True when the instant falls inside [start, end) of any busy interval.
        Malformed intervals never match.
        """
        if not isinstance(busy_intervals, (list, tuple)):
            return False

        try:
            slot_time = parse_iso_datetime(instant)
        except ValueError as e:
            logger.warning(f"Cannot check busy state for {instant!r}: {e}")
            return False

        for busy in busy_intervals:
            if isinstance(busy, BusyInterval):
                start, end = busy.start, busy.end
            elif isinstance(busy, dict):
                start, end = busy.get("start"), busy.get("end")
            else:
                continue

            if not start or not end:
                continue

            try:
                busy_start = parse_iso_datetime(start)
                busy_end = parse_iso_datetime(end)
            except ValueError:
                continue

            if busy_start <= slot_time < busy_end:
                return True

        return False
