"""
Availability resolution against Cal.com.

The primary check looks one hour either side of the requested appointment.
When that window is empty, or has nothing within an hour of the requested
time on the requested day, the search widens to five hours before through
one day after, overlays the stylist's busy times, and offers the closest
alternatives for the same day and the first ones on the next day.
"""

from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from ..models import (
    Available,
    AvailabilityError,
    AvailabilityResult,
    BusyInterval,
    NormalizedBooking,
    Slot,
    Unavailable,
)
from ..utils.logger import logger
from ..utils.time_utils import format_date_time, format_time
from .calcom import CalComClient
from .timezone import TimezoneManager


NEARBY_WINDOW = timedelta(hours=1)
WIDE_WINDOW_HOURS_BEFORE = 5
WIDE_WINDOW_DAYS_AFTER = 1
MAX_ALTERNATIVES = 5


def available_message(desired_start: Any, timezone: Optional[str] = None) -> str:
    return (
        f"The desired slot on {format_date_time(desired_start, timezone)} with the selected stylist "
        f"is currently available. You can proceed with booking."
    )


def _slot_start(slot: Any, timezone: Optional[str] = None) -> datetime:
    if isinstance(slot, Slot):
        return TimezoneManager.to_local(slot.start, timezone)
    if isinstance(slot, dict) and slot.get("start"):
        return TimezoneManager.to_local(slot["start"], timezone)
    raise ValueError(f"slot has no start: {slot!r}")


def find_nearby_slots(
    slots: Sequence[Any],
    desired_start: Any,
    busy_intervals: Optional[List[BusyInterval]] = None,
    timezone: Optional[str] = None,
) -> List[str]:
    """
    Formatted start times of the slots within one hour (inclusive) of the desired start.
    Busy slots are left out when busy intervals are supplied. The primary check
    does not fetch busy times, so it calls this without them.
    """
    if not isinstance(slots, (list, tuple)):
        return []

    try:
        desired_time = TimezoneManager.to_local(desired_start, timezone)
    except ValueError as e:
        logger.error(f"Error finding nearby slots: {e}")
        return []

    nearby = []
    for slot in slots:
        try:
            slot_time = _slot_start(slot, timezone)
        except ValueError:
            continue

        if abs(slot_time - desired_time) > NEARBY_WINDOW:
            continue
        if TimezoneManager.is_busy(slot_time, busy_intervals or []):
            continue

        nearby.append(format_time(slot_time, timezone))

    return nearby


def search_for_proximity_slots(
    available_slots: Any,
    busy_slots: Optional[List[BusyInterval]],
    desired_slot: Dict[str, Any],
    timezone: Optional[str] = None,
) -> AvailabilityResult:
    """
    Decide availability over a wide window and rank alternatives.

    Args:
        available_slots: Slots reported bookable (Slot models or {"start": ...} dicts)
        busy_slots: Busy intervals that suppress otherwise free slots
        desired_slot: {"start", "end", "duration"} of the requested appointment
        timezone: Business timezone override

    Returns:
        Available if the requested time is free, otherwise Unavailable listing up to
        five same-day and five next-day alternatives, both in chronological order
    """
    try:
        if not isinstance(available_slots, list):
            logger.error(f"available_slots is not a list: {type(available_slots).__name__}")
            return AvailabilityError(message="Failed to process available slots: Invalid data format")

        desired_start = desired_slot.get("start")
        desired_time: Optional[datetime] = None
        if desired_start:
            try:
                desired_time = TimezoneManager.to_local(desired_start, timezone)
            except ValueError as e:
                logger.error(f"Error parsing desired start {desired_start!r}: {e}")
        desired_date: Optional[date] = desired_time.date() if desired_time else None

        if desired_time is not None:
            for slot in available_slots:
                try:
                    slot_time = _slot_start(slot, timezone)
                except ValueError:
                    continue
                if TimezoneManager.same_minute(slot_time, desired_time, timezone) and \
                        not TimezoneManager.is_busy(slot_time, busy_slots):
                    logger.info("Desired slot is free in the wide window")
                    return Available(message=available_message(desired_time, timezone))

        slots_by_date: Dict[date, List[datetime]] = {}
        for slot in available_slots:
            try:
                slot_time = _slot_start(slot, timezone)
            except ValueError as e:
                logger.warning(f"Error processing slot date: {e}")
                continue

            day_slots = slots_by_date.setdefault(slot_time.date(), [])
            if not TimezoneManager.is_busy(slot_time, busy_slots):
                day_slots.append(slot_time)

        same_day_slots: List[datetime] = []
        if desired_date and desired_date in slots_by_date:
            same_day_slots = [
                slot_time for slot_time in slots_by_date[desired_date]
                if not TimezoneManager.same_minute(slot_time, desired_time, timezone)
            ]

        if desired_time is not None and same_day_slots:
            closest = sorted(
                same_day_slots,
                key=lambda slot_time: TimezoneManager.minutes_between(slot_time, desired_time),
            )[:MAX_ALTERNATIVES]
            same_day_sorted = sorted(closest)
        else:
            same_day_sorted = same_day_slots[:MAX_ALTERNATIVES]

        next_day_slots: List[datetime] = []
        if desired_date:
            next_day = desired_date + timedelta(days=1)
            next_day_slots = sorted(slots_by_date.get(next_day, []))[:MAX_ALTERNATIVES]

        same_day_times = [format_time(slot_time, timezone) for slot_time in same_day_sorted]
        next_day_times = [format_time(slot_time, timezone) for slot_time in next_day_slots]

        logger.info(f"Alternatives: {len(same_day_times)} same day, {len(next_day_times)} next day")

        message = "The desired slot is not available."
        if same_day_times:
            message += f" Available today at [{', '.join(same_day_times)}]"
            if next_day_times:
                message += f", and tomorrow at [{', '.join(next_day_times)}]."
            else:
                message += "."
        elif next_day_times:
            message += f" Available tomorrow at [{', '.join(next_day_times)}]."
        else:
            message += " Please try another date."

        return Unavailable(message=message)

    except Exception as e:
        logger.exception("Error in proximity search")
        return AvailabilityError(message=f"Error finding alternative slots: {e}")


class AvailabilityResolver:
    def __init__(self, calcom: CalComClient, timezone: Optional[str] = None):
        self.calcom = calcom
        self.timezone = timezone

    async def resolve(self, booking: NormalizedBooking) -> AvailabilityResult:
        result = await self.check_availability(booking)
        if result is None:
            result = await self.check_wider_availability(booking)
        return result

    async def check_availability(self, booking: NormalizedBooking) -> Optional[AvailabilityResult]:
        """
        Check the requested time against a window one hour either side of the booking.

        Returns:
            A result, or None when the search has to widen
        """
        try:
            start_utc = TimezoneManager.to_utc(booking.start_time, self.timezone)
            end_utc = TimezoneManager.to_utc(booking.end_time, self.timezone)

            slots = await self.calcom.get_slots(
                start_utc - NEARBY_WINDOW,
                end_utc + NEARBY_WINDOW,
                booking.duration,
            )

            if not slots:
                logger.info("No slots in the 1-hour window, widening search")
                return None

            desired_date = TimezoneManager.local_date(booking.start_time, self.timezone)
            slots_for_date = [
                slot for slot in slots
                if TimezoneManager.local_date(slot.start, self.timezone) == desired_date
            ]

            if any(TimezoneManager.same_minute(slot.start, booking.start_time, self.timezone) for slot in slots_for_date):
                logger.info("Exact slot is available")
                return Available(message=available_message(booking.start_time, self.timezone))

            nearby = find_nearby_slots(slots_for_date, booking.start_time, timezone=self.timezone)
            if nearby:
                logger.info(f"Exact slot taken, {len(nearby)} nearby slots found")
                return Unavailable(
                    message=(
                        f"The exact slot is not available, but I have nearby slots starting at "
                        f"[{', '.join(nearby)}]. Ask the customer, otherwise run check_availability again?"
                    )
                )

            logger.info(f"No slots within an hour on {desired_date}, widening search")
            return None

        except Exception as e:
            logger.error(f"Error checking availability: {e}")
            return AvailabilityError(message=f"Error checking availability: {e}")

    async def check_wider_availability(self, booking: NormalizedBooking) -> AvailabilityResult:
        """Search five hours before through one day after the booking, minus busy times."""
        try:
            window_start = TimezoneManager.shift_hours(booking.start_time, -WIDE_WINDOW_HOURS_BEFORE, self.timezone)
            window_end = TimezoneManager.to_utc(
                TimezoneManager.shift_days(booking.end_time, WIDE_WINDOW_DAYS_AFTER, self.timezone)
            )

            slots = await self.calcom.get_slots(window_start, window_end, booking.duration)
            busy = await self.calcom.get_busy_times(window_start, window_end)

            desired_slot = {
                "start": booking.start_time,
                "end": booking.end_time,
                "duration": booking.duration,
            }
            return search_for_proximity_slots(slots, busy, desired_slot, self.timezone)

        except Exception as e:
            logger.error(f"Error checking wider availability: {e}")
            return AvailabilityError(message=f"Error checking wider availability: {e}")
