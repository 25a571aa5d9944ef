"""Tools for Cal.com access, timezone handling and availability resolution."""

from .availability import AvailabilityResolver, find_nearby_slots, search_for_proximity_slots
from .calcom import CalComClient, SchedulingAPIError
from .timezone import TimezoneManager
from .validation import BookingValidator, ValidationResult

__all__ = [
    "AvailabilityResolver",
    "find_nearby_slots",
    "search_for_proximity_slots",
    "CalComClient",
    "SchedulingAPIError",
    "TimezoneManager",
    "BookingValidator",
    "ValidationResult"
]
