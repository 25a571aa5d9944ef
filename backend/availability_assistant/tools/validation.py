from typing import Any, Optional

from pydantic import ValidationError

from ..models import NormalizedBooking
from ..utils.logger import logger
from ..utils.time_utils import parse_iso_datetime

class ValidationResult:
    def __init__(self, is_valid: bool, error_type: Optional[str] = None, message: Optional[str] = None, booking: Optional[NormalizedBooking] = None):
        self.is_valid = is_valid
        self.error_type = error_type
        self.message = message
        self.booking = booking

class BookingValidator:
    REQUIRED_FIELDS = ("start_time", "end_time", "duration")
    MAX_REASONABLE_DURATION = 480

    def __init__(self, timezone: Optional[str] = None):
        self.timezone = timezone

    def validate_record(self, record: Any) -> ValidationResult:
        if not isinstance(record, dict):
            return ValidationResult(
                is_valid=False,
                error_type="not_an_object",
                message=f"Expected a booking object, got {type(record).__name__}"
            )

        missing = [field for field in self.REQUIRED_FIELDS if record.get(field) in (None, "")]
        if missing:
            return ValidationResult(
                is_valid=False,
                error_type="missing_field",
                message=f"Booking is missing {', '.join(missing)}"
            )

        try:
            start_time = parse_iso_datetime(record["start_time"], self.timezone)
            end_time = parse_iso_datetime(record["end_time"], self.timezone)
        except (ValueError, OverflowError) as e:
            return ValidationResult(is_valid=False, error_type="invalid_time", message=str(e))

        duration = self._parse_duration(record["duration"])
        if duration is None:
            return ValidationResult(
                is_valid=False,
                error_type="invalid_duration",
                message=f"Duration is not a whole number of minutes: {record['duration']!r}"
            )

        if duration <= 0:
            return ValidationResult(
                is_valid=False,
                error_type="invalid_duration",
                message=f"Duration must be positive, got {duration}"
            )

        if duration > self.MAX_REASONABLE_DURATION:
            logger.warning(f"Unusually long service duration: {duration} minutes")

        try:
            booking = NormalizedBooking(
                start_time=start_time,
                end_time=end_time,
                duration=duration,
                assigned_stylist=str(record.get("assigned_stylist") or "")
            )
        except ValidationError as e:
            return ValidationResult(is_valid=False, error_type="invalid_booking", message=str(e))

        if booking.end_time != booking.expected_end:
            logger.warning(f"End time {booking.end_time.isoformat()} does not match start + {duration} min, using {booking.expected_end.isoformat()}")
            booking = booking.model_copy(update={"end_time": booking.expected_end})

        return ValidationResult(is_valid=True, booking=booking)

    @staticmethod
    def _parse_duration(value: Any) -> Optional[int]:
        """Whole minutes from an int, an integral float or a digit string; None otherwise."""
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value) if value.is_integer() else None
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        return None
