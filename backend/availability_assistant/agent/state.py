from typing import TypedDict, Optional, Any

from ..models import AvailabilityResult, NormalizedBooking


class AvailabilityState(TypedDict):
    payload: Any
    booking: Optional[NormalizedBooking]
    normalization_error: Optional[str]
    needs_wider_search: bool
    result: Optional[AvailabilityResult]


def create_initial_state(payload: Any) -> AvailabilityState:
    return AvailabilityState(
        payload=payload,
        booking=None,
        normalization_error=None,
        needs_wider_search=False,
        result=None
    )
