from datetime import datetime, timedelta
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class BookingRequest(BaseModel):
    """One guest's booking as posted to the webhook."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    bookingtime: str = Field(description="Free-text time, e.g. 'next Tuesday at 2pm'")
    assigned_stylist: str
    duration_of_services: str = Field(description="Free-text duration, e.g. '60 minutes'")


class NormalizedBooking(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_time: datetime
    end_time: datetime
    duration: int = Field(gt=0, description="Minutes")
    assigned_stylist: str = ""

    @property
    def expected_end(self) -> datetime:
        return self.start_time + timedelta(minutes=self.duration)


class Slot(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: datetime


class BusyInterval(BaseModel):
    """Half-open [start, end) period during which the stylist is booked elsewhere."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime


class Available(BaseModel):
    status: Literal["available"] = "available"
    message: str


class Unavailable(BaseModel):
    status: Literal["unavailable"] = "unavailable"
    message: str


class AvailabilityError(BaseModel):
    status: Literal["error"] = "error"
    message: str


AvailabilityResult = Union[Available, Unavailable, AvailabilityError]
