import os

os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("CAL_API_KEY", "test-cal-key")

from datetime import timedelta
from typing import List, Optional

import pytest

from availability_assistant.models import BusyInterval, NormalizedBooking, Slot
from availability_assistant.utils.time_utils import parse_iso_datetime


def make_slots(*starts: str) -> List[Slot]:
    return [Slot(start=parse_iso_datetime(start)) for start in starts]


def make_busy(start: str, end: str) -> BusyInterval:
    return BusyInterval(start=parse_iso_datetime(start), end=parse_iso_datetime(end))


def make_booking(start: str = "2025-05-13T14:00:00-05:00", duration: int = 60) -> NormalizedBooking:
    start_time = parse_iso_datetime(start)
    return NormalizedBooking(
        start_time=start_time,
        end_time=start_time + timedelta(minutes=duration),
        duration=duration,
        assigned_stylist="angelina@creativenails.ca",
    )


class FakeCalCom:
    """Stands in for CalComClient; returns queued slot batches in call order."""

    def __init__(
        self,
        slot_batches: Optional[List[List[Slot]]] = None,
        busy: Optional[List[BusyInterval]] = None,
        slot_error: Optional[Exception] = None,
        busy_error: Optional[Exception] = None,
    ):
        self.slot_batches = list(slot_batches or [])
        self.busy = busy or []
        self.slot_error = slot_error
        self.busy_error = busy_error
        self.slot_calls = []
        self.busy_calls = []

    async def get_slots(self, start, end, duration):
        self.slot_calls.append((start, end, duration))
        if self.slot_error:
            raise self.slot_error
        return self.slot_batches.pop(0) if self.slot_batches else []

    async def get_busy_times(self, date_from, date_to):
        self.busy_calls.append((date_from, date_to))
        if self.busy_error:
            raise self.busy_error
        return self.busy


@pytest.fixture
def booking() -> NormalizedBooking:
    return make_booking()
