import asyncio
import json
from datetime import datetime, timedelta

import pytest
import pytz
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from availability_assistant.agent.time_normalizer import (
    NormalizationError,
    TimeNormalizer,
    extract_json_payload,
    format_current_date,
)
from availability_assistant.models import BookingRequest


REQUEST = {
    "bookingtime": "next Tuesday at 2pm",
    "assigned_stylist": "angelina@creativenails.ca",
    "duration_of_services": "60 minutes",
}

NORMALIZED = {
    "start_time": "2025-05-13T14:00:00-05:00",
    "duration": 60,
    "assigned_stylist": "angelina@creativenails.ca",
    "end_time": "2025-05-13T15:00:00-05:00",
}


class FailingChatModel:
    async def ainvoke(self, messages):
        raise RuntimeError("quota exceeded")


def normalize_with(reply: str, payload=REQUEST):
    normalizer = TimeNormalizer(FakeListChatModel(responses=[reply]))
    return asyncio.run(normalizer.normalize(payload))


class TestExtractJson:
    def test_plain_object(self):
        assert extract_json_payload(json.dumps(NORMALIZED)) == NORMALIZED

    def test_object_inside_prose_and_fences(self):
        reply = "Here is the output:\n```json\n" + json.dumps(NORMALIZED) + "\n```\nLet me know!"

        assert extract_json_payload(reply) == NORMALIZED

    def test_array_is_kept_whole(self):
        reply = json.dumps([NORMALIZED, NORMALIZED])

        assert extract_json_payload(reply) == [NORMALIZED, NORMALIZED]

    def test_no_json(self):
        with pytest.raises(NormalizationError, match="Could not find JSON"):
            extract_json_payload("Sorry, I can't help with that.")

    def test_broken_json(self):
        with pytest.raises(NormalizationError, match="Invalid JSON"):
            extract_json_payload('{"start_time": "2025-05-13T14:00:00-05:00",')


class TestNormalize:
    def test_single_booking(self):
        booking = normalize_with(json.dumps(NORMALIZED))

        assert booking.start_time == datetime(2025, 5, 13, 19, 0, tzinfo=pytz.UTC)
        assert booking.end_time == booking.start_time + timedelta(minutes=60)
        assert booking.duration == 60
        assert booking.assigned_stylist == "angelina@creativenails.ca"

    def test_first_of_many_is_used(self):
        second = dict(NORMALIZED, start_time="2025-05-13T16:00:00-05:00", end_time="2025-05-13T16:45:00-05:00", duration=45)

        booking = normalize_with(json.dumps([NORMALIZED, second]), payload=[REQUEST, REQUEST])

        assert booking.duration == 60

    def test_inconsistent_end_time_is_corrected(self):
        reply = json.dumps(dict(NORMALIZED, end_time="2025-05-13T16:00:00-05:00"))

        booking = normalize_with(reply)

        assert booking.end_time == booking.start_time + timedelta(minutes=60)
        assert booking.end_time == booking.expected_end

    def test_duration_given_as_string(self):
        booking = normalize_with(json.dumps(dict(NORMALIZED, duration="60")))

        assert booking.duration == 60

    def test_integral_float_duration(self):
        booking = normalize_with(json.dumps(dict(NORMALIZED, duration=60.0)))

        assert booking.duration == 60
        assert booking.end_time == booking.expected_end

    @pytest.mark.parametrize("record", [
        dict(NORMALIZED, duration=0),
        dict(NORMALIZED, duration="an hour"),
        dict(NORMALIZED, duration=True),
        dict(NORMALIZED, duration=90.9),
        dict(NORMALIZED, duration="60.5"),
        {k: v for k, v in NORMALIZED.items() if k != "start_time"},
        dict(NORMALIZED, start_time="tuesday afternoon"),
    ])
    def test_invalid_records_are_rejected(self, record):
        with pytest.raises(NormalizationError):
            normalize_with(json.dumps(record))

    def test_empty_list(self):
        with pytest.raises(NormalizationError, match="empty"):
            normalize_with("[]")

    def test_prose_only_reply(self):
        with pytest.raises(NormalizationError):
            normalize_with("I need more information about the booking.")

    def test_model_failure(self):
        normalizer = TimeNormalizer(FailingChatModel())

        with pytest.raises(NormalizationError, match="quota exceeded"):
            asyncio.run(normalizer.normalize(REQUEST))


class TestPrompt:
    def test_messages_carry_current_date_and_payload(self):
        normalizer = TimeNormalizer(FakeListChatModel(responses=["{}"]))
        now = pytz.timezone("America/Winnipeg").localize(datetime(2025, 5, 12, 14, 30))

        system, human = normalizer.build_messages(BookingRequest(**REQUEST), now=now)

        assert "Monday, May 12, 2025, 02:30 PM" in system.content
        assert "America/Winnipeg" in system.content
        assert '"start_time": "2025-05-13T14:00:00-05:00"' in system.content
        assert human.content.startswith("The input is as follow:\n")
        assert json.loads(human.content.split("\n", 1)[1]) == REQUEST

    def test_format_current_date(self):
        assert format_current_date(datetime(2025, 5, 17, 9, 5)) == "Saturday, May 17, 2025, 09:05 AM"
