from datetime import datetime

import pytz

from availability_assistant.tools.timezone import TimezoneManager
from availability_assistant.utils.time_utils import TimeFormat, format_date_time, format_time, parse_iso_datetime, to_local


class TestFormatting:
    def test_format_date_time(self):
        assert format_date_time("2025-05-13T14:00:00-05:00") == "May 13, 2025 at 2:00 PM"

    def test_format_date_time_converts_to_business_timezone(self):
        assert format_date_time("2025-05-13T19:00:00Z") == "May 13, 2025 at 2:00 PM"

    def test_standard_time_uses_minus_six(self):
        assert format_time("2025-01-15T20:00:00Z") == "2:00 PM"

    def test_daylight_time_uses_minus_five(self):
        assert format_time("2025-07-15T19:00:00Z") == "2:00 PM"

    def test_midnight_and_noon(self):
        assert format_time("2025-05-13T00:05:00-05:00") == "12:05 AM"
        assert format_time("2025-05-13T12:30:00-05:00") == "12:30 PM"

    def test_accepts_datetimes(self):
        dt = pytz.timezone("America/Winnipeg").localize(datetime(2025, 11, 3, 9, 15))

        assert format_time(dt) == "9:15 AM"
        assert format_date_time(dt) == "November 3, 2025 at 9:15 AM"

    def test_unparsable_input_is_echoed(self):
        assert format_time("not a date") == "not a date"
        assert format_date_time("not a date") == "not a date"

    def test_missing_input(self):
        assert format_time(None) == "Invalid time"
        assert format_date_time("") == "Invalid date"

    def test_clock(self):
        assert TimeFormat.clock(datetime(2025, 5, 13, 23, 59)) == "11:59 PM"
        assert TimeFormat.clock(datetime(2025, 5, 13, 0, 30)) == "12:30 AM"
        assert TimeFormat.clock(datetime(2025, 5, 13, 9, 5)) == "9:05 AM"

    def test_every_month_is_spelled_out(self):
        assert format_date_time("2025-02-03T10:00:00-06:00") == "February 3, 2025 at 10:00 AM"
        assert format_date_time("2025-12-24T10:00:00-06:00") == "December 24, 2025 at 10:00 AM"


class TestParsing:
    def test_keeps_explicit_offset(self):
        dt = parse_iso_datetime("2025-05-13T14:00:00-05:00")

        assert dt.utcoffset().total_seconds() == -5 * 3600

    def test_zulu_suffix(self):
        dt = parse_iso_datetime("2025-05-13T19:00:00.000Z")

        assert dt.astimezone(pytz.UTC).hour == 19

    def test_to_local_converts_to_business_timezone(self):
        local = to_local("2025-05-13T19:00:00Z")

        assert (local.hour, local.minute) == (14, 0)
        assert local.utcoffset().total_seconds() == -5 * 3600
        assert TimezoneManager.to_local("2025-05-13T19:00:00Z") == local
