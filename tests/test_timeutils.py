"""Tests for time parsing, formatting and end-time arithmetic."""

import pytest

from salon_scheduler.errors import EndsAfterMidnightError, InvalidFormatError
from salon_scheduler.scheduling.timeutils import (
    compute_end_time,
    iter_ticks,
    minutes_to_time,
    normalize_time,
    parse_clock_time,
    time_to_minutes,
)


class TestTimeToMinutes:
    def test_hh_mm(self):
        assert time_to_minutes("09:30") == 570

    def test_seconds_ignored(self):
        assert time_to_minutes("14:00:59") == 840

    def test_midnight(self):
        assert time_to_minutes("00:00") == 0

    @pytest.mark.parametrize("value", ["", "930", "nine:thirty", "09-30", "1:2:3:4"])
    def test_invalid_format(self, value):
        with pytest.raises(InvalidFormatError):
            time_to_minutes(value)

    def test_non_string(self):
        with pytest.raises(InvalidFormatError):
            time_to_minutes(None)


class TestMinutesToTime:
    def test_zero_padded(self):
        assert minutes_to_time(65) == "01:05"

    def test_last_minute_of_day(self):
        assert minutes_to_time(1439) == "23:59"

    def test_round_trip_every_minute(self):
        for minutes in range(0, 24 * 60):
            text = minutes_to_time(minutes)
            assert minutes_to_time(time_to_minutes(text)) == text


class TestParseClockTime:
    def test_valid(self):
        assert parse_clock_time("23:59") == 1439

    @pytest.mark.parametrize("value", ["24:00", "12:60", "-1:00"])
    def test_out_of_range(self, value):
        with pytest.raises(InvalidFormatError):
            parse_clock_time(value)

    def test_normalize_time(self):
        assert normalize_time("9:5:00") == "09:05"


class TestComputeEndTime:
    def test_simple(self):
        assert compute_end_time("10:00", 60) == "11:00"

    def test_crosses_hour(self):
        assert compute_end_time("09:45", 45) == "10:30"

    def test_last_valid_end(self):
        assert compute_end_time("23:00", 59) == "23:59"

    def test_end_at_midnight_rejected(self):
        with pytest.raises(EndsAfterMidnightError):
            compute_end_time("23:30", 30)

    def test_end_past_midnight_rejected(self):
        with pytest.raises(EndsAfterMidnightError, match="after midnight"):
            compute_end_time("22:00", 180)


class TestIterTicks:
    def test_ticks_before_end(self):
        assert list(iter_ticks(540, 660, 30)) == [540, 570, 600, 630]

    def test_partial_last_tick(self):
        assert list(iter_ticks(540, 580, 30)) == [540, 570]

    def test_empty_window(self):
        assert list(iter_ticks(600, 600, 30)) == []
