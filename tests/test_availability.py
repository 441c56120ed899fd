"""Tests for free-interval computation."""

import pytest

from salon_scheduler.schemas.appointment_schema import AppointmentStatus
from salon_scheduler.scheduling.availability import free_intervals, has_any_free_slot
from salon_scheduler.scheduling.conflicts import intervals_overlap
from salon_scheduler.scheduling.timeutils import time_to_minutes
from tests.conftest import hours, make_appointment


def _pairs(intervals):
    return [(i.start_time, i.end_time) for i in intervals]


class TestFreeIntervals:
    def test_empty_day_is_one_interval(self, nine_to_six):
        assert _pairs(free_intervals(nine_to_six, [])) == [("09:00", "18:00")]

    def test_gaps_around_appointments(self, nine_to_six):
        day = [make_appointment("11:00", "13:00"), make_appointment("09:00", "10:00")]
        assert _pairs(free_intervals(nine_to_six, day)) == [
            ("10:00", "11:00"), ("13:00", "18:00"),
        ]

    def test_short_gap_dropped(self, nine_to_six):
        day = [make_appointment("09:00", "10:00"), make_appointment("10:20", "18:00")]
        assert free_intervals(nine_to_six, day) == []

    def test_exact_minimum_kept(self, nine_to_six):
        day = [make_appointment("09:00", "10:00"), make_appointment("10:30", "18:00")]
        assert _pairs(free_intervals(nine_to_six, day)) == [("10:00", "10:30")]

    def test_custom_minimum(self, nine_to_six):
        day = [make_appointment("09:00", "10:00"), make_appointment("10:20", "18:00")]
        assert _pairs(free_intervals(nine_to_six, day, min_duration_minutes=15)) == [
            ("10:00", "10:20"),
        ]

    def test_cancelled_appointments_free(self, nine_to_six):
        day = [make_appointment("09:00", "18:00", status=AppointmentStatus.CANCELLED)]
        assert _pairs(free_intervals(nine_to_six, day)) == [("09:00", "18:00")]

    def test_overlapping_input_absorbed(self, nine_to_six):
        day = [make_appointment("10:00", "12:00", "a"), make_appointment("11:00", "11:30", "b")]
        assert _pairs(free_intervals(nine_to_six, day)) == [
            ("09:00", "10:00"), ("12:00", "18:00"),
        ]

    def test_appointments_outside_window_clipped(self):
        wh = hours("10:00", "14:00")
        day = [make_appointment("08:00", "10:30"), make_appointment("13:30", "19:00")]
        assert _pairs(free_intervals(wh, day)) == [("10:30", "13:30")]

    def test_closed_day_has_no_slots(self):
        closed = hours(closed=True)
        day = [make_appointment("10:00", "11:00")]
        assert free_intervals(closed, day) == []
        assert has_any_free_slot(closed, day) is False

    def test_duration_property(self, nine_to_six):
        interval = free_intervals(nine_to_six, [make_appointment("10:00", "18:00")])[0]
        assert interval.duration_minutes == 60


class TestIntervalInvariants:
    DAYS = [
        [],
        [("09:00", "09:20"), ("09:40", "10:00"), ("17:45", "18:00")],
        [("08:00", "09:30"), ("09:30", "11:00"), ("12:10", "12:30"), ("16:00", "20:00")],
        [("10:00", "12:00"), ("11:00", "13:00"), ("12:30", "12:45"), ("15:00", "15:29")],
    ]

    @pytest.mark.parametrize("spans", DAYS)
    def test_no_overlap(self, nine_to_six, spans):
        day = [make_appointment(s, e, f"a{i}") for i, (s, e) in enumerate(spans)]
        result = free_intervals(nine_to_six, day)
        bounds = [(time_to_minutes(i.start_time), time_to_minutes(i.end_time)) for i in result]
        for i, (s1, e1) in enumerate(bounds):
            for s2, e2 in bounds[i + 1:]:
                assert not intervals_overlap(s1, e1, s2, e2)
            for appointment in day:
                assert not intervals_overlap(
                    s1, e1, appointment.start_minutes, appointment.end_minutes
                )

    @pytest.mark.parametrize("spans", DAYS)
    def test_coverage(self, nine_to_six, spans):
        day = [make_appointment(s, e, f"a{i}") for i, (s, e) in enumerate(spans)]
        covered = set()
        for appointment in day:
            covered.update(range(appointment.start_minutes, appointment.end_minutes))
        for interval in free_intervals(nine_to_six, day):
            covered.update(range(time_to_minutes(interval.start_time),
                                 time_to_minutes(interval.end_time)))
        window = set(range(nine_to_six.start_minutes, nine_to_six.end_minutes))
        missing = sorted(window - covered)
        # whatever is left must be sub-minimum gaps only
        runs, run = [], []
        for minute in missing:
            if run and minute != run[-1] + 1:
                runs.append(run)
                run = []
            run.append(minute)
        if run:
            runs.append(run)
        assert all(len(r) < 30 for r in runs)


class TestHasAnyFreeSlot:
    def test_open_empty_day(self, nine_to_six):
        assert has_any_free_slot(nine_to_six, [])

    def test_fully_booked(self, nine_to_six):
        assert not has_any_free_slot(nine_to_six, [make_appointment("09:00", "18:00")])

    def test_only_short_gaps(self, nine_to_six):
        day = [make_appointment("09:00", "12:00"), make_appointment("12:20", "18:00")]
        assert not has_any_free_slot(nine_to_six, day)

    def test_agrees_with_free_intervals(self, nine_to_six):
        day = [make_appointment("09:00", "12:00"), make_appointment("12:30", "18:00")]
        assert has_any_free_slot(nine_to_six, day) == bool(free_intervals(nine_to_six, day))
