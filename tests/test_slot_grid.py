"""Tests for the fixed-tick day grid."""

import logging

from salon_scheduler.schemas.appointment_schema import AppointmentStatus
from salon_scheduler.schemas.slot_schema import Occupancy, SlotKind
from salon_scheduler.scheduling.slot_grid import build_grid, cells_spanned
from tests.conftest import hours, make_appointment


class TestBuildGrid:
    def test_empty_day_all_free(self, nine_to_six):
        grid = build_grid(nine_to_six, [])
        assert len(grid) == 18
        assert grid[0].time == "09:00"
        assert grid[-1].time == "17:30"
        assert all(slot.is_free and slot.occupancy == Occupancy.NONE for slot in grid)

    def test_closed_day_empty(self):
        assert build_grid(hours(closed=True), [make_appointment("10:00", "11:00")]) == []

    def test_start_and_continuation(self, nine_to_six):
        appointment = make_appointment("10:00", "11:30")
        grid = {slot.time: slot for slot in build_grid(nine_to_six, [appointment])}
        assert grid["09:30"].is_free
        assert grid["10:00"].kind == SlotKind.START
        assert grid["10:30"].kind == SlotKind.CONTINUATION
        assert grid["11:00"].kind == SlotKind.CONTINUATION
        assert grid["11:30"].is_free
        assert grid["10:00"].appointment == appointment
        assert grid["10:00"].occupancy == Occupancy.SINGLE

    def test_unaligned_appointment_continues(self, nine_to_six):
        appointment = make_appointment("10:15", "10:45")
        grid = {slot.time: slot for slot in build_grid(nine_to_six, [appointment])}
        assert grid["10:00"].is_free
        assert grid["10:30"].kind == SlotKind.CONTINUATION

    def test_cancelled_not_shown(self, nine_to_six):
        cancelled = make_appointment("10:00", "11:00", status=AppointmentStatus.CANCELLED)
        assert all(slot.is_free for slot in build_grid(nine_to_six, [cancelled]))

    def test_overlap_tagged_multiple(self, nine_to_six, caplog):
        first = make_appointment("10:00", "11:00", "first")
        second = make_appointment("10:30", "11:30", "second")
        with caplog.at_level(logging.WARNING):
            grid = {slot.time: slot for slot in build_grid(nine_to_six, [second, first])}
        cell = grid["10:30"]
        assert cell.occupancy == Occupancy.MULTIPLE
        assert cell.is_anomaly
        assert cell.appointment.id == "first"
        assert [a.id for a in cell.occupants] == ["first", "second"]
        assert grid["11:00"].occupancy == Occupancy.SINGLE
        assert grid["11:00"].appointment.id == "second"
        assert "Overlapping appointments" in caplog.text

    def test_custom_step(self):
        grid = build_grid(hours("09:00", "10:00"), [], slot_minutes=15)
        assert [slot.time for slot in grid] == ["09:00", "09:15", "09:30", "09:45"]


class TestCellsSpanned:
    def test_whole_cells(self):
        assert cells_spanned(make_appointment("10:00", "11:30")) == 3

    def test_fractional(self):
        assert cells_spanned(make_appointment("10:00", "10:45")) == 1.5
