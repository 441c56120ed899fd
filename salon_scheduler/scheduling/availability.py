"""
Free-interval computation over a day's working-hours window.

A single sweep walks the day's appointments in start order with a cursor
that only ever moves forward, so overlapping appointments in the input
(a data anomaly) are absorbed instead of producing negative gaps.
"""

import logging
from typing import Iterable, Iterator, Optional

from salon_scheduler.config import settings
from salon_scheduler.schemas.appointment_schema import Appointment
from salon_scheduler.schemas.salon_schema import WorkingHours
from salon_scheduler.schemas.slot_schema import FreeInterval
from salon_scheduler.scheduling.conflicts import active_sorted
from salon_scheduler.scheduling.timeutils import minutes_to_time

logger = logging.getLogger(__name__)


def _gaps(
    working_hours: WorkingHours, appointments: Iterable[Appointment]
) -> Iterator[tuple[int, int]]:
    """Yield every raw gap ``(start, end)`` inside the working window, in order."""
    if working_hours.closed:
        return
    work_start = working_hours.start_minutes
    work_end = working_hours.end_minutes

    cursor = work_start
    for appointment in active_sorted(appointments):
        if cursor >= work_end:
            return
        gap_end = min(appointment.start_minutes, work_end)
        if cursor < gap_end:
            yield cursor, gap_end
        cursor = max(cursor, appointment.end_minutes)

    if cursor < work_end:
        yield cursor, work_end


def _min_duration(min_duration_minutes: Optional[int]) -> int:
    if min_duration_minutes is None:
        return settings.scheduling.min_free_minutes
    return min_duration_minutes


def free_intervals(
    working_hours: WorkingHours,
    appointments: Iterable[Appointment],
    min_duration_minutes: Optional[int] = None,
) -> list[FreeInterval]:
    """All maximal gaps of at least ``min_duration_minutes`` (default 30)."""
    minimum = _min_duration(min_duration_minutes)
    return [
        FreeInterval(start_time=minutes_to_time(start), end_time=minutes_to_time(end))
        for start, end in _gaps(working_hours, appointments)
        if end - start >= minimum
    ]


def has_any_free_slot(
    working_hours: WorkingHours,
    appointments: Iterable[Appointment],
    min_duration_minutes: Optional[int] = None,
) -> bool:
    """Whether the day has at least one gap of ``min_duration_minutes``.

    Stops at the first qualifying gap; used for month-wide scans where
    only a boolean per day is needed.
    """
    minimum = _min_duration(min_duration_minutes)
    return any(end - start >= minimum for start, end in _gaps(working_hours, appointments))
