"""Start/end time choices offered by the booking form."""

from typing import Iterable, Optional

from salon_scheduler.config import settings
from salon_scheduler.schemas.appointment_schema import Appointment
from salon_scheduler.schemas.salon_schema import WorkingHours
from salon_scheduler.schemas.slot_schema import FreeInterval
from salon_scheduler.scheduling.conflicts import active_sorted
from salon_scheduler.scheduling.timeutils import minutes_to_time, time_to_minutes


def _step(slot_minutes: Optional[int]) -> int:
    return slot_minutes or settings.scheduling.slot_minutes


def start_time_options(
    working_hours: WorkingHours,
    from_time: Optional[str] = None,
    within: Optional[FreeInterval] = None,
    min_duration_minutes: Optional[int] = None,
    slot_minutes: Optional[int] = None,
) -> list[str]:
    """
    Candidate start times.

    Inside a chosen free interval, starts run from its beginning while a
    booking of ``min_duration_minutes`` still fits. Otherwise they run from
    ``from_time`` (or work start) up to one tick before closing.
    """
    step = _step(slot_minutes)
    if within is not None:
        minimum = min_duration_minutes or settings.scheduling.min_free_minutes
        first = time_to_minutes(within.start_time)
        last = time_to_minutes(within.end_time) - minimum
    else:
        if working_hours.closed:
            return []
        first = time_to_minutes(from_time) if from_time else working_hours.start_minutes
        last = working_hours.end_minutes - step
    return [minutes_to_time(t) for t in range(first, last + 1, step)]


def _next_occupied_start(after_minutes: int, appointments: Iterable[Appointment]) -> Optional[int]:
    for appointment in active_sorted(appointments):
        if appointment.start_minutes > after_minutes:
            return appointment.start_minutes
    return None


def latest_end(
    start_time: str, working_hours: WorkingHours, appointments: Iterable[Appointment]
) -> int:
    """Latest end (minutes) before the next appointment or closing, whichever comes first."""
    start = time_to_minutes(start_time)
    next_start = _next_occupied_start(start, appointments)
    if next_start is None:
        return working_hours.end_minutes
    return min(next_start, working_hours.end_minutes)


def default_end_time(
    start_time: str, working_hours: WorkingHours, appointments: Iterable[Appointment]
) -> str:
    """Pre-filled end time: run until the next booking or closing time."""
    return minutes_to_time(latest_end(start_time, working_hours, appointments))


def end_time_options(
    start_time: str,
    working_hours: WorkingHours,
    appointments: Iterable[Appointment],
    slot_minutes: Optional[int] = None,
) -> list[str]:
    """End times from one tick after ``start_time`` up to the latest possible end."""
    step = _step(slot_minutes)
    appointments = list(appointments)
    first = time_to_minutes(start_time) + step
    last = latest_end(start_time, working_hours, appointments)
    options = [minutes_to_time(t) for t in range(first, last + 1, step)]
    if not options and first <= working_hours.end_minutes:
        options.append(minutes_to_time(first))
    return options
