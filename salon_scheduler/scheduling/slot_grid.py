"""
Fixed-tick day grid used to render the schedule.

Each tick from work start (while before work end) is marked free, the
start tick of an appointment, or a continuation of one. When more than one
appointment contains the same tick the cell is tagged ``Occupancy.MULTIPLE``
with every occupant attached, and a warning is logged.
"""

import logging
from typing import Iterable, Optional

from salon_scheduler.config import settings
from salon_scheduler.schemas.appointment_schema import Appointment
from salon_scheduler.schemas.salon_schema import WorkingHours
from salon_scheduler.schemas.slot_schema import Occupancy, SlotKind, TimeSlot
from salon_scheduler.scheduling.conflicts import active_sorted
from salon_scheduler.scheduling.timeutils import iter_ticks, minutes_to_time

logger = logging.getLogger(__name__)


def build_grid(
    working_hours: WorkingHours,
    appointments: Iterable[Appointment],
    slot_minutes: Optional[int] = None,
) -> list[TimeSlot]:
    """Project a day's appointments onto the working-hours tick grid."""
    if working_hours.closed:
        return []
    step = slot_minutes or settings.scheduling.slot_minutes
    ordered = active_sorted(appointments)

    grid: list[TimeSlot] = []
    for tick in iter_ticks(working_hours.start_minutes, working_hours.end_minutes, step):
        time_str = minutes_to_time(tick)
        occupants = [a for a in ordered if a.start_minutes <= tick < a.end_minutes]

        if not occupants:
            grid.append(TimeSlot(time=time_str, is_free=True))
            continue

        shown = occupants[0]
        if len(occupants) > 1:
            logger.warning(
                "Overlapping appointments at %s on %s: %s",
                time_str,
                shown.appointment_date.isoformat(),
                ", ".join(f"{a.id} ({a.time_range})" for a in occupants),
            )
        grid.append(
            TimeSlot(
                time=time_str,
                is_free=False,
                kind=SlotKind.START if shown.start_minutes == tick else SlotKind.CONTINUATION,
                occupancy=Occupancy.MULTIPLE if len(occupants) > 1 else Occupancy.SINGLE,
                appointment=shown,
                occupants=occupants,
            )
        )
    return grid


def cells_spanned(appointment: Appointment, slot_minutes: Optional[int] = None) -> float:
    """How many grid cells an appointment covers (fractional for odd lengths)."""
    step = slot_minutes or settings.scheduling.slot_minutes
    return (appointment.end_minutes - appointment.start_minutes) / step
