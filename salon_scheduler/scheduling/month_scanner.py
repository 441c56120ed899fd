"""
Per-day availability map for a calendar month.

Past days and no-booking weekdays are marked unavailable up front; every
other day runs the short-circuit free-slot check against its resolved
working hours.
"""

import calendar
import logging
from collections import defaultdict
from datetime import date
from typing import Iterable, Mapping, Optional, Sequence

from salon_scheduler.schemas.appointment_schema import Appointment
from salon_scheduler.schemas.salon_schema import SalonConfig
from salon_scheduler.scheduling.availability import has_any_free_slot
from salon_scheduler.scheduling.working_hours import is_no_booking_day, resolve_working_hours

logger = logging.getLogger(__name__)


def month_days(year: int, month: int) -> list[date]:
    """Every calendar day of the month, in order."""
    _, last = calendar.monthrange(year, month)
    return [date(year, month, day) for day in range(1, last + 1)]


def group_by_date(appointments: Iterable[Appointment]) -> dict[str, list[Appointment]]:
    """Bucket appointments by ISO date string."""
    grouped: dict[str, list[Appointment]] = defaultdict(list)
    for appointment in appointments:
        grouped[appointment.appointment_date.isoformat()].append(appointment)
    return dict(grouped)


def scan_month(
    year: int,
    month: int,
    salon_config: Optional[SalonConfig],
    appointments_by_date: Mapping[str, Sequence[Appointment]],
    today: Optional[date] = None,
    no_booking_weekdays: Optional[tuple[str, ...]] = None,
    min_duration_minutes: Optional[int] = None,
) -> dict[str, bool]:
    """Map each ISO date in the month to whether it still has a bookable gap."""
    today = today or date.today()
    availability: dict[str, bool] = {}
    for day in month_days(year, month):
        key = day.isoformat()
        if day < today or is_no_booking_day(day, no_booking_weekdays):
            availability[key] = False
            continue
        hours = resolve_working_hours(day, salon_config)
        availability[key] = has_any_free_slot(
            hours, appointments_by_date.get(key, ()), min_duration_minutes
        )
    logger.debug(
        "Scanned %04d-%02d: %d of %d days available",
        year, month, sum(availability.values()), len(availability),
    )
    return availability
