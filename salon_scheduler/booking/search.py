"""
Repository-backed availability queries.

Both functions fetch everything they need up front (salon config plus one
date-range query for appointments) and then run the pure calculators.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from salon_scheduler.backend.repository import SalonRepository
from salon_scheduler.config import settings
from salon_scheduler.schemas.slot_schema import DatedFreeInterval
from salon_scheduler.scheduling.availability import free_intervals
from salon_scheduler.scheduling.month_scanner import group_by_date, month_days, scan_month
from salon_scheduler.scheduling.working_hours import (
    SalonConfigProvider,
    is_no_booking_day,
    resolve_working_hours,
)

logger = logging.getLogger(__name__)


async def find_free_slots(
    repository: SalonRepository,
    start_date: Optional[date] = None,
    horizon_days: Optional[int] = None,
    limit: Optional[int] = None,
    min_duration_minutes: Optional[int] = None,
    config_provider: Optional[SalonConfigProvider] = None,
) -> list[DatedFreeInterval]:
    """
    Next free intervals across the coming days, earliest first.

    Args:
        repository: Data access for salon config and appointments.
        start_date: First day to search (defaults to today).
        horizon_days: Number of days to look ahead, ``start_date`` included.
        limit: Maximum number of intervals returned.
        min_duration_minutes: Shortest gap worth offering.
        config_provider: Source of working hours; defaults to the repository.
    """
    start_date = start_date or date.today()
    horizon = horizon_days if horizon_days is not None else settings.scheduling.search_horizon_days
    limit = limit if limit is not None else settings.scheduling.max_search_results
    if horizon <= 0 or limit <= 0:
        return []
    last_date = start_date + timedelta(days=horizon - 1)

    salon_config = await (config_provider or repository).get_salon_config()
    by_date = group_by_date(await repository.fetch_appointments_between(start_date, last_date))

    results: list[DatedFreeInterval] = []
    for offset in range(horizon):
        day = start_date + timedelta(days=offset)
        if is_no_booking_day(day):
            continue
        hours = resolve_working_hours(day, salon_config)
        if hours.closed:
            continue
        for interval in free_intervals(hours, by_date.get(day.isoformat(), []), min_duration_minutes):
            results.append(DatedFreeInterval(appointment_date=day, **interval.model_dump()))
            if len(results) >= limit:
                return results

    logger.debug(
        "Free slot search %s..%s found %d interval(s)", start_date, last_date, len(results)
    )
    return results


async def load_month_availability(
    repository: SalonRepository,
    year: int,
    month: int,
    exclude_appointment_id: Optional[str] = None,
    today: Optional[date] = None,
    config_provider: Optional[SalonConfigProvider] = None,
) -> dict[str, bool]:
    """Fetch a month's data in two queries and scan it for bookable days.

    When editing, pass the appointment's id so its own slot counts as free.
    ``config_provider`` overrides where the working hours come from.
    """
    days = month_days(year, month)
    salon_config = await (config_provider or repository).get_salon_config()
    appointments = await repository.fetch_appointments_between(
        days[0], days[-1], exclude_appointment_id
    )
    return scan_month(year, month, salon_config, group_by_date(appointments), today=today)
