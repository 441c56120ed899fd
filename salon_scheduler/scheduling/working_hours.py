"""
Working-hours resolution per calendar day.

The salon configuration is handed in explicitly through a
``SalonConfigProvider`` instead of being fetched at arbitrary call sites,
which keeps every calculator downstream pure.

Missing configuration fails *open*: a day with no entry gets the default
09:00-18:00 window (see ``DEFAULT_DAY_START`` / ``DEFAULT_DAY_END``).
"""

import logging
from datetime import date
from typing import Optional, Protocol

from salon_scheduler.config import settings
from salon_scheduler.schemas.salon_schema import SalonConfig, WorkingHours
from salon_scheduler.utils import weekday_key

logger = logging.getLogger(__name__)


class SalonConfigProvider(Protocol):
    """Anything that can supply the current salon configuration."""

    async def get_salon_config(self) -> SalonConfig: ...


class StaticSalonConfigProvider:
    """Provider backed by an in-memory SalonConfig."""

    def __init__(self, config: Optional[SalonConfig] = None) -> None:
        self._config = config or SalonConfig()

    async def get_salon_config(self) -> SalonConfig:
        return self._config


def default_working_hours() -> WorkingHours:
    """The open window used when a weekday has no configuration."""
    return WorkingHours(
        start=settings.scheduling.default_day_start,
        end=settings.scheduling.default_day_end,
        closed=False,
    )


def resolve_working_hours(day: date, salon_config: Optional[SalonConfig]) -> WorkingHours:
    """Return the configured window for ``day``'s weekday, or the open default."""
    key = weekday_key(day)
    if salon_config is not None:
        hours = salon_config.working_hours_by_day.get(key)
        if hours is not None:
            return hours
    logger.debug("No working hours configured for %s; using default window", key)
    return default_working_hours()


def is_no_booking_day(day: date, no_booking_weekdays: Optional[tuple[str, ...]] = None) -> bool:
    """Weekdays on which the calendar never offers bookings."""
    weekdays = (
        settings.scheduling.no_booking_weekdays
        if no_booking_weekdays is None
        else no_booking_weekdays
    )
    return weekday_key(day) in weekdays
