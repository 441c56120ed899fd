"""
Cached schedule for one calendar day.

Holds the day's working hours and appointments, and derives the slot grid
and free intervals from them. When attached to the realtime change feed,
any appointment change on this date marks the view stale; the next
``ensure_fresh()`` reloads it.
"""

import logging
from datetime import date
from typing import Callable, Optional

from salon_scheduler.backend.base import ChangeEvent
from salon_scheduler.backend.repository import SalonRepository
from salon_scheduler.schemas.appointment_schema import Appointment
from salon_scheduler.schemas.salon_schema import WorkingHours
from salon_scheduler.schemas.slot_schema import FreeInterval, TimeSlot
from salon_scheduler.scheduling.availability import free_intervals
from salon_scheduler.scheduling.conflicts import find_overlapping_pairs
from salon_scheduler.scheduling.slot_grid import build_grid
from salon_scheduler.scheduling.working_hours import SalonConfigProvider, resolve_working_hours

logger = logging.getLogger(__name__)


class DaySchedule:
    """View-model for the day screen.

    Working hours come from ``config_provider`` when given (for example a
    ``StaticSalonConfigProvider`` holding draft hours), otherwise from the
    repository.
    """

    def __init__(
        self,
        repository: SalonRepository,
        day: date,
        config_provider: Optional[SalonConfigProvider] = None,
    ) -> None:
        self._repo = repository
        self._config_provider = config_provider or repository
        self.day = day
        self.working_hours: Optional[WorkingHours] = None
        self.appointments: list[Appointment] = []
        self.stale = True
        self._unsubscribe: Optional[Callable[[], None]] = None

    async def refresh(self) -> None:
        salon_config = await self._config_provider.get_salon_config()
        self.working_hours = resolve_working_hours(self.day, salon_config)
        self.appointments = await self._repo.fetch_day_appointments(self.day)
        self.stale = False
        logger.debug(
            "Loaded %s: %d appointment(s)", self.day.isoformat(), len(self.appointments)
        )

    async def ensure_fresh(self) -> bool:
        """Reload if stale. Returns True when a reload happened."""
        if not self.stale:
            return False
        await self.refresh()
        return True

    @property
    def grid(self) -> list[TimeSlot]:
        if self.working_hours is None:
            return []
        return build_grid(self.working_hours, self.appointments)

    @property
    def free_intervals(self) -> list[FreeInterval]:
        if self.working_hours is None:
            return []
        return free_intervals(self.working_hours, self.appointments)

    @property
    def overlapping_pairs(self) -> list[tuple[Appointment, Appointment]]:
        """Stored appointments that overlap each other; shown as warnings on the day screen."""
        return find_overlapping_pairs(self.appointments)

    # ------------------------------------------------------------------ #
    # Realtime
    # ------------------------------------------------------------------ #

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._repo.subscribe_appointments(self._on_change)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    @property
    def attached(self) -> bool:
        return self._unsubscribe is not None

    def _on_change(self, event: ChangeEvent) -> None:
        key = self.day.isoformat()
        dates = {str(event.row.get("appointment_date"))}
        if event.old_row:
            dates.add(str(event.old_row.get("appointment_date")))
        if key in dates:
            logger.debug("Appointment %s %s on %s; view is stale",
                         event.row.get("id"), event.kind.value, key)
            self.stale = True
