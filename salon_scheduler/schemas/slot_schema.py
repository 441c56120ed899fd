"""Derived, non-persisted projections of a day's timeline."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from salon_scheduler.schemas.appointment_schema import Appointment
from salon_scheduler.scheduling.timeutils import time_to_minutes


class FreeInterval(BaseModel):
    """A maximal gap in a day's schedule, at least the minimum bookable length."""
    start_time: str
    end_time: str

    @property
    def duration_minutes(self) -> int:
        return time_to_minutes(self.end_time) - time_to_minutes(self.start_time)


class DatedFreeInterval(FreeInterval):
    """Free interval tagged with the day it belongs to."""
    appointment_date: date


class SlotKind(str, Enum):
    FREE = "free"
    START = "start"
    CONTINUATION = "continuation"


class Occupancy(str, Enum):
    NONE = "none"
    SINGLE = "single"
    MULTIPLE = "multiple"


class TimeSlot(BaseModel):
    """One tick of the day grid.

    ``appointment`` is the occupant used for display. With
    ``Occupancy.MULTIPLE`` every overlapping appointment is in ``occupants``
    so renderers can flag the anomaly.
    """
    time: str
    is_free: bool
    kind: SlotKind = SlotKind.FREE
    occupancy: Occupancy = Occupancy.NONE
    appointment: Optional[Appointment] = None
    occupants: list[Appointment] = Field(default_factory=list)

    @property
    def is_anomaly(self) -> bool:
        return self.occupancy == Occupancy.MULTIPLE
