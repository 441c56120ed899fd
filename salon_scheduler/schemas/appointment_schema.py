"""Appointment and service data models."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from salon_scheduler.errors import InvalidFormatError
from salon_scheduler.scheduling.timeutils import normalize_time, time_to_minutes


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Service(BaseModel):
    """Priced service with its canonical duration."""
    id: str
    name: str
    duration_minutes: int
    price: float = 0.0
    is_active: bool = True


class Appointment(BaseModel):
    """
    A booked interval on a single day.

    References exactly one client variant: ``client_id`` for registered
    clients or ``unregistered_client_id`` for staff-created placeholders.
    Times may carry seconds as returned by the datastore.
    """
    id: str
    appointment_date: date
    start_time: str
    end_time: str
    status: AppointmentStatus = AppointmentStatus.CONFIRMED
    client_id: Optional[str] = None
    unregistered_client_id: Optional[str] = None
    service_id: str
    notes: Optional[str] = None

    @field_validator("client_id", "unregistered_client_id", mode="before")
    @classmethod
    def blank_id_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def check_invariants(self) -> "Appointment":
        if bool(self.client_id) == bool(self.unregistered_client_id):
            raise ValueError(
                "Appointment must reference exactly one of client_id or unregistered_client_id"
            )
        try:
            start, end = time_to_minutes(self.start_time), time_to_minutes(self.end_time)
        except InvalidFormatError as exc:
            raise ValueError(exc.message) from None
        if start >= end:
            raise ValueError(
                f"start_time {self.start_time} must be before end_time {self.end_time}"
            )
        return self

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end_time)

    @property
    def is_active(self) -> bool:
        """Cancelled appointments never occupy time."""
        return self.status != AppointmentStatus.CANCELLED

    @property
    def is_registered_client(self) -> bool:
        return self.client_id is not None

    @property
    def time_range(self) -> str:
        return f"{normalize_time(self.start_time)}-{normalize_time(self.end_time)}"
