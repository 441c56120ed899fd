"""Booking request/response models used by the orchestrator."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from salon_scheduler.schemas.appointment_schema import Appointment, AppointmentStatus
from salon_scheduler.schemas.client_schema import ClientSelection


class BookingRequest(BaseModel):
    """Form state submitted by staff to create or edit an appointment.

    All fields are optional so an incomplete form can be validated and
    rejected with a specific error instead of a parsing failure.
    """
    service_id: Optional[str] = None
    client: Optional[ClientSelection] = None
    appointment_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    notes: Optional[str] = None
    editing_appointment_id: Optional[str] = None
    created_by: Optional[str] = None
    status: Optional[AppointmentStatus] = None

    @property
    def is_edit(self) -> bool:
        return self.editing_appointment_id is not None


class ConflictDetail(BaseModel):
    """An existing appointment blocking a candidate interval, ready for display."""
    appointment_id: str
    start_time: str
    end_time: str
    client_name: str = "Unknown client"
    service_name: str = "Unknown service"

    def describe(self) -> str:
        return (
            f"{self.start_time}-{self.end_time} "
            f"({self.client_name}, {self.service_name})"
        )


class BookingResponse(BaseModel):
    """Outcome of a booking attempt."""
    success: bool
    message: str
    booking_ref: str = ""
    appointment: Optional[Appointment] = None
    error_code: Optional[str] = None
    conflicts: list[ConflictDetail] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    client_notified: bool = False
    state_trace: list[str] = Field(default_factory=list)


class CancelResponse(BaseModel):
    """Outcome of cancelling an appointment."""
    success: bool
    message: str
    client_notified: bool = False
