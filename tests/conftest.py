"""Shared test fixtures and helpers."""

from datetime import date
from typing import Optional

import pytest

from salon_scheduler.backend.base import BackendError
from salon_scheduler.backend.memory import InMemoryBackend
from salon_scheduler.backend.repository import SalonRepository
from salon_scheduler.backend.seed import STAFF_USER_ID, seed_demo_data
from salon_scheduler.booking.orchestrator import BookingOrchestrator
from salon_scheduler.booking.state_machine import BookingStateMachine
from salon_scheduler.config import BookingConfig
from salon_scheduler.schemas.appointment_schema import Appointment, AppointmentStatus
from salon_scheduler.schemas.booking_schema import BookingRequest
from salon_scheduler.schemas.client_schema import ClientSelection
from salon_scheduler.schemas.salon_schema import WorkingHours

# A Friday; the seeded demo appointments land on the following Monday.
TODAY = date(2025, 3, 14)
DEMO_DAY = date(2025, 3, 17)


class FlakyBackend(InMemoryBackend):
    """In-memory backend whose next N writes to a table can be made to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.failures: dict[tuple[str, str], int] = {}

    def fail_next(self, op: str, table: str, times: int = 1) -> None:
        self.failures[(op, table)] = times

    def _maybe_fail(self, op: str, table: str) -> None:
        remaining = self.failures.get((op, table), 0)
        if remaining:
            self.failures[(op, table)] = remaining - 1
            raise BackendError(f"{op} on {table} failed")

    async def insert(self, table, row):
        self._maybe_fail("insert", table)
        return await super().insert(table, row)

    async def insert_many(self, table, rows):
        self._maybe_fail("insert_many", table)
        return await super().insert_many(table, rows)

    async def update(self, table, row_id, changes):
        self._maybe_fail("update", table)
        return await super().update(table, row_id, changes)

    async def delete(self, table, row_id):
        self._maybe_fail("delete", table)
        return await super().delete(table, row_id)


def booking_config(**overrides) -> BookingConfig:
    """BookingConfig with explicit defaults so tests ignore the environment."""
    values = {
        "duration_policy": "lenient",
        "edit_strategy": "update",
        "default_status": "confirmed",
        "serialize_bookings": True,
    }
    values.update(overrides)
    return BookingConfig(**values)


@pytest.fixture
def state_machine():
    return BookingStateMachine()


@pytest.fixture
def backend():
    backend = InMemoryBackend()
    seed_demo_data(backend, TODAY)
    return backend


@pytest.fixture
def flaky_backend():
    backend = FlakyBackend()
    seed_demo_data(backend, TODAY)
    return backend


@pytest.fixture
def repository(backend):
    return SalonRepository(backend)


@pytest.fixture
def orchestrator(repository):
    return BookingOrchestrator(repository, config=booking_config())


@pytest.fixture
def nine_to_six():
    return hours("09:00", "18:00")


def hours(start: str = "09:00", end: str = "18:00", closed: bool = False) -> WorkingHours:
    """Helper to create a WorkingHours window."""
    return WorkingHours(start=start, end=end, closed=closed)


def make_appointment(
    start: str,
    end: str,
    appointment_id: Optional[str] = None,
    day: date = DEMO_DAY,
    status: AppointmentStatus = AppointmentStatus.CONFIRMED,
    client_id: Optional[str] = "client-maria",
    unregistered_client_id: Optional[str] = None,
    service_id: str = "svc-haircut",
) -> Appointment:
    """Helper to create an Appointment with sensible defaults."""
    return Appointment(
        id=appointment_id or f"apt-{start}-{end}",
        appointment_date=day,
        start_time=start,
        end_time=end,
        status=status,
        client_id=None if unregistered_client_id else client_id,
        unregistered_client_id=unregistered_client_id,
        service_id=service_id,
    )


def make_request(start: str = "10:00", end: str = "10:30", **overrides) -> BookingRequest:
    """A complete booking request for Maria on the demo day; override any field."""
    fields = {
        "service_id": "svc-haircut",
        "client": ClientSelection.registered("client-maria"),
        "appointment_date": DEMO_DAY,
        "start_time": start,
        "end_time": end,
        "created_by": STAFF_USER_ID,
    }
    fields.update(overrides)
    return BookingRequest(**fields)
