"""Demo salon data for the console demo and local runs."""

from datetime import date, timedelta
from typing import Optional

from salon_scheduler.backend.memory import InMemoryBackend
from salon_scheduler.backend.repository import (
    APPOINTMENTS,
    PROFILES,
    SALON_INFO,
    SERVICES,
    UNREGISTERED_CLIENTS,
)

STAFF_USER_ID = "staff-1"

DEFAULT_WORKING_HOURS: dict[str, dict] = {
    "monday": {"start": "09:00", "end": "18:00", "closed": False},
    "tuesday": {"start": "09:00", "end": "18:00", "closed": False},
    "wednesday": {"start": "09:00", "end": "18:00", "closed": False},
    "thursday": {"start": "09:00", "end": "19:00", "closed": False},
    "friday": {"start": "09:00", "end": "19:00", "closed": False},
    "saturday": {"start": "10:00", "end": "14:00", "closed": False},
    "sunday": {"start": "00:00", "end": "00:00", "closed": True},
}

SERVICE_CATALOG: list[dict] = [
    {"id": "svc-haircut", "name": "Haircut", "duration_minutes": 30, "price": 25.0},
    {"id": "svc-colour", "name": "Hair Colouring", "duration_minutes": 120, "price": 90.0},
    {"id": "svc-manicure", "name": "Manicure", "duration_minutes": 45, "price": 30.0},
    {"id": "svc-pedicure", "name": "Pedicure", "duration_minutes": 60, "price": 40.0},
    {"id": "svc-blowdry", "name": "Blow Dry", "duration_minutes": 30, "price": 20.0},
    {"id": "svc-facial", "name": "Facial Treatment", "duration_minutes": 60, "price": 55.0,
     "is_active": False},
]

REGISTERED_CLIENTS: list[dict] = [
    {"id": "client-maria", "full_name": "Maria Petrova", "phone": "0888123456",
     "email": "maria@example.com"},
    {"id": "client-elena", "full_name": "Elena Ivanova", "phone": "0899765432"},
]

UNREGISTERED: list[dict] = [
    {"id": "walkin-georgi", "full_name": "Georgi Dimitrov", "phone": "0877111222",
     "created_by": STAFF_USER_ID},
]


def demo_day(today: Optional[date] = None) -> date:
    """The first Monday-Friday after ``today``; demo appointments live on it."""
    day = (today or date.today()) + timedelta(days=1)
    while day.weekday() >= 5:
        day += timedelta(days=1)
    return day


def seed_demo_data(backend: InMemoryBackend, today: Optional[date] = None) -> date:
    """Load services, clients, working hours and three appointments on ``demo_day``.

    Returns the day the appointments were placed on.
    """
    backend.seed(SALON_INFO, [
        {"id": "salon", "name": "Demo Salon", "working_hours_json": DEFAULT_WORKING_HOURS},
    ])
    backend.seed(SERVICES, [{"is_active": True, **s} for s in SERVICE_CATALOG])
    backend.seed(PROFILES, REGISTERED_CLIENTS)
    backend.seed(UNREGISTERED_CLIENTS, UNREGISTERED)

    day = demo_day(today)
    iso = day.isoformat()
    backend.seed(APPOINTMENTS, [
        {"id": "apt-1", "appointment_date": iso, "start_time": "09:00:00",
         "end_time": "10:00:00", "status": "confirmed", "client_id": "client-maria",
         "unregistered_client_id": None, "service_id": "svc-pedicure", "notes": None},
        {"id": "apt-2", "appointment_date": iso, "start_time": "11:00:00",
         "end_time": "13:00:00", "status": "confirmed", "client_id": None,
         "unregistered_client_id": "walkin-georgi", "service_id": "svc-colour", "notes": None},
        {"id": "apt-3", "appointment_date": iso, "start_time": "15:00:00",
         "end_time": "15:30:00", "status": "pending", "client_id": "client-elena",
         "unregistered_client_id": None, "service_id": "svc-haircut", "notes": "Fringe only"},
    ])
    return day
