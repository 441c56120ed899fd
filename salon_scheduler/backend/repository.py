"""
Typed access to the salon's tables.

Maps raw backend rows onto the pydantic models used by the scheduling
core. Every method is a single backend round trip unless noted.
"""

import logging
from datetime import date
from typing import Any, Callable, Optional

from salon_scheduler.backend.base import Backend, ChangeCallback, eq, gte, lte, neq
from salon_scheduler.schemas.appointment_schema import Appointment, AppointmentStatus, Service
from salon_scheduler.schemas.booking_schema import ConflictDetail
from salon_scheduler.schemas.client_schema import (
    ClientRef,
    RegisteredClient,
    UnregisteredClient,
)
from salon_scheduler.schemas.notification_schema import Notification
from salon_scheduler.schemas.salon_schema import SalonConfig
from salon_scheduler.scheduling.timeutils import normalize_time

logger = logging.getLogger(__name__)

APPOINTMENTS = "appointments"
SERVICES = "services"
PROFILES = "profiles"
UNREGISTERED_CLIENTS = "unregistered_clients"
NOTIFICATIONS = "notifications"
SALON_INFO = "salon_info"


class SalonRepository:
    """Reads and writes salon data through a generic Backend."""

    def __init__(self, backend: Backend) -> None:
        self.backend = backend

    # ------------------------------------------------------------------ #
    # Salon configuration
    # ------------------------------------------------------------------ #

    async def get_salon_config(self) -> SalonConfig:
        """Working hours from the single ``salon_info`` row (empty config if absent)."""
        rows = await self.backend.select(SALON_INFO, limit=1)
        if not rows:
            logger.warning("No salon_info row found; default working hours apply")
            return SalonConfig()
        row = rows[0]
        return SalonConfig(
            name=row.get("name") or "",
            working_hours_by_day=row.get("working_hours_json") or {},
        )

    # ------------------------------------------------------------------ #
    # Appointments
    # ------------------------------------------------------------------ #

    async def fetch_day_appointments(
        self, day: date, exclude_appointment_id: Optional[str] = None
    ) -> list[Appointment]:
        """Non-cancelled appointments on ``day``, optionally excluding one being edited."""
        filters = [
            eq("appointment_date", day.isoformat()),
            neq("status", AppointmentStatus.CANCELLED.value),
        ]
        if exclude_appointment_id:
            filters.append(neq("id", exclude_appointment_id))
        rows = await self.backend.select(APPOINTMENTS, filters, order_by=["start_time"])
        return [Appointment.model_validate(row) for row in rows]

    async def fetch_appointments_between(
        self, first: date, last: date, exclude_appointment_id: Optional[str] = None
    ) -> list[Appointment]:
        """Non-cancelled appointments from ``first`` to ``last`` inclusive."""
        filters = [
            gte("appointment_date", first.isoformat()),
            lte("appointment_date", last.isoformat()),
            neq("status", AppointmentStatus.CANCELLED.value),
        ]
        if exclude_appointment_id:
            filters.append(neq("id", exclude_appointment_id))
        rows = await self.backend.select(
            APPOINTMENTS, filters, order_by=["appointment_date", "start_time"]
        )
        return [Appointment.model_validate(row) for row in rows]

    async def fetch_upcoming_for_client(
        self, client_id: str, from_date: date, limit: int = 5
    ) -> list[Appointment]:
        """A registered client's next appointments, soonest first."""
        rows = await self.backend.select(
            APPOINTMENTS,
            [eq("client_id", client_id), gte("appointment_date", from_date.isoformat())],
            order_by=["appointment_date", "start_time"],
            limit=limit,
        )
        return [Appointment.model_validate(row) for row in rows]

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        rows = await self.backend.select(APPOINTMENTS, [eq("id", appointment_id)], limit=1)
        return Appointment.model_validate(rows[0]) if rows else None

    async def insert_appointment(self, data: dict[str, Any]) -> Appointment:
        row = await self.backend.insert(APPOINTMENTS, data)
        return Appointment.model_validate(row)

    async def restore_appointment(self, appointment: Appointment) -> Appointment:
        """Re-insert a previously deleted appointment under its original id."""
        row = await self.backend.insert(APPOINTMENTS, appointment.model_dump(mode="json"))
        return Appointment.model_validate(row)

    async def update_appointment(self, appointment_id: str, changes: dict[str, Any]) -> Appointment:
        row = await self.backend.update(APPOINTMENTS, appointment_id, changes)
        return Appointment.model_validate(row)

    async def delete_appointment(self, appointment_id: str) -> Appointment:
        row = await self.backend.delete(APPOINTMENTS, appointment_id)
        return Appointment.model_validate(row)

    def subscribe_appointments(self, callback: ChangeCallback) -> Callable[[], None]:
        return self.backend.subscribe(APPOINTMENTS, callback)

    # ------------------------------------------------------------------ #
    # Services
    # ------------------------------------------------------------------ #

    async def get_service(self, service_id: str) -> Optional[Service]:
        rows = await self.backend.select(SERVICES, [eq("id", service_id)], limit=1)
        return Service.model_validate(rows[0]) if rows else None

    async def list_services(self, active_only: bool = True) -> list[Service]:
        filters = [eq("is_active", True)] if active_only else None
        rows = await self.backend.select(SERVICES, filters, order_by=["name"])
        return [Service.model_validate(row) for row in rows]

    # ------------------------------------------------------------------ #
    # Clients
    # ------------------------------------------------------------------ #

    async def get_registered_client(self, client_id: str) -> Optional[RegisteredClient]:
        rows = await self.backend.select(PROFILES, [eq("id", client_id)], limit=1)
        return RegisteredClient.model_validate(rows[0]) if rows else None

    async def get_unregistered_client(self, client_id: str) -> Optional[UnregisteredClient]:
        rows = await self.backend.select(UNREGISTERED_CLIENTS, [eq("id", client_id)], limit=1)
        return UnregisteredClient.model_validate(rows[0]) if rows else None

    async def insert_unregistered_client(
        self, full_name: str, phone: Optional[str], created_by: str
    ) -> UnregisteredClient:
        row = await self.backend.insert(
            UNREGISTERED_CLIENTS,
            {"full_name": full_name, "phone": phone, "created_by": created_by},
        )
        logger.info("Unregistered client created: %s (%s)", full_name, row["id"])
        return UnregisteredClient.model_validate(row)

    async def delete_unregistered_client(self, client_id: str) -> None:
        await self.backend.delete(UNREGISTERED_CLIENTS, client_id)

    async def client_name(self, ref: ClientRef) -> Optional[str]:
        if ref.client_id:
            client = await self.get_registered_client(ref.client_id)
        else:
            client = await self.get_unregistered_client(ref.unregistered_client_id)
        return client.full_name if client else None

    async def describe_appointment(self, appointment: Appointment) -> ConflictDetail:
        """Client and service names for an appointment, for conflict dialogs."""
        ref = ClientRef(
            client_id=appointment.client_id,
            unregistered_client_id=appointment.unregistered_client_id,
        )
        client_name = await self.client_name(ref)
        service = await self.get_service(appointment.service_id)
        detail = ConflictDetail(
            appointment_id=appointment.id,
            start_time=normalize_time(appointment.start_time),
            end_time=normalize_time(appointment.end_time),
        )
        if client_name:
            detail.client_name = client_name
        if service:
            detail.service_name = service.name
        return detail

    # ------------------------------------------------------------------ #
    # Notifications
    # ------------------------------------------------------------------ #

    async def insert_notification(self, notification: Notification) -> Notification:
        row = await self.backend.insert(NOTIFICATIONS, notification.to_row())
        return Notification.model_validate(row)

    async def insert_notifications(self, notifications: list[Notification]) -> list[Notification]:
        rows = await self.backend.insert_many(NOTIFICATIONS, [n.to_row() for n in notifications])
        return [Notification.model_validate(row) for row in rows]
