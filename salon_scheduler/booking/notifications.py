"""
In-app notifications triggered by the booking workflow.

Appointment notifications are best effort: they sit outside the booking's
consistency boundary, so a failed insert is logged and reported as
``False`` rather than raised. Free-slot broadcasts are an explicit staff
action and surface their failures.
"""

from datetime import date
from typing import Iterable, Optional

from salon_scheduler.backend.base import BackendError
from salon_scheduler.backend.repository import SalonRepository
from salon_scheduler.errors import MissingClientError, PersistenceError
from salon_scheduler.logging_context import get_booking_logger
from salon_scheduler.schemas.appointment_schema import Appointment, Service
from salon_scheduler.schemas.notification_schema import Notification, NotificationType
from salon_scheduler.scheduling.timeutils import normalize_time

logger = get_booking_logger(__name__)


def _day_label(day: date) -> str:
    return day.strftime("%d.%m.%Y")


def appointment_saved_notification(
    appointment: Appointment, service: Service, updated: bool
) -> Notification:
    start = normalize_time(appointment.start_time)
    end = normalize_time(appointment.end_time)
    day = _day_label(appointment.appointment_date)
    if updated:
        notification_type = NotificationType.BOOKING_UPDATED
        title = "Booking updated"
        body = f"Your booking has been moved to {day} from {start} to {end}."
    else:
        notification_type = NotificationType.APPOINTMENT_CREATED
        title = "New booking"
        body = f"Your booking for {service.name} on {day} from {start} to {end} is confirmed."
    return Notification(
        user_id=appointment.client_id,
        type=notification_type,
        title=title,
        body=body,
        data={
            "appointment_id": appointment.id,
            "date": appointment.appointment_date.isoformat(),
            "start_time": start,
            "end_time": end,
            "service_name": service.name,
        },
    )


def appointment_cancelled_notification(
    appointment: Appointment, service_name: str, reason: Optional[str] = None
) -> Notification:
    body = (
        f"Your booking for {service_name} on {_day_label(appointment.appointment_date)} "
        f"at {normalize_time(appointment.start_time)} has been cancelled."
    )
    if reason and reason.strip():
        body += f"\n\nReason: {reason.strip()}"
    return Notification(
        user_id=appointment.client_id,
        type=NotificationType.BOOKING_CANCELLED,
        title="Booking cancelled",
        body=body,
    )


class Notifier:
    """Writes notification rows for registered clients."""

    def __init__(self, repository: SalonRepository) -> None:
        self._repo = repository

    async def _send(self, notification: Notification) -> bool:
        try:
            await self._repo.insert_notification(notification)
        except Exception:
            logger.warning(
                "Notification %s to %s failed",
                notification.type.value, notification.user_id, exc_info=True,
            )
            return False
        logger.info("Notification %s sent to %s", notification.type.value, notification.user_id)
        return True

    async def appointment_saved(
        self, appointment: Appointment, service: Service, updated: bool = False
    ) -> bool:
        """Tell a registered client about a new or changed booking. Best effort."""
        if not appointment.is_registered_client:
            return False
        return await self._send(appointment_saved_notification(appointment, service, updated))

    async def appointment_cancelled(
        self, appointment: Appointment, service_name: str, reason: Optional[str] = None
    ) -> bool:
        """Tell a registered client their booking was cancelled. Best effort."""
        if not appointment.is_registered_client:
            return False
        return await self._send(appointment_cancelled_notification(appointment, service_name, reason))

    async def broadcast_free_slot(
        self, client_ids: Iterable[str], day: date, start_time: str, end_time: str
    ) -> list[Notification]:
        """Offer a free slot to the selected clients in a single insert."""
        recipients = list(dict.fromkeys(client_ids))
        if not recipients:
            raise MissingClientError("Please select at least one client.")
        start, end = normalize_time(start_time), normalize_time(end_time)
        notifications = [
            Notification(
                user_id=client_id,
                type=NotificationType.FREE_SLOT,
                title="Free slot available!",
                body=f"{_day_label(day)} between {start} and {end}",
                data={"date": day.isoformat(), "start_time": start, "end_time": end},
            )
            for client_id in recipients
        ]
        try:
            sent = await self._repo.insert_notifications(notifications)
        except BackendError as exc:
            raise PersistenceError(f"Could not send free slot notifications: {exc}", cause=exc) from exc
        logger.info("Free slot %s %s-%s offered to %d client(s)", day, start, end, len(sent))
        return sent
