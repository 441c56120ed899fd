"""Tests for notification building and delivery."""

from datetime import date

import pytest

from salon_scheduler.backend.repository import NOTIFICATIONS, SalonRepository
from salon_scheduler.booking.notifications import (
    Notifier,
    appointment_cancelled_notification,
    appointment_saved_notification,
)
from salon_scheduler.errors import MissingClientError, PersistenceError
from salon_scheduler.schemas.appointment_schema import Appointment, Service
from salon_scheduler.schemas.notification_schema import NotificationType
from tests.conftest import DEMO_DAY, FlakyBackend, make_appointment

HAIRCUT = Service(id="svc-haircut", name="Haircut", duration_minutes=30)


class TestBuilders:
    def test_created(self):
        notification = appointment_saved_notification(
            make_appointment("10:00:00", "10:30:00", "apt-9"), HAIRCUT, updated=False
        )
        assert notification.type == NotificationType.APPOINTMENT_CREATED
        assert notification.user_id == "client-maria"
        assert "Haircut on 17.03.2025 from 10:00 to 10:30" in notification.body
        assert notification.data["start_time"] == "10:00"

    def test_updated(self):
        notification = appointment_saved_notification(
            make_appointment("12:00", "12:30"), HAIRCUT, updated=True
        )
        assert notification.type == NotificationType.BOOKING_UPDATED
        assert notification.title == "Booking updated"

    def test_cancelled_with_reason(self):
        notification = appointment_cancelled_notification(
            make_appointment("12:00", "12:30"), "Haircut", reason="Power cut"
        )
        assert notification.type == NotificationType.BOOKING_CANCELLED
        assert notification.body.endswith("\n\nReason: Power cut")

    def test_cancelled_blank_reason_ignored(self):
        notification = appointment_cancelled_notification(
            make_appointment("12:00", "12:30"), "Haircut", reason="   "
        )
        assert "Reason" not in notification.body

    def test_row_has_no_id(self):
        row = appointment_saved_notification(
            make_appointment("12:00", "12:30"), HAIRCUT, updated=False
        ).to_row()
        assert "id" not in row
        assert row["type"] == "appointment_created"


class TestNotifier:
    @pytest.mark.asyncio
    async def test_unregistered_client_skipped(self, backend, repository):
        appointment = make_appointment("12:00", "12:30", unregistered_client_id="walkin-georgi")
        assert not await Notifier(repository).appointment_saved(appointment, HAIRCUT)
        assert await backend.select(NOTIFICATIONS) == []

    @pytest.mark.asyncio
    async def test_saved_written(self, backend, repository):
        assert await Notifier(repository).appointment_saved(make_appointment("12:00", "12:30"), HAIRCUT)
        assert len(await backend.select(NOTIFICATIONS)) == 1

    @pytest.mark.asyncio
    async def test_blank_client_id_not_notified(self, backend, repository):
        appointment = Appointment(
            id="apt-blank", appointment_date=DEMO_DAY, start_time="12:00", end_time="12:30",
            service_id="svc-haircut", client_id="", unregistered_client_id="walkin-georgi",
        )
        assert not await Notifier(repository).appointment_saved(appointment, HAIRCUT)
        assert await backend.select(NOTIFICATIONS) == []


class TestBroadcastFreeSlot:
    @pytest.mark.asyncio
    async def test_one_row_per_client(self, backend, repository):
        sent = await Notifier(repository).broadcast_free_slot(
            ["client-maria", "client-elena", "client-maria"], date(2025, 3, 17), "13:00:00", "15:00",
        )
        assert [n.user_id for n in sent] == ["client-maria", "client-elena"]
        rows = await backend.select(NOTIFICATIONS)
        assert len(rows) == 2
        assert rows[0]["type"] == "free_slot"
        assert rows[0]["title"] == "Free slot available!"
        assert rows[0]["body"] == "17.03.2025 between 13:00 and 15:00"
        assert rows[0]["data"] == {"date": "2025-03-17", "start_time": "13:00", "end_time": "15:00"}

    @pytest.mark.asyncio
    async def test_requires_a_client(self, repository):
        with pytest.raises(MissingClientError):
            await Notifier(repository).broadcast_free_slot([], date(2025, 3, 17), "13:00", "15:00")

    @pytest.mark.asyncio
    async def test_backend_failure_surfaced(self):
        backend = FlakyBackend()
        backend.fail_next("insert_many", NOTIFICATIONS)
        notifier = Notifier(SalonRepository(backend))
        with pytest.raises(PersistenceError):
            await notifier.broadcast_free_slot(["client-maria"], date(2025, 3, 17), "13:00", "15:00")
