"""
Booking orchestrator: create, edit, and cancel appointments.

Implements the full booking lifecycle for one attempt:
Validate -> Resolve client -> Check conflicts -> Persist -> Notify.
Each stage is a method that raises a SchedulingError; ``submit`` drives the
state machine through them and turns any failure into a BookingResponse.

Conflict checking and persisting run under a per-orchestrator lock so two
attempts in the same process cannot both pass the check before either
writes. The backend's appointment exclusion constraint remains the real
guard against writers in other processes.
"""

import asyncio
import contextlib
from datetime import date
from typing import Any, Optional

from salon_scheduler.backend.base import BackendError, ConstraintViolationError, RowNotFoundError
from salon_scheduler.backend.repository import SalonRepository
from salon_scheduler.booking.notifications import Notifier
from salon_scheduler.booking.state_machine import BookingStateMachine, BookingTrigger
from salon_scheduler.booking.validation import (
    check_duration_policy,
    validate_client_selection,
    validate_request,
)
from salon_scheduler.config import BookingConfig, settings
from salon_scheduler.errors import (
    AppointmentNotFoundError,
    ClientCreateFailedError,
    MissingServiceError,
    PersistenceError,
    SchedulingError,
    SlotConflictError,
)
from salon_scheduler.logging_context import (
    get_booking_logger,
    new_booking_ref,
    set_appointment_id,
    set_booking_ref,
)
from salon_scheduler.schemas.appointment_schema import Appointment, AppointmentStatus, Service
from salon_scheduler.schemas.booking_schema import (
    BookingRequest,
    BookingResponse,
    CancelResponse,
    ConflictDetail,
)
from salon_scheduler.schemas.client_schema import ClientRef, ClientSelection, ClientSelectionKind
from salon_scheduler.scheduling.conflicts import overlaps
from salon_scheduler.scheduling.timeutils import normalize_time
from salon_scheduler.utils import normalize_phone

logger = get_booking_logger(__name__)


class BookingOrchestrator:
    """Runs booking attempts against a SalonRepository."""

    def __init__(
        self,
        repository: SalonRepository,
        notifier: Optional[Notifier] = None,
        config: Optional[BookingConfig] = None,
        min_booking_minutes: Optional[int] = None,
    ) -> None:
        self._repo = repository
        self._notifier = notifier or Notifier(repository)
        self._config = config or settings.booking
        self._min_booking_minutes = min_booking_minutes
        self._lock = asyncio.Lock()

    @property
    def repository(self) -> SalonRepository:
        return self._repo

    # ------------------------------------------------------------------ #
    # Full workflow
    # ------------------------------------------------------------------ #

    async def submit(self, request: BookingRequest) -> BookingResponse:
        """Create or edit an appointment from booking form state.

        Never raises for domain failures: validation, conflict and
        persistence errors come back as ``success=False`` with an error code.
        """
        booking_ref = new_booking_ref()
        set_booking_ref(booking_ref, request.editing_appointment_id)
        sm = BookingStateMachine()
        sm.transition(BookingTrigger.SUBMITTED)
        created_client_id: Optional[str] = None
        warnings: list[str] = []

        try:
            start, end = self.validate(request)
            service = await self.load_service(request.service_id, allow_inactive=request.is_edit)
            warning = check_duration_policy(end - start, service, self._config.duration_policy)
            if warning:
                warnings.append(warning)
            sm.transition(BookingTrigger.VALIDATED)

            client_ref, created_client_id = await self.resolve_client(
                request.client, request.created_by
            )
            sm.transition(BookingTrigger.CLIENT_RESOLVED)

            async with self._serialized():
                await self.check_conflicts(
                    request.appointment_date,
                    request.start_time,
                    request.end_time,
                    exclude_appointment_id=request.editing_appointment_id,
                )
                sm.transition(BookingTrigger.NO_CONFLICT)
                appointment = await self.persist(
                    self._appointment_data(request, client_ref),
                    editing_appointment_id=request.editing_appointment_id,
                )
            set_appointment_id(appointment.id)
            sm.transition(BookingTrigger.PERSISTED)
        except SchedulingError as exc:
            if created_client_id:
                await self._discard_client(created_client_id)
            sm.transition(BookingTrigger.FAILED)
            logger.warning("Booking failed during %s: %s", sm.failed_from.value, exc.message)
            return BookingResponse(
                success=False,
                message=exc.message,
                booking_ref=booking_ref,
                error_code=exc.code,
                conflicts=getattr(exc, "conflicts", []),
                warnings=warnings,
                state_trace=sm.get_state_trace(),
            )

        notified = await self.notify_client(appointment, service, updated=request.is_edit)
        verb = "updated" if request.is_edit else "created"
        logger.info(
            "Booking %s: appointment %s on %s %s",
            verb, appointment.id,
            appointment.appointment_date.isoformat(), appointment.time_range,
        )
        return BookingResponse(
            success=True,
            message=(
                f"Booking {verb}: {service.name} on {appointment.appointment_date.isoformat()} "
                f"from {normalize_time(appointment.start_time)} "
                f"to {normalize_time(appointment.end_time)}."
            ),
            booking_ref=booking_ref,
            appointment=appointment,
            warnings=warnings,
            client_notified=notified,
            state_trace=sm.get_state_trace(),
        )

    # ------------------------------------------------------------------ #
    # Stages
    # ------------------------------------------------------------------ #

    def validate(self, request: BookingRequest) -> tuple[int, int]:
        return validate_request(request, self._min_booking_minutes)

    async def load_service(self, service_id: str, allow_inactive: bool = False) -> Service:
        try:
            service = await self._repo.get_service(service_id)
        except BackendError as exc:
            raise PersistenceError(f"Could not load the service: {exc}", cause=exc) from exc
        if service is None or not (service.is_active or allow_inactive):
            raise MissingServiceError("The selected service is not available.")
        return service

    async def resolve_client(
        self, selection: Optional[ClientSelection], created_by: Optional[str] = None
    ) -> tuple[ClientRef, Optional[str]]:
        """
        Turn the form's client selection into a ClientRef.

        A new unregistered client is inserted first. Returns the ref and the
        id of a client created by this call (``None`` for existing clients).
        """
        validate_client_selection(selection)
        if selection.kind == ClientSelectionKind.REGISTERED:
            return ClientRef(client_id=selection.client_id), None
        if selection.kind == ClientSelectionKind.UNREGISTERED:
            return ClientRef(unregistered_client_id=selection.client_id), None

        if not created_by:
            raise ClientCreateFailedError(
                "Could not create the client: no signed-in staff member."
            )
        try:
            client = await self._repo.insert_unregistered_client(
                full_name=selection.full_name.strip(),
                phone=normalize_phone(selection.phone),
                created_by=created_by,
            )
        except BackendError as exc:
            raise ClientCreateFailedError(f"Could not create the client: {exc}", cause=exc) from exc
        return ClientRef(unregistered_client_id=client.id), client.id

    async def check_conflicts(
        self,
        day: date,
        start_time: str,
        end_time: str,
        exclude_appointment_id: Optional[str] = None,
    ) -> list[Appointment]:
        """Re-fetch the day and raise SlotConflictError if the candidate overlaps anything."""
        try:
            existing = await self._repo.fetch_day_appointments(day, exclude_appointment_id)
        except BackendError as exc:
            raise PersistenceError(f"Could not check existing bookings: {exc}", cause=exc) from exc

        conflicts = overlaps(start_time, end_time, existing)
        if conflicts:
            details = [await self._describe(a) for a in conflicts]
            raise SlotConflictError(
                "This time overlaps an existing booking: "
                + "; ".join(d.describe() for d in details)
                + ". Please choose another time.",
                conflicts=details,
            )
        return conflicts

    async def persist(
        self, data: dict[str, Any], editing_appointment_id: Optional[str] = None
    ) -> Appointment:
        """Insert a new appointment or apply an edit using the configured strategy."""
        if editing_appointment_id is None:
            return await self._insert(data)

        existing = await self._existing(editing_appointment_id)
        if self._config.edit_strategy == "replace":
            return await self._replace(existing, data)
        try:
            return await self._repo.update_appointment(existing.id, data)
        except ConstraintViolationError as exc:
            raise self._constraint_conflict(exc) from exc
        except RowNotFoundError as exc:
            raise AppointmentNotFoundError(f"Appointment {existing.id} no longer exists.") from exc
        except BackendError as exc:
            raise PersistenceError(f"Could not update the booking: {exc}", cause=exc) from exc

    async def notify_client(
        self, appointment: Appointment, service: Service, updated: bool = False
    ) -> bool:
        """Best effort; a failed notification never undoes the booking."""
        return await self._notifier.appointment_saved(appointment, service, updated=updated)

    # ------------------------------------------------------------------ #
    # Other staff actions
    # ------------------------------------------------------------------ #

    async def cancel(self, appointment_id: str, reason: Optional[str] = None) -> CancelResponse:
        """Remove an appointment and tell a registered client why."""
        set_booking_ref(new_booking_ref(), appointment_id)
        try:
            appointment = await self._repo.get_appointment(appointment_id)
            if appointment is None:
                return CancelResponse(success=False, message=f"Appointment {appointment_id} not found.")
            await self._repo.delete_appointment(appointment_id)
        except RowNotFoundError:
            return CancelResponse(success=False, message=f"Appointment {appointment_id} not found.")
        except BackendError as exc:
            logger.error("Cancelling %s failed: %s", appointment_id, exc)
            return CancelResponse(success=False, message=f"Could not cancel the booking: {exc}")

        service_name = await self._service_name(appointment.service_id)
        notified = await self._notifier.appointment_cancelled(appointment, service_name, reason)
        logger.info("Appointment %s cancelled", appointment_id)
        message = (
            "Booking cancelled and the client was notified."
            if notified
            else "Booking cancelled."
        )
        return CancelResponse(success=True, message=message, client_notified=notified)

    async def update_status(self, appointment_id: str, status: AppointmentStatus) -> Appointment:
        """Confirm, re-open, or cancel an appointment without touching its times.

        Any status other than cancelled is conflict-checked against the rest
        of the day first.
        """
        set_booking_ref(new_booking_ref(), appointment_id)
        async with self._serialized():
            if status != AppointmentStatus.CANCELLED:
                existing = await self._existing(appointment_id)
                await self.check_conflicts(
                    existing.appointment_date,
                    existing.start_time,
                    existing.end_time,
                    exclude_appointment_id=appointment_id,
                )
            try:
                updated = await self._repo.update_appointment(appointment_id, {"status": status.value})
            except RowNotFoundError as exc:
                raise AppointmentNotFoundError(f"Appointment {appointment_id} not found.") from exc
            except ConstraintViolationError as exc:
                raise self._constraint_conflict(exc) from exc
            except BackendError as exc:
                raise PersistenceError(f"Could not change the status: {exc}", cause=exc) from exc
        logger.info("Appointment %s is now %s", appointment_id, status.value)
        return updated

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _serialized(self):
        if self._config.serialize_bookings:
            return self._lock
        return contextlib.nullcontext()

    def _appointment_data(self, request: BookingRequest, client_ref: ClientRef) -> dict[str, Any]:
        status = request.status or AppointmentStatus(self._config.default_status)
        notes = request.notes.strip() if request.notes and request.notes.strip() else None
        return {
            "service_id": request.service_id,
            "appointment_date": request.appointment_date.isoformat(),
            "start_time": normalize_time(request.start_time),
            "end_time": normalize_time(request.end_time),
            "notes": notes,
            "status": status.value,
            **client_ref.as_columns(),
        }

    async def _insert(self, data: dict[str, Any]) -> Appointment:
        try:
            return await self._repo.insert_appointment(data)
        except ConstraintViolationError as exc:
            raise self._constraint_conflict(exc) from exc
        except BackendError as exc:
            raise PersistenceError(f"Could not save the booking: {exc}", cause=exc) from exc

    async def _existing(self, appointment_id: str) -> Appointment:
        try:
            existing = await self._repo.get_appointment(appointment_id)
        except BackendError as exc:
            raise PersistenceError(f"Could not load the booking: {exc}", cause=exc) from exc
        if existing is None:
            raise AppointmentNotFoundError(f"Appointment {appointment_id} not found.")
        return existing

    async def _replace(self, old: Appointment, data: dict[str, Any]) -> Appointment:
        """Delete-then-insert edit. Restores the old row if the insert fails."""
        try:
            await self._repo.delete_appointment(old.id)
        except BackendError as exc:
            raise PersistenceError(f"Could not update the booking: {exc}", cause=exc) from exc

        try:
            return await self._repo.insert_appointment(data)
        except BackendError as exc:
            logger.error("Insert after deleting %s failed (%s); restoring original", old.id, exc)
            try:
                await self._repo.restore_appointment(old)
            except BackendError as restore_exc:
                logger.error("Appointment %s could not be restored and is lost", old.id)
                raise PersistenceError(
                    f"The booking was removed but could not be saved again: {exc}",
                    cause=exc,
                    appointment_lost=True,
                ) from restore_exc
            if isinstance(exc, ConstraintViolationError):
                raise self._constraint_conflict(exc) from exc
            raise PersistenceError(f"Could not update the booking: {exc}", cause=exc) from exc

    async def _discard_client(self, client_id: str) -> None:
        try:
            await self._repo.delete_unregistered_client(client_id)
            logger.info("Discarded client %s created by the failed attempt", client_id)
        except BackendError as exc:
            logger.warning("Could not discard client %s: %s", client_id, exc)

    async def _describe(self, appointment: Appointment) -> ConflictDetail:
        try:
            return await self._repo.describe_appointment(appointment)
        except BackendError:
            logger.warning("Could not load details for appointment %s", appointment.id)
            return ConflictDetail(
                appointment_id=appointment.id,
                start_time=normalize_time(appointment.start_time),
                end_time=normalize_time(appointment.end_time),
            )

    async def _service_name(self, service_id: str) -> str:
        try:
            service = await self._repo.get_service(service_id)
        except BackendError:
            service = None
        return service.name if service else "your service"

    @staticmethod
    def _constraint_conflict(exc: ConstraintViolationError) -> SlotConflictError:
        logger.warning("Datastore rejected overlapping booking: %s", exc)
        return SlotConflictError(
            "This time was just booked by someone else. Please choose another time."
        )
