"""Domain errors raised by the scheduling engine and the booking workflow.

Every error carries a stable ``code`` so callers can map it to a specific
dialog without matching on message text.
"""

from typing import Any, Optional


class SchedulingError(Exception):
    """Base class for all scheduling and booking failures."""

    code = "scheduling_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class BookingValidationError(SchedulingError):
    """Raised before any I/O when a booking request is incomplete or malformed."""

    code = "validation_error"


class MissingServiceError(BookingValidationError):
    code = "missing_service"


class MissingClientError(BookingValidationError):
    code = "missing_client"


class MissingDateError(BookingValidationError):
    code = "missing_date"


class MissingTimesError(BookingValidationError):
    code = "missing_times"


class InvalidFormatError(BookingValidationError):
    """A time string could not be parsed as ``HH:MM``."""

    code = "invalid_format"


class InvalidOrderError(BookingValidationError):
    code = "invalid_order"


class TooShortError(BookingValidationError):
    code = "too_short"


class DurationMismatchError(BookingValidationError):
    """Only raised under the strict duration policy."""

    code = "duration_mismatch"


class EndsAfterMidnightError(BookingValidationError):
    code = "ends_after_midnight"


class SlotConflictError(SchedulingError):
    """The candidate interval overlaps one or more existing appointments."""

    code = "slot_conflict"

    def __init__(self, message: str = "", conflicts: Optional[list[Any]] = None) -> None:
        super().__init__(message)
        self.conflicts = list(conflicts or [])


class PersistenceError(SchedulingError):
    """A backend read or write failed while running the workflow."""

    code = "persistence_error"

    def __init__(
        self,
        message: str = "",
        cause: Optional[BaseException] = None,
        appointment_lost: bool = False,
    ) -> None:
        super().__init__(message)
        self.cause = cause
        self.appointment_lost = appointment_lost


class ClientCreateFailedError(PersistenceError):
    code = "client_create_failed"


class AppointmentNotFoundError(SchedulingError):
    code = "appointment_not_found"
