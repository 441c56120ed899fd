"""
Pure validation of booking form state, run before any I/O.

Checks are ordered the way staff fill the form: service, client, date,
then times. The first failing check raises; nothing is collected.
"""

import logging
from typing import Optional

from salon_scheduler.config import settings
from salon_scheduler.errors import (
    DurationMismatchError,
    InvalidOrderError,
    MissingClientError,
    MissingDateError,
    MissingServiceError,
    MissingTimesError,
    TooShortError,
)
from salon_scheduler.schemas.appointment_schema import Service
from salon_scheduler.schemas.booking_schema import BookingRequest
from salon_scheduler.schemas.client_schema import ClientSelection, ClientSelectionKind
from salon_scheduler.scheduling.timeutils import parse_clock_time

logger = logging.getLogger(__name__)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def validate_client_selection(selection: Optional[ClientSelection]) -> None:
    if selection is None:
        raise MissingClientError("Please select a client or create a new one.")
    if selection.kind == ClientSelectionKind.NEW_UNREGISTERED:
        if _blank(selection.full_name):
            raise MissingClientError("Please enter the new client's name.")
    elif _blank(selection.client_id):
        raise MissingClientError("Please select a client or create a new one.")


def validate_times(
    start_time: Optional[str],
    end_time: Optional[str],
    min_booking_minutes: Optional[int] = None,
) -> tuple[int, int]:
    """Parse and check a start/end pair. Returns ``(start, end)`` in minutes."""
    if _blank(start_time) or _blank(end_time):
        raise MissingTimesError("Please choose both a start and an end time.")
    start = parse_clock_time(start_time)
    end = parse_clock_time(end_time)
    if start >= end:
        raise InvalidOrderError("The end time must be after the start time.")
    minimum = settings.scheduling.min_booking_minutes if min_booking_minutes is None else min_booking_minutes
    if end - start < minimum:
        raise TooShortError(f"The minimum booking length is {minimum} minutes.")
    return start, end


def validate_request(
    request: BookingRequest, min_booking_minutes: Optional[int] = None
) -> tuple[int, int]:
    """Validate a booking request; returns the parsed ``(start, end)`` minutes."""
    if _blank(request.service_id):
        raise MissingServiceError("Please select a service.")
    validate_client_selection(request.client)
    if request.appointment_date is None:
        raise MissingDateError("Please choose a date.")
    return validate_times(request.start_time, request.end_time, min_booking_minutes)


def check_duration_policy(
    duration_minutes: int, service: Service, policy: Optional[str] = None
) -> Optional[str]:
    """
    Compare the chosen duration with the service's canonical one.

    Under the lenient policy a mismatch only produces a warning string;
    under the strict policy it raises DurationMismatchError.
    """
    if duration_minutes == service.duration_minutes:
        return None
    policy = policy or settings.booking.duration_policy
    difference = abs(duration_minutes - service.duration_minutes)
    message = (
        f"Chosen duration ({duration_minutes} min) differs from {service.name} "
        f"({service.duration_minutes} min) by {difference} minutes."
    )
    if policy == "strict":
        raise DurationMismatchError(message)
    logger.warning(message)
    return message
