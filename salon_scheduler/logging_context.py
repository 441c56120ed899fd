"""Booking reference logging context.

Every staff action on the schedule (a submit, a cancel, a status change)
gets a booking reference such as ``BK-1A2B3C``. The same reference is
returned to the caller in ``BookingResponse.booking_ref``, so a message
shown on the booking form can be matched to the log lines of that attempt.
The appointment being worked on is tracked next to it; for a new booking it
is filled in once the row has been inserted.

Usage:
    from salon_scheduler.logging_context import get_booking_logger, set_booking_ref

    set_booking_ref("BK-1A2B3C", appointment_id="apt-7")
    logger = get_booking_logger(__name__)
    logger.info("Checking conflicts")  # [BK-1A2B3C apt-7] Checking conflicts
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Optional

NO_REF = "-"

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s [%(booking_ref)s %(appointment_id)s]: %(message)s"

_booking_ref: ContextVar[str] = ContextVar("booking_ref", default=NO_REF)
_appointment_id: ContextVar[str] = ContextVar("appointment_id", default=NO_REF)


def new_booking_ref() -> str:
    """Short reference staff can read back from the booking form."""
    return f"BK-{uuid.uuid4().hex[:6].upper()}"


def set_booking_ref(booking_ref: str, appointment_id: Optional[str] = None) -> None:
    """Start a new booking context for the current async task."""
    _booking_ref.set(booking_ref)
    _appointment_id.set(appointment_id or NO_REF)


def set_appointment_id(appointment_id: str) -> None:
    _appointment_id.set(appointment_id)


def get_booking_ref() -> str:
    return _booking_ref.get()


def get_appointment_id() -> str:
    return _appointment_id.get()


class BookingContextFilter(logging.Filter):
    """Adds ``booking_ref`` and ``appointment_id`` to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.booking_ref = _booking_ref.get()  # type: ignore[attr-defined]
        record.appointment_id = _appointment_id.get()  # type: ignore[attr-defined]
        return True


def get_booking_logger(name: str) -> logging.Logger:
    """Return a logger with the BookingContextFilter attached."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, BookingContextFilter) for f in logger.filters):
        logger.addFilter(BookingContextFilter())
    return logger


def install_booking_filter(logger: Optional[logging.Logger] = None) -> None:
    """Attach the filter to the handlers of ``logger`` (root by default).

    Handler-level filters see records from every module, so ``LOG_FORMAT``
    can be used even for loggers not created via ``get_booking_logger``.
    """
    target = logger or logging.getLogger()
    for handler in target.handlers:
        if not any(isinstance(f, BookingContextFilter) for f in handler.filters):
            handler.addFilter(BookingContextFilter())
