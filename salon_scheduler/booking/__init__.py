from salon_scheduler.booking.day_view import DaySchedule
from salon_scheduler.booking.notifications import Notifier
from salon_scheduler.booking.orchestrator import BookingOrchestrator
from salon_scheduler.booking.search import find_free_slots, load_month_availability
from salon_scheduler.booking.state_machine import (
    BookingState,
    BookingStateMachine,
    BookingTrigger,
)

__all__ = [
    "BookingOrchestrator",
    "BookingStateMachine",
    "BookingState",
    "BookingTrigger",
    "DaySchedule",
    "Notifier",
    "find_free_slots",
    "load_month_availability",
]
