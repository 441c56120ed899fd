"""Half-open interval overlap checks between a candidate booking and a day's appointments."""

import logging
from typing import Iterable

from salon_scheduler.schemas.appointment_schema import Appointment
from salon_scheduler.scheduling.timeutils import time_to_minutes

logger = logging.getLogger(__name__)


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """``[start_a, end_a)`` and ``[start_b, end_b)`` share at least one minute.

    Touching intervals (one ends exactly when the other starts) do not overlap.
    """
    return start_a < end_b and start_b < end_a


def active_sorted(appointments: Iterable[Appointment]) -> list[Appointment]:
    """Non-cancelled appointments ordered by start, then end."""
    return sorted(
        (a for a in appointments if a.is_active),
        key=lambda a: (a.start_minutes, a.end_minutes),
    )


def overlaps(
    candidate_start: str, candidate_end: str, existing: Iterable[Appointment]
) -> list[Appointment]:
    """Return every non-cancelled appointment overlapping the candidate interval."""
    start = time_to_minutes(candidate_start)
    end = time_to_minutes(candidate_end)
    conflicts = [
        appointment
        for appointment in active_sorted(existing)
        if intervals_overlap(start, end, appointment.start_minutes, appointment.end_minutes)
    ]
    if conflicts:
        logger.debug(
            "Candidate %s-%s overlaps %d appointment(s)", candidate_start, candidate_end, len(conflicts)
        )
    return conflicts


def find_overlapping_pairs(
    appointments: Iterable[Appointment],
) -> list[tuple[Appointment, Appointment]]:
    """Pairs of stored appointments that already overlap each other (data anomalies)."""
    ordered = active_sorted(appointments)
    pairs = []
    for i, first in enumerate(ordered):
        for second in ordered[i + 1:]:
            if second.start_minutes >= first.end_minutes:
                break
            pairs.append((first, second))
    return pairs
