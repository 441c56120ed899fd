"""
Conversions between ``"HH:MM"`` strings and minutes since midnight.

All scheduling arithmetic happens on integer minute offsets within a single
day; strings are only parsed at the edges and formatted on the way out.
"""

from typing import Iterator

from salon_scheduler.errors import EndsAfterMidnightError, InvalidFormatError

MINUTES_PER_DAY = 24 * 60


def time_to_minutes(value: str) -> int:
    """Parse ``"HH:MM"`` or ``"HH:MM:SS"`` into minutes since midnight.

    Seconds are ignored. Raises InvalidFormatError when the hour and minute
    are not integers separated by ``:``.
    """
    if not isinstance(value, str):
        raise InvalidFormatError(f"Time must be a string, got {value!r}")
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise InvalidFormatError(f"Invalid time format: {value!r}")
    try:
        hour, minute = int(parts[0]), int(parts[1])
    except ValueError:
        raise InvalidFormatError(f"Invalid time format: {value!r}") from None
    return hour * 60 + minute


def minutes_to_time(minutes: int) -> str:
    """Format minutes since midnight as ``"HH:MM"``.

    Values of a day or more still format (the hour exceeds 23); callers
    are responsible for bound-checking.
    """
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_clock_time(value: str) -> int:
    """Strict variant of time_to_minutes that requires a valid time of day."""
    minutes = time_to_minutes(value)
    hour, minute = (int(p) for p in value.strip().split(":")[:2])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise InvalidFormatError(f"Not a valid time of day: {value!r}")
    return minutes


def normalize_time(value: str) -> str:
    """Drop seconds and zero-pad: ``"9:5:00"`` -> ``"09:05"``."""
    return minutes_to_time(time_to_minutes(value))


def compute_end_time(start_time: str, duration_minutes: int) -> str:
    """End time of a booking starting at ``start_time``.

    Bookings are same-day only, so an end at or past midnight is rejected
    instead of producing an hour of 24 or more.
    """
    end = time_to_minutes(start_time) + duration_minutes
    if end >= MINUTES_PER_DAY:
        raise EndsAfterMidnightError(
            f"A {duration_minutes} minute booking from {normalize_time(start_time)} "
            "would end after midnight."
        )
    return minutes_to_time(end)


def iter_ticks(start: int, end: int, step: int) -> Iterator[int]:
    """Yield ``start, start+step, ...`` while the tick is before ``end``."""
    tick = start
    while tick < end:
        yield tick
        tick += step
