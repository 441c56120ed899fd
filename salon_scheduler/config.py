"""
Centralized configuration with environment variable overrides.

Scheduling granularity, booking policies, and fallback working hours are
configurable here. Nothing is hardcoded in the scheduling or booking logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from salon_scheduler.logging_context import LOG_FORMAT, install_booking_filter

load_dotenv()

logger = logging.getLogger(__name__)

WEEKDAY_KEYS = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)

DURATION_POLICIES = ("lenient", "strict")
EDIT_STRATEGIES = ("update", "replace")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag from an env var."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


def _safe_weekdays(env_var: str, default: str) -> tuple[str, ...]:
    """Parse a comma-separated list of weekday names."""
    raw = os.getenv(env_var, default)
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class SchedulingConfig:
    """Timeline granularity and fallback working hours."""

    slot_minutes: int = _safe_int("SLOT_MINUTES", "30")
    min_free_minutes: int = _safe_int("MIN_FREE_MINUTES", "30")
    min_booking_minutes: int = _safe_int("MIN_BOOKING_MINUTES", "15")
    default_day_start: str = os.getenv("DEFAULT_DAY_START", "09:00")
    default_day_end: str = os.getenv("DEFAULT_DAY_END", "18:00")
    no_booking_weekdays: tuple[str, ...] = _safe_weekdays("NO_BOOKING_WEEKDAYS", "sunday")
    search_horizon_days: int = _safe_int("SEARCH_HORIZON_DAYS", "14")
    max_search_results: int = _safe_int("MAX_SEARCH_RESULTS", "10")


@dataclass(frozen=True)
class BookingConfig:
    """Policies applied by the booking orchestrator."""

    duration_policy: str = os.getenv("DURATION_POLICY", "lenient").lower()
    edit_strategy: str = os.getenv("EDIT_STRATEGY", "update").lower()
    default_status: str = os.getenv("DEFAULT_APPOINTMENT_STATUS", "confirmed").lower()
    serialize_bookings: bool = _safe_bool("SERIALIZE_BOOKINGS", "true")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    booking: BookingConfig = field(default_factory=BookingConfig)
    salon_name: str = os.getenv("SALON_NAME", "Salon")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_hhmm(name: str, value: str) -> None:
    parts = value.split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"{name} must be HH:MM, got {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"{name} must be a valid time of day, got {value!r}")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    scheduling = config.scheduling
    if scheduling.slot_minutes < 1 or 1440 % scheduling.slot_minutes:
        raise ValueError(
            f"SLOT_MINUTES must divide a day evenly, got {scheduling.slot_minutes}"
        )
    if scheduling.min_free_minutes < 1:
        raise ValueError(
            f"MIN_FREE_MINUTES must be >= 1, got {scheduling.min_free_minutes}"
        )
    if scheduling.min_booking_minutes < 1:
        raise ValueError(
            f"MIN_BOOKING_MINUTES must be >= 1, got {scheduling.min_booking_minutes}"
        )
    _validate_hhmm("DEFAULT_DAY_START", scheduling.default_day_start)
    _validate_hhmm("DEFAULT_DAY_END", scheduling.default_day_end)
    if scheduling.default_day_start >= scheduling.default_day_end:
        raise ValueError(
            "DEFAULT_DAY_START must be before DEFAULT_DAY_END, got "
            f"{scheduling.default_day_start}-{scheduling.default_day_end}"
        )
    unknown = [d for d in scheduling.no_booking_weekdays if d not in WEEKDAY_KEYS]
    if unknown:
        raise ValueError(f"NO_BOOKING_WEEKDAYS has unknown weekdays: {unknown}")
    if scheduling.search_horizon_days < 1:
        raise ValueError(
            f"SEARCH_HORIZON_DAYS must be >= 1, got {scheduling.search_horizon_days}"
        )
    if scheduling.max_search_results < 1:
        raise ValueError(
            f"MAX_SEARCH_RESULTS must be >= 1, got {scheduling.max_search_results}"
        )

    booking = config.booking
    if booking.duration_policy not in DURATION_POLICIES:
        raise ValueError(
            f"DURATION_POLICY must be one of {DURATION_POLICIES}, got {booking.duration_policy!r}"
        )
    if booking.edit_strategy not in EDIT_STRATEGIES:
        raise ValueError(
            f"EDIT_STRATEGY must be one of {EDIT_STRATEGIES}, got {booking.edit_strategy!r}"
        )
    if booking.default_status not in ("pending", "confirmed"):
        raise ValueError(
            "DEFAULT_APPOINTMENT_STATUS must be 'pending' or 'confirmed', "
            f"got {booking.default_status!r}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_booking_filter()
    logger.info("Configuration loaded for '%s'", config.salon_name)
    return config


# Singleton instance
settings = load_config()
