"""Salon configuration models: per-weekday working hours."""

from typing import Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from salon_scheduler.config import WEEKDAY_KEYS, settings
from salon_scheduler.errors import InvalidFormatError
from salon_scheduler.scheduling.timeutils import time_to_minutes


class WorkingHours(BaseModel):
    """Open/close window for one weekday. ``start``/``end`` are ignored when closed."""

    start: str = settings.scheduling.default_day_start
    end: str = settings.scheduling.default_day_end
    closed: bool = False

    @field_validator("start", "end", mode="before")
    @classmethod
    def blank_means_default(cls, value: Optional[str], info: ValidationInfo):
        if value in (None, ""):
            if info.field_name == "start":
                return settings.scheduling.default_day_start
            return settings.scheduling.default_day_end
        return value

    @field_validator("start", "end")
    @classmethod
    def check_parseable(cls, value: str) -> str:
        try:
            time_to_minutes(value)
        except InvalidFormatError as exc:
            raise ValueError(exc.message) from None
        return value

    @field_validator("closed", mode="before")
    @classmethod
    def null_means_open(cls, value):
        return False if value is None else value

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end)


class SalonConfig(BaseModel):
    """Salon-wide settings read by the scheduling core.

    Stored in the ``salon_info`` row as ``working_hours_json``.
    """

    name: str = ""
    working_hours_by_day: dict[str, WorkingHours] = Field(default_factory=dict)

    @field_validator("working_hours_by_day", mode="before")
    @classmethod
    def lowercase_keys(cls, value):
        if not value:
            return {}
        return {str(key).strip().lower(): hours for key, hours in value.items()}

    @field_validator("working_hours_by_day")
    @classmethod
    def known_weekdays(cls, value: dict[str, WorkingHours]) -> dict[str, WorkingHours]:
        unknown = [key for key in value if key not in WEEKDAY_KEYS]
        if unknown:
            raise ValueError(f"Unknown weekday keys: {unknown}")
        return value
