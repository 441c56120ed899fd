"""In-app notification rows written by the booking workflow."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    APPOINTMENT_CREATED = "appointment_created"
    BOOKING_UPDATED = "booking_updated"
    BOOKING_CANCELLED = "booking_cancelled"
    FREE_SLOT = "free_slot"


class Notification(BaseModel):
    user_id: str
    type: NotificationType
    title: str
    body: str
    data: Optional[dict[str, Any]] = Field(default=None)
    id: Optional[str] = None

    def to_row(self) -> dict[str, Any]:
        row = self.model_dump(mode="json", exclude_none=True)
        row.pop("id", None)
        return row
