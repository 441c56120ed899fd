"""Client records and the client selection made on the booking form."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator


class RegisteredClient(BaseModel):
    """Client with an authentication account (``profiles`` table)."""
    id: str
    full_name: str
    phone: Optional[str] = None
    email: Optional[str] = None


class UnregisteredClient(BaseModel):
    """Staff-created placeholder for a walk-in or phone caller."""
    id: str
    full_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    created_by: Optional[str] = None


class ClientRef(BaseModel):
    """Tagged reference to exactly one client variant."""
    client_id: Optional[str] = None
    unregistered_client_id: Optional[str] = None

    @field_validator("client_id", "unregistered_client_id", mode="before")
    @classmethod
    def blank_id_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def exactly_one(self) -> "ClientRef":
        if bool(self.client_id) == bool(self.unregistered_client_id):
            raise ValueError("ClientRef needs exactly one of client_id or unregistered_client_id")
        return self

    @property
    def is_registered(self) -> bool:
        return self.client_id is not None

    def as_columns(self) -> dict[str, Optional[str]]:
        return {
            "client_id": self.client_id,
            "unregistered_client_id": self.unregistered_client_id,
        }


class ClientSelectionKind(str, Enum):
    REGISTERED = "registered"
    UNREGISTERED = "unregistered"
    NEW_UNREGISTERED = "new_unregistered"


class ClientSelection(BaseModel):
    """What staff picked in the client field of the booking form.

    Existing clients carry ``client_id``; a new unregistered client carries
    the ``full_name`` (and optional phone) to create on demand.
    """
    kind: ClientSelectionKind
    client_id: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def registered(cls, client_id: str) -> "ClientSelection":
        return cls(kind=ClientSelectionKind.REGISTERED, client_id=client_id)

    @classmethod
    def unregistered(cls, client_id: str) -> "ClientSelection":
        return cls(kind=ClientSelectionKind.UNREGISTERED, client_id=client_id)

    @classmethod
    def new(cls, full_name: str, phone: Optional[str] = None) -> "ClientSelection":
        return cls(kind=ClientSelectionKind.NEW_UNREGISTERED, full_name=full_name, phone=phone)
