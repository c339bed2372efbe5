from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

from agency_crm.schemas.common import blank_to_none


def _required_name(value, label: str):
    if value is None or not str(value).strip():
        raise ValueError(f"{label} is required")
    value = str(value).strip()
    if len(value) > 100:
        raise ValueError(f"{label} must be at most 100 characters")
    return value


class ClientBase(BaseModel):
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("email", "phone", "address", "notes", mode="before")
    @classmethod
    def _blank_optional(cls, v):
        return blank_to_none(v)


class ClientCreate(ClientBase):
    first_name: str
    last_name: str

    @field_validator("first_name", mode="before")
    @classmethod
    def _first_name(cls, v):
        return _required_name(v, "First name")

    @field_validator("last_name", mode="before")
    @classmethod
    def _last_name(cls, v):
        return _required_name(v, "Last name")


class ClientUpdate(ClientBase):
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @field_validator("first_name", mode="before")
    @classmethod
    def _first_name(cls, v):
        return _required_name(v, "First name")

    @field_validator("last_name", mode="before")
    @classmethod
    def _last_name(cls, v):
        return _required_name(v, "Last name")
