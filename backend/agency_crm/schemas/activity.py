from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime

from agency_crm.models.activity import ActivityType
from agency_crm.schemas.common import check_uuid, to_utc


class ActivityBase(BaseModel):
    client_id: Optional[str] = None
    policy_id: Optional[str] = None
    due_date: Optional[datetime] = None

    class Config:
        use_enum_values = True

    @field_validator("client_id", mode="before")
    @classmethod
    def _client_id(cls, v):
        return check_uuid(v, "Invalid client ID")

    @field_validator("policy_id", mode="before")
    @classmethod
    def _policy_id(cls, v):
        return check_uuid(v, "Invalid policy ID")

    @field_validator("due_date")
    @classmethod
    def _due_date_utc(cls, v):
        return to_utc(v)


def _description(v):
    if v is None or not str(v).strip():
        raise ValueError("Description is required")
    return v


class ActivityCreate(ActivityBase):
    type: ActivityType
    description: str

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, v):
        return _description(v)


class ActivityUpdate(ActivityBase):
    type: Optional[ActivityType] = None
    description: Optional[str] = None
    completed: Optional[bool] = None

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, v):
        return _description(v)
