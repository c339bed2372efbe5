from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, Dict, Optional
from datetime import date
from decimal import Decimal

from agency_crm.models.policy import PolicyType, PolicyStatus
from agency_crm.schemas.common import check_uuid


class PolicyUpdate(BaseModel):
    carrier: Optional[str] = Field(None, min_length=1, max_length=255)
    policy_number: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[PolicyType] = None
    effective_date: Optional[date] = None
    expiration_date: Optional[date] = None
    premium: Optional[Decimal] = Field(None, ge=0)
    details: Optional[Dict[str, Any]] = None
    status: Optional[PolicyStatus] = None

    class Config:
        use_enum_values = True

    @model_validator(mode="after")
    def _dates_in_order(self):
        if self.effective_date and self.expiration_date and self.expiration_date < self.effective_date:
            raise ValueError("Expiration date cannot be before effective date")
        return self


class PolicyCreate(PolicyUpdate):
    client_id: str
    carrier: str = Field(..., min_length=1, max_length=255)
    policy_number: str = Field(..., min_length=1, max_length=100)
    type: PolicyType
    effective_date: date
    expiration_date: date
    premium: Decimal = Field(..., ge=0)

    @field_validator("client_id", mode="before")
    @classmethod
    def _client_id(cls, v):
        return check_uuid(v, "Invalid client ID")
