from pydantic import BaseModel, Field, field_validator
from typing import Optional

from agency_crm.schemas.common import check_uuid


class DocumentCreate(BaseModel):
    client_id: Optional[str] = None
    policy_id: Optional[str] = None
    file_name: str = Field(..., min_length=1, max_length=255)
    file_path: str = Field(..., min_length=1)
    file_size: Optional[int] = Field(None, ge=0)
    mime_type: Optional[str] = Field(None, max_length=100)

    @field_validator("client_id", mode="before")
    @classmethod
    def _client_id(cls, v):
        return check_uuid(v, "Invalid client ID")

    @field_validator("policy_id", mode="before")
    @classmethod
    def _policy_id(cls, v):
        return check_uuid(v, "Invalid policy ID")


class UploadUrlRequest(BaseModel):
    """Camel-cased to match what the dashboard's upload widget posts."""
    fileName: Optional[str] = None
    contentType: Optional[str] = None
    clientId: Optional[str] = None
    policyId: Optional[str] = None

    @field_validator("clientId", mode="before")
    @classmethod
    def _client_id(cls, v):
        return check_uuid(v, "Invalid client ID")

    @field_validator("policyId", mode="before")
    @classmethod
    def _policy_id(cls, v):
        return check_uuid(v, "Invalid policy ID")
