from pydantic import BaseModel, field_validator

from agency_crm.schemas.common import check_uuid


def _content(v):
    if v is None or not str(v).strip():
        raise ValueError("Content is required")
    return v


class NoteUpdate(BaseModel):
    content: str

    @field_validator("content", mode="before")
    @classmethod
    def _content(cls, v):
        return _content(v)


class NoteCreate(NoteUpdate):
    client_id: str

    @field_validator("client_id", mode="before")
    @classmethod
    def _client_id(cls, v):
        if v is None:
            raise ValueError("Invalid client ID")
        return check_uuid(v, "Invalid client ID")
