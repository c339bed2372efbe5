from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from agency_crm.models.user import UserRole


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: Optional[str] = None
    role: UserRole = UserRole.AGENT

    class Config:
        use_enum_values = True


class UserOut(BaseModel):
    id: str
    agency_id: str
    email: str
    full_name: Optional[str] = None
    role: str
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str
