from sqlalchemy import Column, String, DateTime, Text, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from agency_crm.core.database import Base
from agency_crm.models.base import gen_uuid, utcnow
import enum


class ActivityType(str, enum.Enum):
    CALL = "call"
    EMAIL = "email"
    TASK = "task"
    MEETING = "meeting"
    NOTE = "note"


class Activity(Base):
    __tablename__ = "activities"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    agency_id = Column(String(36), ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False)

    # Optional links
    client_id = Column(String(36), ForeignKey("clients.id", ondelete="SET NULL"), nullable=True, index=True)
    policy_id = Column(String(36), ForeignKey("policies.id", ondelete="SET NULL"), nullable=True, index=True)

    # Scheduling
    due_date = Column(DateTime(timezone=True), nullable=True, index=True)
    completed = Column(Boolean, default=False, nullable=False, index=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    client = relationship("Client")
    policy = relationship("Policy")
