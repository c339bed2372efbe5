from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from agency_crm.core.database import Base
from agency_crm.models.base import gen_uuid, utcnow


class Agency(Base):
    """Tenant. Every CRM row hangs off exactly one agency."""
    __tablename__ = "agencies"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    name = Column(String, nullable=False)
    timezone = Column(String, nullable=False, default="America/Chicago")

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    users = relationship("User", back_populates="agency", cascade="all, delete-orphan")
