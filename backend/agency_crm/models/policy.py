from sqlalchemy import Column, String, Date, DateTime, Numeric, JSON, ForeignKey
from sqlalchemy.orm import relationship
from agency_crm.core.database import Base
from agency_crm.models.base import gen_uuid, utcnow
import enum


class PolicyType(str, enum.Enum):
    AUTO = "auto"
    HOME = "home"
    LIFE = "life"
    HEALTH = "health"
    BUSINESS = "business"
    UMBRELLA = "umbrella"
    OTHER = "other"


class PolicyStatus(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
    PENDING = "pending"


class Policy(Base):
    __tablename__ = "policies"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    agency_id = Column(String(36), ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)

    # Policy information
    carrier = Column(String(255), nullable=False, index=True)
    policy_number = Column(String(100), nullable=False, index=True)
    type = Column(String, nullable=False, index=True)
    status = Column(String, default=PolicyStatus.ACTIVE.value, nullable=False, index=True)

    # Dates
    effective_date = Column(Date, nullable=False)
    expiration_date = Column(Date, nullable=False, index=True)

    # Premium
    premium = Column(Numeric(12, 2), nullable=False, default=0)

    # Carrier-specific extras (vehicles, coverages, deductibles ...)
    details = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    client = relationship("Client", back_populates="policies")
