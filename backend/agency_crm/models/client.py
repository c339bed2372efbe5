from sqlalchemy import Column, String, DateTime, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from agency_crm.core.database import Base
from agency_crm.models.base import gen_uuid, utcnow


class Client(Base):
    __tablename__ = "clients"
    __table_args__ = (
        UniqueConstraint("agency_id", "email", name="uq_clients_agency_email"),
    )

    id = Column(String(36), primary_key=True, default=gen_uuid)
    agency_id = Column(String(36), ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False, index=True)

    first_name = Column(String(100), nullable=False, index=True)
    last_name = Column(String(100), nullable=False, index=True)
    email = Column(String, nullable=True, index=True)
    phone = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Policies and notes go with the client; activities/documents are unlinked instead
    policies = relationship(
        "Policy", back_populates="client", cascade="all, delete-orphan",
        order_by="Policy.expiration_date",
    )
    client_notes = relationship("ClientNote", back_populates="client", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
