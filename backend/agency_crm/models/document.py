from sqlalchemy import Column, String, DateTime, BigInteger, ForeignKey
from sqlalchemy.orm import relationship
from agency_crm.core.database import Base
from agency_crm.models.base import gen_uuid, utcnow


class Document(Base):
    """Metadata row for a file held in object storage under `file_path`."""
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    agency_id = Column(String(36), ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False, index=True)

    client_id = Column(String(36), ForeignKey("clients.id", ondelete="SET NULL"), nullable=True, index=True)
    policy_id = Column(String(36), ForeignKey("policies.id", ondelete="SET NULL"), nullable=True, index=True)

    file_name = Column(String(255), nullable=False)
    file_path = Column(String, nullable=False)
    file_size = Column(BigInteger, nullable=True)
    mime_type = Column(String(100), nullable=True)

    uploaded_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    client = relationship("Client")
    policy = relationship("Policy")
