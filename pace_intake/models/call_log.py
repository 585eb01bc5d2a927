"""
Call log database model
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, Integer, Enum, Date, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from pace_intake.core.database import Base
from pace_intake.models.enums import ContactType


class CallLogEntry(Base):
    """Free-form contact note attached to an intake (calls, emails, notes)."""
    __tablename__ = "call_log_entries"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    intake_id = Column(String(36), ForeignKey("intake_records.id"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    date = Column(DateTime, nullable=False)
    contact_type = Column(Enum(ContactType), nullable=False)
    contact_with = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    notes = Column(Text, nullable=False, default="")
    created_by = Column(String, nullable=False)
    follow_up_required = Column(Boolean, default=False, nullable=False)
    follow_up_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    intake = relationship("IntakeRecord", back_populates="notes")

    def __repr__(self):
        return f"<CallLogEntry(id={self.id}, contact_type={self.contact_type.value}, subject={self.subject!r})>"
