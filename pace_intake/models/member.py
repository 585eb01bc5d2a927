"""
Member database model
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Date, DateTime
from sqlalchemy.orm import relationship
from pace_intake.core.database import Base


class Member(Base):
    """
    Member model representing a person referred to the PACE program.

    A member may accumulate several intakes over time (re-enrollment after
    a denial or withdrawal), but at most one of them is open at once.
    """
    __tablename__ = "members"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    date_of_birth = Column(Date, nullable=False)
    medicaid_cin = Column(String(16), nullable=True, index=True)
    street1 = Column(String, nullable=False)
    street2 = Column(String, nullable=True)
    city = Column(String, nullable=False)
    state = Column(String(2), nullable=False)
    zip_code = Column(String(10), nullable=False)
    referral_source = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    intakes = relationship("IntakeRecord", back_populates="member", order_by="IntakeRecord.created_at")

    def __repr__(self):
        return f"<Member(id={self.id}, name={self.full_name})>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
