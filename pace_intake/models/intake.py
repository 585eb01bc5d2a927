"""
Intake record database model
"""
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import Column, String, Boolean, Integer, Enum, Date, DateTime, Text, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from pace_intake.core.database import Base
from pace_intake.models.enums import (
    PACEStatus,
    MedicaidStatus,
    ApplicationOutcome,
    UASStatus,
    IDTRole,
)

_OPEN_STATUS_CLAUSE = "current_status NOT IN ('ENROLLED', 'DENIED', 'WITHDRAWN')"

_DEFAULTS = {
    "current_status": PACEStatus.INQUIRY,
    "medicaid_status": MedicaidStatus.UNKNOWN,
    "has_cin": False,
    "active_flag": False,
    "uas_status": UASStatus.NOT_STARTED,
    "nh_loc_met": False,
    "community_safety_criteria": False,
    "age_criteria": False,
    "roi_received": False,
    "hipaa_received": False,
    "uas_summary_received": False,
    "medicaid_docs_received": False,
}


class IntakeRecord(Base):
    """
    Intake record: one pass of a member through the PACE enrollment workflow.

    The eligibility checklist, UAS assessment and enrollment packet are kept
    as column groups on this row; IDT seats, the timeline and the call log
    are child rows.

    Status transitions (see services.transitions):
        Inquiry → Application Submitted → Eligibility Review → UAS Scheduled
        → UAS Completed → IDT Review → Ready to Enroll → Enrolled
        any open status → Denied | Withdrawn

    ``version`` is the optimistic lock counter; SQLAlchemy checks and bumps
    it on every UPDATE of this row.
    """
    __tablename__ = "intake_records"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    member_id = Column(String(36), ForeignKey("members.id"), nullable=False, index=True)
    previous_intake_id = Column(String(36), ForeignKey("intake_records.id"), nullable=True)
    current_status = Column(Enum(PACEStatus), default=PACEStatus.INQUIRY, nullable=False, index=True)
    version = Column(Integer, nullable=False)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Eligibility checklist
    medicaid_status = Column(Enum(MedicaidStatus), default=MedicaidStatus.UNKNOWN, nullable=False)
    has_cin = Column(Boolean, default=False, nullable=False)
    active_flag = Column(Boolean, default=False, nullable=False)
    application_date = Column(Date, nullable=True)
    application_outcome = Column(Enum(ApplicationOutcome), nullable=True)

    # UAS assessment
    uas_status = Column(Enum(UASStatus), default=UASStatus.NOT_STARTED, nullable=False)
    nh_loc_met = Column(Boolean, default=False, nullable=False)
    community_safety_criteria = Column(Boolean, default=False, nullable=False)
    age_criteria = Column(Boolean, default=False, nullable=False)
    uas_completed_date = Column(Date, nullable=True)
    uas_assessor = Column(String, nullable=True)
    uas_tracking_notes = Column(Text, nullable=True)

    # Enrollment packet
    roi_received = Column(Boolean, default=False, nullable=False)
    roi_date = Column(Date, nullable=True)
    hipaa_received = Column(Boolean, default=False, nullable=False)
    hipaa_date = Column(Date, nullable=True)
    uas_summary_received = Column(Boolean, default=False, nullable=False)
    medicaid_docs_received = Column(Boolean, default=False, nullable=False)
    signature_date = Column(Date, nullable=True)
    enrollment_date = Column(Date, nullable=True)

    # Relationships
    member = relationship("Member", back_populates="intakes")
    idt_assignments = relationship(
        "IDTAssignment", back_populates="intake", cascade="save-update, merge", order_by="IDTAssignment.role"
    )
    timeline = relationship(
        "TimelineEvent", back_populates="intake", cascade="save-update, merge", order_by="TimelineEvent.sequence"
    )
    notes = relationship(
        "CallLogEntry", back_populates="intake", cascade="save-update, merge", order_by="CallLogEntry.sequence"
    )

    __table_args__ = (
        # At most one open intake per member
        Index(
            "uq_open_intake_per_member",
            "member_id",
            unique=True,
            sqlite_where=text(_OPEN_STATUS_CLAUSE),
            postgresql_where=text(_OPEN_STATUS_CLAUSE),
        ),
    )

    __mapper_args__ = {"version_id_col": version}

    def __init__(self, **kwargs):
        # Column defaults only fire on INSERT; transient records need them too
        for key, value in _DEFAULTS.items():
            kwargs.setdefault(key, value)
        super().__init__(**kwargs)

    def __repr__(self):
        return f"<IntakeRecord(id={self.id}, member_id={self.member_id}, status={self.current_status.value})>"

    @property
    def is_terminal(self) -> bool:
        """True once Enrolled, Denied or Withdrawn"""
        return self.current_status.is_terminal

    def idt_assignment(self, role: IDTRole) -> Optional["IDTAssignment"]:
        """Return the IDT seat for ``role`` if the intake tracks it"""
        for assignment in self.idt_assignments:
            if assignment.role == role:
                return assignment
        return None
