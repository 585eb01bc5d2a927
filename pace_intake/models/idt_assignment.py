"""
IDT assignment database model
"""
import uuid
from sqlalchemy import Column, String, Boolean, Enum, Date, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from pace_intake.core.database import Base
from pace_intake.models.enums import IDTRole, MANDATORY_IDT_ROLES


class IDTAssignment(Base):
    """
    One interdisciplinary team seat on an intake.

    RN and PCP seats gate enrollment; the remaining roles are tracked for
    care planning only. Seats for rn, pcp, pt and sw are created unassigned
    with every intake; other roles are added when first assigned.
    """
    __tablename__ = "idt_assignments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    intake_id = Column(String(36), ForeignKey("intake_records.id"), nullable=False, index=True)
    role = Column(Enum(IDTRole), nullable=False)
    assigned = Column(Boolean, default=False, nullable=False)
    name = Column(String, nullable=True)
    contact_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    # Relationships
    intake = relationship("IntakeRecord", back_populates="idt_assignments")

    __table_args__ = (
        UniqueConstraint("intake_id", "role", name="uq_idt_role_per_intake"),
    )

    def __init__(self, **kwargs):
        kwargs.setdefault("assigned", False)
        super().__init__(**kwargs)

    def __repr__(self):
        return f"<IDTAssignment(role={self.role.value}, assigned={self.assigned})>"

    @property
    def is_mandatory(self) -> bool:
        return self.role in MANDATORY_IDT_ROLES
