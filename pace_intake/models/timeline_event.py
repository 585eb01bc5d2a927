"""
Timeline event database model
"""
import uuid
from sqlalchemy import Column, String, Integer, Enum, DateTime, Text, ForeignKey, UniqueConstraint
from sqlalchemy import event as sa_event
from sqlalchemy.orm import relationship, object_session
from pace_intake.core.database import Base
from pace_intake.models.enums import PACEStatus, TimelineCategory


class TimelineEvent(Base):
    """
    Append-only history entry of an intake.

    ``sequence`` is the 1-based position in the intake's timeline. Rows are
    written once; updates and deletes are refused at flush time.
    """
    __tablename__ = "timeline_events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    intake_id = Column(String(36), ForeignKey("intake_records.id"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    date = Column(DateTime, nullable=False)
    event = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    from_status = Column(Enum(PACEStatus), nullable=True)
    to_status = Column(Enum(PACEStatus), nullable=True)
    completed_by = Column(String, nullable=False)
    category = Column(Enum(TimelineCategory), nullable=False)

    # Relationships
    intake = relationship("IntakeRecord", back_populates="timeline")

    __table_args__ = (
        UniqueConstraint("intake_id", "sequence", name="uq_timeline_sequence"),
    )

    def __repr__(self):
        return f"<TimelineEvent(intake_id={self.intake_id}, sequence={self.sequence}, event={self.event!r})>"


@sa_event.listens_for(TimelineEvent, "before_update")
def _refuse_update(mapper, connection, target):
    # Relationship bookkeeping can flag a row dirty without column changes
    if object_session(target).is_modified(target, include_collections=False):
        raise ValueError(f"Timeline event {target.id} is append-only and cannot be modified")


@sa_event.listens_for(TimelineEvent, "before_delete")
def _refuse_delete(mapper, connection, target):
    raise ValueError(f"Timeline event {target.id} is append-only and cannot be deleted")
