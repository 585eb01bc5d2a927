"""
Database models package
"""
from pace_intake.models.enums import (
    PACEStatus,
    MedicaidStatus,
    ApplicationOutcome,
    UASStatus,
    IDTRole,
    TimelineCategory,
    ContactType,
)
from pace_intake.models.member import Member
from pace_intake.models.intake import IntakeRecord
from pace_intake.models.idt_assignment import IDTAssignment
from pace_intake.models.timeline_event import TimelineEvent
from pace_intake.models.call_log import CallLogEntry

__all__ = [
    "PACEStatus",
    "MedicaidStatus",
    "ApplicationOutcome",
    "UASStatus",
    "IDTRole",
    "TimelineCategory",
    "ContactType",
    "Member",
    "IntakeRecord",
    "IDTAssignment",
    "TimelineEvent",
    "CallLogEntry",
]
