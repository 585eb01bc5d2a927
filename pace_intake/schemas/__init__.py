"""
Pydantic schemas for request/response validation
"""
from pace_intake.schemas.member import MemberCreate, MemberResponse
from pace_intake.schemas.intake import IntakeCreate, IntakeResponse, IntakeSummary, StatusSummary
from pace_intake.schemas.checklist import (
    EligibilityUpdate,
    UASUpdate,
    IDTAssignmentUpdate,
    EnrollmentPacketUpdate,
    ReadinessResponse,
)
from pace_intake.schemas.timeline import (
    TimelineEventResponse,
    TransitionRequest,
    TransitionResponse,
    CallLogCreate,
    CallLogResponse,
)

__all__ = [
    "MemberCreate",
    "MemberResponse",
    "IntakeCreate",
    "IntakeResponse",
    "IntakeSummary",
    "StatusSummary",
    "EligibilityUpdate",
    "UASUpdate",
    "IDTAssignmentUpdate",
    "EnrollmentPacketUpdate",
    "ReadinessResponse",
    "TimelineEventResponse",
    "TransitionRequest",
    "TransitionResponse",
    "CallLogCreate",
    "CallLogResponse",
]
