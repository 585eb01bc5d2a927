"""
Intake Pydantic schemas
"""
from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from pace_intake.models.enums import IDTRole, PACEStatus
from pace_intake.models.intake import IntakeRecord
from pace_intake.schemas.checklist import (
    EligibilityChecklist,
    EnrollmentPacket,
    IDTMemberStatus,
    UASAssessment,
)
from pace_intake.schemas.timeline import CallLogResponse, TimelineEventResponse


class IntakeCreate(BaseModel):
    """Schema for opening an intake (or re-enrolling after a closed one)"""
    member_id: str = Field(..., description="Member UUID")
    created_by: str = Field(..., min_length=1, description="Intake coordinator opening the record")
    previous_intake_id: Optional[str] = Field(None, description="Closed intake this re-enrollment follows")


class IntakeSummary(BaseModel):
    """Schema for an intake row on the dashboard"""
    id: str
    member_id: str
    member_name: str
    current_status: PACEStatus
    created_at: datetime
    updated_at: datetime
    completion_percentage: int = Field(..., ge=0, le=100)
    is_overdue: bool = Field(..., description="Stuck in the Medicaid application phase past the threshold")


class StatusSummary(BaseModel):
    """Schema for dashboard counters"""
    total: int
    counts: Dict[PACEStatus, int]


class IntakeResponse(BaseModel):
    """Schema for a full intake record"""
    id: str = Field(..., description="Intake UUID")
    member_id: str
    previous_intake_id: Optional[str] = None
    current_status: PACEStatus
    is_terminal: bool
    version: int
    created_by: str
    created_at: datetime
    updated_at: datetime
    eligibility_checklist: EligibilityChecklist
    uas_assessment: UASAssessment
    idt_checklist: Dict[IDTRole, IDTMemberStatus]
    enrollment_packet: EnrollmentPacket
    timeline: List[TimelineEventResponse]
    notes: List[CallLogResponse]

    @classmethod
    def from_record(cls, record: IntakeRecord) -> "IntakeResponse":
        return cls(
            id=record.id,
            member_id=record.member_id,
            previous_intake_id=record.previous_intake_id,
            current_status=record.current_status,
            is_terminal=record.is_terminal,
            version=record.version,
            created_by=record.created_by,
            created_at=record.created_at,
            updated_at=record.updated_at,
            eligibility_checklist=EligibilityChecklist.model_validate(record),
            uas_assessment=UASAssessment(
                status=record.uas_status,
                nh_loc_met=record.nh_loc_met,
                community_safety_criteria=record.community_safety_criteria,
                age_criteria=record.age_criteria,
                completed_date=record.uas_completed_date,
                assessor=record.uas_assessor,
                tracking_notes=record.uas_tracking_notes,
            ),
            idt_checklist={
                item.role: IDTMemberStatus(
                    role=item.role,
                    assigned=item.assigned,
                    mandatory=item.is_mandatory,
                    name=item.name,
                    contact_date=item.contact_date,
                    notes=item.notes,
                )
                for item in record.idt_assignments
            },
            enrollment_packet=EnrollmentPacket.model_validate(record),
            timeline=[TimelineEventResponse.model_validate(event) for event in record.timeline],
            notes=[CallLogResponse.model_validate(entry) for entry in record.notes],
        )
