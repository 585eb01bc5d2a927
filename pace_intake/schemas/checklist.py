"""
Checklist Pydantic schemas: eligibility, UAS, IDT, enrollment packet, readiness
"""
from datetime import date
from typing import Any, List, Optional
from pydantic import BaseModel, Field, field_validator
from pace_intake.models.enums import ApplicationOutcome, IDTRole, MedicaidStatus, PACEStatus, UASStatus


def _required(v):
    # Omit a field to leave it alone; null would clear a column that must hold a value
    if v is None:
        raise ValueError('Field may be omitted but not set to null')
    return v


class EligibilityChecklist(BaseModel):
    medicaid_status: MedicaidStatus
    has_cin: bool
    active_flag: bool
    application_date: Optional[date] = None
    application_outcome: Optional[ApplicationOutcome] = None

    class Config:
        from_attributes = True


class EligibilityUpdate(BaseModel):
    """Partial update of the eligibility checklist; omitted fields are left alone"""
    medicaid_status: Optional[MedicaidStatus] = None
    has_cin: Optional[bool] = None
    active_flag: Optional[bool] = None
    application_date: Optional[date] = None
    application_outcome: Optional[ApplicationOutcome] = None

    @field_validator('medicaid_status', 'has_cin', 'active_flag')
    @classmethod
    def reject_null(cls, v):
        return _required(v)


class UASAssessment(BaseModel):
    status: UASStatus
    nh_loc_met: bool
    community_safety_criteria: bool
    age_criteria: bool
    completed_date: Optional[date] = None
    assessor: Optional[str] = None
    tracking_notes: Optional[str] = None


class UASUpdate(BaseModel):
    """Partial update of the UAS assessment; omitted fields are left alone"""
    status: Optional[UASStatus] = None
    nh_loc_met: Optional[bool] = None
    community_safety_criteria: Optional[bool] = None
    age_criteria: Optional[bool] = None
    completed_date: Optional[date] = None
    assessor: Optional[str] = None
    tracking_notes: Optional[str] = None

    @field_validator('status', 'nh_loc_met', 'community_safety_criteria', 'age_criteria')
    @classmethod
    def reject_null(cls, v):
        return _required(v)


class IDTMemberStatus(BaseModel):
    role: IDTRole
    assigned: bool
    mandatory: bool = Field(..., description="True for seats that gate enrollment (RN, PCP)")
    name: Optional[str] = None
    contact_date: Optional[date] = None
    notes: Optional[str] = None


class IDTAssignmentUpdate(BaseModel):
    """Schema for filling or clearing an IDT seat"""
    assigned: bool
    name: Optional[str] = Field(None, max_length=255)
    contact_date: Optional[date] = None
    notes: Optional[str] = None


class EnrollmentPacket(BaseModel):
    roi_received: bool
    roi_date: Optional[date] = None
    hipaa_received: bool
    hipaa_date: Optional[date] = None
    uas_summary_received: bool
    medicaid_docs_received: bool
    signature_date: Optional[date] = None
    enrollment_date: Optional[date] = None

    class Config:
        from_attributes = True


class EnrollmentPacketUpdate(BaseModel):
    """Partial update of the enrollment packet; omitted fields are left alone"""
    roi_received: Optional[bool] = None
    roi_date: Optional[date] = None
    hipaa_received: Optional[bool] = None
    hipaa_date: Optional[date] = None
    uas_summary_received: Optional[bool] = None
    medicaid_docs_received: Optional[bool] = None
    signature_date: Optional[date] = None

    @field_validator('roi_received', 'hipaa_received', 'uas_summary_received', 'medicaid_docs_received')
    @classmethod
    def reject_null(cls, v):
        return _required(v)


class UnmetRequirementResponse(BaseModel):
    requirement: str = Field(..., description="Dotted gate name, e.g. enrollmentPacket.hipaaReceived")
    current_value: Any = None


class ReadinessResponse(BaseModel):
    """Schema for enrollment readiness of an intake"""
    intake_id: str
    current_status: PACEStatus
    can_enroll: bool
    unmet_requirements: List[UnmetRequirementResponse]
    completion_percentage: int = Field(..., ge=0, le=100, description="Share of enrollment gates satisfied")
    medicaid_application_stale: bool = Field(..., description="Pending Medicaid application older than the threshold")
    warnings: List[str] = Field(default_factory=list)
    allowed_transitions: List[PACEStatus]
