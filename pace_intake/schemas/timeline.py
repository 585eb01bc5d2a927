"""
Timeline, transition and call log Pydantic schemas
"""
import datetime as dt
from typing import List, Optional
from pydantic import BaseModel, Field
from pace_intake.models.enums import ContactType, PACEStatus, TimelineCategory


class TimelineEventResponse(BaseModel):
    """Schema for a timeline entry"""
    id: str
    sequence: int = Field(..., ge=1, description="1-based position in the intake timeline")
    date: dt.datetime
    event: str
    description: Optional[str] = None
    from_status: Optional[PACEStatus] = None
    to_status: Optional[PACEStatus] = None
    completed_by: str
    category: TimelineCategory

    class Config:
        from_attributes = True


class TransitionRequest(BaseModel):
    """Schema for requesting a status change"""
    status: PACEStatus = Field(..., description="Target status")
    actor: str = Field(..., min_length=1, description="User performing the change")
    reason: Optional[str] = Field(None, description="Justification recorded on the timeline")
    as_of: Optional[dt.datetime] = Field(None, description="Effective timestamp (defaults to now)")


class TransitionResponse(BaseModel):
    """Schema for an applied status change"""
    intake_id: str
    from_status: PACEStatus
    to_status: PACEStatus
    version: int
    timeline_event: TimelineEventResponse
    warnings: List[str] = Field(default_factory=list)


class CallLogCreate(BaseModel):
    """Schema for adding a call log entry"""
    date: Optional[dt.datetime] = Field(None, description="When the contact happened (defaults to now)")
    contact_type: ContactType
    contact_with: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1, max_length=255)
    notes: str = ""
    created_by: str = Field(..., min_length=1)
    follow_up_required: bool = False
    follow_up_date: Optional[dt.date] = None


class CallLogResponse(BaseModel):
    """Schema for a call log entry"""
    id: str
    intake_id: str
    sequence: int
    date: dt.datetime
    contact_type: ContactType
    contact_with: str
    subject: str
    notes: str
    created_by: str
    follow_up_required: bool
    follow_up_date: Optional[dt.date] = None

    class Config:
        from_attributes = True
