"""
Intake API endpoints
"""
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from pace_intake.core.database import get_db
from pace_intake.models.enums import PACEStatus
from pace_intake.models.intake import IntakeRecord
from pace_intake.schemas.intake import IntakeCreate, IntakeResponse, IntakeSummary, StatusSummary
from pace_intake.schemas.timeline import (
    CallLogCreate,
    CallLogResponse,
    TimelineEventResponse,
    TransitionRequest,
    TransitionResponse,
)
from pace_intake.services import intake_service
from pace_intake.services.eligibility import evaluate_readiness, is_intake_overdue
from pace_intake.services.repository import IntakeRepository

router = APIRouter()


def to_summary(record: IntakeRecord) -> IntakeSummary:
    return IntakeSummary(
        id=record.id,
        member_id=record.member_id,
        member_name=record.member.full_name,
        current_status=record.current_status,
        created_at=record.created_at,
        updated_at=record.updated_at,
        completion_percentage=evaluate_readiness(record).completion_percentage,
        is_overdue=is_intake_overdue(record, datetime.utcnow()),
    )


@router.post("", response_model=IntakeResponse, status_code=201)
async def create_intake(
    intake_data: IntakeCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Open a new intake in Inquiry status.

    Seeds unassigned RN, PCP, PT and SW seats and the opening timeline entry.
    Pass ``previous_intake_id`` to re-enroll a member whose earlier intake
    was closed; the closed record itself is never reopened.

    Raises:
        RecordNotFound (404): If member or previous intake not found
        ActiveIntakeExists (409): If the member already has an open intake
        InvalidReenrollment (400): If previous intake is open or not the member's
    """
    record = await IntakeRepository(db).create(
        member_id=intake_data.member_id,
        created_by=intake_data.created_by,
        as_of=datetime.utcnow(),
        previous_intake_id=intake_data.previous_intake_id,
    )
    return IntakeResponse.from_record(record)


@router.get("", response_model=List[IntakeSummary])
async def list_intakes(
    status: Optional[PACEStatus] = Query(None, description="Only intakes in this status"),
    search: Optional[str] = Query(None, description="Member name, CIN or date of birth"),
    db: AsyncSession = Depends(get_db)
):
    """List intakes for the coordinator dashboard, newest first."""
    records = await IntakeRepository(db).list_intakes(status=status, search=search)
    return [to_summary(record) for record in records]


@router.get("/summary", response_model=StatusSummary)
async def intake_status_summary(db: AsyncSession = Depends(get_db)):
    """Count intakes per status."""
    counts = await IntakeRepository(db).status_counts()
    return StatusSummary(total=sum(counts.values()), counts=counts)


@router.get("/{intake_id}", response_model=IntakeResponse)
async def get_intake(
    intake_id: str,
    db: AsyncSession = Depends(get_db)
):
    """
    Get a full intake record with checklists, timeline and call log.

    Raises:
        RecordNotFound (404): If intake not found
    """
    record = await IntakeRepository(db).load(intake_id)
    return IntakeResponse.from_record(record)


@router.post("/{intake_id}/transitions", response_model=TransitionResponse)
async def request_transition(
    intake_id: str,
    transition: TransitionRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Move an intake to a new status.

    Only the next status in the progression, Denied or Withdrawn are
    accepted; Enrolled additionally requires every enrollment gate.

    Raises:
        RecordNotFound (404): If intake not found
        RecordTerminal (409): If intake is Enrolled, Denied or Withdrawn
        InvalidSequence (409): If status skips ahead or goes back
        RequirementsNotMet (422): If enrollment gates are not all satisfied
        ConcurrentModification (409): If the intake kept changing underneath
    """
    record, event, warnings = await intake_service.transition_intake(
        db,
        intake_id,
        status=transition.status,
        actor=transition.actor,
        reason=transition.reason,
        as_of=transition.as_of,
    )
    return TransitionResponse(
        intake_id=record.id,
        from_status=event.from_status,
        to_status=event.to_status,
        version=record.version,
        timeline_event=TimelineEventResponse.model_validate(event),
        warnings=warnings,
    )


@router.get("/{intake_id}/timeline", response_model=List[TimelineEventResponse])
async def get_timeline(
    intake_id: str,
    since: int = Query(0, ge=0, description="Only events with a sequence greater than this"),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the intake timeline in order.

    Reporting consumers poll with ``since`` set to the last sequence they saw.
    """
    record = await IntakeRepository(db).load(intake_id)
    return [TimelineEventResponse.model_validate(event) for event in record.timeline if event.sequence > since]


@router.post("/{intake_id}/notes", response_model=CallLogResponse, status_code=201)
async def add_note(
    intake_id: str,
    entry: CallLogCreate,
    db: AsyncSession = Depends(get_db)
):
    """Append a call log entry to an intake, open or closed."""
    return await intake_service.add_call_log(db, intake_id, entry)


@router.get("/{intake_id}/notes", response_model=List[CallLogResponse])
async def list_notes(
    intake_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Get the intake call log in order."""
    record = await IntakeRepository(db).load(intake_id)
    return record.notes
