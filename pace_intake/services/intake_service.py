"""Intake workflow service.

Entry points the API calls. Every write to an existing intake runs under the
intake's lock and goes through IntakeRepository.save, so writes to one intake
are strictly ordered while different intakes proceed independently.
"""

from datetime import datetime
from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from pace_intake.core.errors import ConcurrentModification, RecordTerminal, TransitionError
from pace_intake.core.logging import get_logger
from pace_intake.models.call_log import CallLogEntry
from pace_intake.models.enums import IDTRole, PACEStatus
from pace_intake.models.idt_assignment import IDTAssignment
from pace_intake.models.intake import IntakeRecord
from pace_intake.models.timeline_event import TimelineEvent
from pace_intake.schemas.checklist import (
    EligibilityUpdate,
    EnrollmentPacketUpdate,
    IDTAssignmentUpdate,
    ReadinessResponse,
    UASUpdate,
)
from pace_intake.schemas.timeline import CallLogCreate
from pace_intake.services.eligibility import is_medicaid_application_stale
from pace_intake.services.intake_machine import IntakeStateMachine
from pace_intake.services.repository import IntakeRepository, record_locks
from pace_intake.services.transitions import allowed_transitions

logger = get_logger(__name__)

STALE_APPLICATION_WARNING = "medicaid_application_stale"

# UASUpdate field -> IntakeRecord column
_UAS_COLUMNS = {
    "status": "uas_status",
    "nh_loc_met": "nh_loc_met",
    "community_safety_criteria": "community_safety_criteria",
    "age_criteria": "age_criteria",
    "completed_date": "uas_completed_date",
    "assessor": "uas_assessor",
    "tracking_notes": "uas_tracking_notes",
}


def _now() -> datetime:
    return datetime.utcnow()


def stale_warnings(record: IntakeRecord, as_of: datetime) -> list:
    if is_medicaid_application_stale(record, as_of):
        return [STALE_APPLICATION_WARNING]
    return []


async def transition_intake(
    db: AsyncSession,
    intake_id: str,
    status: PACEStatus,
    actor: str,
    reason: Optional[str] = None,
    as_of: Optional[datetime] = None,
) -> Tuple[IntakeRecord, TimelineEvent, list]:
    """Apply a status change to an intake.

    An optimistic-lock conflict is retried once against a fresh copy of the
    record; a second conflict is raised to the caller.

    Returns:
        (record, appended timeline event, warnings)

    Raises:
        RecordNotFound, RecordTerminal, InvalidSequence, RequirementsNotMet,
        ConcurrentModification
    """
    as_of = as_of or _now()
    repository = IntakeRepository(db)

    async with record_locks.for_record(intake_id):
        for attempt in (1, 2):
            record = await repository.load(intake_id, refresh=attempt > 1)
            machine = IntakeStateMachine(record)
            from_status = record.current_status
            try:
                event = machine.request_transition(status, actor, reason, as_of)
            except TransitionError as exc:
                logger.info(
                    "transition_rejected",
                    intake_id=intake_id,
                    from_status=from_status.value,
                    requested_status=status.value,
                    error=exc.code,
                )
                raise

            try:
                await repository.save(record)
            except ConcurrentModification:
                if attempt == 2:
                    raise
                logger.warning("transition_conflict_retry", intake_id=intake_id, requested_status=status.value)
                continue

            warnings = stale_warnings(record, as_of)
            if warnings:
                logger.warning(
                    "medicaid_application_stale",
                    intake_id=intake_id,
                    application_date=str(record.application_date),
                )
            logger.info(
                "transition_applied",
                intake_id=intake_id,
                from_status=from_status.value,
                to_status=record.current_status.value,
                actor=actor,
                version=record.version,
            )
            return record, event, warnings


async def _update_open_intake(db: AsyncSession, intake_id: str, apply) -> IntakeRecord:
    repository = IntakeRepository(db)
    async with record_locks.for_record(intake_id):
        record = await repository.load(intake_id)
        if record.is_terminal:
            raise RecordTerminal(record.id, record.current_status)
        apply(record)
        record.updated_at = _now()
        await repository.save(record)
        return record


async def update_eligibility(db: AsyncSession, intake_id: str, update: EligibilityUpdate) -> IntakeRecord:
    """Apply the provided eligibility checklist fields."""
    changes = update.model_dump(exclude_unset=True)

    def apply(record: IntakeRecord) -> None:
        for field, value in changes.items():
            setattr(record, field, value)

    record = await _update_open_intake(db, intake_id, apply)
    logger.info("eligibility_updated", intake_id=intake_id, fields=sorted(changes))
    return record


async def update_uas(db: AsyncSession, intake_id: str, update: UASUpdate) -> IntakeRecord:
    """Apply the provided UAS assessment fields."""
    changes = update.model_dump(exclude_unset=True)

    def apply(record: IntakeRecord) -> None:
        for field, value in changes.items():
            setattr(record, _UAS_COLUMNS[field], value)

    record = await _update_open_intake(db, intake_id, apply)
    logger.info("uas_updated", intake_id=intake_id, fields=sorted(changes))
    return record


async def update_idt_role(
    db: AsyncSession,
    intake_id: str,
    role: IDTRole,
    update: IDTAssignmentUpdate,
) -> IntakeRecord:
    """Fill or clear one IDT seat, adding the seat if the intake lacks it."""

    def apply(record: IntakeRecord) -> None:
        assignment = record.idt_assignment(role)
        if assignment is None:
            assignment = IDTAssignment(role=role)
            record.idt_assignments.append(assignment)
        assignment.assigned = update.assigned
        assignment.name = update.name
        assignment.contact_date = update.contact_date
        assignment.notes = update.notes

    record = await _update_open_intake(db, intake_id, apply)
    logger.info("idt_role_updated", intake_id=intake_id, role=role.value, assigned=update.assigned)
    return record


async def update_enrollment_packet(
    db: AsyncSession,
    intake_id: str,
    update: EnrollmentPacketUpdate,
) -> IntakeRecord:
    """Apply the provided enrollment packet receipt flags and dates."""
    changes = update.model_dump(exclude_unset=True)

    def apply(record: IntakeRecord) -> None:
        for field, value in changes.items():
            setattr(record, field, value)

    record = await _update_open_intake(db, intake_id, apply)
    logger.info("enrollment_packet_updated", intake_id=intake_id, fields=sorted(changes))
    return record


async def add_call_log(db: AsyncSession, intake_id: str, entry_data: CallLogCreate) -> CallLogEntry:
    """Append a call log entry. Closed intakes accept notes too."""
    repository = IntakeRepository(db)
    async with record_locks.for_record(intake_id):
        record = await repository.load(intake_id)
        fields = entry_data.model_dump()
        fields["date"] = fields["date"] or _now()
        entry = IntakeStateMachine(record).add_note(CallLogEntry(**fields))
        await repository.save(record)

    logger.info(
        "note_added",
        intake_id=intake_id,
        contact_type=entry.contact_type.value,
        follow_up_required=entry.follow_up_required,
    )
    return entry


async def get_readiness(db: AsyncSession, intake_id: str, as_of: Optional[datetime] = None) -> ReadinessResponse:
    """Readiness verdict plus advisory warnings for the progress view."""
    as_of = as_of or _now()
    record = await IntakeRepository(db).load(intake_id)
    verdict = IntakeStateMachine(record).current_readiness()
    warnings = stale_warnings(record, as_of)
    return ReadinessResponse(
        intake_id=record.id,
        current_status=record.current_status,
        can_enroll=verdict.can_enroll,
        unmet_requirements=[item.model_dump() for item in verdict.unmet_requirements],
        completion_percentage=verdict.completion_percentage,
        medicaid_application_stale=bool(warnings),
        warnings=warnings,
        allowed_transitions=allowed_transitions(record),
    )
