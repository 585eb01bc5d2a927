"""Enrollment readiness evaluation.

Pure functions over an intake record: no I/O, no mutation. The transition
validator, the readiness endpoint and any reporting consumer all read the
same verdict from here.
"""

from datetime import date, datetime
from typing import Any, Callable, List, NamedTuple, Optional, Union
from pydantic import BaseModel, Field
from pace_intake.core.config import settings
from pace_intake.models.enums import IDTRole, MedicaidStatus, PACEStatus, UASStatus
from pace_intake.models.intake import IntakeRecord


class UnmetRequirement(BaseModel):
    """One failing enrollment gate and the value that made it fail."""
    requirement: str
    current_value: Any = None

    class Config:
        frozen = True


class ReadinessVerdict(BaseModel):
    """Outcome of evaluating every enrollment gate on an intake."""
    can_enroll: bool
    unmet_requirements: List[UnmetRequirement] = Field(default_factory=list)
    completion_percentage: int = Field(..., ge=0, le=100)

    class Config:
        frozen = True


class _Gate(NamedTuple):
    requirement: str
    current_value: Callable[[IntakeRecord], Any]
    is_met: Callable[[Any], bool]


def _idt_assigned(role: IDTRole) -> Callable[[IntakeRecord], bool]:
    def read(record: IntakeRecord) -> bool:
        assignment = record.idt_assignment(role)
        return bool(assignment and assignment.assigned)
    return read


# Evaluation order is also the reporting order of unmet requirements
ENROLLMENT_GATES = (
    _Gate("eligibilityChecklist.medicaidStatus", lambda r: r.medicaid_status, lambda v: v == MedicaidStatus.ACTIVE),
    _Gate("eligibilityChecklist.hasCIN", lambda r: r.has_cin, bool),
    _Gate("uasAssessment.status", lambda r: r.uas_status, lambda v: v == UASStatus.COMPLETED),
    _Gate("uasAssessment.nhLOCMet", lambda r: r.nh_loc_met, bool),
    _Gate("idtChecklist.rn.assigned", _idt_assigned(IDTRole.RN), bool),
    _Gate("idtChecklist.pcp.assigned", _idt_assigned(IDTRole.PCP), bool),
    _Gate("enrollmentPacket.roiReceived", lambda r: r.roi_received, bool),
    _Gate("enrollmentPacket.hipaaReceived", lambda r: r.hipaa_received, bool),
)


def evaluate_readiness(record: IntakeRecord) -> ReadinessVerdict:
    """Evaluate the eight enrollment gates on ``record``.

    Enrollment is all-or-nothing: ``can_enroll`` is true only when every gate
    holds. ``completion_percentage`` is for progress display and is never
    used for gating; it truncates, so 7 of 8 reads 87 and only a fully
    satisfied record reads 100.

    Args:
        record: Intake record (persistent or transient)

    Returns:
        ReadinessVerdict with unmet gates in evaluation order
    """
    unmet = []
    for gate in ENROLLMENT_GATES:
        value = gate.current_value(record)
        if not gate.is_met(value):
            unmet.append(UnmetRequirement(requirement=gate.requirement, current_value=value))

    satisfied = len(ENROLLMENT_GATES) - len(unmet)
    # Truncates: 7 of 8 gates reads 87, and only a complete checklist reads 100
    return ReadinessVerdict(
        can_enroll=not unmet,
        unmet_requirements=unmet,
        completion_percentage=satisfied * 100 // len(ENROLLMENT_GATES),
    )


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def is_medicaid_application_stale(
    record: IntakeRecord,
    as_of: Union[date, datetime],
    threshold_days: Optional[int] = None,
) -> bool:
    """Return True when a pending Medicaid application has waited too long.

    Advisory only: callers surface it as a warning and never block a
    transition on it.

    Args:
        record: Intake record holding the eligibility checklist
        as_of: Reference date or timestamp
        threshold_days: Days after which a pending application is stale
            (defaults to settings.STALE_APPLICATION_DAYS)
    """
    if threshold_days is None:
        threshold_days = settings.STALE_APPLICATION_DAYS
    if record.medicaid_status != MedicaidStatus.PENDING or record.application_date is None:
        return False
    elapsed = _as_date(as_of) - _as_date(record.application_date)
    return elapsed.days > threshold_days


OVERDUE_WATCH_STATUSES = frozenset({PACEStatus.APPLICATION_SUBMITTED, PACEStatus.ELIGIBILITY_REVIEW})


def is_intake_overdue(
    record: IntakeRecord,
    as_of: Union[date, datetime],
    threshold_days: Optional[int] = None,
) -> bool:
    """Return True for intakes stuck in the Medicaid application phase.

    An intake is overdue when it still sits in Application Submitted or
    Eligibility Review more than ``threshold_days`` after it was opened.
    """
    if threshold_days is None:
        threshold_days = settings.STALE_APPLICATION_DAYS
    if record.current_status not in OVERDUE_WATCH_STATUSES or record.created_at is None:
        return False
    return (_as_date(as_of) - _as_date(record.created_at)).days > threshold_days
