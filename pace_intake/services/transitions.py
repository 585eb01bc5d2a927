"""Intake status transition rules."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel
from pace_intake.core.errors import InvalidSequence, RecordTerminal, RequirementsNotMet
from pace_intake.models.enums import CANONICAL_PROGRESSION, ESCAPE_STATUSES, PACEStatus
from pace_intake.models.intake import IntakeRecord
from pace_intake.services.eligibility import evaluate_readiness


class ApprovedTransition(BaseModel):
    """A transition the validator accepted; applying it is up to the caller."""
    from_status: PACEStatus
    to_status: PACEStatus
    timestamp: datetime

    class Config:
        frozen = True


def next_status(status: PACEStatus) -> Optional[PACEStatus]:
    """Return the status after ``status`` in the canonical progression.

    None for terminal statuses.
    """
    if status.is_terminal:
        return None
    return CANONICAL_PROGRESSION[CANONICAL_PROGRESSION.index(status) + 1]


def validate_transition(
    record: IntakeRecord,
    requested_status: PACEStatus,
    as_of: datetime,
) -> ApprovedTransition:
    """Check whether ``record`` may move to ``requested_status``.

    Rules, in order:
    1. Enrolled, Denied and Withdrawn records are closed.
    2. Denied and Withdrawn are reachable from any open status.
    3. Otherwise only the immediate next canonical status is allowed.
    4. Enrolled additionally requires every enrollment gate to hold.

    The record is never modified.

    Args:
        record: Intake record to check
        requested_status: Target status
        as_of: Timestamp the transition would carry

    Returns:
        ApprovedTransition

    Raises:
        RecordTerminal: record is already closed
        InvalidSequence: target skips ahead or goes backwards
        RequirementsNotMet: enrollment requested with unmet gates
    """
    current = record.current_status
    if current.is_terminal:
        raise RecordTerminal(record.id, current)

    if requested_status not in ESCAPE_STATUSES:
        expected = next_status(current)
        if requested_status != expected:
            raise InvalidSequence(current, requested_status, expected)

        if requested_status == PACEStatus.ENROLLED:
            verdict = evaluate_readiness(record)
            if not verdict.can_enroll:
                raise RequirementsNotMet(verdict.unmet_requirements)

    return ApprovedTransition(from_status=current, to_status=requested_status, timestamp=as_of)


def allowed_transitions(record: IntakeRecord) -> List[PACEStatus]:
    """Statuses the record could be moved to now, ignoring enrollment gates."""
    if record.is_terminal:
        return []
    return [next_status(record.current_status), PACEStatus.DENIED, PACEStatus.WITHDRAWN]
