"""Intake lifecycle state machine.

Wraps one IntakeRecord and is the only code that changes its status. The
record and its child collections are mutated in memory; persisting them is
the repository's job.
"""

from datetime import datetime
from typing import Optional
from pace_intake.core.logging import get_logger
from pace_intake.models.call_log import CallLogEntry
from pace_intake.models.enums import PACEStatus, TimelineCategory
from pace_intake.models.intake import IntakeRecord
from pace_intake.models.timeline_event import TimelineEvent
from pace_intake.services.eligibility import ReadinessVerdict, evaluate_readiness
from pace_intake.services.transitions import validate_transition

logger = get_logger(__name__)

STATUS_CATEGORIES = {
    PACEStatus.INQUIRY: TimelineCategory.SYSTEM,
    PACEStatus.APPLICATION_SUBMITTED: TimelineCategory.ELIGIBILITY,
    PACEStatus.ELIGIBILITY_REVIEW: TimelineCategory.ELIGIBILITY,
    PACEStatus.UAS_SCHEDULED: TimelineCategory.UAS,
    PACEStatus.UAS_COMPLETED: TimelineCategory.UAS,
    PACEStatus.IDT_REVIEW: TimelineCategory.IDT,
    PACEStatus.READY_TO_ENROLL: TimelineCategory.ENROLLMENT,
    PACEStatus.ENROLLED: TimelineCategory.ENROLLMENT,
    PACEStatus.DENIED: TimelineCategory.SYSTEM,
    PACEStatus.WITHDRAWN: TimelineCategory.SYSTEM,
}


def category_for(status: PACEStatus) -> TimelineCategory:
    """Timeline category of a transition into ``status``"""
    return STATUS_CATEGORIES[status]


class IntakeStateMachine:
    """
    State machine over a single intake record.

    Initial state is Inquiry; Enrolled, Denied and Withdrawn are terminal.
    Failed transitions leave the record exactly as it was.
    """

    def __init__(self, record: IntakeRecord):
        self.record = record

    @property
    def status(self) -> PACEStatus:
        return self.record.current_status

    def _append_event(self, event: TimelineEvent) -> TimelineEvent:
        event.sequence = len(self.record.timeline) + 1
        self.record.timeline.append(event)
        logger.info(
            "timeline_event_appended",
            intake_id=self.record.id,
            sequence=event.sequence,
            description=event.event,
            category=event.category.value,
        )
        return event

    def record_created(self, actor: str, as_of: datetime) -> TimelineEvent:
        """Write the opening timeline entry of a new intake."""
        description = "Intake opened"
        if self.record.previous_intake_id:
            description = f"Re-enrollment of intake {self.record.previous_intake_id}"
        return self._append_event(TimelineEvent(
            date=as_of,
            event=f"Intake created with status {self.status.value}",
            description=description,
            from_status=None,
            to_status=self.status,
            completed_by=actor,
            category=TimelineCategory.SYSTEM,
        ))

    def request_transition(
        self,
        new_status: PACEStatus,
        actor: str,
        reason: Optional[str],
        as_of: datetime,
    ) -> TimelineEvent:
        """Move the record to ``new_status`` and log it on the timeline.

        Args:
            new_status: Target status
            actor: User performing the change
            reason: Free-text justification stored as the event description
            as_of: Timestamp of the change

        Returns:
            The appended TimelineEvent

        Raises:
            TransitionError: the validator refused; nothing was changed
        """
        approved = validate_transition(self.record, new_status, as_of)

        self.record.current_status = approved.to_status
        self.record.updated_at = approved.timestamp
        if approved.to_status == PACEStatus.ENROLLED and self.record.enrollment_date is None:
            self.record.enrollment_date = approved.timestamp.date()

        return self._append_event(TimelineEvent(
            date=approved.timestamp,
            event=f"Status changed from {approved.from_status.value} to {approved.to_status.value}",
            description=reason,
            from_status=approved.from_status,
            to_status=approved.to_status,
            completed_by=actor,
            category=category_for(approved.to_status),
        ))

    def add_note(self, entry: CallLogEntry) -> CallLogEntry:
        """Append a call log entry. Allowed in every status, closed ones included."""
        entry.sequence = len(self.record.notes) + 1
        self.record.notes.append(entry)
        return entry

    def current_readiness(self) -> ReadinessVerdict:
        return evaluate_readiness(self.record)
