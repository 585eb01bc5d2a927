"""Test the intake state machine: timeline, atomicity and terminality."""

from datetime import datetime, timedelta

import pytest

from pace_intake.core.errors import InvalidSequence, RecordTerminal, RequirementsNotMet
from pace_intake.models.call_log import CallLogEntry
from pace_intake.models.enums import (
    CANONICAL_PROGRESSION,
    ContactType,
    PACEStatus,
    TimelineCategory,
)
from pace_intake.services.intake_machine import IntakeStateMachine, category_for

START = datetime(2024, 2, 1, 9, 0)


def walk_to(machine, target, actor="coordinator"):
    """Advance one step at a time until ``target`` is reached."""
    as_of = START
    for status in CANONICAL_PROGRESSION[1:]:
        if machine.status == target:
            break
        as_of += timedelta(days=1)
        machine.request_transition(status, actor, None, as_of)
    return as_of


def test_full_lifecycle_to_enrolled(make_intake):
    record = make_intake(ready=True)
    machine = IntakeStateMachine(record)

    walk_to(machine, PACEStatus.ENROLLED)

    assert record.current_status == PACEStatus.ENROLLED
    assert record.is_terminal is True
    assert [event.to_status for event in record.timeline] == list(CANONICAL_PROGRESSION[1:])
    assert [event.sequence for event in record.timeline] == list(range(1, 8))
    assert record.enrollment_date == record.timeline[-1].date.date()


def test_transition_appends_descriptive_event(make_intake):
    record = make_intake(status=PACEStatus.ELIGIBILITY_REVIEW)
    machine = IntakeStateMachine(record)
    as_of = datetime(2024, 3, 4, 14, 15)

    event = machine.request_transition(PACEStatus.UAS_SCHEDULED, "j.smith", "UAS booked for 3/10", as_of)

    assert record.timeline == [event]
    assert event.date == as_of
    assert event.event == "Status changed from Eligibility Review to UAS Scheduled"
    assert event.description == "UAS booked for 3/10"
    assert event.completed_by == "j.smith"
    assert event.category == TimelineCategory.UAS
    assert event.from_status == PACEStatus.ELIGIBILITY_REVIEW
    assert record.updated_at == as_of


@pytest.mark.parametrize("status,category", [
    (PACEStatus.APPLICATION_SUBMITTED, TimelineCategory.ELIGIBILITY),
    (PACEStatus.ELIGIBILITY_REVIEW, TimelineCategory.ELIGIBILITY),
    (PACEStatus.UAS_COMPLETED, TimelineCategory.UAS),
    (PACEStatus.IDT_REVIEW, TimelineCategory.IDT),
    (PACEStatus.READY_TO_ENROLL, TimelineCategory.ENROLLMENT),
    (PACEStatus.ENROLLED, TimelineCategory.ENROLLMENT),
    (PACEStatus.DENIED, TimelineCategory.SYSTEM),
    (PACEStatus.WITHDRAWN, TimelineCategory.SYSTEM),
])
def test_category_mapping(status, category):
    assert category_for(status) == category


def test_failed_transition_changes_nothing(make_intake):
    record = make_intake(status=PACEStatus.READY_TO_ENROLL, ready=True, hipaa_received=False)
    machine = IntakeStateMachine(record)
    before_updated = record.updated_at

    with pytest.raises(RequirementsNotMet):
        machine.request_transition(PACEStatus.ENROLLED, "coordinator", None, START)
    with pytest.raises(InvalidSequence):
        machine.request_transition(PACEStatus.INQUIRY, "coordinator", None, START)

    assert record.current_status == PACEStatus.READY_TO_ENROLL
    assert record.timeline == []
    assert record.updated_at == before_updated
    assert record.enrollment_date is None


@pytest.mark.parametrize("closing", [PACEStatus.DENIED, PACEStatus.WITHDRAWN])
def test_terminality_is_permanent(make_intake, closing):
    record = make_intake(status=PACEStatus.UAS_SCHEDULED, ready=True)
    machine = IntakeStateMachine(record)
    machine.request_transition(closing, "admin", "Member moved out of service area", START)
    timeline_length = len(record.timeline)

    for target in PACEStatus:
        with pytest.raises(RecordTerminal):
            machine.request_transition(target, "admin", None, START + timedelta(days=1))

    assert record.current_status == closing
    assert len(record.timeline) == timeline_length


def test_status_sequence_is_monotonic(make_intake):
    record = make_intake(ready=True)
    machine = IntakeStateMachine(record)
    observed = [record.current_status]

    walk_to(machine, PACEStatus.IDT_REVIEW)
    observed.extend(event.to_status for event in record.timeline)
    machine.request_transition(PACEStatus.WITHDRAWN, "coordinator", None, START + timedelta(days=30))
    observed.append(record.current_status)

    ranks = [CANONICAL_PROGRESSION.index(status) for status in observed[:-1]]
    assert ranks == sorted(ranks)
    assert len(set(ranks)) == len(ranks)
    assert observed[-1] == PACEStatus.WITHDRAWN


def test_record_created_opens_timeline(make_intake):
    record = make_intake(previous_intake_id="intake-old")
    event = IntakeStateMachine(record).record_created("coordinator", START)

    assert event.sequence == 1
    assert event.category == TimelineCategory.SYSTEM
    assert event.to_status == PACEStatus.INQUIRY
    assert "intake-old" in event.description


def test_notes_accepted_on_closed_record(make_intake):
    record = make_intake(status=PACEStatus.DENIED)
    machine = IntakeStateMachine(record)

    first = machine.add_note(CallLogEntry(
        date=START,
        contact_type=ContactType.OUTBOUND,
        contact_with="Daughter",
        subject="Denial letter follow-up",
        notes="Explained appeal rights",
        created_by="coordinator",
    ))
    second = machine.add_note(CallLogEntry(
        date=START,
        contact_type=ContactType.NOTE,
        contact_with="Internal",
        subject="Appeal packet mailed",
        created_by="coordinator",
    ))

    assert record.notes == [first, second]
    assert [entry.sequence for entry in record.notes] == [1, 2]
    assert record.timeline == []


def test_current_readiness_delegates_to_evaluator(make_intake):
    machine = IntakeStateMachine(make_intake(ready=True, has_cin=False))

    verdict = machine.current_readiness()

    assert verdict.can_enroll is False
    assert verdict.completion_percentage == 87
