"""Test end-to-end workflow: referral → checklists → transitions → enrollment."""

from datetime import date, timedelta

import pytest

MEMBER_DATA = {
    "first_name": "John",
    "last_name": "Smith",
    "date_of_birth": "1941-07-04",
    "medicaid_cin": "NY87654321",
    "street1": "221 Lake Avenue",
    "city": "Rochester",
    "state": "ny",
    "zip_code": "14608",
    "referral_source": "Rochester General",
}

PROGRESSION = [
    "Application Submitted",
    "Eligibility Review",
    "UAS Scheduled",
    "UAS Completed",
    "IDT Review",
    "Ready to Enroll",
]


async def open_intake(client, member_data=MEMBER_DATA):
    response = await client.post("/members", json=member_data)
    assert response.status_code == 201
    member_id = response.json()["id"]

    response = await client.post("/intakes", json={"member_id": member_id, "created_by": "coordinator"})
    assert response.status_code == 201
    return member_id, response.json()


async def advance(client, intake_id, statuses):
    for status in statuses:
        response = await client.post(
            f"/intakes/{intake_id}/transitions",
            json={"status": status, "actor": "coordinator"}
        )
        assert response.status_code == 200, response.json()


@pytest.mark.asyncio
async def test_complete_enrollment_workflow(client):
    """Test complete workflow from referral to enrollment.

    Flow:
    1. Register member and open intake (Inquiry)
    2. Walk the progression up to Ready to Enroll
    3. Fill eligibility, UAS, IDT and enrollment packet checklists
    4. Enroll
    5. Verify timeline and that the record is closed
    """
    # Step 1: Register member and open intake
    member_id, intake = await open_intake(client)
    intake_id = intake["id"]
    assert intake["current_status"] == "Inquiry"
    assert intake["is_terminal"] is False
    assert set(intake["idt_checklist"]) == {"rn", "pcp", "pt", "sw"}
    assert intake["idt_checklist"]["rn"]["mandatory"] is True
    assert intake["idt_checklist"]["pt"]["mandatory"] is False
    assert len(intake["timeline"]) == 1
    assert intake["timeline"][0]["category"] == "System"

    # Step 2: Walk the progression
    await advance(client, intake_id, PROGRESSION)

    # Enrollment is refused while the checklists are empty
    response = await client.post(
        f"/intakes/{intake_id}/transitions",
        json={"status": "Enrolled", "actor": "coordinator"}
    )
    assert response.status_code == 422
    assert response.json()["error"] == "REQUIREMENTS_NOT_MET"
    assert len(response.json()["details"]["unmet_requirements"]) == 8

    # Step 3: Fill the checklists
    response = await client.patch(
        f"/intakes/{intake_id}/eligibility",
        json={"medicaid_status": "Active", "has_cin": True, "active_flag": True, "application_outcome": "Approved"}
    )
    assert response.status_code == 200
    assert response.json()["eligibility_checklist"]["medicaid_status"] == "Active"

    response = await client.patch(
        f"/intakes/{intake_id}/uas",
        json={"status": "Completed", "nh_loc_met": True, "assessor": "RN Lee", "completed_date": "2024-02-10"}
    )
    assert response.status_code == 200
    assert response.json()["uas_assessment"]["assessor"] == "RN Lee"

    for role, name in (("rn", "Karen White"), ("pcp", "Dr. Patel")):
        response = await client.put(
            f"/intakes/{intake_id}/idt/{role}",
            json={"assigned": True, "name": name, "contact_date": "2024-02-12"}
        )
        assert response.status_code == 200
        assert response.json()["idt_checklist"][role]["name"] == name

    response = await client.get(f"/intakes/{intake_id}/readiness")
    assert response.status_code == 200
    readiness = response.json()
    assert readiness["can_enroll"] is False
    assert readiness["completion_percentage"] == 75
    assert [item["requirement"] for item in readiness["unmet_requirements"]] == [
        "enrollmentPacket.roiReceived",
        "enrollmentPacket.hipaaReceived",
    ]

    response = await client.patch(
        f"/intakes/{intake_id}/enrollment-packet",
        json={"roi_received": True, "roi_date": "2024-02-14", "hipaa_received": True}
    )
    assert response.status_code == 200

    response = await client.get(f"/intakes/{intake_id}/readiness")
    readiness = response.json()
    assert readiness["can_enroll"] is True
    assert readiness["unmet_requirements"] == []
    assert readiness["completion_percentage"] == 100
    assert readiness["allowed_transitions"] == ["Enrolled", "Denied", "Withdrawn"]

    # Step 4: Enroll
    response = await client.post(
        f"/intakes/{intake_id}/transitions",
        json={"status": "Enrolled", "actor": "supervisor", "reason": "All gates satisfied"}
    )
    assert response.status_code == 200
    transition = response.json()
    assert transition["from_status"] == "Ready to Enroll"
    assert transition["to_status"] == "Enrolled"
    assert transition["timeline_event"]["category"] == "Enrollment"
    assert transition["timeline_event"]["completed_by"] == "supervisor"

    # Step 5: Verify the closed record
    response = await client.get(f"/intakes/{intake_id}")
    assert response.status_code == 200
    record = response.json()
    assert record["current_status"] == "Enrolled"
    assert record["is_terminal"] is True
    assert record["enrollment_packet"]["enrollment_date"] is not None
    assert [event["sequence"] for event in record["timeline"]] == list(range(1, 9))
    assert [event["to_status"] for event in record["timeline"][1:]] == PROGRESSION + ["Enrolled"]

    response = await client.post(
        f"/intakes/{intake_id}/transitions",
        json={"status": "Denied", "actor": "admin"}
    )
    assert response.status_code == 409
    assert response.json()["error"] == "RECORD_TERMINAL"


@pytest.mark.asyncio
async def test_out_of_order_transition_reports_next_status(client):
    """Test that skipping and reversing are refused with the legal next status."""
    _, intake = await open_intake(client)
    intake_id = intake["id"]
    await advance(client, intake_id, PROGRESSION[:5])

    response = await client.post(
        f"/intakes/{intake_id}/transitions",
        json={"status": "UAS Scheduled", "actor": "coordinator"}
    )
    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "INVALID_SEQUENCE"
    assert body["details"]["expected_next"] == "Ready to Enroll"

    # Record untouched
    response = await client.get(f"/intakes/{intake_id}")
    assert response.json()["current_status"] == "IDT Review"
    assert len(response.json()["timeline"]) == 6


@pytest.mark.asyncio
async def test_unknown_status_is_rejected(client):
    """Test that a status outside the enum never reaches the state machine."""
    _, intake = await open_intake(client)

    response = await client.post(
        f"/intakes/{intake['id']}/transitions",
        json={"status": "Pending Review", "actor": "coordinator"}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_stale_medicaid_application_warns_without_blocking(client):
    """Test the advisory warning for applications pending over 30 days."""
    _, intake = await open_intake(client)
    intake_id = intake["id"]
    await advance(client, intake_id, PROGRESSION[:1])

    application_date = (date.today() - timedelta(days=45)).isoformat()
    response = await client.patch(
        f"/intakes/{intake_id}/eligibility",
        json={"medicaid_status": "Pending", "application_date": application_date}
    )
    assert response.status_code == 200

    response = await client.get(f"/intakes/{intake_id}/readiness")
    assert response.json()["medicaid_application_stale"] is True
    assert response.json()["warnings"] == ["medicaid_application_stale"]

    # Transition still goes through and carries the warning
    response = await client.post(
        f"/intakes/{intake_id}/transitions",
        json={"status": "Eligibility Review", "actor": "coordinator"}
    )
    assert response.status_code == 200
    assert response.json()["warnings"] == ["medicaid_application_stale"]


@pytest.mark.asyncio
async def test_call_log_and_timeline_polling(client):
    """Test notes on open and closed intakes and incremental timeline reads."""
    _, intake = await open_intake(client)
    intake_id = intake["id"]

    note = {
        "contact_type": "Inbound",
        "contact_with": "Member's daughter",
        "subject": "Program questions",
        "notes": "Asked about day center transportation",
        "created_by": "coordinator",
        "follow_up_required": True,
        "follow_up_date": "2024-03-01",
    }
    response = await client.post(f"/intakes/{intake_id}/notes", json=note)
    assert response.status_code == 201
    assert response.json()["sequence"] == 1
    assert response.json()["follow_up_required"] is True

    response = await client.post(
        f"/intakes/{intake_id}/transitions",
        json={"status": "Withdrawn", "actor": "coordinator", "reason": "Family chose assisted living"}
    )
    assert response.status_code == 200
    assert response.json()["timeline_event"]["category"] == "System"

    # Closed intakes still take notes but refuse checklist edits
    response = await client.post(f"/intakes/{intake_id}/notes", json={**note, "subject": "Closing call"})
    assert response.status_code == 201
    response = await client.patch(f"/intakes/{intake_id}/eligibility", json={"has_cin": True})
    assert response.status_code == 409

    response = await client.get(f"/intakes/{intake_id}/notes")
    assert [entry["subject"] for entry in response.json()] == ["Program questions", "Closing call"]

    response = await client.get(f"/intakes/{intake_id}/timeline", params={"since": 1})
    events = response.json()
    assert len(events) == 1
    assert events[0]["to_status"] == "Withdrawn"
    assert events[0]["description"] == "Family chose assisted living"


@pytest.mark.asyncio
async def test_dashboard_listing_and_summary(client):
    """Test status filter, member search and per-status counts."""
    _, first = await open_intake(client)
    _, second = await open_intake(client, {**MEMBER_DATA, "first_name": "Linda", "last_name": "Garcia",
                                            "medicaid_cin": None})
    await advance(client, second["id"], PROGRESSION[:2])

    response = await client.get("/intakes", params={"status": "Eligibility Review"})
    assert [item["id"] for item in response.json()] == [second["id"]]
    assert response.json()[0]["member_name"] == "Linda Garcia"

    response = await client.get("/intakes", params={"search": "smi"})
    assert [item["id"] for item in response.json()] == [first["id"]]

    response = await client.get("/intakes", params={"search": "NY8765"})
    assert [item["id"] for item in response.json()] == [first["id"]]

    response = await client.get("/intakes/summary")
    summary = response.json()
    assert summary["total"] == 2
    assert summary["counts"]["Inquiry"] == 1
    assert summary["counts"]["Eligibility Review"] == 1
    assert summary["counts"]["Enrolled"] == 0


@pytest.mark.asyncio
async def test_missing_intake_returns_404(client):
    response = await client.get("/intakes/does-not-exist/readiness")
    assert response.status_code == 404
    assert response.json()["error"] == "RECORD_NOT_FOUND"


@pytest.mark.asyncio
async def test_member_state_is_normalized(client):
    response = await client.post("/members", json=MEMBER_DATA)
    assert response.status_code == 201
    assert response.json()["state"] == "NY"
    assert response.json()["full_name"] == "John Smith"


@pytest.mark.asyncio
@pytest.mark.parametrize("path,payload,section,field", [
    ("eligibility", {"has_cin": None}, "eligibility_checklist", "has_cin"),
    ("eligibility", {"medicaid_status": None}, "eligibility_checklist", "medicaid_status"),
    ("uas", {"status": None}, "uas_assessment", "status"),
    ("uas", {"nh_loc_met": None}, "uas_assessment", "nh_loc_met"),
    ("enrollment-packet", {"roi_received": None}, "enrollment_packet", "roi_received"),
    ("enrollment-packet", {"hipaa_received": None}, "enrollment_packet", "hipaa_received"),
])
async def test_checklist_flags_cannot_be_nulled(client, path, payload, section, field):
    """Required checklist values can be left out of a PATCH but never cleared."""
    _, intake = await open_intake(client)
    intake_id = intake["id"]

    response = await client.patch(f"/intakes/{intake_id}/{path}", json=payload)
    assert response.status_code == 422

    response = await client.get(f"/intakes/{intake_id}")
    assert response.status_code == 200
    assert response.json()[section][field] == intake[section][field]
