"""
Checklist API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from pace_intake.core.database import get_db
from pace_intake.models.enums import IDTRole
from pace_intake.schemas.checklist import (
    EligibilityUpdate,
    EnrollmentPacketUpdate,
    IDTAssignmentUpdate,
    ReadinessResponse,
    UASUpdate,
)
from pace_intake.schemas.intake import IntakeResponse
from pace_intake.services import intake_service

router = APIRouter()


@router.patch("/{intake_id}/eligibility", response_model=IntakeResponse)
async def update_eligibility(
    intake_id: str,
    update: EligibilityUpdate,
    db: AsyncSession = Depends(get_db)
):
    """
    Update the Medicaid eligibility checklist.

    Raises:
        RecordNotFound (404): If intake not found
        RecordTerminal (409): If intake is closed
    """
    record = await intake_service.update_eligibility(db, intake_id, update)
    return IntakeResponse.from_record(record)


@router.patch("/{intake_id}/uas", response_model=IntakeResponse)
async def update_uas(
    intake_id: str,
    update: UASUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Update the UAS assessment tracking."""
    record = await intake_service.update_uas(db, intake_id, update)
    return IntakeResponse.from_record(record)


@router.put("/{intake_id}/idt/{role}", response_model=IntakeResponse)
async def update_idt_role(
    intake_id: str,
    role: IDTRole,
    update: IDTAssignmentUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Assign or unassign an IDT seat."""
    record = await intake_service.update_idt_role(db, intake_id, role, update)
    return IntakeResponse.from_record(record)


@router.patch("/{intake_id}/enrollment-packet", response_model=IntakeResponse)
async def update_enrollment_packet(
    intake_id: str,
    update: EnrollmentPacketUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Record receipt of enrollment packet documents."""
    record = await intake_service.update_enrollment_packet(db, intake_id, update)
    return IntakeResponse.from_record(record)


@router.get("/{intake_id}/readiness", response_model=ReadinessResponse)
async def get_readiness(
    intake_id: str,
    db: AsyncSession = Depends(get_db)
):
    """
    Get enrollment readiness for an intake.

    Returns every unmet gate in a fixed order, the completion percentage and
    a non-blocking warning when the Medicaid application has been pending
    too long.
    """
    return await intake_service.get_readiness(db, intake_id)
