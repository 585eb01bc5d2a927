"""
Member API endpoints
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from pace_intake.core.database import get_db
from pace_intake.core.logging import get_logger
from pace_intake.models.member import Member
from pace_intake.schemas.intake import IntakeSummary
from pace_intake.schemas.member import MemberCreate, MemberResponse
from pace_intake.services.repository import IntakeRepository
from pace_intake.api.intakes import to_summary

router = APIRouter()
logger = get_logger(__name__)


@router.post("", response_model=MemberResponse, status_code=201)
async def create_member(
    member_data: MemberCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a referred member.

    Args:
        member_data: Demographics, address and referral source
        db: Database session

    Returns:
        MemberResponse with created member data
    """
    new_member = Member(**member_data.model_dump())

    db.add(new_member)
    await db.flush()
    await db.refresh(new_member)

    logger.info("member_created", member_id=new_member.id, referral_source=new_member.referral_source)
    return new_member


@router.get("/{member_id}", response_model=MemberResponse)
async def get_member(
    member_id: str,
    db: AsyncSession = Depends(get_db)
):
    """
    Get a member.

    Raises:
        RecordNotFound (404): If member not found
    """
    return await IntakeRepository(db).get_member(member_id)


@router.get("/{member_id}/intakes", response_model=List[IntakeSummary])
async def list_member_intakes(
    member_id: str,
    db: AsyncSession = Depends(get_db)
):
    """List every intake of a member, open and closed, newest first."""
    repository = IntakeRepository(db)
    await repository.get_member(member_id)
    records = await repository.list_intakes(member_id=member_id)
    return [to_summary(record) for record in records]
