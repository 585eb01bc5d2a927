"""Intake persistence.

IntakeRepository is the only place intake records are read from or written
to the database. RecordLocks serializes writers per intake inside this
process; the ``version`` column catches writers in other processes.
"""

import asyncio
import weakref
from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError
from pace_intake.core.errors import (
    ActiveIntakeExists,
    ConcurrentModification,
    InvalidReenrollment,
    RecordNotFound,
)
from pace_intake.core.logging import get_logger
from pace_intake.models.enums import DEFAULT_IDT_ROLES, TERMINAL_STATUSES, PACEStatus
from pace_intake.models.idt_assignment import IDTAssignment
from pace_intake.models.intake import IntakeRecord
from pace_intake.models.member import Member
from pace_intake.services.intake_machine import IntakeStateMachine

logger = get_logger(__name__)


class RecordLocks:
    """Per-intake asyncio locks.

    A lock lives as long as someone holds a reference to it, so idle
    intakes do not accumulate entries.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def for_record(self, intake_id: str) -> asyncio.Lock:
        lock = self._locks.get(intake_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[intake_id] = lock
        return lock


record_locks = RecordLocks()


class IntakeRepository:
    """Load and save intake aggregates."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _aggregate_query():
        return select(IntakeRecord).options(
            selectinload(IntakeRecord.member),
            selectinload(IntakeRecord.idt_assignments),
            selectinload(IntakeRecord.timeline),
            selectinload(IntakeRecord.notes),
        )

    async def load(self, intake_id: str, refresh: bool = False) -> IntakeRecord:
        """Load an intake with all of its child collections.

        Args:
            intake_id: Intake UUID
            refresh: Overwrite any copy already held by the session

        Raises:
            RecordNotFound: no intake with this id
        """
        query = self._aggregate_query().where(IntakeRecord.id == intake_id)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        record = result.scalar_one_or_none()
        if record is None:
            raise RecordNotFound("Intake", intake_id)
        return record

    async def save(self, record: IntakeRecord) -> None:
        """Flush and commit ``record``.

        Raises:
            ConcurrentModification: the stored version moved since load
        """
        # rollback() expires the record, so its id is read up front
        intake_id = record.id
        self.db.add(record)
        try:
            await self.db.flush()
        except StaleDataError as exc:
            await self.db.rollback()
            raise ConcurrentModification(intake_id) from exc
        await self.db.commit()

    async def find_active_by_member(self, member_id: str) -> Optional[IntakeRecord]:
        """Return the member's open intake, if any."""
        result = await self.db.execute(
            self._aggregate_query().where(
                IntakeRecord.member_id == member_id,
                IntakeRecord.current_status.not_in(TERMINAL_STATUSES),
            )
        )
        return result.scalar_one_or_none()

    async def get_member(self, member_id: str) -> Member:
        result = await self.db.execute(select(Member).where(Member.id == member_id))
        member = result.scalar_one_or_none()
        if member is None:
            raise RecordNotFound("Member", member_id)
        return member

    async def create(
        self,
        member_id: str,
        created_by: str,
        as_of: datetime,
        previous_intake_id: Optional[str] = None,
    ) -> IntakeRecord:
        """Open a new intake in Inquiry for ``member_id``.

        Seeds the default IDT seats and the opening timeline entry. A
        re-enrollment passes the closed intake it follows as
        ``previous_intake_id``.

        Raises:
            RecordNotFound: member (or previous intake) does not exist
            ActiveIntakeExists: member already has an open intake
            InvalidReenrollment: previous intake is open or belongs to someone else
        """
        await self.get_member(member_id)

        if previous_intake_id is not None:
            previous = await self.load(previous_intake_id)
            if previous.member_id != member_id:
                raise InvalidReenrollment(
                    f"Intake {previous_intake_id} belongs to a different member",
                    previous_intake_id,
                )
            if not previous.is_terminal:
                raise InvalidReenrollment(
                    f"Intake {previous_intake_id} is still open",
                    previous_intake_id,
                )

        active = await self.find_active_by_member(member_id)
        if active is not None:
            raise ActiveIntakeExists(member_id, active.id)

        record = IntakeRecord(
            member_id=member_id,
            previous_intake_id=previous_intake_id,
            created_by=created_by,
            created_at=as_of,
            updated_at=as_of,
            idt_assignments=[IDTAssignment(role=role) for role in DEFAULT_IDT_ROLES],
        )
        IntakeStateMachine(record).record_created(created_by, as_of)

        self.db.add(record)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            # Lost a race with another request opening an intake for the same member
            await self.db.rollback()
            raise ActiveIntakeExists(member_id) from exc
        await self.db.commit()

        logger.info(
            "intake_created",
            intake_id=record.id,
            member_id=member_id,
            previous_intake_id=previous_intake_id,
            created_by=created_by,
        )
        return await self.load(record.id, refresh=True)

    async def list_intakes(
        self,
        status: Optional[PACEStatus] = None,
        search: Optional[str] = None,
        member_id: Optional[str] = None,
    ) -> List[IntakeRecord]:
        """List intakes, newest first.

        Args:
            status: Only intakes in this status
            search: Case-insensitive match on member first/last name, CIN or DOB
            member_id: Only intakes of this member
        """
        query = (
            select(IntakeRecord)
            .join(Member, Member.id == IntakeRecord.member_id)
            .options(selectinload(IntakeRecord.member), selectinload(IntakeRecord.idt_assignments))
            .order_by(IntakeRecord.created_at.desc())
        )
        if status is not None:
            query = query.where(IntakeRecord.current_status == status)
        if member_id is not None:
            query = query.where(IntakeRecord.member_id == member_id)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(or_(
                func.lower(Member.first_name).like(pattern),
                func.lower(Member.last_name).like(pattern),
                func.lower(Member.medicaid_cin).like(pattern),
                cast(Member.date_of_birth, String).like(f"%{search}%"),
            ))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def status_counts(self) -> Dict[PACEStatus, int]:
        """Number of intakes per status; every status is present."""
        result = await self.db.execute(
            select(IntakeRecord.current_status, func.count(IntakeRecord.id))
            .group_by(IntakeRecord.current_status)
        )
        counts = {status: 0 for status in PACEStatus}
        for status, count in result.all():
            counts[status] = count
        return counts
