"""Pytest configuration and fixtures."""

import os
import sys
import uuid
from datetime import date, datetime
from pathlib import Path

import pytest
import pytest_asyncio

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Point the app at a throwaway database before anything imports settings
TEST_DB_PATH = project_root / "test_pace_intake.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from httpx import AsyncClient, ASGITransport  # noqa: E402

from pace_intake.core.database import AsyncSessionLocal, Base, engine  # noqa: E402
from pace_intake.models import IDTAssignment, IntakeRecord, Member  # noqa: E402
from pace_intake.models.enums import (  # noqa: E402
    IDTRole,
    MedicaidStatus,
    PACEStatus,
    UASStatus,
)
from main import app  # noqa: E402


@pytest_asyncio.fixture
async def db_schema():
    """Fresh schema for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest_asyncio.fixture
async def client(db_schema):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client


@pytest_asyncio.fixture
async def db_session(db_schema):
    async with AsyncSessionLocal() as session:
        yield session


@pytest_asyncio.fixture
async def member(db_session):
    new_member = Member(
        first_name="Maria",
        last_name="Rodriguez",
        date_of_birth=date(1944, 3, 12),
        medicaid_cin="NY12345678",
        street1="100 Main Street",
        city="Rochester",
        state="NY",
        zip_code="14601",
        referral_source="Monroe County DSS",
    )
    db_session.add(new_member)
    await db_session.commit()
    return new_member


@pytest.fixture
def make_intake():
    """Build a transient intake record (no database needed).

    ``ready=True`` satisfies every enrollment gate; keyword arguments
    override single columns, ``rn_assigned``/``pcp_assigned`` control the
    gating IDT seats.
    """
    def _make(status=PACEStatus.INQUIRY, ready=False, rn_assigned=None, pcp_assigned=None, **fields):
        values = {
            "id": str(uuid.uuid4()),
            "member_id": "member-1",
            "current_status": status,
            "created_by": "coordinator",
            "created_at": datetime(2024, 1, 2, 9, 0),
            "updated_at": datetime(2024, 1, 2, 9, 0),
        }
        if ready:
            values.update(
                medicaid_status=MedicaidStatus.ACTIVE,
                has_cin=True,
                uas_status=UASStatus.COMPLETED,
                nh_loc_met=True,
                roi_received=True,
                hipaa_received=True,
            )
        values.update(fields)
        rn = ready if rn_assigned is None else rn_assigned
        pcp = ready if pcp_assigned is None else pcp_assigned
        values["idt_assignments"] = [
            IDTAssignment(role=IDTRole.RN, assigned=rn),
            IDTAssignment(role=IDTRole.PCP, assigned=pcp),
            IDTAssignment(role=IDTRole.PT),
            IDTAssignment(role=IDTRole.SW),
        ]
        return IntakeRecord(**values)

    return _make


def pytest_sessionfinish(session, exitstatus):
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()
