"""
PACE Intake Enrollment API
FastAPI application entry point
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pace_intake.core.config import settings
from pace_intake.core.database import engine, Base
from pace_intake.core.errors import PACEError, pace_error_handler
from pace_intake.core.logging import configure_logging, get_logger
from pace_intake.api import members, intakes, checklist
# Import models to ensure they're registered with Base.metadata
from pace_intake.models import Member, IntakeRecord, IDTAssignment, TimelineEvent, CallLogEntry

configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
logger = get_logger(__name__)


# Create database tables
async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup"""
    await init_db()
    logger.info("service_started", version=settings.VERSION)
    yield
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="PACE intake lifecycle, eligibility gating and enrollment audit trail",
    version=settings.VERSION,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(PACEError, pace_error_handler)

# Include routers
app.include_router(members.router, prefix="/members", tags=["members"])
app.include_router(intakes.router, prefix="/intakes", tags=["intakes"])
app.include_router(checklist.router, prefix="/intakes", tags=["checklist"])


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION
    }


@app.get("/health")
async def health():
    """Detailed health check"""
    return {
        "status": "healthy",
        "database": "connected",
        "stale_application_days": settings.STALE_APPLICATION_DAYS
    }
