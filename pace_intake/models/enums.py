"""
Enum definitions for database models
"""
import enum


class PACEStatus(str, enum.Enum):
    """Intake lifecycle status"""
    INQUIRY = "Inquiry"
    APPLICATION_SUBMITTED = "Application Submitted"
    ELIGIBILITY_REVIEW = "Eligibility Review"
    UAS_SCHEDULED = "UAS Scheduled"
    UAS_COMPLETED = "UAS Completed"
    IDT_REVIEW = "IDT Review"
    READY_TO_ENROLL = "Ready to Enroll"
    ENROLLED = "Enrolled"
    DENIED = "Denied"          # Reachable from any open status
    WITHDRAWN = "Withdrawn"    # Reachable from any open status

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


CANONICAL_PROGRESSION = (
    PACEStatus.INQUIRY,
    PACEStatus.APPLICATION_SUBMITTED,
    PACEStatus.ELIGIBILITY_REVIEW,
    PACEStatus.UAS_SCHEDULED,
    PACEStatus.UAS_COMPLETED,
    PACEStatus.IDT_REVIEW,
    PACEStatus.READY_TO_ENROLL,
    PACEStatus.ENROLLED,
)

TERMINAL_STATUSES = frozenset({PACEStatus.ENROLLED, PACEStatus.DENIED, PACEStatus.WITHDRAWN})

ESCAPE_STATUSES = frozenset({PACEStatus.DENIED, PACEStatus.WITHDRAWN})


class MedicaidStatus(str, enum.Enum):
    """Medicaid eligibility as reported by the state"""
    ACTIVE = "Active"
    PENDING = "Pending"
    INACTIVE = "Inactive"
    UNKNOWN = "Unknown"


class ApplicationOutcome(str, enum.Enum):
    """Outcome of the Medicaid application"""
    APPROVED = "Approved"
    DENIED = "Denied"
    PENDING = "Pending"


class UASStatus(str, enum.Enum):
    """Uniform Assessment System progress"""
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class IDTRole(str, enum.Enum):
    """Interdisciplinary team seats"""
    RN = "rn"
    PCP = "pcp"
    PT = "pt"
    SW = "sw"
    OT = "ot"
    DIETITIAN = "dietitian"
    PHARMACIST = "pharmacist"
    BEHAVIORAL_HEALTH = "behavioral_health"


MANDATORY_IDT_ROLES = (IDTRole.RN, IDTRole.PCP)

# Seats created with every new intake
DEFAULT_IDT_ROLES = (IDTRole.RN, IDTRole.PCP, IDTRole.PT, IDTRole.SW)


class TimelineCategory(str, enum.Enum):
    """Grouping used by the history view"""
    ELIGIBILITY = "Eligibility"
    UAS = "UAS"
    IDT = "IDT"
    ENROLLMENT = "Enrollment"
    SYSTEM = "System"


class ContactType(str, enum.Enum):
    """Call log contact channel"""
    INBOUND = "Inbound"
    OUTBOUND = "Outbound"
    EMAIL = "Email"
    NOTE = "Note"
