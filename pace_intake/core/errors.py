"""
Domain error taxonomy and HTTP mapping.

Every failure the intake core can produce is one of the classes below.
Each carries a stable ``code`` and the HTTP status the API answers with,
so the presentation layer can map it to a specific, actionable message.
"""
from typing import Any, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

from pace_intake.core.logging import get_logger

logger = get_logger(__name__)


class PACEError(Exception):
    """Base intake service error."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code or "PACE_ERROR"
        self.details = details or {}
        super().__init__(self.message)


class TransitionError(PACEError):
    """A requested status transition was refused."""


class RecordTerminal(TransitionError):
    """The intake is Enrolled, Denied or Withdrawn and can no longer change."""

    def __init__(self, intake_id: Optional[str], current_status: Any):
        self.current_status = current_status
        super().__init__(
            message=f"Intake {intake_id} is closed with status '{_value(current_status)}'",
            status_code=status.HTTP_409_CONFLICT,
            code="RECORD_TERMINAL",
            details={"intake_id": intake_id, "current_status": _value(current_status)},
        )


class InvalidSequence(TransitionError):
    """The requested status skips or reverses the canonical progression."""

    def __init__(self, current_status: Any, requested_status: Any, expected_next: Any):
        self.current_status = current_status
        self.requested_status = requested_status
        self.expected_next = expected_next
        super().__init__(
            message=(
                f"Cannot move from '{_value(current_status)}' to '{_value(requested_status)}'; "
                f"the next status is '{_value(expected_next)}'"
            ),
            status_code=status.HTTP_409_CONFLICT,
            code="INVALID_SEQUENCE",
            details={
                "current_status": _value(current_status),
                "requested_status": _value(requested_status),
                "expected_next": _value(expected_next),
            },
        )


class RequirementsNotMet(TransitionError):
    """Enrollment was requested before every enrollment gate was satisfied."""

    def __init__(self, unmet_requirements: list):
        self.unmet_requirements = list(unmet_requirements)
        names = [item.requirement for item in self.unmet_requirements]
        super().__init__(
            message=f"Enrollment requirements not met: {', '.join(names)}",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            code="REQUIREMENTS_NOT_MET",
            details={
                "unmet_requirements": [
                    {"requirement": item.requirement, "current_value": _value(item.current_value)}
                    for item in self.unmet_requirements
                ]
            },
        )


class RecordNotFound(PACEError):
    """Resource not found."""

    def __init__(self, resource: str, identifier: Optional[str] = None):
        message = f"{resource} not found"
        if identifier:
            message += f" (id: {identifier})"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            code="RECORD_NOT_FOUND",
            details={"resource": resource, "id": identifier},
        )


class ConcurrentModification(PACEError):
    """Another writer saved the intake first (optimistic lock conflict)."""

    def __init__(self, intake_id: Optional[str]):
        super().__init__(
            message=f"Intake {intake_id} was modified concurrently; reload and retry",
            status_code=status.HTTP_409_CONFLICT,
            code="CONCURRENT_MODIFICATION",
            details={"intake_id": intake_id},
        )


class ActiveIntakeExists(PACEError):
    """The member already has an intake that is not closed."""

    def __init__(self, member_id: str, active_intake_id: Optional[str] = None):
        super().__init__(
            message=f"Member {member_id} already has an active intake",
            status_code=status.HTTP_409_CONFLICT,
            code="ACTIVE_INTAKE_EXISTS",
            details={"member_id": member_id, "active_intake_id": active_intake_id},
        )


class InvalidReenrollment(PACEError):
    """A re-enrollment must reference a closed intake of the same member."""

    def __init__(self, message: str, previous_intake_id: str):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            code="INVALID_REENROLLMENT",
            details={"previous_intake_id": previous_intake_id},
        )


def _value(item: Any) -> Any:
    return getattr(item, "value", item)


async def pace_error_handler(request: Request, exc: PACEError) -> JSONResponse:
    """Render a PACEError as a JSON error body."""
    logger.warning(
        "request_failed",
        error=exc.code,
        message=exc.message,
        path=request.url.path,
        status_code=exc.status_code,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.code,
            "message": exc.message,
            "details": exc.details,
        },
    )
