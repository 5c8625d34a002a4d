"""
Domain errors raised by the attendance adjustment core.

Every error is an expected, recoverable condition. Each carries a stable
wire ``code`` and the HTTP status the API layer answers with; the message is
meant to be shown to the user verbatim.
"""
from typing import Optional

from fastapi import status


class AttendanceError(Exception):
    """Base class for attendance adjustment/audit failures"""

    code = "ATTENDANCE_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Attendance request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class PermissionDenied(AttendanceError):
    code = "PERMISSION_DENIED"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action"


class InvalidReason(AttendanceError):
    code = "INVALID_REASON"
    default_message = "Reason must be between 10 and 500 characters"


class NoOpRejected(AttendanceError):
    code = "NO_OP_REJECTED"
    status_code = status.HTTP_409_CONFLICT
    default_message = "No status change detected"


class InvalidLateMinutes(AttendanceError):
    code = "INVALID_LATE_MINUTES"
    default_message = "Late minutes are required (1-180) for LATE and not allowed otherwise"


class CrossOrgForbidden(AttendanceError):
    code = "CROSS_ORG_FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Target is outside your organization"


class StaleTargetDate(AttendanceError):
    code = "STALE_TARGET_DATE"
    default_message = "Occurrence date is outside the editable window"


class TargetNotFound(AttendanceError):
    code = "TARGET_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Session or user not found"


class StalePrecondition(AttendanceError):
    """Raised when the log moved on between validation and append."""

    code = "STALE_PRECONDITION"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Attendance was changed by someone else; reload and try again"
