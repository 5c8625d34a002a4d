"""
Database models
"""
from attendance_audit.models.organization import Organization
from attendance_audit.models.user import User, Role
from attendance_audit.models.attendance_session import AttendanceSession, Recurrence
from attendance_audit.models.attendance import AttendanceRecord, AttendanceStatus
from attendance_audit.models.adjustment import AttendanceAdjustment, AppendOnlyViolation
from attendance_audit.models.policy import OrganizationPolicy
from attendance_audit.models.audit_log import AuditLog

__all__ = [
    "Organization",
    "User",
    "Role",
    "AttendanceSession",
    "Recurrence",
    "AttendanceRecord",
    "AttendanceStatus",
    "AttendanceAdjustment",
    "AppendOnlyViolation",
    "OrganizationPolicy",
    "AuditLog",
]
