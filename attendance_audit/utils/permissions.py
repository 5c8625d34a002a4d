"""
Attendance permission checks.

Pure functions over the closed Role enum. UI callers use them to decide
whether to render controls; the services re-run the same checks on every
mutation and audit read.
"""
from typing import Dict, FrozenSet

from attendance_audit.models.user import Role
from attendance_audit.utils.roles import resolve_role

# view / adjust / export
ATTENDANCE_STAFF_ROLES: FrozenSet[Role] = frozenset({
    Role.PLATFORM_OWNER,
    Role.ORG_SUPER_ADMIN,
    Role.ORG_ADMIN,
    Role.MANAGER,
})

# delete / audit trail / settings (MANAGER excluded)
ATTENDANCE_ADMIN_ROLES: FrozenSet[Role] = frozenset({
    Role.PLATFORM_OWNER,
    Role.ORG_SUPER_ADMIN,
    Role.ORG_ADMIN,
})


def can_view(role) -> bool:
    """Check if a role can view attendance"""
    return resolve_role(role) in ATTENDANCE_STAFF_ROLES


def can_adjust(role) -> bool:
    """Check if a role can adjust attendance"""
    return resolve_role(role) in ATTENDANCE_STAFF_ROLES


def can_export(role) -> bool:
    """Check if a role can export attendance data"""
    return resolve_role(role) in ATTENDANCE_STAFF_ROLES


def can_delete(role) -> bool:
    """Check if a role can delete attendance records"""
    return resolve_role(role) in ATTENDANCE_ADMIN_ROLES


def can_view_audit_trail(role) -> bool:
    """Check if a role can read the adjustment audit trail"""
    return resolve_role(role) in ATTENDANCE_ADMIN_ROLES


def can_manage_settings(role) -> bool:
    """Check if a role can change attendance settings (adjustment window, late cap)"""
    return resolve_role(role) in ATTENDANCE_ADMIN_ROLES


def capabilities(role) -> Dict[str, bool]:
    """All attendance capabilities of a role, keyed by capability name."""
    return {
        "view": can_view(role),
        "adjust": can_adjust(role),
        "export": can_export(role),
        "delete": can_delete(role),
        "view_audit_trail": can_view_audit_trail(role),
        "manage_settings": can_manage_settings(role),
    }
