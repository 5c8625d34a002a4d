"""
Role utility functions for handling both enum and string role values
"""
import re

from attendance_audit.models.user import Role

# Normalized token -> Role. Covers the canonical names plus the aliases
# older clients still send (SuperAdmin, CompanyAdmin, staff, user, ...).
_ROLE_TOKENS = {
    "platformowner": Role.PLATFORM_OWNER,
    "orgsuperadmin": Role.ORG_SUPER_ADMIN,
    "superadmin": Role.ORG_SUPER_ADMIN,
    "orgadmin": Role.ORG_ADMIN,
    "companyadmin": Role.ORG_ADMIN,
    "manager": Role.MANAGER,
    "sessionadmin": Role.SESSION_ADMIN,
    "staff": Role.SESSION_ADMIN,
    "enduser": Role.END_USER,
    "user": Role.END_USER,
}

_SEPARATORS = re.compile(r"[\s_-]+")


def role_name(role):
    """
    Safely extract role name from either enum or string
    
    Args:
        role: Either a Role enum instance or a string
        
    Returns:
        str: The role name as string
    """
    return role.value if hasattr(role, "value") else str(role)


def resolve_role(value) -> Role:
    """
    Resolve a role enum or raw role string to a Role.

    Never raises: anything unrecognised (None, empty, wrong type, unknown
    name) resolves to Role.UNKNOWN, which holds no capability.
    """
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return Role.UNKNOWN
    token = _SEPARATORS.sub("", value.strip().lower())
    return _ROLE_TOKENS.get(token, Role.UNKNOWN)
