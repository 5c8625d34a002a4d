"""
Organization membership lookups
"""
from typing import Optional
from sqlalchemy.orm import Session
from attendance_audit.models.user import User, Role
from attendance_audit.models.attendance_session import AttendanceSession
from attendance_audit.utils.roles import resolve_role


def get_user(db: Session, user_id: int) -> Optional[User]:
    """Get a user by ID."""
    return db.query(User).filter(User.id == user_id).first()


def get_session(db: Session, session_id: int) -> Optional[AttendanceSession]:
    """Get an attendance session by ID."""
    return db.query(AttendanceSession).filter(AttendanceSession.id == session_id).first()


def is_platform_owner(actor) -> bool:
    return resolve_role(actor.role) == Role.PLATFORM_OWNER


def can_access_organization(actor, organization_id: Optional[int]) -> bool:
    """
    True when the actor may act inside the given organization.

    Platform owners act across tenants; everyone else only inside their own.
    """
    if is_platform_owner(actor):
        return True
    return actor.organization_id is not None and actor.organization_id == organization_id
