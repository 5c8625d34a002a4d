"""
Audit query service - read access to the adjustment log for the audit viewer and CSV export.
"""
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence
from sqlalchemy.orm import Session

from attendance_audit.core.constants import CHANGE_TYPE_MANUAL
from attendance_audit.core.exceptions import PermissionDenied, CrossOrgForbidden, TargetNotFound
from attendance_audit.models.adjustment import AttendanceAdjustment
from attendance_audit.services.adjustment_store import list_session_adjustments
from attendance_audit.services.membership_service import get_session, can_access_organization
from attendance_audit.utils.datetime_utils import now_utc, ensure_utc, iso_8601_utc
from attendance_audit.utils.permissions import can_view_audit_trail
from attendance_audit.utils.roles import role_name

logger = logging.getLogger(__name__)

AUDIT_CSV_HEADERS = [
    "Date/Time",
    "Occurrence Date",
    "User",
    "Action",
    "Previous Status",
    "New Status",
    "Late Minutes",
    "Reason",
    "Modified By",
    "Role",
]


def _authorize(db: Session, actor, session_id: int) -> None:
    """Permission and tenant gate; runs before any log row is read."""
    if not can_view_audit_trail(actor.role):
        logger.warning(
            "Audit trail denied: user %s (role %s) on session %s",
            actor.id, role_name(actor.role), session_id,
        )
        raise PermissionDenied("Audit trails are restricted to organization admins and platform owners")
    session = get_session(db, session_id)
    if session is None:
        raise TargetNotFound("Session not found")
    if not can_access_organization(actor, session.organization_id):
        raise CrossOrgForbidden()


def get_trail(
    db: Session,
    actor,
    session_id: int,
    occurrence_date: Optional[date] = None,
) -> List[AttendanceAdjustment]:
    """
    Session audit trail, most recent last
    
    Args:
        db: Database session
        actor: Authenticated user
        session_id: Session ID
        occurrence_date: Restrict to one occurrence (optional)
    
    Raises:
        PermissionDenied: If the actor cannot view audit trails
        TargetNotFound: If the session does not exist
        CrossOrgForbidden: If the session belongs to another organization
    """
    _authorize(db, actor, session_id)
    return list_session_adjustments(db, session_id, occurrence_date)


def get_user_history(
    db: Session,
    actor,
    session_id: int,
    user_id: int,
    occurrence_date: Optional[date] = None,
) -> List[AttendanceAdjustment]:
    """One user's modification history in a session; same gate as get_trail."""
    _authorize(db, actor, session_id)
    return list_session_adjustments(db, session_id, occurrence_date, user_id=user_id)


def filter_trail(
    trail: Sequence[AttendanceAdjustment],
    manual_only: bool = False,
    since_days: Optional[int] = None,
    search_text: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[AttendanceAdjustment]:
    """
    Filter a trail for display without touching the input
    
    Args:
        trail: Entries as returned by get_trail
        manual_only: Keep only manual adjustments
        since_days: Keep entries modified within the last N days
        search_text: Case-insensitive match on user name, reason or actor name
        now: Clock override for since_days
    
    Returns:
        A new list, in the input order
    """
    cutoff = None
    if since_days is not None:
        cutoff = (ensure_utc(now) if now is not None else now_utc()) - timedelta(days=since_days)
    needle = search_text.strip().lower() if search_text and search_text.strip() else None
    
    result = []
    for entry in trail:
        if manual_only and entry.change_type != CHANGE_TYPE_MANUAL:
            continue
        if cutoff is not None and ensure_utc(entry.modified_at) < cutoff:
            continue
        if needle is not None and not (
            needle in (entry.target_user_name or "").lower()
            or needle in (entry.reason or "").lower()
            or needle in (entry.modified_by_name or "").lower()
        ):
            continue
        result.append(entry)
    return result


def trail_csv_rows(trail: Sequence[AttendanceAdjustment]) -> List[dict]:
    """Rows for the audit CSV export, keyed by AUDIT_CSV_HEADERS."""
    return [
        {
            "Date/Time": iso_8601_utc(entry.modified_at),
            "Occurrence Date": entry.occurrence_date.isoformat(),
            "User": entry.target_user_name,
            "Action": entry.action,
            "Previous Status": entry.previous_status.value,
            "New Status": entry.new_status.value,
            "Late Minutes": "" if entry.late_minutes is None else entry.late_minutes,
            "Reason": entry.reason,
            "Modified By": entry.modified_by_name,
            "Role": role_name(entry.modified_by_role),
        }
        for entry in trail
    ]
