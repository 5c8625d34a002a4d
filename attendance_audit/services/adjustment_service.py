"""
Adjustment service - validates and appends manual attendance adjustments.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session

from attendance_audit.core.config import settings
from attendance_audit.core.constants import (
    ACTION_ADJUST,
    CHANGE_TYPE_MANUAL,
    LATE_MINUTES_MIN,
    REASON_MIN_LENGTH,
    REASON_MAX_LENGTH,
)
from attendance_audit.core.exceptions import (
    PermissionDenied,
    InvalidReason,
    NoOpRejected,
    InvalidLateMinutes,
    CrossOrgForbidden,
    StaleTargetDate,
    TargetNotFound,
)
from attendance_audit.models.adjustment import AttendanceAdjustment
from attendance_audit.models.attendance import AttendanceStatus
from attendance_audit.services.audit_service import log_audit
from attendance_audit.services.membership_service import get_session, get_user, can_access_organization
from attendance_audit.services.policy_service import get_adjustment_policy
from attendance_audit.services.status_service import current_state
from attendance_audit.services import adjustment_store
from attendance_audit.utils.datetime_utils import now_utc, ensure_utc, local_date
from attendance_audit.utils.locks import KeyedLock
from attendance_audit.utils.permissions import can_adjust
from attendance_audit.utils.roles import role_name

logger = logging.getLogger(__name__)

# Serializes validate -> append -> commit per (session, date, user) key
_key_locks = KeyedLock()


def submit_adjustment(
    db: Session,
    actor,
    session_id: int,
    occurrence_date: date,
    target_user_id: int,
    new_status: AttendanceStatus,
    reason: str,
    late_minutes: Optional[int] = None,
    now: Optional[datetime] = None,
) -> AttendanceAdjustment:
    """
    Validate and append one attendance adjustment
    
    Checks run in a fixed order and the first failure wins: permission,
    reason length, no-op, late minutes, session/user lookup and tenant
    boundary, editable window and session schedule. A session owned by
    another organization is refused before the no-op check. Dates are
    compared in ORG_TIMEZONE. Nothing is written unless every check
    passes; the log entry and its audit row commit together.
    
    Args:
        db: Database session
        actor: Authenticated user making the change (id, name, role, organization_id)
        session_id: Session ID
        occurrence_date: Occurrence date being adjusted
        target_user_id: User whose attendance changes
        new_status: Requested status
        reason: Free-text justification (10-500 chars after trimming)
        late_minutes: Minutes late; required for LATE, forbidden otherwise
        now: Clock override (defaults to current UTC time)
    
    Returns:
        The committed AttendanceAdjustment
    
    Raises:
        PermissionDenied, InvalidReason, NoOpRejected, InvalidLateMinutes,
        TargetNotFound, CrossOrgForbidden, StaleTargetDate, StalePrecondition
    """
    # 1. Permission, re-checked here whatever the UI decided
    if not can_adjust(actor.role):
        logger.warning(
            "Adjustment denied: user %s (role %s) tried to adjust session %s user %s",
            actor.id, role_name(actor.role), session_id, target_user_id,
        )
        raise PermissionDenied("You do not have permission to adjust attendance")

    new_status = AttendanceStatus(new_status)

    # 2. Reason
    reason_text = (reason or "").strip()
    if not (REASON_MIN_LENGTH <= len(reason_text) <= REASON_MAX_LENGTH):
        raise InvalidReason(
            f"Reason must be between {REASON_MIN_LENGTH} and {REASON_MAX_LENGTH} characters"
        )
    
    key = (session_id, occurrence_date, target_user_id)
    with _key_locks.hold(key):
        # Another tenant's session is refused before any of its state is read,
        # so the no-op answer cannot be used to probe foreign attendance
        session = get_session(db, session_id)
        if session is not None and not can_access_organization(actor, session.organization_id):
            _log_cross_org(actor, session, None)
            raise CrossOrgForbidden("Session is outside your organization")

        # 3. No-op, against the latest committed state
        expected_count = _entry_count(db, session_id, occurrence_date, target_user_id)
        state = current_state(db, session_id, occurrence_date, target_user_id)
        if state.status == new_status:
            raise NoOpRejected(f"No change detected: user is already {state.status.value}")

        # 4. Late minutes
        policy = get_adjustment_policy(db, session.organization_id if session else actor.organization_id)
        if new_status == AttendanceStatus.LATE:
            if late_minutes is None or not (LATE_MINUTES_MIN <= late_minutes <= policy.late_minutes_cap):
                raise InvalidLateMinutes(
                    f"Late minutes must be between {LATE_MINUTES_MIN} and {policy.late_minutes_cap} when marking as LATE"
                )
        elif late_minutes is not None:
            raise InvalidLateMinutes("Late minutes can only be set when marking as LATE")
        
        # 5. Session/user lookup and tenant boundary
        target_user = get_user(db, target_user_id)
        if session is None or target_user is None:
            raise TargetNotFound("Session or user not found")
        if target_user.organization_id != session.organization_id:
            _log_cross_org(actor, session, target_user)
            raise CrossOrgForbidden("Target user is outside your organization")

        # 6. Editable window, in the organization's calendar
        now = ensure_utc(now) if now is not None else now_utc()
        today = local_date(now, settings.ORG_TIMEZONE)
        oldest_allowed = today - timedelta(days=policy.adjustment_window_days)
        if occurrence_date > today:
            raise StaleTargetDate("Cannot adjust attendance for a future date")
        if occurrence_date < oldest_allowed:
            raise StaleTargetDate(
                f"Attendance older than {policy.adjustment_window_days} days can no longer be adjusted"
            )
        if not session.occurs_on(occurrence_date):
            raise TargetNotFound(f"Session '{session.name}' has no occurrence on {occurrence_date.isoformat()}")

        record = AttendanceAdjustment(
            organization_id=session.organization_id,
            session_id=session_id,
            occurrence_date=occurrence_date,
            target_user_id=target_user_id,
            target_user_name=target_user.name,
            previous_status=state.status,
            new_status=new_status,
            late_minutes=late_minutes if new_status == AttendanceStatus.LATE else None,
            reason=reason_text,
            change_type=CHANGE_TYPE_MANUAL,
            modified_by_id=actor.id,
            modified_by_name=actor.name,
            modified_by_role=role_name(actor.role),
            modified_at=now,
        )
        try:
            adjustment_store.append_adjustment(db, record, expected_count)
            log_audit(
                db=db,
                actor_id=actor.id,
                action=ACTION_ADJUST,
                entity_type="attendance_adjustment",
                entity_id=record.id,
                organization_id=session.organization_id,
                meta={
                    "session_id": session_id,
                    "occurrence_date": occurrence_date,
                    "target_user_id": target_user_id,
                    "previous_status": state.status,
                    "new_status": new_status,
                    "late_minutes": record.late_minutes,
                },
                commit=False,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(record)
    
    logger.info(
        "Attendance adjusted: session %s date %s user %s %s -> %s by user %s (#%s)",
        session_id, occurrence_date, target_user_id,
        record.previous_status.value, record.new_status.value, actor.id, record.sequence,
    )
    return record


def _log_cross_org(actor, session, target_user) -> None:
    logger.warning(
        "Cross-org adjustment blocked: user %s (org %s) -> session %s (org %s), user %s (org %s)",
        actor.id, actor.organization_id, session.id, session.organization_id,
        target_user.id if target_user else None,
        target_user.organization_id if target_user else None,
    )


def _entry_count(db: Session, session_id: int, occurrence_date: date, user_id: int) -> int:
    latest = adjustment_store.latest_adjustment(db, session_id, occurrence_date, user_id)
    return latest.sequence if latest else 0
