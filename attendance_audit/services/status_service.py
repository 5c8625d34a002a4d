"""
Status reconstructor - effective attendance state from base record + adjustment log.
"""
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional
from sqlalchemy.orm import Session

from attendance_audit.core.exceptions import PermissionDenied, CrossOrgForbidden, TargetNotFound
from attendance_audit.models.attendance import AttendanceRecord, AttendanceStatus
from attendance_audit.models.adjustment import AttendanceAdjustment
from attendance_audit.models.user import User
from attendance_audit.schemas.attendance import (
    AdjustmentRecordOut,
    AttendanceSummary,
    DetailedSessionResponse,
    EffectiveAttendanceState,
    ModifiedBy,
    RosterEntry,
)
from attendance_audit.services.adjustment_store import list_adjustments, list_session_adjustments
from attendance_audit.services.membership_service import get_session, can_access_organization
from attendance_audit.utils.datetime_utils import ensure_utc
from attendance_audit.utils.permissions import can_view
from attendance_audit.utils.roles import role_name


def _log_order(record: AttendanceAdjustment):
    return (ensure_utc(record.modified_at), record.sequence)


def reconstruct_state(
    base: Optional[AttendanceRecord],
    adjustments: Iterable[AttendanceAdjustment],
) -> EffectiveAttendanceState:
    """
    Fold the adjustment log over a base record.
    
    A missing base record means the user never checked in, so the fold
    starts from ABSENT. Input order does not matter: entries are sorted by
    (modified_at, sequence) first, which makes the result a pure function
    of the inputs.
    
    Args:
        base: Scan-derived record for the key, or None
        adjustments: Log entries for the same key
    
    Returns:
        EffectiveAttendanceState
    """
    base_status = AttendanceStatus(base.status) if base is not None else AttendanceStatus.ABSENT
    status = base_status
    late_minutes = base.late_minutes if base is not None and base_status == AttendanceStatus.LATE else None
    
    ordered = sorted(adjustments, key=_log_order)
    if not ordered:
        return EffectiveAttendanceState(status=status, base_status=base_status, late_minutes=late_minutes)
    
    for record in ordered:
        status = AttendanceStatus(record.new_status)
        late_minutes = record.late_minutes if status == AttendanceStatus.LATE else None
    
    last = ordered[-1]
    return EffectiveAttendanceState(
        status=status,
        base_status=base_status,
        late_minutes=late_minutes,
        is_manually_modified=True,
        last_modified_by=ModifiedBy(
            user_id=last.modified_by_id,
            name=last.modified_by_name,
            role=role_name(last.modified_by_role),
        ),
        last_modified_at=ensure_utc(last.modified_at),
        modification_count=len(ordered),
    )


def get_base_record(
    db: Session,
    session_id: int,
    occurrence_date: date,
    user_id: int,
) -> Optional[AttendanceRecord]:
    """Scan-derived record for a key, or None if the user never checked in."""
    return db.query(AttendanceRecord).filter(
        AttendanceRecord.session_id == session_id,
        AttendanceRecord.occurrence_date == occurrence_date,
        AttendanceRecord.user_id == user_id,
    ).first()


def current_state(
    db: Session,
    session_id: int,
    occurrence_date: date,
    user_id: int,
) -> EffectiveAttendanceState:
    """
    Effective attendance state for one (session, date, user) key
    
    Reads straight from the store on every call, so an adjustment
    committed (or flushed in the same session) is visible immediately.
    """
    base = get_base_record(db, session_id, occurrence_date, user_id)
    adjustments = list_adjustments(db, session_id, occurrence_date, user_id)
    return reconstruct_state(base, adjustments)


def summarize(states: Iterable[EffectiveAttendanceState]) -> AttendanceSummary:
    """Count effective states by status."""
    summary = AttendanceSummary()
    for state in states:
        summary.total += 1
        if state.status == AttendanceStatus.PRESENT:
            summary.present += 1
        elif state.status == AttendanceStatus.LATE:
            summary.late += 1
        else:
            summary.absent += 1
    return summary


def _occurrence_states(
    db: Session,
    session_id: int,
    occurrence_date: date,
) -> Dict[int, tuple]:
    """user_id -> (state, adjustments) for everyone with a base record or an adjustment on the date."""
    bases = {
        record.user_id: record
        for record in db.query(AttendanceRecord).filter(
            AttendanceRecord.session_id == session_id,
            AttendanceRecord.occurrence_date == occurrence_date,
        ).all()
    }
    by_user: Dict[int, List[AttendanceAdjustment]] = defaultdict(list)
    for record in list_session_adjustments(db, session_id, occurrence_date):
        by_user[record.target_user_id].append(record)
    
    user_ids = sorted(set(bases) | set(by_user))
    return {
        user_id: (reconstruct_state(bases.get(user_id), by_user.get(user_id, [])), by_user.get(user_id, []))
        for user_id in user_ids
    }


def session_summary(db: Session, session_id: int, occurrence_date: date) -> AttendanceSummary:
    """Totals (total/present/absent/late) over the effective states of one occurrence."""
    states = _occurrence_states(db, session_id, occurrence_date)
    return summarize(state for state, _ in states.values())


def authorize_view(db: Session, actor, session_id: int):
    """View permission and tenant gate for roster/state reads. Returns the session."""
    if not can_view(actor.role):
        raise PermissionDenied("You do not have permission to view attendance")
    session = get_session(db, session_id)
    if session is None:
        raise TargetNotFound("Session not found")
    if not can_access_organization(actor, session.organization_id):
        raise CrossOrgForbidden()
    return session


def session_roster(
    db: Session,
    actor,
    session_id: int,
    occurrence_date: date,
    include_history: bool = False,
) -> DetailedSessionResponse:
    """
    Detailed attendance for one session occurrence
    
    Args:
        db: Database session
        actor: Authenticated user
        session_id: Session ID
        occurrence_date: Occurrence date
        include_history: Attach each user's modification history
    
    Raises:
        PermissionDenied: If the actor cannot view attendance
        TargetNotFound: If the session does not exist
        CrossOrgForbidden: If the session belongs to another organization
    """
    session = authorize_view(db, actor, session_id)
    states = _occurrence_states(db, session_id, occurrence_date)
    names = {
        user.id: user.name
        for user in db.query(User).filter(User.id.in_(list(states))).all()
    } if states else {}
    
    users = []
    for user_id, (state, history) in states.items():
        users.append(RosterEntry(
            user_id=user_id,
            user_name=names.get(user_id, ""),
            state=state,
            modification_history=[AdjustmentRecordOut.from_record(r) for r in history] if include_history else None,
        ))
    
    return DetailedSessionResponse(
        session_id=session.id,
        session_name=session.name,
        occurrence_date=occurrence_date,
        attendance_summary=summarize(entry.state for entry in users),
        users=users,
    )
