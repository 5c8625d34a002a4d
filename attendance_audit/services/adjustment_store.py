"""
Adjustment record store - append-only access to attendance_adjustments.

Writes go through append_adjustment only; there is no update or delete.
Per-key reads return entries in log order: (modified_at, sequence) ascending;
session-wide reads order by (modified_at, id).
"""
from datetime import date
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from attendance_audit.core.exceptions import StalePrecondition
from attendance_audit.models.adjustment import AttendanceAdjustment, check_adjustment_row
from attendance_audit.utils.datetime_utils import ensure_utc


def list_adjustments(
    db: Session,
    session_id: int,
    occurrence_date: date,
    user_id: int,
) -> List[AttendanceAdjustment]:
    """All log entries for one (session, date, user) key, oldest first."""
    return (
        db.query(AttendanceAdjustment)
        .filter(
            AttendanceAdjustment.session_id == session_id,
            AttendanceAdjustment.occurrence_date == occurrence_date,
            AttendanceAdjustment.target_user_id == user_id,
        )
        .order_by(AttendanceAdjustment.modified_at, AttendanceAdjustment.sequence)
        .all()
    )


def list_session_adjustments(
    db: Session,
    session_id: int,
    occurrence_date: Optional[date] = None,
    user_id: Optional[int] = None,
) -> List[AttendanceAdjustment]:
    """
    Log entries for a session (optionally one date and/or one user), most recent last.
    
    Entries from different keys share no sequence counter, so ties on
    modified_at fall back to insertion order (id).
    """
    query = db.query(AttendanceAdjustment).filter(AttendanceAdjustment.session_id == session_id)
    if occurrence_date is not None:
        query = query.filter(AttendanceAdjustment.occurrence_date == occurrence_date)
    if user_id is not None:
        query = query.filter(AttendanceAdjustment.target_user_id == user_id)
    return query.order_by(
        AttendanceAdjustment.modified_at,
        AttendanceAdjustment.id,
    ).all()


def latest_adjustment(
    db: Session,
    session_id: int,
    occurrence_date: date,
    user_id: int,
) -> Optional[AttendanceAdjustment]:
    """The entry with the highest sequence for a key, or None."""
    return (
        db.query(AttendanceAdjustment)
        .filter(
            AttendanceAdjustment.session_id == session_id,
            AttendanceAdjustment.occurrence_date == occurrence_date,
            AttendanceAdjustment.target_user_id == user_id,
        )
        .order_by(AttendanceAdjustment.sequence.desc())
        .first()
    )


def append_adjustment(
    db: Session,
    record: AttendanceAdjustment,
    expected_count: int,
) -> AttendanceAdjustment:
    """
    Compare-and-append one entry to the log
    
    The entry is appended only if the key still holds exactly
    ``expected_count`` entries, i.e. nothing was appended since the caller
    computed ``record.previous_status``. The flush is not committed; the
    caller owns the transaction.
    
    Args:
        db: Database session
        record: New, not yet persisted AttendanceAdjustment
        expected_count: Number of entries the caller validated against
    
    Returns:
        The flushed record, with ``sequence`` assigned
    
    Raises:
        ValueError: If the record violates a row invariant
        StalePrecondition: If the key moved on (in-process or via the
            unique (key, sequence) constraint across processes)
    """
    if record.id is not None:
        raise ValueError("append_adjustment only accepts new records")
    check_adjustment_row(record)
    
    latest = latest_adjustment(db, record.session_id, record.occurrence_date, record.target_user_id)
    current_count = latest.sequence if latest else 0
    if current_count != expected_count:
        raise StalePrecondition()
    if latest is not None and latest.new_status != record.previous_status:
        raise StalePrecondition()
    
    record.sequence = current_count + 1
    # Keep modified_at monotonic within the key so both orderings agree
    if latest is not None and ensure_utc(record.modified_at) < ensure_utc(latest.modified_at):
        record.modified_at = ensure_utc(latest.modified_at)
    
    db.add(record)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise StalePrecondition()
    return record
