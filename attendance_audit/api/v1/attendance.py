"""
Attendance adjustment and audit endpoints.
Every handler passes the authenticated user into the service layer, which
re-checks permissions and tenant boundaries itself.
"""
import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from attendance_audit.core.config import settings
from attendance_audit.core.deps import get_db, get_current_user
from attendance_audit.core.exceptions import PermissionDenied
from attendance_audit.models.user import User
from attendance_audit.schemas.attendance import (
    AdjustAttendanceRequest,
    AdjustAttendanceResponse,
    AdjustmentRecordOut,
    AuditTrailResponse,
    DetailedSessionResponse,
    EffectiveAttendanceState,
    PermissionsOut,
    UserHistoryResponse,
)
from attendance_audit.schemas.policy import AdjustmentPolicy, PolicyUpdateRequest
from attendance_audit.services.adjustment_service import submit_adjustment
from attendance_audit.services import audit_query_service, status_service
from attendance_audit.services.policy_service import get_adjustment_policy, update_adjustment_policy
from attendance_audit.utils.csv_export import stream_csv
from attendance_audit.utils.datetime_utils import today_local
from attendance_audit.utils.permissions import capabilities, can_view
from attendance_audit.utils.roles import resolve_role

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/permissions", response_model=PermissionsOut)
async def my_permissions(current_user: User = Depends(get_current_user)):
    """Attendance capabilities of the current user (for showing/hiding UI controls)."""
    return PermissionsOut(
        role=resolve_role(current_user.role).value,
        capabilities=capabilities(current_user.role),
    )


@router.get("/policy", response_model=AdjustmentPolicy)
async def get_policy(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Effective adjustment policy of the current user's organization."""
    if not can_view(current_user.role):
        raise PermissionDenied("You do not have permission to view attendance settings")
    return get_adjustment_policy(db, current_user.organization_id)


@router.put("/policy", response_model=AdjustmentPolicy)
async def put_policy(
    body: PolicyUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Set the adjustment window and late-minutes cap of the current user's organization."""
    organization_id = body.organization_id or current_user.organization_id
    if organization_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="organization_id is required for users without an organization",
        )
    return update_adjustment_policy(
        db, current_user, organization_id,
        adjustment_window_days=body.adjustment_window_days,
        late_minutes_cap=body.late_minutes_cap,
    )


@router.post(
    "/session/{session_id}/adjust",
    response_model=AdjustAttendanceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def adjust_attendance(
    session_id: int,
    body: AdjustAttendanceRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    POST /api/v1/attendance/session/{session_id}/adjust - append one adjustment.
    Returns the new log entry, the user's effective state and the occurrence totals.
    """
    occurrence_date = body.target_date or today_local(settings.ORG_TIMEZONE)
    record = submit_adjustment(
        db,
        current_user,
        session_id=session_id,
        occurrence_date=occurrence_date,
        target_user_id=body.user_id,
        new_status=body.new_status,
        reason=body.reason,
        late_minutes=body.late_minutes,
    )
    return AdjustAttendanceResponse(
        success=True,
        message=f"Attendance updated from {record.previous_status.value} to {record.new_status.value}",
        modification=AdjustmentRecordOut.from_record(record),
        state=status_service.current_state(db, session_id, occurrence_date, body.user_id),
        attendance_summary=status_service.session_summary(db, session_id, occurrence_date),
    )


@router.get("/session/{session_id}/state/{user_id}", response_model=EffectiveAttendanceState)
async def get_state(
    session_id: int,
    user_id: int,
    target_date: Optional[date] = Query(None, description="Occurrence date (default: today)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Effective attendance state of one user for one occurrence."""
    status_service.authorize_view(db, current_user, session_id)
    return status_service.current_state(db, session_id, target_date or today_local(settings.ORG_TIMEZONE), user_id)


@router.get("/session/{session_id}/detailed", response_model=DetailedSessionResponse)
async def get_detailed(
    session_id: int,
    target_date: Optional[date] = Query(None, description="Occurrence date (default: today)"),
    include_history: bool = Query(False, alias="includeHistory"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Roster of effective states for one occurrence, optionally with each user's history."""
    return status_service.session_roster(
        db, current_user, session_id, target_date or today_local(settings.ORG_TIMEZONE), include_history=include_history,
    )


@router.get("/session/{session_id}/audit", response_model=AuditTrailResponse)
async def get_audit_trail(
    session_id: int,
    target_date: Optional[date] = Query(None, alias="targetDate"),
    manual_only: bool = Query(False, alias="manualOnly"),
    since_days: Optional[int] = Query(None, alias="sinceDays", ge=1),
    recent: bool = Query(False, description="Shortcut for the configured recent window"),
    q: Optional[str] = Query(None, description="Search user name, reason or admin name"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Session audit trail (admin roles only), most recent last."""
    trail = audit_query_service.get_trail(db, current_user, session_id, target_date)
    if recent and since_days is None:
        since_days = settings.AUDIT_RECENT_DAYS
    trail = audit_query_service.filter_trail(
        trail, manual_only=manual_only, since_days=since_days, search_text=q,
    )
    return AuditTrailResponse(
        session_id=session_id,
        occurrence_date=target_date,
        total=len(trail),
        audit_log=[AdjustmentRecordOut.from_record(r) for r in trail],
    )


@router.get("/session/{session_id}/audit/export")
async def export_audit_trail(
    session_id: int,
    target_date: Optional[date] = Query(None, alias="targetDate"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """CSV export of the session audit trail (same access rules as the trail)."""
    trail = audit_query_service.get_trail(db, current_user, session_id, target_date)
    filename = f"session_{session_id}_audit_trail_{today_local(settings.ORG_TIMEZONE).isoformat()}.csv"
    logger.info("Audit trail export: session %s, %s rows, by user %s", session_id, len(trail), current_user.id)
    return stream_csv(
        audit_query_service.AUDIT_CSV_HEADERS,
        audit_query_service.trail_csv_rows(trail),
        filename=filename,
    )


@router.get("/session/{session_id}/user/{user_id}/history", response_model=UserHistoryResponse)
async def get_user_history(
    session_id: int,
    user_id: int,
    target_date: Optional[date] = Query(None, alias="targetDate"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """One user's modification history in a session."""
    history = audit_query_service.get_user_history(db, current_user, session_id, user_id, target_date)
    return UserHistoryResponse(
        session_id=session_id,
        user_id=user_id,
        occurrence_date=target_date,
        modification_history=[AdjustmentRecordOut.from_record(r) for r in history],
    )
