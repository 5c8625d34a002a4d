"""
Attendance adjustment / audit schemas.
All datetimes are serialized as ISO-8601 UTC (Z).
"""
from datetime import date, datetime
from typing import Optional, List, Dict
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from attendance_audit.models.attendance import AttendanceStatus
from attendance_audit.utils.datetime_utils import ensure_utc, iso_8601_utc
from attendance_audit.utils.roles import role_name


class ModifiedBy(BaseModel):
    """Who made an adjustment (snapshot taken at append time)"""
    user_id: int
    name: str
    role: str

    model_config = ConfigDict(frozen=True)


class EffectiveAttendanceState(BaseModel):
    """Current status of one (session, date, user) after folding all adjustments over the base record."""
    status: AttendanceStatus
    base_status: AttendanceStatus
    late_minutes: Optional[int] = None
    is_manually_modified: bool = False
    last_modified_by: Optional[ModifiedBy] = None
    last_modified_at: Optional[datetime] = None
    modification_count: int = 0

    model_config = ConfigDict(frozen=True)

    @field_serializer("last_modified_at", when_used="always")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class AdjustmentRecordOut(BaseModel):
    """One entry of the append-only adjustment log"""
    id: int
    session_id: int
    occurrence_date: date
    target_user_id: int
    target_user_name: str
    previous_status: AttendanceStatus
    new_status: AttendanceStatus
    late_minutes: Optional[int] = None
    reason: str
    action: str
    change_type: str
    modified_by: ModifiedBy
    modified_at: datetime
    sequence: int

    @field_serializer("modified_at", when_used="always")
    def _ser_datetime(self, dt: datetime) -> Optional[str]:
        return iso_8601_utc(dt)

    @classmethod
    def from_record(cls, record) -> "AdjustmentRecordOut":
        return cls(
            id=record.id,
            session_id=record.session_id,
            occurrence_date=record.occurrence_date,
            target_user_id=record.target_user_id,
            target_user_name=record.target_user_name,
            previous_status=record.previous_status,
            new_status=record.new_status,
            late_minutes=record.late_minutes,
            reason=record.reason,
            action=record.action,
            change_type=record.change_type,
            modified_by=ModifiedBy(
                user_id=record.modified_by_id,
                name=record.modified_by_name,
                role=role_name(record.modified_by_role),
            ),
            modified_at=ensure_utc(record.modified_at),
            sequence=record.sequence,
        )


class AdjustAttendanceRequest(BaseModel):
    """
    Request body for an attendance adjustment.

    Reason and late-minute rules are checked by the adjustment service so
    that every violation surfaces with its own error code.
    """
    user_id: int = Field(..., description="Target user ID")
    new_status: AttendanceStatus
    reason: str = Field(..., description="Why the status is being changed (10-500 characters)")
    late_minutes: Optional[int] = Field(None, description="Required when new_status is LATE (1-180)")
    target_date: Optional[date] = Field(None, description="Occurrence date; defaults to today (UTC)")


class AttendanceSummary(BaseModel):
    """Effective-state totals for one session occurrence"""
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0


class AdjustAttendanceResponse(BaseModel):
    success: bool = True
    message: str
    modification: AdjustmentRecordOut
    state: EffectiveAttendanceState
    attendance_summary: AttendanceSummary


class RosterEntry(BaseModel):
    user_id: int
    user_name: str
    state: EffectiveAttendanceState
    modification_history: Optional[List[AdjustmentRecordOut]] = None


class DetailedSessionResponse(BaseModel):
    session_id: int
    session_name: str
    occurrence_date: date
    attendance_summary: AttendanceSummary
    users: List[RosterEntry]


class AuditTrailResponse(BaseModel):
    session_id: int
    occurrence_date: Optional[date] = None
    total: int
    audit_log: List[AdjustmentRecordOut]


class UserHistoryResponse(BaseModel):
    session_id: int
    user_id: int
    occurrence_date: Optional[date] = None
    modification_history: List[AdjustmentRecordOut]


class PermissionsOut(BaseModel):
    role: str
    capabilities: Dict[str, bool]
