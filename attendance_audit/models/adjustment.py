"""
Attendance adjustment model (append-only modification log).

Rows are inserted once and never updated or deleted; corrections are new
rows. The mapper events below refuse UPDATE/DELETE flushes and re-check
the row invariants on INSERT, so a write that bypasses the service still
cannot put a malformed entry into the log.
"""
from sqlalchemy import (
    Column, Integer, Date, DateTime, ForeignKey, String, Text,
    UniqueConstraint, CheckConstraint, Index, Enum as SQLEnum, event,
)
from sqlalchemy.orm import validates
from attendance_audit.core.constants import (
    CHANGE_TYPE_MANUAL,
    REASON_MIN_LENGTH,
    REASON_MAX_LENGTH,
    LATE_MINUTES_MIN,
    LATE_MINUTES_MAX,
)
from attendance_audit.db.base import Base
from attendance_audit.models.attendance import AttendanceStatus


class AppendOnlyViolation(Exception):
    """Raised when something tries to update or delete a logged adjustment."""


class AttendanceAdjustment(Base):
    __tablename__ = "attendance_adjustments"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    session_id = Column(Integer, ForeignKey("attendance_sessions.id"), nullable=False)
    occurrence_date = Column(Date, nullable=False)
    target_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    target_user_name = Column(String, nullable=False)
    previous_status = Column(SQLEnum(AttendanceStatus), nullable=False)
    new_status = Column(SQLEnum(AttendanceStatus), nullable=False)
    late_minutes = Column(Integer, nullable=True)
    reason = Column(Text, nullable=False)
    change_type = Column(String, nullable=False, default=CHANGE_TYPE_MANUAL)
    modified_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    modified_by_name = Column(String, nullable=False)
    modified_by_role = Column(String, nullable=False)
    modified_at = Column(DateTime(timezone=True), nullable=False)
    sequence = Column(Integer, nullable=False)  # 1-based, per (session, date, user) key

    __table_args__ = (
        UniqueConstraint(
            "session_id", "occurrence_date", "target_user_id", "sequence",
            name="uq_adjustment_key_sequence",
        ),
        CheckConstraint("previous_status <> new_status", name="ck_adjustment_not_noop"),
        CheckConstraint("sequence >= 1", name="ck_adjustment_sequence_positive"),
        Index("ix_adjustment_key", "session_id", "occurrence_date", "target_user_id"),
    )

    @property
    def action(self) -> str:
        """Display action, e.g. MARKED_PRESENT."""
        status = self.new_status.value if hasattr(self.new_status, "value") else str(self.new_status)
        return f"MARKED_{status}"

    @validates("reason")
    def _validate_reason(self, key, value):
        if value is None:
            raise ValueError("reason is required")
        length = len(value.strip())
        if length < REASON_MIN_LENGTH or length > REASON_MAX_LENGTH:
            raise ValueError(
                f"reason must be {REASON_MIN_LENGTH}-{REASON_MAX_LENGTH} characters, got {length}"
            )
        return value


def check_adjustment_row(target: AttendanceAdjustment) -> None:
    """Row-level invariants of a log entry. Raises ValueError on violation."""
    previous = AttendanceStatus(target.previous_status)
    new = AttendanceStatus(target.new_status)
    if previous == new:
        raise ValueError("previous_status and new_status must differ")
    if new == AttendanceStatus.LATE:
        if target.late_minutes is None or not (LATE_MINUTES_MIN <= target.late_minutes <= LATE_MINUTES_MAX):
            raise ValueError(
                f"late_minutes must be {LATE_MINUTES_MIN}-{LATE_MINUTES_MAX} for LATE"
            )
    elif target.late_minutes is not None:
        raise ValueError("late_minutes is only allowed for LATE")


@event.listens_for(AttendanceAdjustment, "before_insert")
def _before_insert(mapper, connection, target):
    check_adjustment_row(target)


@event.listens_for(AttendanceAdjustment, "before_update")
def _before_update(mapper, connection, target):
    raise AppendOnlyViolation(f"attendance adjustment {target.id} is immutable")


@event.listens_for(AttendanceAdjustment, "before_delete")
def _before_delete(mapper, connection, target):
    raise AppendOnlyViolation(f"attendance adjustment {target.id} cannot be deleted")
