"""
Attendance session model: a class/meeting run by an organization.
Recurring sessions produce one occurrence per date.
"""
from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, String, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from attendance_audit.db.base import Base


class Recurrence(str, enum.Enum):
    NONE = "NONE"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"


class AttendanceSession(Base):
    __tablename__ = "attendance_sessions"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    recurrence = Column(String, nullable=False, default=Recurrence.NONE.value)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)

    organization = relationship("Organization", backref="sessions")

    def occurs_on(self, day) -> bool:
        """True if the session has an occurrence on the given calendar date."""
        if day < self.start_date or (self.end_date is not None and day > self.end_date):
            return False
        if self.recurrence == Recurrence.DAILY.value:
            return True
        if self.recurrence == Recurrence.WEEKLY.value:
            return day.weekday() == self.start_date.weekday()
        return day == self.start_date
