"""
Audit log model (generic action log: logins, adjustments)
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from attendance_audit.db.base import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=True, index=True)
    action = Column(String, nullable=False)  # e.g., "ATTENDANCE_ADJUST", "AUTH_LOGIN_SUCCESS"
    entity_type = Column(String, nullable=False)  # e.g., "attendance_adjustment", "auth"
    entity_id = Column(Integer, nullable=True)
    meta_json = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
