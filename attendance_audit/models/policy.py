"""
Organization attendance policy model
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey
from sqlalchemy.sql import func
from attendance_audit.db.base import Base


class OrganizationPolicy(Base):
    __tablename__ = "organization_policies"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, unique=True)

    # How many days back an occurrence date may still be adjusted (0 = today only)
    adjustment_window_days = Column(Integer, nullable=False, default=30)
    # Upper bound for late minutes; never above the global 180 cap
    late_minutes_cap = Column(Integer, nullable=False, default=180)

    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)
