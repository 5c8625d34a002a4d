"""
User model
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from attendance_audit.db.base import Base


class Role(str, enum.Enum):
    PLATFORM_OWNER = "PLATFORM_OWNER"
    ORG_SUPER_ADMIN = "ORG_SUPER_ADMIN"
    ORG_ADMIN = "ORG_ADMIN"
    MANAGER = "MANAGER"
    SESSION_ADMIN = "SESSION_ADMIN"
    END_USER = "END_USER"
    UNKNOWN = "UNKNOWN"  # unparseable role strings; never granted anything


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False)
    # Nullable only for platform owners, who are not bound to a tenant
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=True, index=True)
    password_hash = Column(String, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)

    organization = relationship("Organization", backref="users")
