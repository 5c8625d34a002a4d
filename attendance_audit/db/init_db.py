"""
Database initialization
Seeds the initial platform owner account
"""
import logging
from sqlalchemy.orm import Session
from attendance_audit.core.config import settings
from attendance_audit.core.security import hash_password
from attendance_audit.models.user import User, Role

logger = logging.getLogger(__name__)


def init_db(db: Session) -> bool:
    """
    Create the initial platform owner if no platform owner exists
    
    Returns:
        True if an account was created
    """
    existing = db.query(User).filter(User.role == Role.PLATFORM_OWNER.value).first()
    if existing:
        logger.info("Platform owner already exists, skipping initial bootstrap")
        return False
    
    owner = User(
        email=settings.INITIAL_ADMIN_EMAIL,
        name="Platform Owner",
        role=Role.PLATFORM_OWNER.value,
        organization_id=None,
        password_hash=hash_password(settings.INITIAL_ADMIN_PASSWORD),
        active=True,
    )
    db.add(owner)
    db.commit()
    logger.info("Initial platform owner created: %s", owner.email)
    return True
