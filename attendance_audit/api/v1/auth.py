"""
Authentication endpoints
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session
from attendance_audit.core.constants import ACTION_LOGIN
from attendance_audit.core.deps import get_db
from attendance_audit.core.security import verify_password, create_access_token
from attendance_audit.models.user import User
from attendance_audit.schemas.auth import LoginRequest, TokenResponse
from attendance_audit.services.audit_service import log_audit
from attendance_audit.utils.roles import role_name

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Authenticate user and return JWT token
    
    Validates email and password, rejects inactive users.
    """
    user = db.query(User).filter(func.lower(User.email) == login_data.email.strip().lower()).first()
    
    if not user or user.password_hash is None or not verify_password(login_data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )
    
    if not user.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )
    
    # JWT 'sub' claim must be a string
    access_token = create_access_token(data={
        "sub": str(user.id),
        "role": role_name(user.role),
        "org": user.organization_id,
    })
    
    # Don't fail login if audit fails
    try:
        log_audit(
            db=db,
            actor_id=user.id,
            action=ACTION_LOGIN,
            entity_type="auth",
            organization_id=user.organization_id,
            meta={"email": user.email, "role": role_name(user.role)}
        )
    except Exception as e:
        db.rollback()
        logger.warning("Failed to log audit for login: %s", e)
    
    return TokenResponse(access_token=access_token, token_type="bearer")
