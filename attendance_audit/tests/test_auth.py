"""
Tests for authentication endpoints
"""
import pytest
from fastapi import status
from sqlalchemy.orm import Session

from attendance_audit.core.config import settings
from attendance_audit.core.security import hash_password, create_access_token
from attendance_audit.models.audit_log import AuditLog
from attendance_audit.db.init_db import init_db
from attendance_audit.models.user import User, Role


@pytest.fixture
def inactive_user(db: Session, org):
    """Create an inactive user"""
    user = User(
        email="gone@northside.test",
        name="Inactive Admin",
        role=Role.ORG_ADMIN.value,
        organization_id=org.id,
        password_hash=hash_password("testpass123"),
        active=False,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def test_auth_login_success(client, db, org_admin):
    """Successful login returns 200 and an access_token"""
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "admin@northside.test", "password": "testpass123"},
    )
    
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"
    
    log = db.query(AuditLog).filter(AuditLog.action == "AUTH_LOGIN_SUCCESS").first()
    assert log is not None
    assert log.actor_id == org_admin.id


def test_auth_login_email_case_insensitive(client, org_admin):
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "  Admin@Northside.TEST ", "password": "testpass123"},
    )
    assert response.status_code == status.HTTP_200_OK


def test_auth_login_wrong_password(client, org_admin):
    """Wrong password returns 401"""
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "admin@northside.test", "password": "wrongpassword"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Invalid email or password"


def test_auth_login_unknown_user(client, db):
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "nobody@northside.test", "password": "testpass123"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_auth_login_inactive_user(client, inactive_user):
    """Inactive user cannot login (403)"""
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "gone@northside.test", "password": "testpass123"},
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_login_token_authenticates(client, org_admin):
    login = client.post(
        "/api/v1/auth/login",
        json={"email": "admin@northside.test", "password": "testpass123"},
    )
    token = login.json()["access_token"]
    response = client.get(
        "/api/v1/attendance/permissions",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["role"] == "ORG_ADMIN"


def test_protected_endpoint_requires_token(client, db):
    response = client.get("/api/v1/attendance/permissions")
    assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)


def test_invalid_token_rejected(client, db):
    response = client.get(
        "/api/v1/attendance/permissions",
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_token_for_inactive_user_rejected(client, inactive_user):
    token = create_access_token({"sub": str(inactive_user.id)})
    response = client.get(
        "/api/v1/attendance/permissions",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_init_db_bootstraps_platform_owner_once(client, db):
    """Initial platform owner is created once and can log in"""
    assert init_db(db) is True
    assert init_db(db) is False
    assert db.query(User).filter(User.role == Role.PLATFORM_OWNER.value).count() == 1
    
    response = client.post(
        "/api/v1/auth/login",
        json={"email": settings.INITIAL_ADMIN_EMAIL, "password": settings.INITIAL_ADMIN_PASSWORD},
    )
    assert response.status_code == status.HTTP_200_OK
