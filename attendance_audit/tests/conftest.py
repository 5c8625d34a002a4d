"""
Pytest configuration and fixtures
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-attendance-audit")
os.environ.setdefault("APP_ENV", "local")

import pytest  # noqa: E402
from datetime import date, timedelta  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from attendance_audit.main import app  # noqa: E402
from attendance_audit.db.base import Base  # noqa: E402
from attendance_audit.core.deps import get_db  # noqa: E402
from attendance_audit.core.security import create_access_token, hash_password  # noqa: E402
from attendance_audit.models import (  # noqa: E402
    Organization,
    User,
    Role,
    AttendanceSession,
    AttendanceRecord,
    AttendanceStatus,
)
from attendance_audit.core.config import settings  # noqa: E402
from attendance_audit.utils.datetime_utils import today_local  # noqa: E402


# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    if type(dbapi_conn).__module__.startswith("sqlite3"):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    
    db = TestingSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Test client fixture with database override"""
    def override_get_db():
        yield db
    
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _make_user(db, email, name, role, organization_id, password="testpass123"):
    user = User(
        email=email,
        name=name,
        role=role.value,
        organization_id=organization_id,
        password_hash=hash_password(password),
        active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user) -> dict:
    """Bearer header for a user without going through /auth/login."""
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def today() -> date:
    return today_local(settings.ORG_TIMEZONE)


@pytest.fixture
def org(db):
    """Create the main organization"""
    organization = Organization(name="Northside Academy", active=True)
    db.add(organization)
    db.commit()
    db.refresh(organization)
    return organization


@pytest.fixture
def other_org(db):
    """Create a second, unrelated organization"""
    organization = Organization(name="Riverside College", active=True)
    db.add(organization)
    db.commit()
    db.refresh(organization)
    return organization


@pytest.fixture
def org_admin(db, org):
    return _make_user(db, "admin@northside.test", "Alice Admin", Role.ORG_ADMIN, org.id)


@pytest.fixture
def super_admin(db, org):
    return _make_user(db, "super@northside.test", "Sam Super", Role.ORG_SUPER_ADMIN, org.id)


@pytest.fixture
def manager(db, org):
    return _make_user(db, "manager@northside.test", "Maya Manager", Role.MANAGER, org.id)


@pytest.fixture
def end_user(db, org):
    return _make_user(db, "student@northside.test", "Eli Student", Role.END_USER, org.id)


@pytest.fixture
def second_student(db, org):
    return _make_user(db, "student2@northside.test", "Fatima Student", Role.END_USER, org.id)


@pytest.fixture
def platform_owner(db):
    return _make_user(db, "owner@platform.test", "Paula Owner", Role.PLATFORM_OWNER, None)


@pytest.fixture
def outsider_admin(db, other_org):
    return _make_user(db, "admin@riverside.test", "Oscar Outsider", Role.ORG_ADMIN, other_org.id)


@pytest.fixture
def outsider_student(db, other_org):
    return _make_user(db, "student@riverside.test", "Olga Outsider", Role.END_USER, other_org.id)


@pytest.fixture
def class_session(db, org, today):
    """A daily class owned by the main organization, running for the last 90 days"""
    session = AttendanceSession(
        organization_id=org.id,
        name="Physics 101",
        recurrence="DAILY",
        start_date=today - timedelta(days=90),
        active=True,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


@pytest.fixture
def absent_record(db, class_session, end_user, today):
    """Base record: the student did not scan today"""
    record = AttendanceRecord(
        session_id=class_session.id,
        occurrence_date=today,
        user_id=end_user.id,
        status=AttendanceStatus.ABSENT,
        location_verified=False,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


REASON = "Student forgot to scan QR code"
